"""Positron — native windows with web front-ends, served from the host process.

A loopback HTTP content provider serves the front-end's pages, and a
call bridge lets page script call Python functions by name.

Basic usage::

    from positron import Provider, View, ViewConfig

    provider = Provider()
    provider.add_content("/login.htm", "text/html", LOGIN_PAGE)
    provider.start()

    view = View.create(ViewConfig(title="Chat", width=400, height=550))
    view.bind("add", lambda app, a, b: a + b, app)
    view.navigate(provider.get_uri("/login.htm"))
    view.run()

The native window backend needs ``pip install positron[gui]``.
"""

__version__ = "0.1.0"
__all__ = [
    "Bridge",
    "BridgeError",
    "ConfigurationError",
    "Failure",
    "HTTPError",
    "HeadlessBackend",
    "HostDispatcher",
    "MethodNotAllowed",
    "NotFound",
    "PositronError",
    "ProtocolError",
    "Provider",
    "ProviderConfig",
    "Request",
    "Response",
    "SizeHint",
    "StartupError",
    "Success",
    "View",
    "ViewConfig",
    "current_call",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import positron`` free of the server stack until it is used.
    """
    if name == "Provider":
        from positron.server.provider import Provider

        return Provider

    if name in ("ProviderConfig", "ViewConfig", "SizeHint"):
        from positron import config as _config

        return getattr(_config, name)

    if name in ("View", "HeadlessBackend", "HostDispatcher"):
        from positron import host as _host

        return getattr(_host, name)

    if name in ("Bridge", "Success", "Failure", "current_call"):
        from positron import bridge as _bridge

        return getattr(_bridge, name)

    if name == "Request":
        from positron.http.request import Request

        return Request

    if name == "Response":
        from positron.http.response import Response

        return Response

    if name in (
        "BridgeError",
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "PositronError",
        "ProtocolError",
        "StartupError",
    ):
        from positron import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
