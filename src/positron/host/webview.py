"""pywebview backend — a real native window.

``pywebview`` is an optional dependency (``pip install positron[gui]``).
It is imported when the backend creates its window, so the rest of
positron works without it.

pywebview calls the exposed JS API on its own worker threads, one per
call, which gives the bridge its concurrent, out-of-order completion.

The GUI toolkit loop owns the main thread inside ``webview.start()``.
The host dispatcher runs on the background thread pywebview starts its
``func`` on, so "host thread" here means that thread, not the GUI
thread. pywebview marshals every window call (``run_js``, ``load_url``,
``set_title``, ``resize``) onto the GUI thread itself; the dispatcher
only keeps those calls ordered.

Init scripts run on the ``before_load`` event, which fires on every
navigation before the page's own scripts, so bindings exist by the time
``window.onload`` runs.
"""

import logging
from typing import Any

from positron.config import SizeHint, ViewConfig
from positron.errors import StartupError
from positron.host.backend import InvokeCallback
from positron.host.dispatch import HostDispatcher

logger = logging.getLogger("positron.host")

_TRANSPORT_JS = """\
window.__positron.send = function (name, seq, req) {
  var go = function () { window.pywebview.api.positron_invoke(name, seq, req); };
  if (window.pywebview && window.pywebview.api && window.pywebview.api.positron_invoke) {
    go();
  } else {
    window.addEventListener("pywebviewready", go, { once: true });
  }
};
"""


def _import_webview() -> Any:
    try:
        import webview
    except ImportError as exc:
        msg = (
            "The native window backend requires pywebview. "
            "Install it with: pip install positron[gui]"
        )
        raise StartupError(msg) from exc
    return webview


class _JsApi:
    """The object pywebview exposes as ``window.pywebview.api``.

    Only public methods are exposed, so state stays in underscored slots.
    """

    __slots__ = ("_backend",)

    def __init__(self, backend: "WebviewBackend") -> None:
        self._backend = backend

    def positron_invoke(self, name: str, seq: str, req: str) -> None:
        invoker = self._backend._invoker
        if invoker is None:
            logger.error("front-end call %r (seq=%s) before an invoker was installed", name, seq)
            return
        invoker(name, seq, req)


class WebviewBackend:
    """Native window through pywebview."""

    transport_js = _TRANSPORT_JS

    __slots__ = ("_config", "_icon", "_init_scripts", "_invoker", "_loaded", "_webview", "_window")

    def __init__(self) -> None:
        self._webview: Any = None
        self._window: Any = None
        self._config: ViewConfig | None = None
        self._icon: str | None = None
        self._init_scripts: list[str] = []
        self._invoker: InvokeCallback | None = None
        self._loaded = False

    def create(self, config: ViewConfig) -> None:
        webview = _import_webview()
        kwargs: dict[str, Any] = {
            "width": config.width,
            "height": config.height,
            "resizable": config.size_hint is not SizeHint.FIXED,
            "js_api": _JsApi(self),
        }
        if config.size_hint is SizeHint.MIN:
            kwargs["min_size"] = (config.width, config.height)
        elif config.size_hint is SizeHint.MAX:
            logger.debug("pywebview has no maximum window size; MAX hint ignored")

        try:
            window = webview.create_window(config.title, html="", **kwargs)
        except Exception as exc:
            msg = f"Cannot create native window: {exc}"
            raise StartupError(msg) from exc

        window.events.before_load += self._on_before_load
        self._webview = webview
        self._window = window
        self._config = config
        self._icon = str(config.icon) if config.icon is not None else None

    def destroy(self) -> None:
        if self._window is not None:
            self._window.destroy()
            self._window = None

    def run(self, dispatcher: HostDispatcher) -> None:
        """Start the GUI loop; the dispatcher runs on pywebview's func thread."""
        if self._webview is None or self._config is None:
            msg = "create() must be called before run()."
            raise StartupError(msg)
        kwargs: dict[str, Any] = {"debug": self._config.debug}
        if self._icon is not None:
            kwargs["icon"] = self._icon
        try:
            self._webview.start(dispatcher.run, **kwargs)
        finally:
            # All windows closed: nothing can be delivered any more
            dispatcher.close()

    def terminate(self) -> None:
        if self._window is not None:
            self._window.destroy()

    def navigate(self, url: str) -> None:
        self._loaded = False
        self._window.load_url(url)

    def init(self, js: str) -> None:
        self._init_scripts.append(js)
        if self._loaded:
            self._window.run_js(js)

    def eval(self, js: str) -> None:
        self._window.run_js(js)

    def set_title(self, title: str) -> None:
        self._window.set_title(title)

    def set_size(self, width: int, height: int, hint: SizeHint) -> None:
        self._window.resize(width, height)
        if hint is not SizeHint.NONE:
            logger.debug("size hint %s applies at window creation only", hint.name)

    def set_icon(self, icon: str) -> None:
        # pywebview takes the icon when the GUI loop starts
        self._icon = icon

    def get_window(self) -> Any:
        return self._window

    def install_invoker(self, callback: InvokeCallback) -> None:
        self._invoker = callback

    def _on_before_load(self, *args: Any) -> None:
        self._loaded = True
        for js in self._init_scripts:
            self._window.run_js(js)
