"""ASGI exchange handler — one request in, one response out.

The only component that touches raw ASGI HTTP scopes. Resolves the
route (explicit table, then embedded directories, then the 404
responder), runs the handler against a mutable Response and sends
whatever the handler left behind. Handler failures never stop the
listener: they are logged and the partial response goes out.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import anyio.to_thread

from positron._internal.asgi import Receive, Scope, Send
from positron.config import ProviderConfig
from positron.errors import HTTPError, MethodNotAllowed, ResourceError
from positron.http.request import Request
from positron.http.response import Response
from positron.routing.route import EmbeddedDirectory
from positron.routing.router import Router
from positron.server.content import not_found, read_file, write_resource_error
from positron.server.hooks import ProviderHooks
from positron.server.sender import send_response

logger = logging.getLogger("positron.server")

# Built-in handlers only produce content for reads
_SERVED_METHODS = frozenset({"GET", "HEAD"})


def add_access_control(
    request: Request,
    response: Response,
    allowed_origins: tuple[str, ...] | frozenset[str],
) -> None:
    """Echo the request's Origin back when it is on the allow-list.

    The match is exact. Anything else leaves the header off.
    """
    if not allowed_origins:
        return
    origin = request.origin
    if origin is not None and origin in allowed_origins:
        response.set_header("access-control-allow-origin", origin)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    config: ProviderConfig,
    hooks: ProviderHooks | None = None,
) -> None:
    """Process a single HTTP exchange.

    *hooks* may implement either method of ``ProviderHooks``; missing
    methods are skipped.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)
    response = Response()
    add_access_control(request, response, config.allowed_origins)

    try:
        await _dispatch(request, response, router=router, config=config, hooks=hooks)
    except HTTPError as exc:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.target, exc.detail)
        response.status = exc.status
        for name, value in exc.headers:
            response.set_header(name, value)
        response.set_header("content-type", "text/plain")
        response.set_body(f"{exc.detail}\n")
    except Exception:
        # Degrade to the partial response the handler left behind
        logger.exception("handler failed for %s %s", request.method, request.target)

    await send_response(response, send, head=request.method == "HEAD")


async def _dispatch(
    request: Request,
    response: Response,
    *,
    router: Router,
    config: ProviderConfig,
    hooks: ProviderHooks | None,
) -> None:
    dispatch_hook = getattr(hooks, "dispatch", None)
    if dispatch_hook is not None and not await _run(dispatch_hook, request, response):
        return

    if request.method not in _SERVED_METHODS:
        raise MethodNotAllowed(_SERVED_METHODS)

    additional_action = getattr(hooks, "additional_action", None)
    if additional_action is not None:
        await _run(additional_action, request, response)

    route = router.resolve(request.path)
    if route is not None:
        await _run(route.handler, request, response, route.context)
        return

    match = router.resolve_directory(request.path)
    if match is not None:
        directory, file_path = match
        await _run(_serve_directory_file, request, response, directory, file_path, config)
        return

    not_found(request, response, config.not_found_text)


def _serve_directory_file(
    request: Request,
    response: Response,
    directory: EmbeddedDirectory,
    file_path: Path,
    config: ProviderConfig,
) -> None:
    try:
        body = read_file(file_path, config.max_file_size)
    except ResourceError as exc:
        write_resource_error(response, exc)
        return
    response.set_header("content-type", directory.resolve_mime(request.path))
    response.set_body(body)


async def _run(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking handler off the event loop."""
    return await anyio.to_thread.run_sync(func, *args)
