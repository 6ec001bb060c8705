"""Content provider — the loopback ASGI application serving the front-end.

Owns the route table and the listener. Routes are registered during
setup; ``start()`` binds the loopback socket, captures the resolved
address once as ``base_url``, freezes the table and serves from a
background thread.
"""

import logging
import socket
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from positron._internal.asgi import Receive, Scope, Send
from positron.config import ProviderConfig
from positron.errors import StartupError
from positron.http.request import Request
from positron.http.response import Response
from positron.routing.route import EmbeddedDirectory, Route
from positron.routing.router import Router
from positron.server.content import (
    ContentContext,
    FileContext,
    not_found,
    serve_content,
    serve_file,
)
from positron.server.handler import handle_request
from positron.server.hooks import ProviderHooks

logger = logging.getLogger("positron.server")


class Provider:
    """Serves in-memory content, files and directory trees over loopback HTTP.

    Usage::

        provider = Provider()
        provider.add_content("/login.htm", "text/html", LOGIN_HTML)
        provider.add_directory("/assets", "./web/assets")
        provider.start()
        view.navigate(provider.get_uri("/login.htm"))
        ...
        provider.stop()
    """

    __slots__ = (
        "_base_url",
        "_hooks",
        "_lock",
        "_router",
        "_server",
        "_socket",
        "_thread",
        "config",
    )

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        hooks: ProviderHooks | None = None,
    ) -> None:
        self.config = config or ProviderConfig()
        self._hooks = hooks
        self._router = Router(not_found=self._not_found)
        self._base_url: str | None = None
        self._server: Any = None
        self._socket: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    # -- Registration --

    def add_route(self, prefix: str) -> Route:
        """Register an empty route answered by the 404 responder."""
        return self._router.add_route(prefix)

    def add_content(
        self,
        prefix: str,
        mime_type: str,
        contents: str | bytes,
        *,
        on_request: Callable[[Request, Response], Any] | None = None,
    ) -> ContentContext:
        """Serve *contents* under *prefix*. ``str`` is stored as UTF-8."""
        data = contents.encode("utf-8") if isinstance(contents, str) else bytes(contents)
        context = ContentContext(mime_type=mime_type, contents=data, on_request=on_request)
        self._router.add(Route(prefix=prefix, handler=serve_content, context=context))
        return context

    def add_file(self, prefix: str, mime_type: str, path: str | Path) -> FileContext:
        """Serve the file at *path* under *prefix*, re-read on every request."""
        context = FileContext(
            mime_type=mime_type,
            path=Path(path),
            max_file_size=self.config.max_file_size,
        )
        self._router.add(Route(prefix=prefix, handler=serve_file, context=context))
        return context

    def add_directory(
        self,
        address: str,
        path: str | Path,
        resolve_mime: Callable[[str], str] | None = None,
    ) -> EmbeddedDirectory:
        """Serve a directory tree under *address* when no explicit route matches."""
        return self._router.add_directory(address, path, resolve_mime)

    @property
    def router(self) -> Router:
        return self._router

    # -- Addresses --

    @property
    def base_url(self) -> str:
        """``http://host:port`` of the running listener."""
        if self._base_url is None:
            msg = "Provider has not been started; no base URL yet."
            raise RuntimeError(msg)
        return self._base_url

    def get_uri(self, path: str) -> str | None:
        """Return the full URL for *path*, or ``None`` if nothing serves it."""
        if not path.startswith("/"):
            msg = f"Path must be absolute, got {path!r}."
            raise ValueError(msg)
        if not self._router.is_routable(path):
            return None
        return f"{self.base_url}{path}"

    # -- Lifecycle --

    def start(self) -> str:
        """Bind the listener and serve from a background thread.

        Returns the base URL. Raises ``StartupError`` if the loopback
        socket cannot be bound; nothing is left running in that case.
        """
        with self._lock:
            if self._thread is not None:
                return self.base_url
            server, sock = self._prepare()
            thread = threading.Thread(
                target=self._serve,
                args=(server, sock),
                name="positron-provider",
                daemon=True,
            )
            self._thread = thread
        thread.start()
        logger.info("provider ready at %s", self.base_url)
        return self.base_url

    def run(self) -> None:
        """Bind the listener and serve on the calling thread until stopped."""
        with self._lock:
            server, sock = self._prepare()
        logger.info("provider serving at %s", self.base_url)
        self._serve(server, sock)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Ask the listener to exit and wait for the serving thread."""
        with self._lock:
            server, thread = self._server, self._thread
            self._thread = None
        if server is not None:
            server.should_exit = True
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._server is not None and self._server.started and not self._server.should_exit

    def __enter__(self) -> "Provider":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()

    def _prepare(self) -> tuple[Any, socket.socket]:
        """Bind the socket, capture the base URL, build the server. Caller holds _lock."""
        import uvicorn

        try:
            sock = socket.create_server((self.config.host, self.config.port))
        except OSError as exc:
            msg = f"Cannot bind loopback listener on {self.config.host}:{self.config.port}: {exc}"
            raise StartupError(msg) from exc

        host, port = sock.getsockname()[:2]
        self._base_url = f"http://[{host}]:{port}" if ":" in host else f"http://{host}:{port}"
        self._router.compile()

        server = uvicorn.Server(
            uvicorn.Config(
                self,
                interface="asgi3",
                lifespan="on",
                log_config=None,
                log_level=self.config.log_level,
                access_log=self.config.access_log,
            )
        )
        self._server = server
        self._socket = sock
        return server, sock

    def _serve(self, server: Any, sock: socket.socket) -> None:
        try:
            server.run(sockets=[sock])
        finally:
            sock.close()
            logger.info("provider stopped")

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if not self._router.compiled:
            self._router.compile()
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            config=self.config,
            hooks=self._hooks,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze the route table before the first exchange."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self._router.compile()
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Handlers --

    def _not_found(self, request: Request, response: Response, context: Any = None) -> None:
        not_found(request, response, self.config.not_found_text)
