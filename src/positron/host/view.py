"""View — the native window with its call bridge and host dispatcher.

A view is created, bound and navigated during setup, then ``run()``
blocks the calling thread in the UI loop until ``terminate()`` (from
any thread) or the user closes the window. Everything that touches the
front-end goes through the host dispatcher, so it is safe to call from
bound functions, timers and other worker threads alike.

The host thread is whichever thread runs the dispatcher. On the headless
backend that is the thread calling ``run()``; on the pywebview backend
it is pywebview's background ``func`` thread, and pywebview itself
forwards each window call to the GUI thread.
"""

import logging
from collections.abc import Callable
from typing import Any

from positron.bridge.envelope import ReturnValue
from positron.bridge.registry import BoundFunction, Bridge
from positron.bridge.scope import note_answered
from positron.config import SizeHint, ViewConfig
from positron.errors import StartupError
from positron.host.backend import Backend
from positron.host.dispatch import HostDispatcher
from positron.host.script import BOOTSTRAP_JS, binding_script, settle_script

logger = logging.getLogger("positron.host")


class View:
    """A front-end window that talks to Python through the call bridge.

    Usage::

        view = View.create(ViewConfig(title="Chat", width=400, height=550,
                                      size_hint=SizeHint.FIXED))
        view.bind("performLogin", perform_login, app)
        view.navigate(provider.get_uri("/login.htm"))
        view.run()
        view.destroy()
    """

    __slots__ = ("_backend", "_bridge", "_dispatcher", "_running", "config")

    def __init__(self, backend: Backend, config: ViewConfig) -> None:
        self.config = config
        self._backend = backend
        self._dispatcher = HostDispatcher()
        self._bridge = Bridge(poster=self.return_)
        self._running = False

    @classmethod
    def create(cls, config: ViewConfig | None = None, backend: Backend | None = None) -> "View":
        """Create the native surface and install the bridge bootstrap.

        Without *backend* a pywebview window is created. Raises
        ``StartupError`` if the surface cannot be created.
        """
        config = config or ViewConfig()
        if backend is None:
            from positron.host.webview import WebviewBackend

            backend = WebviewBackend()

        try:
            backend.create(config)
        except StartupError:
            raise
        except Exception as exc:
            msg = f"Cannot create the native UI surface: {exc}"
            raise StartupError(msg) from exc

        view = cls(backend, config)
        backend.install_invoker(view._bridge.call)
        backend.init(BOOTSTRAP_JS)
        backend.init(backend.transport_js)
        logger.debug("view created with %s", type(backend).__name__)
        return view

    # -- Properties --

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def bridge(self) -> Bridge:
        return self._bridge

    @property
    def dispatcher(self) -> HostDispatcher:
        return self._dispatcher

    @property
    def running(self) -> bool:
        return self._running

    # -- Lifecycle --

    def run(self) -> None:
        """Run the UI loop on the calling thread until terminated.

        Must not be called reentrantly. Bindings are frozen from here on.
        """
        if self._running:
            msg = "View.run() is already running."
            raise RuntimeError(msg)
        self._bridge.freeze()
        self._running = True
        try:
            self._backend.run(self._dispatcher)
        finally:
            self._running = False
            self._dispatcher.close()

    def terminate(self) -> None:
        """Stop the UI loop. Safe from any thread."""
        self._backend.terminate()
        self._dispatcher.close()

    def destroy(self) -> None:
        """Close the native window. Call after ``run()`` has returned."""
        self._dispatcher.close()
        self._backend.destroy()

    def __enter__(self) -> "View":
        return self

    def __exit__(self, *args: object) -> None:
        self.destroy()

    # -- Host dispatch --

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> bool:
        """Queue ``fn(*args)`` to run on the host thread. Never blocks.

        Returns ``False`` once the UI loop has shut down.
        """
        return self._dispatcher.dispatch(fn, *args)

    def _on_host(self, fn: Callable[..., Any], *args: Any) -> None:
        if self._dispatcher.on_owner_thread():
            fn(*args)
        else:
            self._dispatcher.dispatch(fn, *args)

    # -- Window --

    def set_title(self, title: str) -> None:
        self._on_host(self._backend.set_title, title)

    def set_size(self, width: int, height: int, hint: SizeHint = SizeHint.NONE) -> None:
        self._on_host(self._backend.set_size, width, height, hint)

    def set_icon(self, icon: str) -> None:
        self._on_host(self._backend.set_icon, icon)

    def get_window(self) -> Any:
        """The backend's native window object."""
        return self._backend.get_window()

    # -- Front-end --

    def navigate(self, url: str) -> None:
        """Load *url*; ``data:`` URIs work as well as provider URLs."""
        self._on_host(self._backend.navigate, url)

    def init(self, js: str) -> None:
        """Inject *js* on every page load, before ``window.onload``."""
        self._on_host(self._backend.init, js)

    def eval(self, js: str) -> None:
        """Evaluate *js* asynchronously; the result is ignored."""
        self._on_host(self._backend.eval, js)

    # -- Bindings --

    def bind(self, name: str, func: Callable[..., Any], context: Any) -> BoundFunction:
        """Expose *func* as ``window[name]`` with typed argument decoding.

        ``func(context, *args)`` is called with the decoded arguments; its
        return value resolves the front-end promise, a raised exception
        rejects it.
        """
        bound = self._bridge.bind(name, func, context)
        self._backend.init(binding_script(name))
        return bound

    def bind_raw(
        self,
        name: str,
        context: Any,
        callback: Callable[[Any, str, str], Any],
    ) -> BoundFunction:
        """Expose *callback* as ``window[name]`` with the raw argument text.

        The callback must answer with ``view.return_(seq, envelope)``.
        """
        bound = self._bridge.bind_raw(name, context, callback)
        self._backend.init(binding_script(name))
        return bound

    def return_(self, seq: str, envelope: ReturnValue) -> bool:
        """Deliver *envelope* to the front-end promise waiting on *seq*.

        Never blocks. Returns ``False`` if the UI loop has already shut
        down and the envelope was dropped.
        """
        note_answered(seq)
        return self._dispatcher.dispatch(self._settle, seq, envelope)

    post = return_

    def _settle(self, seq: str, envelope: ReturnValue) -> None:
        self._backend.eval(settle_script(seq, envelope))
