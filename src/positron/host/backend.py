"""Backend protocol and the headless backend.

A backend is the native window collaborator: it owns the blocking UI
loop and evaluates script in the front-end. The view talks to it only
through this protocol. No base class required; the view checks the
shape, not the lineage.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeAlias

from positron.config import SizeHint, ViewConfig
from positron.host.dispatch import HostDispatcher

# (name, seq, req) -> whatever the bridge returns
InvokeCallback: TypeAlias = Callable[[str, str, str], Any]


class Backend(Protocol):
    """Protocol for native window backends.

    ``transport_js`` assigns ``window.__positron.send(name, seq, req)``,
    the function the front-end uses to reach ``install_invoker``'s callback.
    """

    transport_js: str

    def create(self, config: ViewConfig) -> None:
        """Create the native surface. Raise on failure."""
        ...

    def destroy(self) -> None: ...

    def run(self, dispatcher: HostDispatcher) -> None:
        """Block in the UI loop; *dispatcher* must be drained meanwhile."""
        ...

    def terminate(self) -> None:
        """Make ``run()`` return. Safe from any thread."""
        ...

    def navigate(self, url: str) -> None: ...

    def init(self, js: str) -> None:
        """Run *js* on every page load, before the page's own scripts."""
        ...

    def eval(self, js: str) -> None:
        """Evaluate *js* in the current page; the result is ignored."""
        ...

    def set_title(self, title: str) -> None: ...

    def set_size(self, width: int, height: int, hint: SizeHint) -> None: ...

    def set_icon(self, icon: str) -> None: ...

    def get_window(self) -> Any: ...

    def install_invoker(self, callback: InvokeCallback) -> None:
        """Route front-end calls to *callback*."""
        ...


class HeadlessBackend:
    """A backend without a window.

    Records what a real front-end would have seen (navigations, init
    scripts, evaluated scripts) and lets the host play the front-end
    through ``invoke()``. ``run()`` simply drives the dispatcher.
    """

    # No page to call from: front-end sends go nowhere
    transport_js = "window.__positron.send = function () {};"

    __slots__ = (
        "_dispatcher",
        "_invoker",
        "config",
        "created",
        "evaluated",
        "icon",
        "init_scripts",
        "navigations",
        "size",
        "title",
    )

    def __init__(self) -> None:
        self.config: ViewConfig | None = None
        self.created = False
        self.title = ""
        self.size: tuple[int, int, SizeHint] | None = None
        self.icon: str | None = None
        self.navigations: list[str] = []
        self.init_scripts: list[str] = []
        self.evaluated: list[str] = []
        self._invoker: InvokeCallback | None = None
        self._dispatcher: HostDispatcher | None = None

    def create(self, config: ViewConfig) -> None:
        self.config = config
        self.created = True
        self.title = config.title
        self.size = (config.width, config.height, config.size_hint)
        if config.icon is not None:
            self.icon = str(config.icon)

    def destroy(self) -> None:
        self.created = False

    def run(self, dispatcher: HostDispatcher) -> None:
        self._dispatcher = dispatcher
        dispatcher.run()

    def terminate(self) -> None:
        if self._dispatcher is not None:
            self._dispatcher.close()

    def navigate(self, url: str) -> None:
        self.navigations.append(url)

    def init(self, js: str) -> None:
        self.init_scripts.append(js)

    def eval(self, js: str) -> None:
        self.evaluated.append(js)

    def set_title(self, title: str) -> None:
        self.title = title

    def set_size(self, width: int, height: int, hint: SizeHint) -> None:
        self.size = (width, height, hint)

    def set_icon(self, icon: str) -> None:
        self.icon = icon

    def get_window(self) -> Any:
        return self

    def install_invoker(self, callback: InvokeCallback) -> None:
        self._invoker = callback

    @property
    def url(self) -> str | None:
        """The last navigation target."""
        return self.navigations[-1] if self.navigations else None

    def invoke(self, name: str, seq: str, req: str) -> Any:
        """Play the front-end: call binding *name* with token *seq*."""
        if self._invoker is None:
            msg = "No invoker installed; create the backend through View.create()."
            raise RuntimeError(msg)
        return self._invoker(name, seq, req)
