"""Content router with longest-prefix matching.

Routes are kept in a flat tuple in registration order. Resolution scans
the whole table and keeps the longest case-insensitive prefix match;
among equal-length matches the first registered wins.

Free-threading safety:
    - Route and EmbeddedDirectory are frozen dataclasses
    - Both tables are tuples, replaced on registration and fixed at ``compile()``
"""

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from positron.errors import ConfigurationError
from positron.routing.route import EmbeddedDirectory, Route, guess_mime


def strip_query(path: str) -> str:
    """Drop ``?query`` and ``#fragment`` from a request target."""
    for sep in ("?", "#"):
        index = path.find(sep)
        if index != -1:
            path = path[:index]
    return path


def _check_prefix(prefix: str) -> None:
    if not prefix.startswith("/"):
        msg = f"Route prefix must be an absolute path starting with '/', got {prefix!r}."
        raise ConfigurationError(msg)


class Router:
    """Ordered route table plus the embedded-directory fallback tier.

    Usage::

        router = Router()
        router.add(Route("/app.htm", serve_content, ContentContext(...)))
        router.add_directory("/assets", "./web/assets")
        router.compile()
        route = router.resolve("/app.htm?theme=dark")
    """

    __slots__ = ("_compiled", "_directories", "_lock", "_not_found", "_routes")

    def __init__(self, not_found: Callable[..., Any] | None = None) -> None:
        self._routes: tuple[Route, ...] = ()
        self._directories: tuple[EmbeddedDirectory, ...] = ()
        self._not_found = not_found
        self._compiled = False
        self._lock = threading.Lock()

    # -- Registration --

    def add(self, route: Route) -> Route:
        """Register a route. Must be called before compile()."""
        _check_prefix(route.prefix)
        with self._lock:
            self._ensure_open()
            self._routes = (*self._routes, route)
        return route

    def add_route(self, prefix: str) -> Route:
        """Register an empty route bound to the not-found handler."""
        if self._not_found is None:
            msg = "Router has no not-found handler to bind empty routes to."
            raise ConfigurationError(msg)
        return self.add(Route(prefix=prefix, handler=self._not_found))

    def add_directory(
        self,
        address: str,
        path: str | Path,
        resolve_mime: Callable[[str], str] | None = None,
    ) -> EmbeddedDirectory:
        """Append a directory tree to the fallback tier."""
        _check_prefix(address)
        directory = EmbeddedDirectory(
            address=address,
            path=Path(path),
            resolve_mime=resolve_mime or guess_mime,
        )
        with self._lock:
            self._ensure_open()
            self._directories = (*self._directories, directory)
        return directory

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        with self._lock:
            if self._compiled:
                return
            self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    def _ensure_open(self) -> None:
        if self._compiled:
            msg = "Cannot add routes after the provider has started."
            raise ConfigurationError(msg)

    # -- Introspection --

    @property
    def routes(self) -> tuple[Route, ...]:
        """All registered routes, in registration order."""
        return self._routes

    @property
    def directories(self) -> tuple[EmbeddedDirectory, ...]:
        """All embedded directories, in registration order."""
        return self._directories

    # -- Resolution --

    def resolve(self, path: str) -> Route | None:
        """Return the longest registered prefix of *path*, or ``None``.

        Comparison is case-insensitive. A later route replaces the
        current best only when its prefix is strictly longer.
        """
        lowered = strip_query(path).lower()
        best: Route | None = None
        best_len = -1
        for route in self._routes:
            if len(route.prefix) > best_len and lowered.startswith(route.prefix.lower()):
                best = route
                best_len = len(route.prefix)
        return best

    def resolve_directory(self, path: str) -> tuple[EmbeddedDirectory, Path] | None:
        """Return the first embedded directory holding a file for *path*."""
        url_path = strip_query(path)
        for directory in self._directories:
            candidate = directory.resolve_address_path(url_path)
            if candidate is not None and candidate.is_file():
                return directory, candidate
        return None

    def is_routable(self, path: str) -> bool:
        """True if *path* hits an explicit route or an embedded directory prefix."""
        if self.resolve(path) is not None:
            return True
        url_path = strip_query(path)
        return any(d.resolve_address_path(url_path) is not None for d in self._directories)
