"""Route and EmbeddedDirectory frozen dataclasses."""

import mimetypes
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def guess_mime(path: str) -> str:
    """Default MIME resolver for embedded directories."""
    content_type, _ = mimetypes.guess_type(path)
    return content_type or "application/octet-stream"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen content route.

    ``handler(request, response, context)`` fills in the response.
    ``context`` is opaque per-route state handed back on every call.
    """

    prefix: str
    handler: Callable[..., Any]
    context: Any = None


@dataclass(frozen=True, slots=True)
class EmbeddedDirectory:
    """A directory tree served under a URL prefix.

    Consulted only when no explicit route matches. The URL suffix after
    ``address`` is joined onto ``path``.
    """

    address: str
    path: Path
    resolve_mime: Callable[[str], str] = field(default=guess_mime)

    def has_address(self, url_path: str) -> bool:
        return url_path.lower().startswith(self.address.lower())

    def resolve_address_path(self, url_path: str) -> Path | None:
        """Map *url_path* to a file candidate under ``path``.

        Returns ``None`` when the prefix does not match or when the
        joined path escapes the directory root.
        """
        if not self.has_address(url_path):
            return None
        relative = url_path[len(self.address) :].lstrip("/")
        root = self.path.resolve()
        candidate = (root / relative).resolve() if relative else root
        if not candidate.is_relative_to(root):
            return None
        return candidate
