"""Built-in content producers for provider routes.

Each producer has the route handler signature
``(request, response, context) -> None`` and never raises for expected
failures: a file that cannot be opened answers 404, a file that cannot
be read (or is over the size cap) answers 500, both as plain text.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from positron.config import DEFAULT_MAX_FILE_SIZE
from positron.errors import ResourceError
from positron.http.request import Request
from positron.http.response import Response

logger = logging.getLogger("positron.server")

NOT_FOUND_PAGE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8">
  </head>
  <body>
    <p>The requested page was not found!</p>
  </body>
</html>"""


@dataclass(frozen=True, slots=True)
class ContentContext:
    """In-memory content served verbatim.

    ``on_request(request, response)`` runs after the content type is set
    and before the body, so it can add headers or adjust the status.
    """

    mime_type: str
    contents: bytes
    on_request: Callable[[Request, Response], Any] | None = None


@dataclass(frozen=True, slots=True)
class FileContext:
    """A single on-disk file, read on every request."""

    mime_type: str
    path: Path
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


def serve_content(request: Request, response: Response, context: ContentContext) -> None:
    """Serve a ``ContentContext``."""
    response.set_header("content-type", context.mime_type)
    if context.on_request is not None:
        context.on_request(request, response)
    response.set_body(context.contents)


def serve_file(request: Request, response: Response, context: FileContext) -> None:
    """Serve a ``FileContext``."""
    try:
        body = read_file(context.path, context.max_file_size)
    except ResourceError as exc:
        write_resource_error(response, exc)
        return
    response.set_header("content-type", context.mime_type)
    response.set_body(body)


def read_file(path: Path, max_file_size: int) -> bytes:
    """Read *path* whole, refusing files over *max_file_size* bytes.

    Raises ``ResourceError`` with status 404 if the file cannot be
    opened and 500 if it cannot be read or is too large.
    """
    try:
        handle = path.open("rb")
    except OSError as exc:
        detail = f"Could not open file {path}: {type(exc).__name__}"
        raise ResourceError(404, detail) from exc

    with handle:
        try:
            # One byte past the cap tells "exactly at the limit" from "over it"
            data = handle.read(max_file_size + 1)
        except OSError as exc:
            detail = f"Could not read file {path}: {type(exc).__name__}"
            raise ResourceError(500, detail) from exc

    if len(data) > max_file_size:
        detail = f"Could not read file {path}: FileTooBig"
        raise ResourceError(500, detail)
    return data


def write_resource_error(response: Response, exc: ResourceError) -> None:
    """Turn a ``ResourceError`` into a plain-text diagnostic response."""
    if exc.status >= 500:
        logger.warning("%s", exc.detail)
    else:
        logger.debug("%s", exc.detail)
    response.set_header("content-type", "text/plain")
    response.status = exc.status
    response.set_body(f"{exc.detail}\n")


def not_found(request: Request, response: Response, text: str | None = None) -> None:
    """The default 404 responder: HTML body, optional override text."""
    logger.debug("404 %s %s", request.method, request.target)
    response.set_header("content-type", "text/html")
    response.status = 404
    response.set_body(text if text is not None else NOT_FOUND_PAGE)
    response.write("\n")
