"""Mutable HTTP response handed to route handlers.

Handlers write into the response in place: status, headers and body are
built up incrementally and whatever state exists when the handler
returns (or fails) is what gets sent.
"""

from dataclasses import dataclass, field


@dataclass(slots=True)
class Response:
    """An HTTP response under construction.

    Usage::

        def handle(request, response, context):
            response.set_header("content-type", "text/plain")
            response.status = 404
            response.write("Could not open file\\n")
    """

    status: int = 200
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytearray = field(default_factory=bytearray)

    def set_header(self, name: str, value: str) -> None:
        """Set *name*, replacing any earlier value (case-insensitive)."""
        lower = name.lower()
        self.headers = [(n, v) for n, v in self.headers if n.lower() != lower]
        self.headers.append((lower, value))

    def add_header(self, name: str, value: str) -> None:
        """Append a header without touching earlier values."""
        self.headers.append((name.lower(), value))

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value for *name*, or *default*."""
        lower = name.lower()
        for n, v in self.headers:
            if n == lower:
                return v
        return default

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    def write(self, data: str | bytes) -> None:
        """Append to the body. ``str`` is encoded as UTF-8."""
        self.body += data.encode("utf-8") if isinstance(data, str) else data

    def set_body(self, data: str | bytes) -> None:
        """Replace the body."""
        self.body = bytearray(data.encode("utf-8") if isinstance(data, str) else data)

    @property
    def body_bytes(self) -> bytes:
        return bytes(self.body)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")
