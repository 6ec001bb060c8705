"""Immutable HTTP request.

Built once per exchange from the ASGI scope. Content routes only ever
read metadata, so the body is never consumed.
"""

from dataclasses import dataclass

from positron._internal.asgi import Scope
from positron.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request as seen by route handlers."""

    method: str
    path: str
    query_string: str
    headers: Headers
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    @classmethod
    def from_asgi(cls, scope: Scope) -> "Request":
        """Parse a raw ASGI HTTP scope into a request."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            query_string=scope.get("query_string", b"").decode("latin-1"),
            headers=Headers(tuple(scope.get("headers", ()))),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )

    @property
    def origin(self) -> str | None:
        """The ``Origin`` header, if the front-end sent one."""
        return self.headers.get("origin")

    @property
    def target(self) -> str:
        """Path plus query string, as it appeared on the request line."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path
