"""Async test client for the content provider.

Sends requests through the ASGI interface directly, no HTTP involved.
"""

from dataclasses import dataclass
from typing import Any

from positron._internal.asgi import Scope
from positron.server.provider import Provider


@dataclass(frozen=True, slots=True)
class TestResponse:
    """What the provider put on the wire for one request."""

    __test__ = False  # Tell pytest this is not a test class

    status: int
    headers: tuple[tuple[str, str], ...]
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value for *name* (case-insensitive), or *default*."""
        lower = name.lower()
        for n, v in self.headers:
            if n == lower:
                return v
        return default

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")


class TestClient:
    """Async test client for a ``Provider``.

    The route table is frozen on entry, as it would be by ``start()``.

    Usage::

        async with TestClient(provider) as client:
            response = await client.get("/login.htm")
            assert response.status == 200
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("provider",)

    def __init__(self, provider: Provider) -> None:
        self.provider = provider

    async def __aenter__(self) -> "TestClient":
        if not self.provider.router.compiled:
            self.provider.router.compile()
        return self

    async def __aexit__(self, *args: object) -> None:
        pass

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a HEAD request."""
        return await self.request("HEAD", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> TestResponse:
        """Send a POST request."""
        return await self.request("POST", path, headers=headers, body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> TestResponse:
        """Send an arbitrary request through the ASGI app."""
        if "?" in path:
            path_part, query_string = path.split("?", 1)
        else:
            path_part = path
            query_string = ""

        raw_headers: list[tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ]

        scope: Scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("127.0.0.1", 80),
            "client": ("127.0.0.1", 0),
        }

        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        status = 0
        response_headers: list[tuple[bytes, bytes]] = []
        parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status, response_headers
            if message["type"] == "http.response.start":
                status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                parts.append(message.get("body", b""))

        await self.provider(scope, receive, send)

        return TestResponse(
            status=status,
            headers=tuple(
                (n.decode("latin-1").lower(), v.decode("latin-1")) for n, v in response_headers
            ),
            body=b"".join(parts),
        )
