"""Tests for positron.server.sender response emission rules."""

import pytest

from positron.http.response import Response
from positron.server.sender import send_response


def _collector() -> tuple[list[dict], object]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    return messages, send


class TestSendResponse:
    @pytest.mark.asyncio
    async def test_200_preserves_body(self) -> None:
        messages, send = _collector()
        response = Response()
        response.write("ok")
        await send_response(response, send)

        assert messages[0]["type"] == "http.response.start"
        assert messages[0]["status"] == 200
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"2"
        assert messages[1]["type"] == "http.response.body"
        assert messages[1]["body"] == b"ok"

    @pytest.mark.asyncio
    async def test_204_drops_body(self) -> None:
        messages, send = _collector()
        # A handler left body bytes behind on a no-body status
        response = Response(status=204)
        response.write("unexpected-body")
        await send_response(response, send)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_304_drops_body(self) -> None:
        messages, send = _collector()
        response = Response(status=304)
        response.write("unexpected-body")
        await send_response(response, send)
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_head_keeps_length_drops_body(self) -> None:
        messages, send = _collector()
        response = Response()
        response.write("hello")
        await send_response(response, send, head=True)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"5"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_handler_content_length_replaced(self) -> None:
        messages, send = _collector()
        response = Response()
        response.set_header("Content-Length", "999")
        response.write("abc")
        await send_response(response, send)

        lengths = [v for n, v in messages[0]["headers"] if n == b"content-length"]
        assert lengths == [b"3"]

    @pytest.mark.asyncio
    async def test_header_names_lowercased(self) -> None:
        messages, send = _collector()
        response = Response()
        response.add_header("X-Custom", "1")
        await send_response(response, send)
        assert (b"x-custom", b"1") in messages[0]["headers"]
