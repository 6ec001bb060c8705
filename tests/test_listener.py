"""Integration tests for the loopback listener over a real socket."""

import socket

import httpx
import pytest

from positron.config import ProviderConfig
from positron.errors import StartupError
from positron.server.provider import Provider


def _get(url: str) -> httpx.Response:
    # Loopback only: keep proxy settings from the environment out of it
    with httpx.Client(trust_env=False, timeout=5.0) as client:
        return client.get(url)


@pytest.fixture
def running():
    provider = Provider()
    provider.add_content("/login.htm", "text/html", "<html>login</html>")
    provider.start()
    yield provider
    provider.stop()


class TestListener:
    def test_serves_over_loopback(self, running) -> None:
        url = running.get_uri("/login.htm?x=1")
        response = _get(url)
        assert response.status_code == 200
        assert response.text == "<html>login</html>"

    def test_base_url_is_loopback(self, running) -> None:
        assert running.base_url.startswith("http://127.0.0.1:")
        port = int(running.base_url.rsplit(":", 1)[1])
        assert port > 0

    def test_get_uri(self, running) -> None:
        assert running.get_uri("/login.htm") == f"{running.base_url}/login.htm"
        assert running.get_uri("/unregistered") is None

    def test_404_over_socket(self, running) -> None:
        response = _get(f"{running.base_url}/missing")
        assert response.status_code == 404

    def test_start_is_idempotent(self, running) -> None:
        assert running.start() == running.base_url


class TestStartup:
    def test_port_in_use(self) -> None:
        blocker = socket.create_server(("127.0.0.1", 0))
        try:
            port = blocker.getsockname()[1]
            provider = Provider(ProviderConfig(port=port))
            with pytest.raises(StartupError):
                provider.start()
            assert not provider.running
        finally:
            blocker.close()

    def test_context_manager(self) -> None:
        provider = Provider()
        provider.add_content("/x", "text/plain", "x")
        with provider:
            response = _get(provider.get_uri("/x"))
            assert response.text == "x"
