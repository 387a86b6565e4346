"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttp import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc123 HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: test-client\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample file upload."""
    body = b"hello"
    return (
        b"POST /files/foo.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Empty serving directory."""
    directory = tmp_path / "data"
    directory.mkdir()
    return directory


@pytest.fixture
def config(data_dir: Path) -> ServerConfig:
    """Test configuration: loopback, OS-chosen port, short deadline."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        timeout=2.0,
        directory=str(data_dir),
        log_level="WARNING",
    )


class TestServer:
    """Runs an HTTPServer in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        if self.server.is_running:
            self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def send(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes, return everything the server writes before closing."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as sock:
            sock.sendall(raw)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


def _running_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()
    yield test_srv
    test_srv.stop()


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Server with a serving directory and standard framing."""
    yield from _running_server(config)


@pytest.fixture
def bare_server() -> Generator[TestServer, None, None]:
    """Server started without a serving directory."""
    yield from _running_server(ServerConfig(host="127.0.0.1", port=0, timeout=2.0))


@pytest.fixture
def legacy_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Server emitting legacy framing."""
    config.legacy_framing = True
    yield from _running_server(config)
