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

from minihttpd import ServerLoop, ConfigSource, ServerConfig
from minihttpd.core import ListenerClosedError
from minihttpd.handlers import StaticFileProvider


INDEX_BODY = b"<h1>Hello, World!</h1>\n"


@pytest.fixture
def sample_get_request() -> bytes:
    """Minimal HTTP GET request."""
    return b"GET / HTTP/1.1\r\n\r\n"


@pytest.fixture
def sample_request_with_headers() -> bytes:
    """HTTP GET request with headers and a body that must not be read."""
    return (
        b"POST /submit HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Content-Length: 5\r\n"
        b"\r\n"
        b"hello"
    )


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Content root containing index.html."""
    (tmp_path / "index.html").write_bytes(INDEX_BODY)
    return tmp_path


@pytest.fixture
def provider(content_dir: Path) -> StaticFileProvider:
    """Static provider serving INDEX_BODY."""
    return StaticFileProvider(str(content_dir))


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def http_exchange(port: int, request: bytes) -> bytes:
    """Send a request, half-close, and read the response until EOF."""
    with socket.create_connection(("127.0.0.1", port), timeout=5.0) as s:
        if request:
            s.sendall(request)
        s.shutdown(socket.SHUT_WR)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class ServerThread:
    """Runs a ServerLoop in a background thread."""

    def __init__(self, server: ServerLoop):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: threading.Thread = None

    def _run(self):
        try:
            self.server.run()
        except ListenerClosedError:
            pass  # Normal end after stop()
        except BaseException as e:
            self.error = e

    def start(self):
        """Start server in background thread and wait until it is bound."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.ready.wait(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.error}")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


@pytest.fixture
def running_server(free_port: int, provider: StaticFileProvider) -> Generator[ServerThread, None, None]:
    """A ServerLoop listening on 127.0.0.1:free_port."""
    source = ConfigSource({"IP_ADDR": "127.0.0.1", "PORT": str(free_port), "LOG_LEVEL": "WARNING"})
    server = ServerLoop(source, provider, ServerConfig.from_source(source))

    srv = ServerThread(server)
    srv.port = free_port
    srv.start()

    yield srv

    srv.stop()
