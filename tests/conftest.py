"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttpd import Server, ServerConfig


INDEX_HTML = b"<!DOCTYPE html>\n<html><body><h1>Hello from tinyhttpd</h1></body></html>\n"
STYLE_CSS = b"body { color: #333; }\n"
APP_JS = b"console.log('hi');\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """A document root with a handful of files."""
    root = tmp_path / "srv"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "style.css").write_bytes(STYLE_CSS)
    (root / "app.js").write_bytes(APP_JS)
    (root / "photo.PNG").write_bytes(PNG_BYTES)
    (root / "api").mkdir()
    (root / "api" / "users.json").write_bytes(b'[{"id": 1}]')
    (root / "img").mkdir()
    (tmp_path / "secret.txt").write_bytes(b"outside the root")
    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: Server):
        self.server = server
        self.host, self.port = server.address
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.start, daemon=True)
        self._thread.start()

        # The socket is already listening; wait for the accept loop itself
        for _ in range(50):  # 5 seconds max
            if self.server.is_running:
                return
            time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        sock = socket.create_connection((self.host, self.port), timeout=5.0)
        return sock

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with self.connect() as sock:
            sock.sendall(raw)
            return recv_all(sock)

    def get(self, path: str) -> bytes:
        return self.request(f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


def recv_all(sock: socket.socket) -> bytes:
    """Read until EOF."""
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def config(doc_root: Path) -> ServerConfig:
    """Test server configuration on an OS-assigned port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        doc_root=str(doc_root),
        log_level="WARNING",
        accept_poll_interval=0.1,
    )


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Create and start a test server."""
    test_srv = TestServer(Server(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
