"""
pytest configuration and fixtures.
"""

import logging
import socket
import threading
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserver import ServerConfig
from staticserver.core import Listener
from staticserver.handlers import StaticFileHandler


# A valid 1x1 PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture(autouse=True)
def restore_log_level():
    """StaticServer.run() sets the package log level; undo it after each test."""
    logger = logging.getLogger("staticserver")
    level = logger.level
    yield
    logger.setLevel(level)


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """Document root with a few files of different types."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(b"hi")
    (root / "logo.png").write_bytes(PNG_BYTES)
    (root / "data.xyz").write_bytes(b"\x00\x01\x02\x03")
    (root / "style.css").write_text("body { color: red; }")
    (root / "sub").mkdir()
    (root / "sub" / "page.htm").write_text("<p>sub</p>")
    (tmp_path / "secret.txt").write_text("outside the root")
    return root


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def handler(doc_root: Path) -> StaticFileHandler:
    return StaticFileHandler(str(doc_root))


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def config() -> ServerConfig:
    """Test configuration: ephemeral port, fast shutdown polling."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        poll_interval=0.05,
        read_timeout=5.0,
        log_level="WARNING",
    )


class RunningListener:
    """A Listener running its accept loop in a background thread."""

    def __init__(self, listener: Listener):
        self.listener = listener
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.listener.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.listener.run, daemon=True)
        self._thread.start()

    def stop(self):
        self.listener.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self.listener.close()

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            return read_all(s)

    def get(self, target: str, version: str = "HTTP/1.1"):
        """GET a target; returns (status_line, headers, body)."""
        raw = self.request(f"GET {target} {version}\r\nHost: localhost\r\n\r\n".encode())
        return split_response(raw)


def read_all(sock: socket.socket) -> bytes:
    """Read from a socket until EOF."""
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes):
    """Split raw response bytes into (status_line, headers dict, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return lines[0], headers, body


@pytest.fixture
def server(config: ServerConfig, doc_root: Path) -> Generator[RunningListener, None, None]:
    """A running listener serving the doc_root fixture."""
    listener = Listener(config)
    listener.start(0, str(doc_root))

    running = RunningListener(listener)
    running.start()

    yield running

    running.stop()
