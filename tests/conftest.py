"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Dict, Generator, Optional, Union

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request for the echo route."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: curl/7.64.1\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request writing a file."""
    body = b"12345"
    return (
        b"POST /files/number HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def serving_dir(tmp_path: Path) -> Path:
    """A serving directory with one file in it."""
    directory = tmp_path / "files"
    directory.mkdir()
    (directory / "foo").write_bytes(b"Hello, World!")
    return directory


class FakeFileSystem:
    """In-memory FileSystem keyed by resolved path."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        self.files: Dict[Path, bytes] = {}
        self.fail_writes = False

    def put(self, name: str, data: bytes):
        self.files[self.root / name] = data

    def get(self, name: str) -> Optional[bytes]:
        return self.files.get(self.root / name)

    def read(self, path) -> bytes:
        try:
            return self.files[Path(path)]
        except KeyError:
            raise FileNotFoundError(str(path))

    def write(self, path, data: bytes) -> None:
        if self.fail_writes:
            raise PermissionError(f"Read-only: {path}")
        self.files[Path(path)] = data


@pytest.fixture
def fake_fs(tmp_path: Path) -> FakeFileSystem:
    return FakeFileSystem(tmp_path)


@pytest.fixture
def config(serving_dir: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        workers=2,
        timeout=5.0,
        directory=str(serving_dir),
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self, port: Optional[int] = None):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": port},
            daemon=True
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, half_close: bool = True) -> bytes:
        """Send raw request bytes and read until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            if half_close:
                sock.shutdown(socket.SHUT_WR)

            chunks = []
            while True:
                try:
                    chunk = sock.recv(4096)
                except ConnectionResetError:
                    break  # Server dropped the connection with unread input
                if not chunk:
                    break
                chunks.append(chunk)
            return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server on a free port, serving the serving_dir fixture."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def fixed_port_server(config: ServerConfig, free_port: int) -> Generator[TestServer, None, None]:
    """A running server told to bind free_port through run(port=...)."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start(port=free_port)

    yield test_srv

    test_srv.stop()
