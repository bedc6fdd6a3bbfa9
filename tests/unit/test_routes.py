"""
Unit tests for the fixed route table, end to end without sockets.
"""

import gzip
from pathlib import Path

import pytest

from minihttp.config import MissingDirectoryError
from minihttp.http.request import parse_request
from minihttp.routes import build_router, dispatch


def run(raw: bytes, directory=None, filesystem=None) -> bytes:
    return dispatch(parse_request(raw), directory, filesystem).to_bytes()


class TestRouteTable:
    """Tests for build_router()."""

    def test_route_order(self):
        """Test the registration order of the fixed routes."""
        router = build_router(None)

        assert [(str(r.method), r.path) for r in router.routes()] == [
            ("GET", "/"),
            ("GET", "/user-agent"),
            ("GET", "/files/*name"),
            ("GET", "/echo/*text"),
            ("POST", "/files/*name"),
        ]

    @pytest.mark.parametrize("raw", [
        b"POST / HTTP/1.1\r\n\r\n",
        b"POST /echo/abc HTTP/1.1\r\n\r\n",
        b"GET /echo HTTP/1.1\r\n\r\n",
        b"GET /files HTTP/1.1\r\n\r\n",
        b"GET /user-agent/ HTTP/1.1\r\n\r\n",
        b"GET //echo/abc HTTP/1.1\r\n\r\n",
    ])
    def test_unmatched_paths(self, raw: bytes):
        """Anything outside the table is a bare 404."""
        assert run(raw) == b"HTTP/1.1 404 Not Found\r\n\r\n"


class TestScenarios:
    """Request-to-response behavior of every route."""

    def test_echo(self):
        """GET /echo/hello answers the text with exact framing."""
        assert run(b"GET /echo/hello HTTP/1.1\r\n\r\n") == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )

    def test_user_agent(self):
        """GET /user-agent reflects the header value."""
        raw = run(b"GET /user-agent HTTP/1.1\r\nUser-Agent: test-client\r\n\r\n")
        assert raw.endswith(b"\r\nContent-Length: 11\r\n\r\ntest-client")

    def test_not_found(self):
        """An unknown path gets exactly the 404 status line."""
        assert run(b"GET /nonexistent HTTP/1.1\r\n\r\n") == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_root(self):
        """GET / answers 200 with nothing else."""
        assert run(b"GET / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_post_then_get(self, serving_dir: Path):
        """A posted file can be read back."""
        posted = run(
            b"POST /files/a.txt HTTP/1.1\r\nContent-Length: 3\r\n\r\nabc",
            str(serving_dir),
        )
        assert posted == b"HTTP/1.1 201 Created\r\n\r\n"

        fetched = run(b"GET /files/a.txt HTTP/1.1\r\n\r\n", str(serving_dir))
        assert fetched == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/octet-stream\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_post_then_get_in_memory(self, fake_fs):
        """The same round trip against an injected filesystem."""
        root = str(fake_fs.root)
        run(b"POST /files/b HTTP/1.1\r\nContent-Length: 2\r\n\r\nhi", root, fake_fs)

        assert fake_fs.get("b") == b"hi"
        assert run(b"GET /files/b HTTP/1.1\r\n\r\n", root, fake_fs).endswith(b"\r\n\r\nhi")

    def test_gzip_echo(self):
        """Negotiated gzip compresses the body and declares it."""
        raw = run(b"GET /echo/hi HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n")
        head, _, body = raw.partition(b"\r\n\r\n")

        assert head.split(b"\r\n") == [
            b"HTTP/1.1 200 OK",
            b"Content-Encoding: gzip",
            b"Content-Type: text/plain",
            b"Content-Length: " + str(len(body)).encode(),
        ]
        assert gzip.decompress(body) == b"hi"

    def test_gzip_file(self, serving_dir: Path):
        """File bodies are compressed too."""
        raw = run(
            b"GET /files/foo HTTP/1.1\r\nAccept-Encoding: deflate, gzip\r\n\r\n",
            str(serving_dir),
        )
        body = raw.partition(b"\r\n\r\n")[2]
        assert gzip.decompress(body) == b"Hello, World!"

    def test_unknown_encoding_not_applied(self):
        """Unknown encodings leave the body uncompressed."""
        raw = run(b"GET /echo/abc HTTP/1.1\r\nAccept-Encoding: invalid-encoding\r\n\r\n")

        assert b"Content-Encoding" not in raw
        assert raw.endswith(b"\r\n\r\nabc")

    def test_gzip_not_applied_to_bodyless(self):
        """A 404 stays bare even when gzip is accepted."""
        raw = run(b"GET /nope HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n")
        assert raw == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_version_is_echoed(self):
        """The response version mirrors the request's."""
        assert run(b"GET / HTTP/1.0\r\n\r\n") == b"HTTP/1.0 200 OK\r\n\r\n"

    def test_get_missing_file(self, serving_dir: Path):
        """A missing file is a bare 404."""
        raw = run(b"GET /files/missing HTTP/1.1\r\n\r\n", str(serving_dir))
        assert raw == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_files_without_directory(self):
        """/files/* without a serving directory is a configuration failure."""
        with pytest.raises(MissingDirectoryError):
            run(b"GET /files/foo HTTP/1.1\r\n\r\n")

    def test_echo_does_not_need_directory(self):
        """Non-file routes work without a serving directory."""
        assert run(b"GET /echo/x HTTP/1.1\r\n\r\n").endswith(b"\r\n\r\nx")
