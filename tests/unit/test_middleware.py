"""
Unit tests for middleware: pipeline ordering, compression, access logging.
"""

import json
import logging

import pytest

from minihttp.http.media_types import ContentEncoding
from minihttp.http.request import HTTPRequest, Method
from minihttp.http.response import ok
from minihttp.middleware import (
    CompressionMiddleware,
    LoggingMiddleware,
    Middleware,
    MiddlewarePipeline,
)


def make_request(headers=None, path: str = "/echo/abc") -> HTTPRequest:
    return HTTPRequest(
        method=Method.GET,
        path=path,
        headers=headers or {},
        client_address=("10.0.0.1", 5555),
    )


class RecordingMiddleware(Middleware):
    def __init__(self, label, calls):
        self.label = label
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.label}:before")
        response = next(request)
        self.calls.append(f"{self.label}:after")
        return response


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline."""

    def test_first_added_is_outermost(self):
        """Test that middleware runs in the order added."""
        calls = []
        pipeline = MiddlewarePipeline().use(
            RecordingMiddleware("a", calls),
            RecordingMiddleware("b", calls),
        )

        def handler(request):
            calls.append("handler")
            return ok()

        pipeline.wrap(handler)(make_request())

        assert calls == ["a:before", "b:before", "handler", "b:after", "a:after"]

    def test_empty_pipeline_is_passthrough(self):
        """Wrapping with no middleware returns the handler unchanged."""
        def handler(request):
            return ok()

        assert MiddlewarePipeline().wrap(handler) is handler


class TestCompressionMiddleware:
    """Tests for gzip content negotiation."""

    def test_gzip_negotiated(self):
        """Test that gzip is set when offered and a body exists."""
        response = CompressionMiddleware()(
            make_request({"Accept-Encoding": "gzip"}),
            lambda r: ok(text="abc"),
        )
        assert response.content_encoding is ContentEncoding.GZIP

    def test_gzip_among_others(self):
        """Test gzip found inside a list of encodings."""
        response = CompressionMiddleware()(
            make_request({"Accept-Encoding": "invalid-encoding-1, gzip, invalid-encoding-2"}),
            lambda r: ok(text="abc"),
        )
        assert response.content_encoding is ContentEncoding.GZIP

    @pytest.mark.parametrize("header", [None, "", "deflate", "br, identity", "gzipx"])
    def test_no_gzip_leaves_response_alone(self, header):
        """Without a gzip token the response passes through untouched."""
        headers = {"Accept-Encoding": header} if header is not None else {}
        original = ok(text="abc")

        response = CompressionMiddleware()(make_request(headers), lambda r: original)

        assert response is original
        assert b"Content-Encoding" not in response.to_bytes()

    def test_bodyless_response_not_encoded(self):
        """A header-only response never gets an encoding."""
        response = CompressionMiddleware()(
            make_request({"Accept-Encoding": "gzip"}),
            lambda r: ok(),
        )

        assert response.content_encoding is None
        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"


class TestLoggingMiddleware:
    """Tests for access logging."""

    def test_text_format(self, caplog):
        """Test Apache-style access line."""
        middleware = LoggingMiddleware()

        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            middleware(make_request({"User-Agent": "curl/8"}), lambda r: ok(text="abc"))

        [record] = [r for r in caplog.records if r.name == "minihttp.access"]
        message = record.getMessage()
        assert message.startswith("10.0.0.1 - - [")
        assert '"GET /echo/abc HTTP/1.1" 200 3' in message

    def test_json_format(self, caplog):
        """Test structured JSON access line."""
        middleware = LoggingMiddleware(log_format="json")

        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            middleware(make_request({"Accept-Encoding": "gzip"}),
                       lambda r: ok(text="abc").with_encoding(ContentEncoding.GZIP))

        [record] = [r for r in caplog.records if r.name == "minihttp.access"]
        entry = json.loads(record.getMessage())

        assert entry["method"] == "GET"
        assert entry["path"] == "/echo/abc"
        assert entry["status_code"] == 200
        assert entry["client_ip"] == "10.0.0.1"
        assert entry["content_encoding"] == "gzip"

    def test_unknown_format_rejected(self):
        """Test that an unknown format fails at construction."""
        with pytest.raises(ValueError):
            LoggingMiddleware(log_format="xml")

    def test_handler_error_logged_and_reraised(self, caplog):
        """Errors are logged, then propagate unchanged."""
        def boom(request):
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="minihttp.access"):
            with pytest.raises(RuntimeError):
                LoggingMiddleware()(make_request(), boom)

        assert "RuntimeError: boom" in caplog.text
