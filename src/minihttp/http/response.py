"""
=============================================================================
HTTP RESPONSE BUILDER AND SERIALIZER
=============================================================================

Builds HTTPResponse objects and serializes them to exact wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (only when the response has a body) ──────────────────┐ │
    │  │    Content-Encoding: gzip\r\n          ← only if negotiated    │ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Length: 25\r\n              ← after compression     │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    raw (or gzip-compressed) bytes                              │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A response without a body is just the status line and a blank line:

    HTTP/1.1 404 Not Found\r\n\r\n

=============================================================================
BIT-EXACT OUTPUT
=============================================================================

The serializer is the only part of the server whose output is compared
byte for byte by clients, so:

    - header order is fixed: Content-Encoding, Content-Type, Content-Length
    - no Date/Server/Connection headers are added
    - Content-Length is the length of the bytes that actually follow,
      i.e. computed AFTER gzip compression

=============================================================================
"""

from dataclasses import dataclass, replace
from typing import Optional, Union
import gzip

from .media_types import ContentEncoding, ContentType
from .status_codes import HTTPStatus


# zlib's default level; mtime=0 keeps the gzip header (and so the body) stable
GZIP_LEVEL = 6
GZIP_MTIME = 0


@dataclass(frozen=True)
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Immutable once built. A handler creates one per request and the
    serializer turns it into bytes; middleware that needs a different
    response (e.g. to add an encoding) makes a copy with with_encoding().

    Invariant: a body always has a declared content type. The reverse is
    allowed: a content type without a body serializes as header-only
    framing.
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: Optional[ContentType] = None
    content_encoding: Optional[ContentEncoding] = None
    version: str = "HTTP/1.1"
    body: Optional[bytes] = None

    def __post_init__(self):
        if self.body is not None and self.content_type is None:
            raise ValueError("A response body requires a content type")

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line (without CRLF).

        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status.value} {self.status.phrase}"

    @property
    def has_body(self) -> bool:
        """True when the response will be framed with body headers."""
        return self.content_type is not None and self.body is not None

    def with_encoding(self, encoding: Optional[ContentEncoding]) -> "HTTPResponse":
        """Return a copy of this response with a different content encoding."""
        return replace(self, content_encoding=encoding)

    def encoded_body(self) -> bytes:
        """
        The body as it goes on the wire.

        Gzip-compressed when content_encoding is GZIP, otherwise unchanged.
        Empty when the response has no body.
        """
        if not self.has_body:
            return b""
        if self.content_encoding is ContentEncoding.GZIP:
            return gzip.compress(self.body, compresslevel=GZIP_LEVEL, mtime=GZIP_MTIME)
        return self.body

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for sending over the socket.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\r\n                 ← Status line
            Content-Encoding: gzip\r\n          ← Only if encoded
            Content-Type: text/plain\r\n
            Content-Length: 25\r\n              ← Length of encoded body
            \r\n                                ← Separator
            <body bytes>

        =====================================================================
        """
        lines = [self.status_line]

        if not self.has_body:
            lines.append("")
            return ("\r\n".join(lines) + "\r\n").encode("utf-8")

        body = self.encoded_body()

        if self.content_encoding is not None:
            lines.append(f"Content-Encoding: {self.content_encoding}")
        lines.append(f"Content-Type: {self.content_type}")
        lines.append(f"Content-Length: {len(body)}")
        lines.append("")

        header_bytes = ("\r\n".join(lines) + "\r\n").encode("utf-8")
        return header_bytes + body


def serialize(response: HTTPResponse) -> bytes:
    """Serialize a response to wire bytes. Total and side-effect free."""
    return response.to_bytes()


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    ==========================================================================
    USAGE
    ==========================================================================

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .version(request.version)
            .text("hello")
            .build())

        response = (ResponseBuilder()
            .version(request.version)
            .binary(file_bytes)
            .build())

    text() and binary() set the body and its content type together, so a
    builder can never produce a body without a type.

    ==========================================================================
    """

    def __init__(self, version: str = "HTTP/1.1"):
        self._status = HTTPStatus.OK
        self._version = version
        self._content_type: Optional[ContentType] = None
        self._content_encoding: Optional[ContentEncoding] = None
        self._body: Optional[bytes] = None

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the status code."""
        self._status = status
        return self

    def version(self, version: str) -> "ResponseBuilder":
        """Set the protocol version echoed in the status line."""
        self._version = version
        return self

    def text(self, text: Union[str, bytes]) -> "ResponseBuilder":
        """Set a text/plain body. Strings are encoded as UTF-8."""
        if isinstance(text, str):
            text = text.encode("utf-8")
        self._body = text
        self._content_type = ContentType.TEXT
        return self

    def binary(self, data: bytes) -> "ResponseBuilder":
        """Set an application/octet-stream body."""
        self._body = bytes(data)
        self._content_type = ContentType.APPLICATION
        return self

    def encoding(self, encoding: Optional[ContentEncoding]) -> "ResponseBuilder":
        """Set the content encoding applied at serialization time."""
        self._content_encoding = encoding
        return self

    def build(self) -> HTTPResponse:
        """Build and return the HTTPResponse object."""
        return HTTPResponse(
            status=self._status,
            content_type=self._content_type,
            content_encoding=self._content_encoding,
            version=self._version,
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the four statuses the server produces:
#
#     return ok(version, text="hello")
#     return ok(version, data=file_bytes)
#     return created(version)
#     return not_found(version)
#
# =============================================================================

def ok(
    version: str = "HTTP/1.1",
    text: Optional[Union[str, bytes]] = None,
    data: Optional[bytes] = None,
) -> HTTPResponse:
    """
    Create a 200 OK response.

    Pass `text` for a text/plain body, `data` for an octet-stream body,
    or neither for a header-only response.
    """
    builder = ResponseBuilder(version).status(HTTPStatus.OK)
    if text is not None:
        builder.text(text)
    elif data is not None:
        builder.binary(data)
    return builder.build()


def created(version: str = "HTTP/1.1") -> HTTPResponse:
    """Create a 201 Created response with no body."""
    return ResponseBuilder(version).status(HTTPStatus.CREATED).build()


def not_found(version: str = "HTTP/1.1") -> HTTPResponse:
    """Create a 404 Not Found response with no body."""
    return ResponseBuilder(version).status(HTTPStatus.NOT_FOUND).build()


def internal_error(version: str = "HTTP/1.1") -> HTTPResponse:
    """Create a 500 Internal Server Error response with no body."""
    return ResponseBuilder(version).status(HTTPStatus.INTERNAL_SERVER_ERROR).build()
