"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads an HTTP/1.1 request off a byte stream and turns it into a structured
HTTPRequest object.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬── ────────┬──────── ────┬───                             │ │
    │  │   Method       Path        Version                             │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    User-Agent: curl/8.4.0\r\n                                  │ │
    │  │    Accept-Encoding: gzip\r\n                                   │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (exactly Content-Length bytes) ──────────────────────────┐ │
    │  │    hello                                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STREAM-BASED PARSING
=============================================================================

The parser pulls from a buffered, file-like stream (socket.makefile("rb")
in the server, io.BytesIO in tests) instead of a pre-read byte blob:

    readline()  → request line
    readline()  → header, header, ..., blank line
    read(N)     → body, where N = Content-Length

Because we read line by line and then exactly N body bytes, the parser
never consumes anything past the end of the declared body.

=============================================================================
FAILURE MODES
=============================================================================

Every failure is a subclass of HTTPParseError. A failed parse means there
is no well-formed request to answer, so the server drops the connection
without writing a response.

    MalformedRequestLine   - request line is not exactly 3 tokens
    UnsupportedMethod      - method token is not GET or POST
    MalformedHeaderLine    - header line has no ": " separator
    InvalidContentLength   - Content-Length is not a non-negative integer
    IncompleteBody         - stream ended before Content-Length bytes

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import BinaryIO, Dict, Mapping, Optional
import io
import re

from .media_types import ContentEncoding, negotiate_encoding, parse_accept_encoding


class HTTPParseError(Exception):
    """
    Raised when an HTTP request cannot be parsed.

    Carries a short machine-friendly `reason` next to the human message,
    so the connection layer can log why a connection was dropped.
    """

    reason = "parse_error"


class MalformedRequestLine(HTTPParseError):
    """The request line did not split into method, path and version."""

    reason = "malformed_request_line"


class UnsupportedMethod(HTTPParseError):
    """The method token is not one the server implements."""

    reason = "unsupported_method"

    def __init__(self, method: str):
        super().__init__(f"Unsupported HTTP method: {method!r}")
        self.method = method


class MalformedHeaderLine(HTTPParseError):
    """A header line lacks the ': ' name/value separator."""

    reason = "malformed_header_line"


class InvalidContentLength(HTTPParseError):
    """The Content-Length header is not a non-negative integer."""

    reason = "invalid_content_length"


class IncompleteBody(HTTPParseError):
    """The stream closed before the declared body was fully received."""

    reason = "incomplete_body"


class Method(str, Enum):
    """HTTP methods the server understands. Anything else fails parsing."""

    GET = "GET"
    POST = "POST"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Instances are immutable: the parser builds one per connection and it is
    never modified afterwards. The router hands handlers a routed copy
    (made with dataclasses.replace) that carries the captured path_params.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Method.GET or Method.POST

        path:           Request target exactly as sent ("/echo/a/b")

        version:        Version token from the request line, echoed back
                        verbatim in the response status line

        headers:        Header name → value, names case-sensitive as
                        received, last duplicate wins

        body:           Raw body bytes, or None when the request carried
                        no Content-Length header

        path_params:    Values captured by the matched route
                        "/echo/*text" with "/echo/hi" → {"text": "hi"}

        client_address: (ip, port) of the peer, used for access logs

    =========================================================================
    """

    method: Method
    path: str
    version: str = "HTTP/1.1"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    path_params: Mapping[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)

    @property
    def text(self) -> str:
        """
        The body decoded as UTF-8, with invalid bytes replaced by U+FFFD.

        Returns an empty string when there is no body.
        """
        if self.body is None:
            return ""
        return self.body.decode("utf-8", errors="replace")

    @property
    def content_length(self) -> int:
        """Length of the body that was read (0 when absent)."""
        return len(self.body) if self.body is not None else 0

    @property
    def user_agent(self) -> str:
        """Get the User-Agent header value, or an empty string."""
        return self.headers.get("User-Agent", "")

    @property
    def accepted_encodings(self) -> list[str]:
        """Coding tokens listed in the Accept-Encoding header."""
        return parse_accept_encoding(self.headers.get("Accept-Encoding", ""))

    @property
    def preferred_encoding(self) -> Optional[ContentEncoding]:
        """The encoding the response body should use, if any."""
        return negotiate_encoding(self.accepted_encodings)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value.

        Lookup is case-sensitive: header names are stored exactly as the
        client sent them.
        """
        return self.headers.get(name, default)


class RequestParser:
    """
    Parses an HTTP request from a buffered binary stream.

    ==========================================================================
    PARSER PIPELINE
    ==========================================================================

        stream
          │
          ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Request line  ── readline(), split on whitespace             │
        │     │  != 3 tokens → MalformedRequestLine                        │
        │     │  not GET/POST → UnsupportedMethod                          │
        │     ▼                                                             │
        │  2. Headers ─────── readline() until blank line / EOF            │
        │     │  no ": " → MalformedHeaderLine                             │
        │     ▼                                                             │
        │  3. Body ────────── read(Content-Length)                         │
        │     │  not digits → InvalidContentLength                         │
        │     │  short read → IncompleteBody                               │
        │     ▼                                                             │
        │  4. HTTPRequest                                                   │
        └───────────────────────────────────────────────────────────────────┘

    ==========================================================================
    """

    METHODS = {method.value: method for method in Method}

    HEADER_SEPARATOR = ": "

    # ASCII digits only; int() alone would also accept "+5", " 5" and "5_0"
    CONTENT_LENGTH_PATTERN = re.compile(r"[0-9]+", re.ASCII)

    def parse(
        self,
        stream: BinaryIO,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse one request from the stream.

        Args:
            stream: Readable binary stream positioned at a request start.
                    Must support readline() and read(n).
            client_address: Peer (ip, port), kept for logging.

        Returns:
            The parsed HTTPRequest.

        Raises:
            HTTPParseError: One of its subclasses, naming the failure.
        """
        method, path, version = self._parse_request_line(self._read_line(stream))
        headers = self._parse_headers(stream)
        body = self._read_body(stream, headers)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=MappingProxyType(headers),
            body=body,
            client_address=client_address,
        )

    def _read_line(self, stream: BinaryIO) -> str:
        """Read one line and strip surrounding whitespace (including CR LF)."""
        raw = stream.readline()
        return raw.decode("utf-8", errors="replace").strip()

    def _parse_request_line(self, line: str) -> tuple[Method, str, str]:
        """
        Split "METHOD SP PATH SP VERSION" into its three parts.

        The version token is not validated: whatever the client sent is
        echoed back in the status line.
        """
        parts = line.split()
        if len(parts) != 3:
            raise MalformedRequestLine(f"Invalid request line: {line!r}")

        token, path, version = parts

        method = self.METHODS.get(token)
        if method is None:
            raise UnsupportedMethod(token)

        if not path.startswith("/"):
            raise MalformedRequestLine(f"Request target must start with '/': {path!r}")

        return method, path, version

    def _parse_headers(self, stream: BinaryIO) -> Dict[str, str]:
        """
        Read header lines up to the blank line that ends the header block.

        End of stream also ends the block. Duplicate names overwrite the
        earlier value.
        """
        headers: Dict[str, str] = {}

        while True:
            raw = stream.readline()
            if not raw:
                break  # EOF

            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                break  # End of headers

            name, sep, value = line.partition(self.HEADER_SEPARATOR)
            if not sep:
                raise MalformedHeaderLine(f"Invalid header line: {line!r}")

            headers[name] = value

        return headers

    def _read_body(self, stream: BinaryIO, headers: Dict[str, str]) -> Optional[bytes]:
        """Read exactly Content-Length bytes, or return None without the header."""
        raw_length = headers.get("Content-Length")
        if raw_length is None:
            return None

        if not self.CONTENT_LENGTH_PATTERN.fullmatch(raw_length):
            raise InvalidContentLength(f"Invalid Content-Length header: {raw_length!r}")

        content_length = int(raw_length)
        body = bytearray()
        while len(body) < content_length:
            chunk = stream.read(content_length - len(body))
            if not chunk:
                raise IncompleteBody(
                    f"Incomplete body: expected {content_length} bytes, got {len(body)}"
                )
            body += chunk

        return bytes(body)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Parse a request held entirely in memory.

    Wraps the bytes in io.BytesIO and runs RequestParser over it.
    """
    return RequestParser().parse(io.BytesIO(data), client_address)
