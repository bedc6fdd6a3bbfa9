"""
=============================================================================
CONTENT TYPES AND CONTENT ENCODINGS
=============================================================================

Responses that carry a body declare exactly one of two media types:

    text/plain                  - echo text, user-agent reflection
    application/octet-stream    - raw file contents from /files/*

The browser/client treats octet-stream as opaque binary data, which is
what we want for files: we never sniff or guess a file's type.

The only content coding the server knows is gzip. Any other token in the
client's Accept-Encoding header (deflate, br, identity, ...) is ignored.

=============================================================================
"""

import re
from enum import Enum
from typing import Iterable, Optional


class ContentType(str, Enum):
    """
    Media type of a response body.

    Inherits from str so the member can be written straight into the
    Content-Type header line.
    """

    TEXT = "text/plain"
    APPLICATION = "application/octet-stream"

    def __str__(self) -> str:
        return self.value


class ContentEncoding(str, Enum):
    """Content coding applied to a response body on the wire."""

    GZIP = "gzip"

    def __str__(self) -> str:
        return self.value


ZERO_QVALUE = re.compile(r"0(\.0{0,3})?")


def parse_accept_encoding(header: str) -> list[str]:
    """
    Split an Accept-Encoding header into bare coding tokens.

    Quality parameters are dropped, so "gzip;q=0.8" yields "gzip". A coding
    with q=0 is one the client refuses, so it is left out entirely:

        >>> parse_accept_encoding("deflate, gzip;q=0.8, br")
        ['deflate', 'gzip', 'br']
        >>> parse_accept_encoding("gzip;q=0, br")
        ['br']
    """
    tokens = []
    for part in header.split(","):
        token, *params = part.split(";")
        token = token.strip()
        if not token or _is_refused(params):
            continue
        tokens.append(token)
    return tokens


def _is_refused(params: list[str]) -> bool:
    for param in params:
        name, _, value = param.partition("=")
        if name.strip().lower() == "q" and ZERO_QVALUE.fullmatch(value.strip()):
            return True
    return False


def negotiate_encoding(tokens: Iterable[str]) -> Optional[ContentEncoding]:
    """
    Pick the response encoding from the client's accepted tokens.

    Returns ContentEncoding.GZIP when "gzip" is offered, otherwise None.
    Unknown tokens are ignored, never rejected.
    """
    for token in tokens:
        if token == ContentEncoding.GZIP.value:
            return ContentEncoding.GZIP
    return None
