"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows about HTTP bytes lives in this package:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   stream → HTTPRequest, or an HTTPParseError subclass              │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE SERIALIZER (response.py)                                   │
    │   HTTPResponse → exact wire bytes, gzip when negotiated             │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │   (method, path) → handler, exact or prefix-strip matching          │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES / MEDIA TYPES (status_codes.py, media_types.py)        │
    │   the fixed vocabulary the wire format is built from                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    Method,
    HTTPParseError,
    MalformedRequestLine,
    UnsupportedMethod,
    MalformedHeaderLine,
    InvalidContentLength,
    IncompleteBody,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    serialize,
    ok,
    created,
    not_found,
    internal_error,
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus
from .media_types import ContentType, ContentEncoding, negotiate_encoding, parse_accept_encoding

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "Method",
    "HTTPParseError",
    "MalformedRequestLine",
    "UnsupportedMethod",
    "MalformedHeaderLine",
    "InvalidContentLength",
    "IncompleteBody",
    "parse_request",

    # Responses
    "HTTPResponse",
    "ResponseBuilder",
    "serialize",
    "ok",
    "created",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Vocabulary
    "HTTPStatus",
    "ContentType",
    "ContentEncoding",
    "negotiate_encoding",
    "parse_accept_encoding",
]
