"""
=============================================================================
COMPRESSION MIDDLEWARE (CONTENT NEGOTIATION)
=============================================================================

Decides whether a response body goes out gzip-compressed.

=============================================================================
HOW HTTP COMPRESSION WORKS
=============================================================================

    Client                                      Server
      │                                           │
      │  GET /echo/hello HTTP/1.1                 │
      │  Accept-Encoding: deflate, gzip           │
      │ ────────────────────────────────────────► │
      │                                           │  "gzip" offered →
      │                                           │  mark response GZIP
      │  HTTP/1.1 200 OK                          │
      │  Content-Encoding: gzip                   │
      │  Content-Type: text/plain                 │
      │  Content-Length: 25                       │
      │                                           │
      │  <gzip bytes>                             │
      │ ◄──────────────────────────────────────── │

The Accept-Encoding header is a comma-separated list. Only the "gzip"
token is recognized; every other token is ignored, never rejected.

This middleware only DECIDES. The actual compression happens in the
serializer (HTTPResponse.to_bytes), so Content-Length is always computed
from the compressed bytes.

=============================================================================
"""

import logging

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


class CompressionMiddleware(Middleware):
    """
    Response compression middleware.

    1. Negotiate an encoding from the request's Accept-Encoding header
    2. Call the next handler to get the response
    3. If the response carries a body and gzip was negotiated, return a
       copy with content_encoding set
    """

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        encoding = request.preferred_encoding

        response = next(request)

        if encoding is None or not response.has_body:
            return response

        logger.debug(f"Encoding response for {request.path} as {encoding}")
        return response.with_encoding(encoding)
