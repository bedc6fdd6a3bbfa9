"""
=============================================================================
minihttp
=============================================================================

A small multi-threaded HTTP/1.1 server over raw sockets.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET  /                 200, empty body                              │
    │  GET  /echo/<text>      200, text/plain <text>                       │
    │  GET  /user-agent       200, text/plain User-Agent header            │
    │  GET  /files/<name>     200, application/octet-stream file bytes     │
    │  POST /files/<name>     201 after writing the body                   │
    │  anything else          404                                          │
    └─────────────────────────────────────────────────────────────────────┘

Text and file responses are gzip-compressed when the client lists "gzip"
in Accept-Encoding. Each connection carries one request, then closes.

    python -m minihttp --directory /tmp/files

=============================================================================
"""

__version__ = "1.0.0"

from .config import ConfigurationError, MissingDirectoryError, ServerConfig
from .server import HTTPServer, create_app

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "ConfigurationError",
    "MissingDirectoryError",
    "create_app",
    "__version__",
]
