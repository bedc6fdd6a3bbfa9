"""
=============================================================================
ROUTE TABLE
=============================================================================

The server's whole external API surface, in matching order:

    ┌────────┬───────────────┬────────────────────────────────────────────┐
    │ Method │ Path          │ Behavior                                   │
    ├────────┼───────────────┼────────────────────────────────────────────┤
    │ GET    │ /             │ 200, no body                               │
    │ GET    │ /user-agent   │ 200, text = User-Agent header              │
    │ GET    │ /files/*name  │ 200 + file bytes, or 404                   │
    │ GET    │ /echo/*text   │ 200, text = rest of the path               │
    │ POST   │ /files/*name  │ 201 after writing the body, or 500         │
    │ (any)  │ anything else │ 404, no body                               │
    └────────┴───────────────┴────────────────────────────────────────────┘

=============================================================================
"""

from typing import Optional

from .fs import FileSystem
from .handlers import FileHandler, echo, root, user_agent
from .http.request import HTTPRequest
from .http.response import HTTPResponse
from .http.router import Router
from .middleware import CompressionMiddleware


def build_router(
    directory: Optional[str],
    filesystem: Optional[FileSystem] = None,
    sandbox: bool = True,
) -> Router:
    """
    Build the fixed route table.

    Args:
        directory: Serving directory for /files/*, or None.
        filesystem: Provider used by the file handlers.
        sandbox: Keep /files/* names inside the serving directory.
    """
    router = Router()
    files = FileHandler(directory, filesystem, sandbox=sandbox)

    router.get("/")(root)
    router.get("/user-agent")(user_agent)
    router.get("/files/*name", name="read_file")(files.read)
    router.get("/echo/*text")(echo)
    router.post("/files/*name", name="write_file")(files.write)

    return router


def dispatch(
    request: HTTPRequest,
    serving_directory: Optional[str],
    filesystem: Optional[FileSystem] = None,
) -> HTTPResponse:
    """
    Route one request and apply content negotiation to the result.

    A self-contained entry point for embedding the handlers without the
    socket server. The server itself builds the router once and reuses it.

    Raises:
        MissingDirectoryError: A /files/* route was hit without a directory.
    """
    router = build_router(serving_directory, filesystem)
    return CompressionMiddleware()(request, router.dispatch)
