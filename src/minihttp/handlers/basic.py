"""
Handlers that need nothing but the request itself.

    GET /               → 200, no body (liveness probe)
    GET /echo/<text>    → 200, text/plain body = <text>
    GET /user-agent     → 200, text/plain body = User-Agent header
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


def root(request: HTTPRequest) -> HTTPResponse:
    """Answer 200 with no body. Used by clients to check the server is up."""
    return ok(request.version)


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Reflect the path remainder back as text.

    The remainder is taken verbatim, embedded slashes included:
    /echo/a/b answers "a/b".
    """
    return ok(request.version, text=request.path_params.get("text", ""))


def user_agent(request: HTTPRequest) -> HTTPResponse:
    # Empty body (still text/plain) when the header is absent
    return ok(request.version, text=request.user_agent)
