"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) pairs to handler functions. The route set is small and
fixed, so two pattern forms are all we need:

- Exact paths:    /user-agent      matches only "/user-agent"
- Prefix routes:  /echo/*text      matches "/echo/" + anything, and
                                   captures the remainder as "text"

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Incoming Request                                                   │
    │   GET /echo/a/b                                                      │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER (first match wins, in registration order)            │   │
    │   │                                                              │   │
    │   │   GET  /              → root                                │   │
    │   │   GET  /user-agent    → user_agent                          │   │
    │   │   GET  /files/*name   → files.read                          │   │
    │   │   GET  /echo/*text    → echo            ← MATCH!            │   │
    │   │   POST /files/*name   → files.write                         │   │
    │   │                                                              │   │
    │   │   Captured: path_params = {"text": "a/b"}                    │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   echo(routed_request)                                               │
    │                                                                      │
    │   No match → 404 Not Found (no body)                                 │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY NOT REGEX?
=============================================================================

Prefix routes capture everything after the prefix VERBATIM, including
embedded slashes, and paths are never normalized (no trailing-slash
stripping, no URL decoding). A plain startswith() check expresses exactly
that and nothing more.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional
import logging

from .request import HTTPRequest, Method
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


# Handler: a function that takes a (routed) request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        @router.get("/files/*name")
        def read_file(request):
            ...

        Route(
            path="/files/*name",     # Pattern as registered
            method=Method.GET,
            handler=read_file,
            prefix="/files/",        # Everything before the wildcard
            param_name="name",       # Key for the captured remainder
        )

    Exact routes have prefix=None and param_name=None.
    """

    path: str
    method: Method
    handler: Handler
    name: Optional[str] = None

    prefix: Optional[str] = field(default=None, repr=False)
    param_name: Optional[str] = field(default=None, repr=False)

    @property
    def is_prefix(self) -> bool:
        return self.prefix is not None

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """
        Match a request path against this route.

        Returns the captured params (empty for exact routes) or None.
        """
        if self.prefix is None:
            return {} if path == self.path else None

        if not path.startswith(self.prefix):
            return None
        return {self.param_name: path[len(self.prefix):]}


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

        Pattern: /echo/*text
        Path:    /echo/hello
        Result:  RouteMatch(route=<Route>, params={"text": "hello"})
    """

    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router over an ordered list of routes.

    ==========================================================================
    DECORATOR-BASED API
    ==========================================================================

        router = Router()

        @router.get("/")
        def root(request):
            return ok(request.version)

        @router.get("/echo/*text")
        def echo(request):
            return ok(request.version, text=request.path_params["text"])

        response = router.dispatch(request)

    ==========================================================================
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Method,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: Exact path ("/user-agent") or prefix pattern ("/echo/*text").
                  The wildcard must be the final segment.
            handler: Function taking a request, returning a response.
            method: Method the route answers to.
            name: Optional name, used in debug output.

        Returns:
            The registered Route.
        """
        prefix, param_name = self._compile_pattern(path)

        route = Route(
            path=path,
            method=Method(method),
            handler=handler,
            name=name or getattr(handler, "__name__", None),
            prefix=prefix,
            param_name=param_name,
        )
        self._routes.append(route)

        logger.debug(f"Registered route {route.method} {route.path}")
        return route

    def _compile_pattern(self, path: str) -> tuple[Optional[str], Optional[str]]:
        """
        Split a pattern into (prefix, param_name).

            "/user-agent"   → (None, None)         exact
            "/echo/*text"   → ("/echo/", "text")   prefix strip
        """
        if not path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {path!r}")

        star = path.find("*")
        if star == -1:
            return None, None

        prefix, param_name = path[:star], path[star + 1:]
        if not param_name or "/" in param_name or "*" in param_name:
            raise ValueError(f"Wildcard must be the last segment: {path!r}")

        return prefix, param_name

    def route(
        self,
        path: str,
        method: Method,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator for registering routes."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, Method.GET, name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, Method.POST, name)

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: Method, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Order matters: first-registered, first-matched.
        """
        for route in self._routes:
            if route.method != method:
                continue

            params = route.match(path)
            if params is not None:
                return RouteMatch(route=route, params=params)

        return None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        The handler receives a copy of the request with path_params set.
        Unmatched requests get a bodyless 404 carrying the request's version.
        """
        match = self.match(request.method, request.path)

        if match is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found(request.version)

        routed = replace(request, path_params=match.params)
        return match.route.handler(routed)

    def routes(self) -> List[Route]:
        """Get all registered routes in matching order."""
        return list(self._routes)
