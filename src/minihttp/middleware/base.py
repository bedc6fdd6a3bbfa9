"""
=============================================================================
MIDDLEWARE BASE CLASSES
=============================================================================

Middleware wraps the router to handle cross-cutting concerns (content
negotiation, access logging) without touching individual handlers.

=============================================================================
CHAIN OF RESPONSIBILITY
=============================================================================

Each middleware receives the request and a `next` callable. It may act
before calling next, after it, or both:

    ┌──────────────────────────────────────────────────────────┐
    │  LoggingMiddleware             (start timer)             │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │  CompressionMiddleware     (read Accept-Encoding)  │  │
    │  │  ┌──────────────────────────────────────────────┐  │  │
    │  │  │            router.dispatch                   │  │  │
    │  │  └──────────────────────────────────────────────┘  │  │
    │  │                            (set Content-Encoding)  │  │
    │  └────────────────────────────────────────────────────┘  │
    │                                (emit access log line)    │
    └──────────────────────────────────────────────────────────┘

Responses are immutable, so middleware that changes a response returns
a modified copy rather than mutating the one it got from next().

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The next handler in the chain: another middleware or the router itself
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class MyMiddleware(Middleware):
            def __call__(self, request, next):
                response = next(request)     # <-- must call next
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming HTTP request
            next: The next handler in the chain

        Returns:
            HTTP response (from next() or a modified copy of it)
        """

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

    First added = outermost:

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        pipeline.add(CompressionMiddleware())

        handler = pipeline.wrap(router.dispatch)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Add middleware to the pipeline. Returns self for chaining."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """Add several middleware at once."""
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with every middleware in the pipeline.

        Given [MW1, MW2] the result calls MW1 → MW2 → handler. We wrap in
        reverse so the first-added middleware ends up outermost.
        """
        current = handler

        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)

        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler,
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped
