"""
Middleware wrapped around the router.

    LoggingMiddleware      - one access-log line per request
    CompressionMiddleware  - gzip content negotiation
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .compression import CompressionMiddleware
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "CompressionMiddleware",
    "LoggingMiddleware",
    "RequestLog",
]
