"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

Emits one access-log line per handled request, in either a human-readable
text format or JSON for log aggregators:

    text:
    127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "GET /echo/hi HTTP/1.1" 200 2 gzip 0.14ms

    json:
    {"method": "GET", "path": "/echo/hi", "status_code": 200, ...}

Requests that fail to parse never reach the middleware; the connection
layer logs those itself.

=============================================================================
"""

from dataclasses import asdict, dataclass
from typing import Optional
import json
import logging
import time

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


# Namespaced so access logs can be routed separately:
#   logging.getLogger("minihttp.access").addHandler(file_handler)
logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """Structured access-log entry for one request."""

    method: str
    path: str
    version: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    content_encoding: Optional[str]
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path} {self.version}" {self.status_code} '
            f'{self.content_length} {self.content_encoding or "-"} '
            f'{self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so the timing covers everything and
    the logged response is the final one (including its encoding).

        pipeline.add(LoggingMiddleware(log_format="json"))
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
    ):
        """
        Args:
            log_format: "text" (Apache-style line) or "json".
            log_level: Level access lines are emitted at.
        """
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {log_format!r}")

        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        log_entry = RequestLog(
            method=str(request.method),
            path=request.path,
            version=request.version,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body or b""),
            content_encoding=str(response.content_encoding) if response.content_encoding else None,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
