"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minihttp --directory /tmp/files                  │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_DIRECTORY=/tmp/files python -m minihttp              │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    └─────────────────────────────────────────────────────────────────────┘

The serving directory is the one setting the request handlers care about:
/files/* routes resolve names under it. Everything else shapes the
transport (address, workers, timeouts) or logging.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


class ConfigurationError(Exception):
    """
    A required setting is missing or invalid.

    Unlike per-request failures, this is not turned into an HTTP response:
    the request path that needed the setting is aborted.
    """


class MissingDirectoryError(ConfigurationError):
    """A /files/* route was hit but no serving directory is configured."""

    def __init__(self, message: str = "No serving directory configured"):
        super().__init__(message)


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, timeout

    THREADING
    - workers

    FILES
    - directory, sandbox_files

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    port: int = 4221
    backlog: int = 128

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None blocks indefinitely: a client that never finishes its request
    holds its worker until it disconnects.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREADING
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 4
    """Number of worker threads, each serving one connection at a time."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """Serving directory for /files/* routes. None disables them."""

    sandbox_files: bool = True
    """Reject /files/* names that resolve outside the serving directory."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST        Server host (default: 127.0.0.1)
        HTTP_PORT        Server port (default: 4221)
        HTTP_WORKERS     Worker threads (default: 4)
        HTTP_TIMEOUT     Socket timeout in seconds (default: none)
        HTTP_DIRECTORY   Serving directory (default: none)
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        HTTP_LOG_FORMAT  Access log format, text or json (default: text)
        HTTP_NO_SANDBOX  1/true/yes/on to disable the /files/* sandbox
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        no_sandbox = os.getenv("HTTP_NO_SANDBOX", "").strip().lower()
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            workers=int(os.getenv("HTTP_WORKERS", "4")),
            timeout=float(timeout) if timeout else None,
            directory=os.getenv("HTTP_DIRECTORY") or None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
            sandbox_files=no_sandbox not in ("1", "true", "yes", "on"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Runs at startup so a bad setting fails immediately, not on the
        first request that needs it.

        Raises:
            ValueError: If a value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(f"Serving directory does not exist: {self.directory}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")
