"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m minihttp                          # 127.0.0.1:4221, no files
    python -m minihttp --directory /tmp/files   # enable /files/*
    python -m minihttp -H 0.0.0.0 -p 8080       # other address
    python -m minihttp --log-format json        # JSON access log

The `minihttp` console script runs the same main().

Settings are resolved in three layers: CLI flags override HTTP_* environment
variables (see ServerConfig.from_env), which override the defaults.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal multi-threaded HTTP/1.1 server with echo and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Routes:
  GET  /                 200, empty body
  GET  /echo/<text>      200, echoes <text>
  GET  /user-agent       200, echoes the User-Agent header
  GET  /files/<name>     200 with file contents, or 404
  POST /files/<name>     201 after writing the request body
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Serving directory for /files/* (default: $HTTP_DIRECTORY, else none)"
    )

    parser.add_argument(
        "--no-sandbox",
        action="store_true",
        help="Allow /files/* names to resolve outside the serving directory"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of worker threads (default: 4)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-connection socket timeout in seconds (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Layer the parsed CLI flags over the environment-derived config."""
    config = ServerConfig.from_env()

    if args.directory is not None:
        config.directory = args.directory
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.workers = args.workers
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format
    if args.no_sandbox:
        config.sandbox_files = False

    return config


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    try:
        server = HTTPServer(config_from_args(args))
        server.run()
    except (OSError, ValueError) as e:
        # Invalid settings or an address that cannot be bound
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
