"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: socket server, thread pool, parser, middleware
and the fixed route table.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           HTTPServer                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐          │
    │    │ SocketServer │───►│  ThreadPool  │───►│ RequestParser│          │
    │    │   (accept)   │    │  (workers)   │    │ (bytes→req)  │          │
    │    └──────────────┘    └──────────────┘    └──────┬───────┘          │
    │                                                   │                  │
    │                                                   ▼                  │
    │           ┌─────────────────────────────────────────────┐            │
    │           │  Logging → Compression → Router → Handler    │            │
    │           └─────────────────────────────────────────────┘            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts a TCP connection
    2. The connection is queued on the ThreadPool
    3. A worker parses one request from the socket stream
    4. Middleware and router produce an HTTPResponse
    5. The response is serialized (gzip applied here) and sent
    6. The connection is closed: one request per connection

WHAT GOES WRONG, AND WHAT THE CLIENT SEES:
──────────────────────────────────────────

    Parse error (HTTPParseError)         connection closed, no response
    No serving directory configured      connection closed, no response
    File read fails                      404 (inside the handler)
    File write fails                     500 (inside the handler)
    Any other handler exception          500, logged with traceback

=============================================================================
"""

import logging
from typing import BinaryIO, Callable, Optional, Tuple

from .config import ConfigurationError, ServerConfig
from .core.connection import Connection, ConnectionState
from .core.socket_server import SocketServer
from .core.thread_pool import ThreadPool
from .fs import FileSystem
from .http.request import HTTPParseError, HTTPRequest, RequestParser
from .http.response import HTTPResponse, internal_error
from .http.router import Router
from .middleware import CompressionMiddleware, LoggingMiddleware, MiddlewarePipeline
from .routes import build_router


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Multi-threaded HTTP/1.1 server for the fixed minihttp route table.

        server = HTTPServer(ServerConfig(directory="/tmp/files"))
        server.run()    # blocks until SIGINT/SIGTERM or shutdown()

    The request pipeline can be driven without a socket, which is what the
    tests do:

        raw = server.process_stream(io.BytesIO(b"GET / HTTP/1.1\\r\\n\\r\\n"))
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        filesystem: Optional[FileSystem] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults are used if not provided.
            filesystem: Provider for /files/* I/O. Defaults to the local disk.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(workers=self.config.workers)
        self._parser = RequestParser()

        self._router = build_router(
            self.config.directory,
            filesystem,
            sandbox=self.config.sandbox_files,
        )

        # Logging first so it times and records the final, encoded response
        self._middleware = MiddlewarePipeline().use(
            LoggingMiddleware(log_format=self.config.log_format),
            CompressionMiddleware(),
        )
        self._handler: Callable[[HTTPRequest], HTTPResponse] = self._middleware.wrap(
            self._router.dispatch
        )

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) once running; the configured one before that."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # REQUEST PIPELINE
    # =========================================================================

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Run one parsed request through middleware and router.

        Raises:
            ConfigurationError: A /files/* route was hit without a directory.
        """
        return self._handler(request)

    def process_stream(
        self,
        stream: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> bytes:
        """
        Read one request from the stream and return the response bytes.

        Unexpected handler exceptions become a 500. Parse and configuration
        errors propagate: for those, no response is sent at all.

        Raises:
            HTTPParseError: The request could not be parsed.
            ConfigurationError: The request needed a missing setting.
        """
        request = self._parser.parse(stream, client_address)

        try:
            response = self.handle(request)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception(f"Unhandled error for {request.method} {request.path}: {e}")
            response = internal_error(request.version)

        return response.to_bytes()

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server and block until it is stopped.

        Args:
            host: Override config host.
            port: Override config port (0 picks a free port).
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._thread_pool.start()

        directory = self.config.directory or "(none)"
        logger.info(f"Serving files from {directory} with {self.config.workers} workers")
        for route in self._router.routes():
            logger.debug(f"Route: {route.method} {route.path} -> {route.name}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._stop()

    def shutdown(self):
        """Ask the accept loop to stop. run() returns once it has."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    def _stop(self):
        logger.info("Shutting down server...")
        # In-flight connections finish before the workers exit
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by SocketServer for each accepted connection."""
        self._thread_pool.submit(self._process_connection, args=(conn,))

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on the connection, then close it.

        Runs on a worker thread.
        """
        with conn:
            conn.state = ConnectionState.READING

            try:
                data = self.process_stream(conn.reader, conn.address)
            except HTTPParseError as e:
                logger.warning(
                    f"[{conn.id}] Dropping connection from {conn.client_ip}: "
                    f"{e.reason}: {e}"
                )
                return
            except ConfigurationError as e:
                logger.critical(f"[{conn.id}] Cannot serve request: {e}")
                return
            except OSError as e:
                # Includes socket.timeout while waiting for request bytes
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            conn.send_response(data)


def create_app(
    config: Optional[ServerConfig] = None,
    filesystem: Optional[FileSystem] = None,
) -> HTTPServer:
    """
    Create a configured HTTPServer.

        app = create_app(ServerConfig(directory="/tmp/files", port=0))
        app.run()
    """
    return HTTPServer(config, filesystem)
