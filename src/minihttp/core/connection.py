"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the stream API the request parser
needs.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request sent as

    GET /echo/hi HTTP/1.1\r\n
    \r\n

may arrive as "GET /ec" + "ho/hi HTTP/1.1\r\n\r\n", or any other split.

Rather than buffering by hand, we wrap the socket in a buffered binary
file (socket.makefile("rb")). The parser then calls readline() for the
request line and headers and read(n) for the body, and the buffered reader
takes care of joining chunks across recv() calls.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

There is no keep-alive: each connection carries exactly one request and
one response, then it is closed.

    NEW ──────► READING ──────► WRITING
     │             │                │
     │             ▼                ▼
     └──────────► CLOSING ◄─────────┘
                    │
                    ▼
                  CLOSED

=============================================================================
"""

import socket
import time
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and cleanup."""

    NEW = "new"                # Just accepted
    READING = "reading"        # Request is being parsed and handled
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current lifecycle state.
        created_at: When the connection was accepted.
        timeout: Socket timeout in seconds, None to block indefinitely.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        self.socket.settimeout(self.timeout)
        self._reader = self.socket.makefile("rb")

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def reader(self) -> BinaryIO:
        """
        Buffered binary stream over the socket.

        Supports readline() and read(n); handed straight to RequestParser.
        """
        return self._reader

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Uses sendall() so the whole response goes out, not just what fits
        in the kernel buffer.

        Returns:
            True if sent, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN so the client sees end-of-response,
        then the reader and socket are released.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            if self._reader is not None:
                self._reader.close()
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
