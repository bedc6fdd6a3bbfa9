"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server speaks a deliberately small subset of HTTP, so only four status
codes can ever appear on the wire:

    ┌──────┬─────────────────────────┬───────────────────────────────────┐
    │ Code │ Reason Phrase           │ Produced by                       │
    ├──────┼─────────────────────────┼───────────────────────────────────┤
    │ 200  │ OK                      │ /, /echo/*, /user-agent, GET file │
    │ 201  │ Created                 │ POST /files/* (write succeeded)   │
    │ 404  │ Not Found               │ unknown route, missing file       │
    │ 500  │ Internal Server Error   │ POST /files/* (write failed)      │
    └──────┴─────────────────────────┴───────────────────────────────────┘

The status line format is:

    HTTP/1.1 404 Not Found\r\n
    ────┬─── ─┬─ ────┬────
        │     │      │
    Version  Code  Reason phrase (fixed per code)

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # Request succeeded
    CREATED = 201                   # File written (POST)
    NOT_FOUND = 404                 # No route, or no such file
    INTERNAL_SERVER_ERROR = 500     # File could not be written

    @property
    def phrase(self) -> str:
        """Get the reason phrase for the status line."""
        return _PHRASES[self]

    @property
    def is_success(self) -> bool:
        """Check if this is a 2xx status."""
        return 200 <= self < 300

    def __str__(self) -> str:
        return str(self.value)


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
