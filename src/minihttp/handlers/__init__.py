"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Handlers are plain callables: HTTPRequest in, HTTPResponse out.

    basic.py   root, echo, user_agent   (request-only, no I/O)
    files.py   FileHandler.read/write   (serving-directory I/O)

They are bound to paths in minihttp.routes.build_router().

=============================================================================
"""

from .basic import echo, root, user_agent
from .files import FileHandler

__all__ = ["root", "echo", "user_agent", "FileHandler"]
