"""
=============================================================================
FILE HANDLER
=============================================================================

Serves GET /files/<name> and POST /files/<name> out of the serving
directory.

    GET  /files/notes.txt   → 200 + raw bytes (application/octet-stream)
                              404 if missing or unreadable
    POST /files/notes.txt   → write the request body, overwriting
                              201 on success, 500 if the write fails

=============================================================================
PATH TRAVERSAL
=============================================================================

The <name> part is joined onto the serving directory as-is, so a request
for /files/../../etc/passwd would escape it. With sandboxing on (the
default) we:

1. Resolve the full path (following .. and symlinks)
2. Check the resolved path is still inside the serving directory
3. Answer 404 if it is not, as if the file did not exist

    root:     /srv/files
    request:  /files/../../etc/passwd
    resolved: /etc/passwd               ← outside root → 404

With sandboxing off the joined path is used unchecked.

=============================================================================
MISSING DIRECTORY
=============================================================================

Without a serving directory no /files/* request can ever succeed. That is
a deployment mistake rather than a client error, so the handler raises
MissingDirectoryError instead of returning a response.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..config import MissingDirectoryError
from ..fs import FileSystem, LocalFileSystem
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, created, internal_error, not_found, ok


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Reads and writes files under a serving directory.

        files = FileHandler("/srv/files")
        router.get("/files/*name")(files.read)
        router.post("/files/*name")(files.write)

    The route must capture the file name as path_params["name"].
    """

    def __init__(
        self,
        root_dir: Optional[str],
        filesystem: Optional[FileSystem] = None,
        sandbox: bool = True,
    ):
        """
        Args:
            root_dir: Serving directory, or None when not configured.
            filesystem: Read/write provider. Defaults to the local disk.
            sandbox: Refuse names that resolve outside root_dir.
        """
        self.root_dir = Path(root_dir) if root_dir is not None else None
        self.filesystem = filesystem or LocalFileSystem()
        self.sandbox = sandbox

    def resolve(self, name: str) -> Optional[Path]:
        """
        Map a requested file name to a filesystem path.

        Returns None when sandboxing rejects the name.

        Raises:
            MissingDirectoryError: If no serving directory is configured.
        """
        if self.root_dir is None:
            raise MissingDirectoryError(
                f"Cannot serve /files/{name}: no serving directory configured"
            )

        full_path = self.root_dir / name
        if not self.sandbox:
            return full_path

        root = self.root_dir.resolve()
        try:
            full_path = full_path.resolve()
        except ValueError as e:
            # e.g. an embedded NUL byte
            logger.warning(f"Rejected file name {name!r}: {e}")
            return None

        try:
            full_path.relative_to(root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name}")
            return None

        return full_path

    def read(self, request: HTTPRequest) -> HTTPResponse:
        """Handle GET /files/<name>."""
        name = request.path_params.get("name", "")
        path = self.resolve(name)
        if path is None:
            return not_found(request.version)

        try:
            data = self.filesystem.read(path)
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            return not_found(request.version)

        return ok(request.version, data=data)

    def write(self, request: HTTPRequest) -> HTTPResponse:
        """Handle POST /files/<name>. A request without a body writes an empty file."""
        name = request.path_params.get("name", "")
        path = self.resolve(name)
        if path is None:
            return not_found(request.version)

        try:
            self.filesystem.write(path, request.body or b"")
        except (OSError, ValueError) as e:
            logger.error(f"Cannot write {path}: {e}")
            return internal_error(request.version)

        logger.debug(f"Wrote {request.content_length} bytes to {path}")
        return created(request.version)
