"""
Filesystem provider for the /files/* routes.

Handlers talk to a FileSystem rather than to pathlib directly, so tests
can swap in an in-memory implementation. Failures are reported with the
standard exceptions: FileNotFoundError (or another OSError) from read(),
OSError from write().
"""

from pathlib import Path
from typing import Protocol, Union


PathLike = Union[str, Path]


class FileSystem(Protocol):
    """Minimal read/write interface the file handlers need."""

    def read(self, path: PathLike) -> bytes:
        ...

    def write(self, path: PathLike, data: bytes) -> None:
        ...


class LocalFileSystem:
    """
    Direct pass-through to the local disk.

    No locking, no atomic rename: concurrent writers to the same path race
    and the last one wins.
    """

    def read(self, path: PathLike) -> bytes:
        return Path(path).read_bytes()

    def write(self, path: PathLike, data: bytes) -> None:
        Path(path).write_bytes(data)
