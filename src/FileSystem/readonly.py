"""
Read-only filesystem decorator.

Reads are forwarded to the wrapped filesystem; every mutation raises
ReadOnlyError without touching it.
"""

from typing import BinaryIO

from FileSystem.base import ConfigLike, DelegatingFileSystem, FileSystem
from FileSystem.exceptions import ReadOnlyError


class ReadOnlyFileSystem(DelegatingFileSystem):
    """Wraps a filesystem and rejects every write, delete, move and copy."""

    def __init__(self, inner: FileSystem) -> None:
        super().__init__(inner)

    def write(self, path: str, content: bytes, config: ConfigLike = None) -> None:
        raise ReadOnlyError("write file", path)

    def write_stream(self, path: str, stream: BinaryIO, config: ConfigLike = None) -> None:
        raise ReadOnlyError("write file", path)

    def set_visibility(self, path: str, visibility: str) -> None:
        raise ReadOnlyError("set visibility", path)

    def delete(self, path: str) -> None:
        raise ReadOnlyError("delete file", path)

    def delete_dir(self, path: str) -> None:
        raise ReadOnlyError("delete directory", path)

    def create_dir(self, path: str, config: ConfigLike = None) -> None:
        raise ReadOnlyError("create directory", path)

    def move(self, src: str, dst: str, config: ConfigLike = None) -> None:
        raise ReadOnlyError("move", src, destination=dst)

    def copy(self, src: str, dst: str, config: ConfigLike = None) -> None:
        raise ReadOnlyError("copy", src, destination=dst)
