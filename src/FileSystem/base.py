"""
Base filesystem abstraction.

This module defines the contract every filesystem adapter implements, the
directory entry view returned by listings, and a delegating base class used
by decorators.
"""

import io
import enum
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, BinaryIO, Callable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

from FileSystem.exceptions import FileSystemError, PathNotFoundError
from FileSystem.options import WriteConfig
from FileSystem.pathutils import join_path, normalize_path


ConfigLike = Union[WriteConfig, Mapping[str, Any], None]


class DirEntry(BaseModel):
    """A directory listing element."""

    model_config = ConfigDict(frozen=True)

    name: str
    is_dir: bool
    size: int = 0
    mod_time: datetime
    visibility: str = ""


class WalkAction(enum.Enum):
    """Values a walk visitor may return to steer the traversal."""

    CONTINUE = "continue"
    SKIP_DIR = "skip_dir"
    """Do not descend into this directory; ignored for files."""
    SKIP_ALL = "skip_all"
    """Stop the walk immediately without an error."""


VisitFn = Callable[[str, DirEntry, Optional[FileSystemError]], Optional[WalkAction]]


class FileSystem(ABC):
    """
    Abstract base class for filesystem implementations.

    Paths are tree-relative and normalized by the adapter. Existence checks
    never raise for absent paths; every other failure raises a
    FileSystemError subclass.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """
        Check if a file or directory exists.

        Args:
            path: The path to check

        Returns:
            True if an entry exists at the path, False otherwise
        """
        pass

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """Check if a file exists at the path."""
        pass

    @abstractmethod
    def dir_exists(self, path: str) -> bool:
        """Check if a directory exists at the path."""
        pass

    @abstractmethod
    def stat(self, path: str) -> DirEntry:
        """
        Describe the entry at a path.

        Raises:
            PathNotFoundError: If nothing exists at the path
        """
        pass

    @abstractmethod
    def read(self, path: str) -> bytes:
        """
        Read the whole content of a file.

        Args:
            path: The path of the file to read

        Returns:
            The file content

        Raises:
            PathNotFoundError: If the file does not exist
            IsNotFileError: If the path is a directory
        """
        pass

    def read_stream(self, path: str) -> BinaryIO:
        """
        Open a file for reading.

        Returns:
            A binary file object; the caller closes it
        """
        return io.BytesIO(self.read(path))

    @abstractmethod
    def read_dir(self, path: str) -> List[DirEntry]:
        """
        List the direct children of a directory, sorted by name.

        Raises:
            PathNotFoundError: If the directory does not exist
            IsNotDirectoryError: If the path is a file
        """
        pass

    def walk(self, path: str, visit_fn: VisitFn) -> None:
        """
        Walk the tree rooted at path depth-first, in pre-order.

        visit_fn(path, entry, error) is called for every entry, the walk root
        included. It may return WalkAction.SKIP_DIR to skip a directory's
        children, WalkAction.SKIP_ALL to stop, or raise to abort the walk.
        When listing a directory fails, visit_fn is called again for that
        directory with the error. Walking an absent path visits nothing.

        Args:
            path: The path to start from
            visit_fn: The visitor
        """
        path = normalize_path(path)
        try:
            entry = self.stat(path)
        except PathNotFoundError:
            return
        self._walk_entry(path, entry, visit_fn)

    def _walk_entry(self, path: str, entry: DirEntry, visit_fn: VisitFn) -> bool:
        """Visit one entry and its subtree; returns True when the walk must stop."""
        action = visit_fn(path, entry, None)
        if action is WalkAction.SKIP_ALL:
            return True
        if not entry.is_dir or action is WalkAction.SKIP_DIR:
            return False
        try:
            children = self.read_dir(path)
        except FileSystemError as e:
            return visit_fn(path, entry, e) is WalkAction.SKIP_ALL
        for child in children:
            if self._walk_entry(join_path(path, child.name), child, visit_fn):
                return True
        return False

    @abstractmethod
    def last_modified(self, path: str) -> datetime:
        """Return the last modification time (UTC) of the entry at path."""
        pass

    @abstractmethod
    def file_size(self, path: str) -> int:
        """Return the size in bytes of the entry at path; 0 for directories."""
        pass

    @abstractmethod
    def mime_type(self, path: str) -> str:
        """Return the MIME type of the file at path."""
        pass

    @abstractmethod
    def visibility(self, path: str) -> str:
        """Return the visibility label of the entry at path."""
        pass

    @abstractmethod
    def write(self, path: str, content: bytes, config: ConfigLike = None) -> None:
        """
        Write content to a file, creating missing parent directories.

        Args:
            path: The path of the file to write
            content: The bytes to write
            config: Visibility and write-flag overrides

        Raises:
            IsNotFileError: If the path is a directory
            AlreadyExistsError: If a parent segment is a file
        """
        pass

    def write_stream(self, path: str, stream: BinaryIO, config: ConfigLike = None) -> None:
        """Write the remaining content of a binary stream to a file."""
        self.write(path, stream.read(), config)

    @abstractmethod
    def set_visibility(self, path: str, visibility: str) -> None:
        """
        Change the visibility of the entry at path.

        Raises:
            PathNotFoundError: If nothing exists at the path
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """
        Delete a file. Absent paths are ignored.

        Raises:
            IsNotFileError: If the path is a directory
        """
        pass

    @abstractmethod
    def delete_dir(self, path: str) -> None:
        """
        Delete a directory recursively. Absent paths are ignored.

        Raises:
            IsNotDirectoryError: If the path is a file
        """
        pass

    @abstractmethod
    def create_dir(self, path: str, config: ConfigLike = None) -> None:
        """
        Create a directory and any missing parents. Existing directories are kept.

        Raises:
            AlreadyExistsError: If a segment of the path is a file
        """
        pass

    @abstractmethod
    def move(self, src: str, dst: str, config: ConfigLike = None) -> None:
        """
        Move a file or directory.

        Raises:
            PathNotFoundError: If src does not exist
            AlreadyExistsError: If dst already exists
        """
        pass

    @abstractmethod
    def copy(self, src: str, dst: str, config: ConfigLike = None) -> None:
        """
        Copy a file.

        Raises:
            PathNotFoundError: If src does not exist
            IsNotFileError: If src is a directory
            AlreadyExistsError: If dst exists and the write flag lacks TRUNCATE
        """
        pass


class DelegatingFileSystem(FileSystem):
    """
    A filesystem forwarding every call to an inner filesystem.

    Decorators subclass it and override only the methods whose behavior
    changes. Subclasses that build the inner filesystem on demand override
    _target().
    """

    def __init__(self, inner: Optional[FileSystem] = None) -> None:
        self._inner = inner

    def _target(self) -> FileSystem:
        return self._inner

    def exists(self, path: str) -> bool:
        return self._target().exists(path)

    def file_exists(self, path: str) -> bool:
        return self._target().file_exists(path)

    def dir_exists(self, path: str) -> bool:
        return self._target().dir_exists(path)

    def stat(self, path: str) -> DirEntry:
        return self._target().stat(path)

    def read(self, path: str) -> bytes:
        return self._target().read(path)

    def read_stream(self, path: str) -> BinaryIO:
        return self._target().read_stream(path)

    def read_dir(self, path: str) -> List[DirEntry]:
        return self._target().read_dir(path)

    def walk(self, path: str, visit_fn: VisitFn) -> None:
        return self._target().walk(path, visit_fn)

    def last_modified(self, path: str) -> datetime:
        return self._target().last_modified(path)

    def file_size(self, path: str) -> int:
        return self._target().file_size(path)

    def mime_type(self, path: str) -> str:
        return self._target().mime_type(path)

    def visibility(self, path: str) -> str:
        return self._target().visibility(path)

    def write(self, path: str, content: bytes, config: ConfigLike = None) -> None:
        return self._target().write(path, content, config)

    def write_stream(self, path: str, stream: BinaryIO, config: ConfigLike = None) -> None:
        return self._target().write_stream(path, stream, config)

    def set_visibility(self, path: str, visibility: str) -> None:
        return self._target().set_visibility(path, visibility)

    def delete(self, path: str) -> None:
        return self._target().delete(path)

    def delete_dir(self, path: str) -> None:
        return self._target().delete_dir(path)

    def create_dir(self, path: str, config: ConfigLike = None) -> None:
        return self._target().create_dir(path, config)

    def move(self, src: str, dst: str, config: ConfigLike = None) -> None:
        return self._target().move(src, dst, config)

    def copy(self, src: str, dst: str, config: ConfigLike = None) -> None:
        return self._target().copy(src, dst, config)
