"""
Filesystem abstraction module.

This module provides a single filesystem interface implemented by an
in-memory tree and a local disk adapter, decorators adding read-only and
deferred-initialization behavior, and a manager routing "name://path"
logical paths to named filesystems.
"""

from .base import DirEntry, FileSystem, WalkAction
from .exceptions import (
    AlreadyExistsError,
    BackendError,
    FileSystemError,
    InvalidPathError,
    IsNotDirectoryError,
    IsNotFileError,
    PathNotFoundError,
    PermissionDeniedError,
    ReadOnlyError,
    UnknownFileSystemError,
)
from .options import DEFAULT_WRITE_FLAG, WriteConfig, WriteFlag
from .visibility import AclVisibilityConverter, UnixVisibilityConverter, VisibilityConverter
from .memory import MemoryFileSystem
from .local import LocalFileSystem
from .readonly import ReadOnlyFileSystem
from .deferred import DeferredFileSystem
from .registry import DEFAULT_DRIVERS, UnknownDriverError, get_filesystem
from .manager import FileSystemManager

__all__ = [
    # Contract
    "DirEntry",
    "FileSystem",
    "WalkAction",
    "WriteConfig",
    "WriteFlag",
    "DEFAULT_WRITE_FLAG",

    # Errors
    "FileSystemError",
    "PathNotFoundError",
    "IsNotFileError",
    "IsNotDirectoryError",
    "AlreadyExistsError",
    "InvalidPathError",
    "UnknownFileSystemError",
    "PermissionDeniedError",
    "ReadOnlyError",
    "BackendError",

    # Visibility
    "VisibilityConverter",
    "UnixVisibilityConverter",
    "AclVisibilityConverter",

    # Implementations
    "MemoryFileSystem",
    "LocalFileSystem",
    "ReadOnlyFileSystem",
    "DeferredFileSystem",
    "FileSystemManager",

    # Drivers
    "DEFAULT_DRIVERS",
    "UnknownDriverError",
    "get_filesystem",
]
