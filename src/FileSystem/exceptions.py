"""
Filesystem error taxonomy.

Every failure raised by an adapter is a FileSystemError subclass naming the
operation, the path(s) involved and the underlying cause. Callers branch on
the class, never on the message.
"""

from typing import Optional, Union


class FileSystemError(Exception):
    """
    Base class for all filesystem failures.

    Attributes:
        operation: Short name of the failed operation (e.g. "read", "move")
        location: The path the operation was applied to
        destination: The destination path for move/copy, otherwise None
        cause: The reason, either a message or the wrapped exception
    """

    reason = "filesystem error"

    def __init__(
        self,
        operation: str,
        location: str,
        cause: Optional[Union[str, BaseException]] = None,
        destination: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.location = location
        self.destination = destination
        self.cause = cause if cause is not None else self.reason
        super().__init__(self._format())

    def _format(self) -> str:
        if self.destination is not None:
            return f"Unable to {self.operation} from {self.location} to {self.destination}: {self.cause}"
        return f"Unable to {self.operation} at location {self.location}: {self.cause}"


class PathNotFoundError(FileSystemError):
    """The resolved path has no entry."""

    reason = "path not found"


class IsNotFileError(FileSystemError):
    """The entry exists but is a directory where a file is required."""

    reason = "entry is not a file"


class IsNotDirectoryError(FileSystemError):
    """The entry exists but is a file where a directory is required."""

    reason = "entry is not a directory"


class AlreadyExistsError(FileSystemError):
    """The destination is already occupied by an incompatible entry."""

    reason = "entry already exists"


class InvalidPathError(FileSystemError):
    """The path cannot be routed or cannot be used for the operation."""

    reason = "invalid path"


class UnknownFileSystemError(FileSystemError):
    """No filesystem is registered under the requested name."""

    reason = "unknown filesystem"

    def __init__(self, name: str, location: Optional[str] = None) -> None:
        self.name = name
        super().__init__("resolve filesystem", location if location is not None else name,
                         f"unknown filesystem '{name}'")


class PermissionDeniedError(FileSystemError):
    """The backend refused the operation."""

    reason = "permission denied"


class ReadOnlyError(PermissionDeniedError):
    """A mutation was attempted on a read-only filesystem."""

    reason = "read-only file system"


class BackendError(FileSystemError):
    """An opaque backend or transport failure; the original exception is chained."""

    reason = "backend failure"
