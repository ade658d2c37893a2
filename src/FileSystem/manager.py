"""
Filesystem manager.

The manager keeps a table of named filesystems and routes logical paths of
the form "<name>://<path>" to them. It implements the FileSystem contract
itself, so callers can use it wherever a single filesystem is expected.
"""

import logging
from datetime import datetime
from typing import BinaryIO, Dict, List, Mapping, Optional, Tuple

from Configuration.DriverConfig import ManagerConfig
from Configuration.FileSystemConfig import FileSystemConfig
from FileSystem.base import ConfigLike, DirEntry, FileSystem, VisitFn
from FileSystem.deferred import DeferredFileSystem
from FileSystem.exceptions import (
    AlreadyExistsError,
    InvalidPathError,
    IsNotFileError,
    PathNotFoundError,
    UnknownFileSystemError,
)
from FileSystem.options import DEFAULT_WRITE_FLAG, WriteConfig, WriteFlag
from FileSystem.readonly import ReadOnlyFileSystem
from FileSystem.registry import DriverFactory, get_filesystem
from Utils.locks import ReadWriteLock


class FileSystemManager(FileSystem):
    """
    Routes logical paths to registered filesystems.

    Operations whose source and destination resolve to the same filesystem
    instance are delegated to it. Otherwise move and copy fall back to
    streaming the source file into the destination; directories cannot
    cross filesystems.
    """

    def __init__(self, filesystems: Optional[Mapping[str, FileSystem]] = None) -> None:
        """
        Initialize the manager.

        Args:
            filesystems: Initial filesystems keyed by name
        """
        self.logger = logging.getLogger(__name__)
        self._filesystems: Dict[str, FileSystem] = {}
        self._lock = ReadWriteLock()
        for name, fs in (filesystems or {}).items():
            self.add_filesystem(name, fs)

    @classmethod
    def from_config(
        cls,
        config: ManagerConfig,
        drivers: Optional[Mapping[str, DriverFactory]] = None,
    ) -> "FileSystemManager":
        """
        Build a manager from a configuration.

        Lazy disks are wrapped in a DeferredFileSystem so that their driver
        runs on first use; read-only disks are wrapped in a ReadOnlyFileSystem.

        Args:
            config: The disks to create
            drivers: The driver table (default: DEFAULT_DRIVERS)

        Returns:
            A manager holding one filesystem per disk

        Raises:
            UnknownDriverError: If a non-lazy disk names an unknown driver
        """
        manager = cls()
        for name, disk in config.disks.items():
            def build(disk=disk) -> FileSystem:
                return get_filesystem(disk.driver, disk.options, drivers)

            fs: FileSystem = DeferredFileSystem(build, name=name) if disk.lazy else build()
            if disk.read_only:
                fs = ReadOnlyFileSystem(fs)
            manager.add_filesystem(name, fs)
        return manager

    def add_filesystem(self, name: str, fs: FileSystem) -> None:
        """Register fs under name, replacing any filesystem already there."""
        with self._lock.write_locked():
            self._filesystems[name] = fs
        self.logger.info(f"Registered filesystem '{name}' ({type(fs).__name__})")

    def get_filesystem(self, name: str) -> FileSystem:
        """
        Look up a filesystem by name.

        Raises:
            UnknownFileSystemError: If nothing is registered under name
        """
        with self._lock.read_locked():
            fs = self._filesystems.get(name)
        if fs is None:
            raise UnknownFileSystemError(name)
        return fs

    def has_filesystem(self, name: str) -> bool:
        with self._lock.read_locked():
            return name in self._filesystems

    def names(self) -> List[str]:
        with self._lock.read_locked():
            return sorted(self._filesystems)

    def resolve(self, logical_path: str) -> Tuple[FileSystem, str]:
        """
        Split a logical path and find its filesystem.

        Args:
            logical_path: A path of the form "<name>://<path>"

        Returns:
            The filesystem and the path relative to it

        Raises:
            InvalidPathError: If the path does not hold exactly one separator
            UnknownFileSystemError: If the name is not registered
        """
        parts = logical_path.split(FileSystemConfig.SCHEME_SEPARATOR)
        if len(parts) != 2:
            raise InvalidPathError(
                "resolve filesystem", logical_path,
                f"expected '<name>{FileSystemConfig.SCHEME_SEPARATOR}<path>'",
            )
        name, path = parts
        with self._lock.read_locked():
            fs = self._filesystems.get(name)
        if fs is None:
            raise UnknownFileSystemError(name, logical_path)
        return fs, path

    def exists(self, path: str) -> bool:
        fs, rel = self.resolve(path)
        return fs.exists(rel)

    def file_exists(self, path: str) -> bool:
        fs, rel = self.resolve(path)
        return fs.file_exists(rel)

    def dir_exists(self, path: str) -> bool:
        fs, rel = self.resolve(path)
        return fs.dir_exists(rel)

    def stat(self, path: str) -> DirEntry:
        fs, rel = self.resolve(path)
        return fs.stat(rel)

    def read(self, path: str) -> bytes:
        fs, rel = self.resolve(path)
        return fs.read(rel)

    def read_stream(self, path: str) -> BinaryIO:
        fs, rel = self.resolve(path)
        return fs.read_stream(rel)

    def read_dir(self, path: str) -> List[DirEntry]:
        fs, rel = self.resolve(path)
        return fs.read_dir(rel)

    def walk(self, path: str, visit_fn: VisitFn) -> None:
        """Walk a filesystem; visited paths are reported as logical paths."""
        fs, rel = self.resolve(path)
        prefix = path[: len(path) - len(rel)]
        fs.walk(rel, lambda inner, entry, error: visit_fn(prefix + inner, entry, error))

    def last_modified(self, path: str) -> datetime:
        fs, rel = self.resolve(path)
        return fs.last_modified(rel)

    def file_size(self, path: str) -> int:
        fs, rel = self.resolve(path)
        return fs.file_size(rel)

    def mime_type(self, path: str) -> str:
        fs, rel = self.resolve(path)
        return fs.mime_type(rel)

    def visibility(self, path: str) -> str:
        fs, rel = self.resolve(path)
        return fs.visibility(rel)

    def write(self, path: str, content: bytes, config: ConfigLike = None) -> None:
        fs, rel = self.resolve(path)
        fs.write(rel, content, config)

    def write_stream(self, path: str, stream: BinaryIO, config: ConfigLike = None) -> None:
        fs, rel = self.resolve(path)
        fs.write_stream(rel, stream, config)

    def set_visibility(self, path: str, visibility: str) -> None:
        fs, rel = self.resolve(path)
        fs.set_visibility(rel, visibility)

    def delete(self, path: str) -> None:
        fs, rel = self.resolve(path)
        fs.delete(rel)

    def delete_dir(self, path: str) -> None:
        fs, rel = self.resolve(path)
        fs.delete_dir(rel)

    def create_dir(self, path: str, config: ConfigLike = None) -> None:
        fs, rel = self.resolve(path)
        fs.create_dir(rel, config)

    def move(self, src: str, dst: str, config: ConfigLike = None) -> None:
        src_fs, src_rel = self.resolve(src)
        dst_fs, dst_rel = self.resolve(dst)
        if src_fs is dst_fs:
            src_fs.move(src_rel, dst_rel, config)
            return

        if not src_fs.exists(src_rel):
            raise PathNotFoundError("move", src, destination=dst)
        if dst_fs.exists(dst_rel):
            raise AlreadyExistsError("move", src, destination=dst)
        self.logger.info(f"Moving {src} to {dst} across filesystems")
        self._transfer(src_fs, src_rel, dst_fs, dst_rel, config)
        src_fs.delete(src_rel)

    def copy(self, src: str, dst: str, config: ConfigLike = None) -> None:
        src_fs, src_rel = self.resolve(src)
        dst_fs, dst_rel = self.resolve(dst)
        if src_fs is dst_fs:
            src_fs.copy(src_rel, dst_rel, config)
            return

        cfg = WriteConfig.coerce(config)
        if not src_fs.exists(src_rel):
            raise PathNotFoundError("copy", src, destination=dst)
        if dst_fs.dir_exists(dst_rel):
            raise IsNotFileError("copy", src, "destination is a directory", destination=dst)
        if dst_fs.file_exists(dst_rel) and not cfg.has_flag(WriteFlag.TRUNCATE, default=WriteFlag(0)):
            raise AlreadyExistsError("copy", src, destination=dst)
        self.logger.info(f"Copying {src} to {dst} across filesystems")
        # copy replaces, it never appends
        self._transfer(src_fs, src_rel, dst_fs, dst_rel, cfg.with_write_flag(DEFAULT_WRITE_FLAG))

    def _transfer(self, src_fs: FileSystem, src: str, dst_fs: FileSystem, dst: str, config: ConfigLike) -> None:
        # read_stream raises IsNotFileError for directories
        with src_fs.read_stream(src) as stream:
            dst_fs.write_stream(dst, stream, config)
