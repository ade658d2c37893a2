"""
Local filesystem implementation.

This module provides a filesystem implementation rooted at a directory of
the local file system. Paths are normalized before they are joined to the
root, so no path can reach outside it.
"""

import io
import os
import shutil
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

import fsspec

from Configuration.FileSystemConfig import FileSystemConfig
from FileSystem.base import ConfigLike, DirEntry, FileSystem
from FileSystem.exceptions import (
    AlreadyExistsError,
    BackendError,
    FileSystemError,
    InvalidPathError,
    IsNotDirectoryError,
    IsNotFileError,
    PathNotFoundError,
    PermissionDeniedError,
)
from FileSystem.mimetype import MimeTypeDetector
from FileSystem.options import DEFAULT_WRITE_FLAG, WriteConfig, WriteFlag
from FileSystem.pathutils import ROOT, base_name, is_within, normalize_path, parent_path, split_path
from FileSystem.visibility import UnixVisibilityConverter


class LocalFileSystem(FileSystem):
    """
    Implementation of FileSystem for a directory on the local file system.

    This class uses fsspec for file operations and os.chmod to apply
    visibility through a UnixVisibilityConverter.
    """

    def __init__(
        self,
        root: str,
        visibility_converter: Optional[UnixVisibilityConverter] = None,
        mimetype_detector: Optional[MimeTypeDetector] = None,
        defer_root_creation: bool = False,
    ) -> None:
        """
        Initialize the local file system.

        Args:
            root: The directory all paths are relative to
            visibility_converter: Maps visibility labels to permission bits
            mimetype_detector: Detector used by mime_type
            defer_root_creation: Create the root on the first write instead of now

        Raises:
            ValueError: If root is empty
        """
        if not root:
            raise ValueError("root must not be empty")
        self.logger = logging.getLogger(__name__)
        self.fs = fsspec.filesystem("file")
        self.root = os.path.abspath(root)
        self.converter = visibility_converter or UnixVisibilityConverter()
        self.mimetype_detector = mimetype_detector or MimeTypeDetector()
        self._root_lock = threading.Lock()
        self._root_created = False
        if not defer_root_creation:
            self._create_root()

    def _create_root(self) -> None:
        if self._root_created:
            return
        with self._root_lock:
            if not self._root_created:
                self.logger.debug(f"Creating root directory: {self.root}")
                with self._errors("create directory", self.root):
                    self.fs.makedirs(self.root, exist_ok=True)
                self._root_created = True

    def _full(self, path: str) -> str:
        parts = split_path(path)
        return os.path.join(self.root, *parts) if parts else self.root

    @contextmanager
    def _errors(self, operation: str, location: str, destination: Optional[str] = None) -> Iterator[None]:
        """Translate OS errors raised inside the block into FileSystemError kinds."""
        try:
            yield
        except FileSystemError:
            raise
        except FileNotFoundError as e:
            raise PathNotFoundError(operation, location, e, destination) from e
        except IsADirectoryError as e:
            raise IsNotFileError(operation, location, e, destination) from e
        except NotADirectoryError as e:
            raise IsNotDirectoryError(operation, location, e, destination) from e
        except FileExistsError as e:
            raise AlreadyExistsError(operation, location, e, destination) from e
        except PermissionError as e:
            raise PermissionDeniedError(operation, location, e, destination) from e
        except OSError as e:
            raise BackendError(operation, location, e, destination) from e

    def _info(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            return self.fs.info(self._full(path))
        except FileNotFoundError:
            return None

    def _entry(self, name: str, info: Dict[str, Any]) -> DirEntry:
        is_dir = info.get("type") == "directory"
        mode = (info.get("mode") or 0) & 0o777
        return DirEntry(
            name=name,
            is_dir=is_dir,
            size=0 if is_dir else int(info.get("size") or 0),
            mod_time=datetime.fromtimestamp(info.get("mtime") or 0, tz=timezone.utc),
            visibility=self.converter.inverse_for_dir(mode) if is_dir else self.converter.inverse_for_file(mode),
        )

    def _require(self, path: str, operation: str) -> Dict[str, Any]:
        info = self._info(path)
        if info is None:
            raise PathNotFoundError(operation, normalize_path(path))
        return info

    def _make_dirs(self, path: str, mode: int, operation: str) -> None:
        """Create every missing directory along path with the given permission bits."""
        current = self.root
        walked: List[str] = []
        for part in split_path(path):
            walked.append(part)
            current = os.path.join(current, part)
            if self.fs.isdir(current):
                continue
            if self.fs.exists(current):
                raise AlreadyExistsError(operation, "/".join(walked), "a file exists at this location")
            with self._errors(operation, "/".join(walked)):
                try:
                    self.fs.mkdir(current, create_parents=False)
                except FileExistsError:
                    # created concurrently
                    if not self.fs.isdir(current):
                        raise
                    continue
                os.chmod(current, mode)

    def exists(self, path: str) -> bool:
        return self.fs.exists(self._full(path))

    def file_exists(self, path: str) -> bool:
        return self.fs.isfile(self._full(path))

    def dir_exists(self, path: str) -> bool:
        return self.fs.isdir(self._full(path))

    def stat(self, path: str) -> DirEntry:
        return self._entry(base_name(path), self._require(path, "retrieve metadata"))

    def read(self, path: str) -> bytes:
        path = normalize_path(path)
        self.logger.debug(f"Reading file: {path}")
        info = self._require(path, "read file")
        if info.get("type") == "directory":
            raise IsNotFileError("read file", path)
        with self._errors("read file", path):
            return self.fs.cat_file(self._full(path))

    def read_stream(self, path: str) -> BinaryIO:
        path = normalize_path(path)
        self.logger.debug(f"Opening input stream for: {path}")
        info = self._require(path, "read file")
        if info.get("type") == "directory":
            raise IsNotFileError("read file", path)
        with self._errors("read file", path):
            return self.fs.open(self._full(path), "rb")

    def read_dir(self, path: str) -> List[DirEntry]:
        path = normalize_path(path)
        info = self._require(path, "read directory")
        if info.get("type") != "directory":
            raise IsNotDirectoryError("read directory", path)
        with self._errors("read directory", path):
            items = self.fs.ls(self._full(path), detail=True)
        entries = [self._entry(item["name"].rstrip("/").rsplit("/", 1)[-1], item) for item in items]
        self.logger.debug(f"Found {len(entries)} entries in: {path or '/'}")
        return sorted(entries, key=lambda entry: entry.name)

    def last_modified(self, path: str) -> datetime:
        return self.stat(path).mod_time

    def file_size(self, path: str) -> int:
        return self.stat(path).size

    def mime_type(self, path: str) -> str:
        path = normalize_path(path)
        info = self._require(path, "retrieve mime type")
        if info.get("type") == "directory":
            raise IsNotFileError("retrieve mime type", path)
        with self._errors("retrieve mime type", path):
            with self.fs.open(self._full(path), "rb") as f:
                sample = f.read(FileSystemConfig.MIME_SAMPLE_SIZE)
        return self.mimetype_detector.detect(path, sample)

    def visibility(self, path: str) -> str:
        return self.stat(path).visibility

    def write(self, path: str, content: bytes, config: ConfigLike = None) -> None:
        self.write_stream(path, io.BytesIO(bytes(content)), config)

    def write_stream(self, path: str, stream: BinaryIO, config: ConfigLike = None) -> None:
        cfg = WriteConfig.coerce(config)
        path = normalize_path(path)
        if path == ROOT:
            self.logger.debug("Ignoring write to the root path")
            return
        self._create_root()

        dir_mode = self.converter.for_dir(cfg.resolve_dir_visibility(self.converter.dir_default_visibility))
        file_mode = self.converter.for_file(cfg.resolve_file_visibility(self.converter.file_default_visibility))
        self._make_dirs(parent_path(path), dir_mode, "write file")

        full = self._full(path)
        if self.fs.isdir(full):
            raise IsNotFileError("write file", path)
        created = not self.fs.exists(full)
        mode = "ab" if cfg.has_flag(WriteFlag.APPEND) else "wb"
        self.logger.debug(f"Writing file: {path} (mode {mode})")
        with self._errors("write file", path):
            with self.fs.open(full, mode) as f:
                shutil.copyfileobj(stream, f)
            if created:
                os.chmod(full, file_mode)

    def set_visibility(self, path: str, visibility: str) -> None:
        path = normalize_path(path)
        info = self._require(path, "set visibility")
        if info.get("type") == "directory":
            mode = self.converter.for_dir(visibility)
        else:
            mode = self.converter.for_file(visibility)
        with self._errors("set visibility", path):
            os.chmod(self._full(path), mode)

    def delete(self, path: str) -> None:
        path = normalize_path(path)
        info = self._info(path)
        if info is None:
            return
        if info.get("type") == "directory":
            raise IsNotFileError("delete file", path)
        self.logger.debug(f"Deleting file: {path}")
        with self._errors("delete file", path):
            self.fs.rm_file(self._full(path))

    def delete_dir(self, path: str) -> None:
        path = normalize_path(path)
        info = self._info(path)
        if info is None:
            return
        if info.get("type") != "directory":
            raise IsNotDirectoryError("delete directory", path)
        self.logger.debug(f"Deleting directory: {path or '/'}")
        with self._errors("delete directory", path):
            if path == ROOT:
                # the root itself is kept, only emptied
                for child in self.fs.ls(self.root, detail=False):
                    self.fs.rm(child, recursive=True)
            else:
                self.fs.rm(self._full(path), recursive=True)

    def create_dir(self, path: str, config: ConfigLike = None) -> None:
        cfg = WriteConfig.coerce(config)
        self._create_root()
        mode = self.converter.for_dir(cfg.resolve_dir_visibility(self.converter.dir_default_visibility))
        self.logger.debug(f"Creating directory: {normalize_path(path)}")
        self._make_dirs(path, mode, "create directory")

    def move(self, src: str, dst: str, config: ConfigLike = None) -> None:
        cfg = WriteConfig.coerce(config)
        src, dst = normalize_path(src), normalize_path(dst)
        if src == ROOT:
            raise InvalidPathError("move", src, "the root directory cannot be moved", destination=dst)
        info = self._info(src)
        if info is None:
            raise PathNotFoundError("move", src, destination=dst)
        if self.exists(dst):
            raise AlreadyExistsError("move", src, destination=dst)
        if info.get("type") == "directory" and is_within(dst, src):
            raise InvalidPathError("move", src, "a directory cannot be moved into itself", destination=dst)

        dir_mode = self.converter.for_dir(cfg.resolve_dir_visibility(self.converter.dir_default_visibility))
        self._make_dirs(parent_path(dst), dir_mode, "move")
        self.logger.debug(f"Moving {src} to {dst}")
        with self._errors("move", src, dst):
            self.fs.mv(self._full(src), self._full(dst), recursive=True)

    def copy(self, src: str, dst: str, config: ConfigLike = None) -> None:
        cfg = WriteConfig.coerce(config)
        src, dst = normalize_path(src), normalize_path(dst)
        info = self._info(src)
        if info is None:
            raise PathNotFoundError("copy", src, destination=dst)
        if info.get("type") == "directory":
            raise IsNotFileError("copy", src, destination=dst)
        existing = self._info(dst)
        if existing is not None:
            if existing.get("type") == "directory":
                raise IsNotFileError("copy", src, "destination is a directory", destination=dst)
            if not cfg.has_flag(WriteFlag.TRUNCATE, default=WriteFlag(0)):
                raise AlreadyExistsError("copy", src, destination=dst)

        if src == dst:
            # opening the destination for writing would empty the source
            self.logger.debug(f"Copy of {src} onto itself keeps the content")
            if cfg.file_visibility is not None:
                self.set_visibility(dst, cfg.file_visibility)
            return

        self.logger.debug(f"Copying {src} to {dst}")
        with self.read_stream(src) as stream:
            # copy replaces, it never appends
            self.write_stream(dst, stream, cfg.with_write_flag(DEFAULT_WRITE_FLAG))
