"""
In-memory filesystem implementation.

The filesystem is a tree of Node objects rooted at a directory node that is
never removed. Each node guards its own state with a reader/writer lock; an
operation locks one node at a time and never nests locks, so multi-step
operations (creating a parent chain, moving, copying) are not atomic as a
whole but cannot deadlock. Callers that need atomicity across operations
must serialize externally.
"""

import logging
import weakref
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from Configuration.FileSystemConfig import FileSystemConfig
from FileSystem.base import ConfigLike, DirEntry, FileSystem
from FileSystem.exceptions import (
    AlreadyExistsError,
    InvalidPathError,
    IsNotDirectoryError,
    IsNotFileError,
    PathNotFoundError,
)
from FileSystem.mimetype import MimeTypeDetector
from FileSystem.options import WriteConfig, WriteFlag
from FileSystem.pathutils import ROOT, base_name, is_within, normalize_path, parent_path, split_path
from Utils.locks import ReadWriteLock


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Node:
    """
    A file or directory in the in-memory tree.

    A node is owned by its parent's children map. The parent back-reference
    is weak and is cleared on detach, so removing a node from its parent
    releases the whole subtree.
    """

    def __init__(self, name: str, is_dir: bool, visibility: str, parent: Optional["Node"] = None) -> None:
        self.name = name
        self.is_dir = is_dir
        self.content = b""
        self.visibility = visibility
        self.last_modified = _now()
        self.children: Dict[str, "Node"] = {}
        self._parent: Optional[weakref.ref] = weakref.ref(parent) if parent is not None else None
        self.lock = ReadWriteLock()

    @property
    def parent(self) -> Optional["Node"]:
        return self._parent() if self._parent is not None else None

    def find_child(self, name: str) -> Optional["Node"]:
        with self.lock.read_locked():
            return self.children.get(name)

    def list_children(self) -> List["Node"]:
        with self.lock.read_locked():
            nodes = list(self.children.values())
        # str ordering is code point ordering, which matches UTF-8 byte ordering
        return sorted(nodes, key=lambda node: node.name)

    def child_or_create(self, name: str, is_dir: bool, visibility: str) -> "Node":
        """Return the child called name, creating it first if it is missing."""
        with self.lock.write_locked():
            child = self.children.get(name)
            if child is None:
                child = Node(name, is_dir, visibility, parent=self)
                self.children[name] = child
            return child

    def attach(self, child: "Node") -> bool:
        """Add child under its current name; False if the name is taken."""
        with self.lock.write_locked():
            if child.name in self.children:
                return False
            self.children[child.name] = child
            child._parent = weakref.ref(self)
            return True

    def put_file(self, child: "Node") -> bool:
        """Add or replace a file child; False if a directory holds the name."""
        with self.lock.write_locked():
            existing = self.children.get(child.name)
            if existing is not None:
                if existing.is_dir:
                    return False
                existing._parent = None
            self.children[child.name] = child
            child._parent = weakref.ref(self)
            return True

    def detach(self, child: "Node") -> bool:
        """Remove child; False if it is no longer attached here."""
        with self.lock.write_locked():
            if self.children.get(child.name) is not child:
                return False
            del self.children[child.name]
            child._parent = None
            return True

    def clear(self) -> None:
        with self.lock.write_locked():
            for child in self.children.values():
                child._parent = None
            self.children = {}

    def rename(self, name: str) -> None:
        with self.lock.write_locked():
            self.name = name

    def read_content(self) -> bytes:
        with self.lock.read_locked():
            return self.content

    def snapshot(self) -> Tuple[bytes, datetime]:
        with self.lock.read_locked():
            return self.content, self.last_modified

    def write_content(self, data: bytes, append: bool) -> None:
        with self.lock.write_locked():
            self.content = self.content + data if append else data
            self.last_modified = _now()

    def set_visibility(self, visibility: str) -> None:
        with self.lock.write_locked():
            self.visibility = visibility

    def entry(self) -> DirEntry:
        with self.lock.read_locked():
            return DirEntry(
                name=self.name,
                is_dir=self.is_dir,
                size=0 if self.is_dir else len(self.content),
                mod_time=self.last_modified,
                visibility=self.visibility,
            )


class MemoryFileSystem(FileSystem):
    """
    Implementation of FileSystem backed by an in-memory tree.

    All methods are thread-safe and may be called concurrently. Writes to
    the root path are ignored; deleting the root directory empties it.
    """

    def __init__(
        self,
        visibility: str = FileSystemConfig.DEFAULT_VISIBILITY,
        mimetype_detector: Optional[MimeTypeDetector] = None,
    ) -> None:
        """
        Initialize an empty in-memory filesystem.

        Args:
            visibility: Visibility applied when an operation does not specify one
            mimetype_detector: Detector used by mime_type (default: MimeTypeDetector())
        """
        self.logger = logging.getLogger(__name__)
        self.default_visibility = visibility or FileSystemConfig.DEFAULT_VISIBILITY
        self.mimetype_detector = mimetype_detector or MimeTypeDetector()
        self.root = Node(ROOT, True, self.default_visibility)

    def _lookup(self, path: str) -> Optional[Node]:
        node = self.root
        for part in split_path(path):
            if not node.is_dir:
                return None
            node = node.find_child(part)
            if node is None:
                return None
        return node

    def _require(self, path: str, operation: str) -> Node:
        node = self._lookup(path)
        if node is None:
            raise PathNotFoundError(operation, normalize_path(path))
        return node

    def _make_dirs(self, path: str, visibility: str, operation: str) -> Node:
        """Create every missing directory along path and return the last one."""
        node = self.root
        walked: List[str] = []
        for part in split_path(path):
            walked.append(part)
            child = node.child_or_create(part, True, visibility)
            if not child.is_dir:
                raise AlreadyExistsError(operation, "/".join(walked), "a file exists at this location")
            node = child
        return node

    def _detach(self, node: Node) -> None:
        parent = node.parent
        if parent is not None:
            parent.detach(node)

    def exists(self, path: str) -> bool:
        return self._lookup(path) is not None

    def file_exists(self, path: str) -> bool:
        node = self._lookup(path)
        return node is not None and not node.is_dir

    def dir_exists(self, path: str) -> bool:
        node = self._lookup(path)
        return node is not None and node.is_dir

    def stat(self, path: str) -> DirEntry:
        return self._require(path, "retrieve metadata").entry()

    def read(self, path: str) -> bytes:
        node = self._require(path, "read file")
        if node.is_dir:
            raise IsNotFileError("read file", normalize_path(path))
        return node.read_content()

    def read_dir(self, path: str) -> List[DirEntry]:
        node = self._require(path, "read directory")
        if not node.is_dir:
            raise IsNotDirectoryError("read directory", normalize_path(path))
        return [child.entry() for child in node.list_children()]

    def last_modified(self, path: str) -> datetime:
        return self.stat(path).mod_time

    def file_size(self, path: str) -> int:
        return self.stat(path).size

    def mime_type(self, path: str) -> str:
        node = self._require(path, "retrieve mime type")
        if node.is_dir:
            raise IsNotFileError("retrieve mime type", normalize_path(path))
        return self.mimetype_detector.detect(normalize_path(path), node.read_content())

    def visibility(self, path: str) -> str:
        return self.stat(path).visibility

    def write(self, path: str, content: bytes, config: ConfigLike = None) -> None:
        cfg = WriteConfig.coerce(config)
        path = normalize_path(path)
        if path == ROOT:
            self.logger.debug("Ignoring write to the root path")
            return

        self.logger.debug(f"Writing file: {path}")
        parent = self._make_dirs(
            parent_path(path), cfg.resolve_dir_visibility(self.default_visibility), "write file"
        )
        node = parent.child_or_create(
            base_name(path), False, cfg.resolve_file_visibility(self.default_visibility)
        )
        if node.is_dir:
            raise IsNotFileError("write file", path)
        node.write_content(bytes(content), append=cfg.has_flag(WriteFlag.APPEND))

    def set_visibility(self, path: str, visibility: str) -> None:
        self._require(path, "set visibility").set_visibility(visibility)

    def delete(self, path: str) -> None:
        node = self._lookup(path)
        if node is None:
            return
        if node.is_dir:
            raise IsNotFileError("delete file", normalize_path(path))
        self.logger.debug(f"Deleting file: {normalize_path(path)}")
        self._detach(node)

    def delete_dir(self, path: str) -> None:
        node = self._lookup(path)
        if node is None:
            return
        if not node.is_dir:
            raise IsNotDirectoryError("delete directory", normalize_path(path))
        self.logger.debug(f"Deleting directory: {normalize_path(path)}")
        if node is self.root:
            node.clear()
        else:
            self._detach(node)

    def create_dir(self, path: str, config: ConfigLike = None) -> None:
        cfg = WriteConfig.coerce(config)
        self.logger.debug(f"Creating directory: {normalize_path(path)}")
        self._make_dirs(path, cfg.resolve_dir_visibility(self.default_visibility), "create directory")

    def move(self, src: str, dst: str, config: ConfigLike = None) -> None:
        cfg = WriteConfig.coerce(config)
        src, dst = normalize_path(src), normalize_path(dst)
        if src == ROOT:
            raise InvalidPathError("move", src, "the root directory cannot be moved", destination=dst)

        node = self._lookup(src)
        if node is None:
            raise PathNotFoundError("move", src, destination=dst)
        if self._lookup(dst) is not None:
            raise AlreadyExistsError("move", src, destination=dst)
        if node.is_dir and is_within(dst, src):
            raise InvalidPathError("move", src, "a directory cannot be moved into itself", destination=dst)

        self.logger.debug(f"Moving {src} to {dst}")
        target = self._make_dirs(
            parent_path(dst), cfg.resolve_dir_visibility(self.default_visibility), "move"
        )
        source_parent = node.parent
        if source_parent is None or not source_parent.detach(node):
            raise PathNotFoundError("move", src, "source was removed concurrently", destination=dst)

        old_name = node.name
        node.rename(base_name(dst))
        if not target.attach(node):
            node.rename(old_name)
            if not source_parent.attach(node):
                self.logger.warning(f"Lost {src} while moving to {dst}: both paths were taken concurrently")
                raise AlreadyExistsError(
                    "move", src, "destination and source were both taken concurrently; source is lost",
                    destination=dst,
                )
            raise AlreadyExistsError("move", src, destination=dst)

    def copy(self, src: str, dst: str, config: ConfigLike = None) -> None:
        cfg = WriteConfig.coerce(config)
        src, dst = normalize_path(src), normalize_path(dst)

        node = self._lookup(src)
        if node is None:
            raise PathNotFoundError("copy", src, destination=dst)
        if node.is_dir:
            raise IsNotFileError("copy", src, destination=dst)

        existing = self._lookup(dst)
        if existing is not None:
            if existing.is_dir:
                raise IsNotFileError("copy", src, "destination is a directory", destination=dst)
            # copy never appends; without TRUNCATE an existing destination is an error
            if not cfg.has_flag(WriteFlag.TRUNCATE, default=WriteFlag(0)):
                raise AlreadyExistsError("copy", src, destination=dst)

        self.logger.debug(f"Copying {src} to {dst}")
        target = self._make_dirs(
            parent_path(dst), cfg.resolve_dir_visibility(self.default_visibility), "copy"
        )
        content, modified = node.snapshot()
        fresh = Node(base_name(dst), False, cfg.resolve_file_visibility(self.default_visibility))
        fresh.content = content
        fresh.last_modified = modified
        if not target.put_file(fresh):
            raise IsNotFileError("copy", src, "destination is a directory", destination=dst)
