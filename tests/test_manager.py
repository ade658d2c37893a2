"""
Unit tests for the filesystem manager.
"""

import os
import shutil
import tempfile
import unittest

from Configuration.DriverConfig import ManagerConfig
from FileSystem.deferred import DeferredFileSystem
from FileSystem.exceptions import (
    AlreadyExistsError,
    InvalidPathError,
    IsNotFileError,
    PathNotFoundError,
    ReadOnlyError,
    UnknownFileSystemError,
)
from FileSystem.manager import FileSystemManager
from FileSystem.memory import MemoryFileSystem
from FileSystem.options import WriteConfig, WriteFlag
from FileSystem.readonly import ReadOnlyFileSystem
from FileSystem.registry import UnknownDriverError


class TestFileSystemManager(unittest.TestCase):
    """Test cases for the FileSystemManager class."""

    def setUp(self):
        """Set up test fixtures."""
        self.first = MemoryFileSystem()
        self.second = MemoryFileSystem()
        self.manager = FileSystemManager({"first": self.first, "second": self.second})
        self.first.write("docs/a.txt", b"alpha")

    def test_registry(self):
        """Test adding and looking up filesystems by name."""
        self.assertEqual(self.manager.names(), ["first", "second"])
        self.assertTrue(self.manager.has_filesystem("first"))
        self.assertFalse(self.manager.has_filesystem("third"))
        self.assertIs(self.manager.get_filesystem("first"), self.first)
        with self.assertRaises(UnknownFileSystemError):
            self.manager.get_filesystem("third")

        third = MemoryFileSystem()
        self.manager.add_filesystem("third", third)
        self.assertIs(self.manager.get_filesystem("third"), third)

    def test_resolve(self):
        """Test splitting logical paths."""
        fs, path = self.manager.resolve("first://docs/a.txt")
        self.assertIs(fs, self.first)
        self.assertEqual(path, "docs/a.txt")

    def test_resolve_errors(self):
        """Test malformed and unknown logical paths."""
        for path in ("docs/a.txt", "first://a://b", ""):
            with self.assertRaises(InvalidPathError):
                self.manager.resolve(path)
        with self.assertRaises(UnknownFileSystemError) as ctx:
            self.manager.resolve("third://a.txt")
        self.assertEqual(ctx.exception.name, "third")

    def test_operations_are_delegated(self):
        """Test that contract operations reach the resolved filesystem."""
        self.manager.write("second://x/y.txt", b"data")
        self.assertEqual(self.second.read("x/y.txt"), b"data")
        self.assertTrue(self.manager.file_exists("second://x/y.txt"))
        self.assertTrue(self.manager.dir_exists("second://x"))
        self.assertFalse(self.manager.exists("first://x"))
        self.assertEqual(self.manager.file_size("first://docs/a.txt"), 5)
        self.assertEqual([entry.name for entry in self.manager.read_dir("first://docs")], ["a.txt"])

        self.manager.set_visibility("first://docs/a.txt", "private")
        self.assertEqual(self.first.visibility("docs/a.txt"), "private")

        self.manager.create_dir("first://empty")
        self.assertTrue(self.first.dir_exists("empty"))
        self.manager.delete_dir("first://empty")
        self.manager.delete("second://x/y.txt")
        self.assertFalse(self.second.exists("x/y.txt"))

    def test_walk_reports_logical_paths(self):
        """Test that walked paths carry the filesystem prefix."""
        visited = []
        self.manager.walk("first://docs", lambda path, entry, error: visited.append(path))
        self.assertEqual(visited, ["first://docs", "first://docs/a.txt"])

    def test_move_within_filesystem(self):
        """Test that same-filesystem moves are delegated."""
        self.manager.move("first://docs", "first://archive/docs")
        self.assertEqual(self.first.read("archive/docs/a.txt"), b"alpha")
        self.assertFalse(self.first.exists("docs"))

    def test_move_across_filesystems(self):
        """Test that cross-filesystem moves copy the content and delete the source."""
        self.manager.move("first://docs/a.txt", "second://inbox/a.txt", WriteConfig(file_visibility="private"))
        self.assertFalse(self.first.exists("docs/a.txt"))
        self.assertEqual(self.second.read("inbox/a.txt"), b"alpha")
        self.assertEqual(self.second.visibility("inbox/a.txt"), "private")

    def test_move_directory_across_filesystems_fails(self):
        """Test that directories cannot cross filesystems."""
        with self.assertRaises(IsNotFileError):
            self.manager.move("first://docs", "second://docs")
        self.assertTrue(self.first.file_exists("docs/a.txt"))
        self.assertFalse(self.second.exists("docs"))

    def test_move_across_filesystems_guards(self):
        """Test the absent-source and occupied-destination cases."""
        with self.assertRaises(PathNotFoundError):
            self.manager.move("first://missing", "second://x")
        self.second.write("taken.txt", b"taken")
        with self.assertRaises(AlreadyExistsError):
            self.manager.move("first://docs/a.txt", "second://taken.txt")
        self.assertTrue(self.first.exists("docs/a.txt"))

    def test_copy_across_filesystems(self):
        """Test cross-filesystem copies and their overwrite rule."""
        self.manager.copy("first://docs/a.txt", "second://a.txt")
        self.assertEqual(self.second.read("a.txt"), b"alpha")
        self.assertTrue(self.first.exists("docs/a.txt"))

        self.first.write("docs/a.txt", b"beta")
        with self.assertRaises(AlreadyExistsError):
            self.manager.copy("first://docs/a.txt", "second://a.txt")
        self.manager.copy(
            "first://docs/a.txt", "second://a.txt",
            WriteConfig(write_flag=WriteFlag.TRUNCATE | WriteFlag.APPEND),
        )
        self.assertEqual(self.second.read("a.txt"), b"beta")

    def test_copy_within_filesystem(self):
        """Test that same-filesystem copies are delegated."""
        self.manager.copy("first://docs/a.txt", "first://docs/b.txt")
        self.assertEqual(self.first.read("docs/b.txt"), b"alpha")

    def test_same_instance_under_two_names(self):
        """Test that two names for one instance count as the same filesystem."""
        self.manager.add_filesystem("alias", self.first)
        self.manager.move("first://docs", "alias://moved")
        self.assertTrue(self.first.dir_exists("moved"))


class TestFileSystemManagerFromConfig(unittest.TestCase):
    """Test cases for building a manager from configuration."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Tear down test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_from_config(self):
        """Test that disks are built with their drivers and wrappers."""
        config = ManagerConfig.model_validate({
            "disks": {
                "scratch": {"driver": "memory"},
                "files": {"driver": "local", "options": {"root": os.path.join(self.temp_dir, "files")}},
                "archive": {"driver": "memory", "readOnly": True},
                "later": {"driver": "local", "lazy": True,
                          "options": {"root": os.path.join(self.temp_dir, "later")}},
            }
        })
        manager = FileSystemManager.from_config(config)
        self.assertEqual(manager.names(), ["archive", "files", "later", "scratch"])
        self.assertIsInstance(manager.get_filesystem("scratch"), MemoryFileSystem)
        self.assertIsInstance(manager.get_filesystem("archive"), ReadOnlyFileSystem)
        self.assertIsInstance(manager.get_filesystem("later"), DeferredFileSystem)

        self.assertTrue(os.path.isdir(os.path.join(self.temp_dir, "files")))
        self.assertFalse(os.path.exists(os.path.join(self.temp_dir, "later")))

        manager.write("later://a.txt", b"a")
        self.assertTrue(os.path.isfile(os.path.join(self.temp_dir, "later", "a.txt")))

        with self.assertRaises(ReadOnlyError):
            manager.write("archive://a.txt", b"a")

        manager.copy("later://a.txt", "scratch://a.txt")
        self.assertEqual(manager.read("scratch://a.txt"), b"a")

    def test_custom_driver_table(self):
        """Test that an explicit driver table replaces the defaults."""
        built = []

        def open_counted(options):
            built.append(options)
            return MemoryFileSystem()

        config = ManagerConfig.model_validate({"disks": {"x": {"driver": "counted", "options": {"k": "v"}}}})
        manager = FileSystemManager.from_config(config, drivers={"counted": open_counted})
        self.assertEqual(built, [{"k": "v"}])
        self.assertTrue(manager.has_filesystem("x"))

        with self.assertRaises(UnknownDriverError):
            FileSystemManager.from_config(config)


if __name__ == "__main__":
    unittest.main()
