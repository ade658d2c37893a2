"""
Unit tests for the local filesystem implementation.
"""

import os
import stat
import shutil
import tempfile
import unittest

from FileSystem.base import WalkAction
from FileSystem.exceptions import (
    AlreadyExistsError,
    InvalidPathError,
    IsNotDirectoryError,
    IsNotFileError,
    PathNotFoundError,
)
from FileSystem.local import LocalFileSystem
from FileSystem.options import PRIVATE_FILE, WriteConfig, WriteFlag
from FileSystem.visibility import UnixVisibilityConverter


def _mode(path):
    return stat.S_IMODE(os.stat(path).st_mode)


class TestLocalFileSystem(unittest.TestCase):
    """Test cases for the LocalFileSystem class."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.root = os.path.join(self.temp_dir, "root")
        self.fs = LocalFileSystem(self.root)

        # Create some test files and directories
        os.makedirs(os.path.join(self.root, "dir1"))
        os.makedirs(os.path.join(self.root, "dir2", "subdir"))

        with open(os.path.join(self.root, "file1.txt"), "wb") as f:
            f.write(b"File 1 content")

        with open(os.path.join(self.root, "dir1", "file2.txt"), "wb") as f:
            f.write(b"File 2 content")

    def tearDown(self):
        """Tear down test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_root_created_eagerly(self):
        """Test that the root directory is created on construction."""
        root = os.path.join(self.temp_dir, "eager")
        LocalFileSystem(root)
        self.assertTrue(os.path.isdir(root))

    def test_root_creation_deferred(self):
        """Test that deferred root creation waits for the first write."""
        root = os.path.join(self.temp_dir, "deferred")
        fs = LocalFileSystem(root, defer_root_creation=True)
        self.assertFalse(os.path.exists(root))
        fs.write("a.txt", b"a")
        self.assertTrue(os.path.isfile(os.path.join(root, "a.txt")))

    def test_empty_root_rejected(self):
        """Test that an empty root is refused."""
        with self.assertRaises(ValueError):
            LocalFileSystem("")

    def test_existence_checks(self):
        """Test that existence checks distinguish files and directories."""
        self.assertTrue(self.fs.file_exists("file1.txt"))
        self.assertTrue(self.fs.dir_exists("dir2/subdir"))
        self.assertFalse(self.fs.exists("missing"))
        self.assertTrue(self.fs.dir_exists("/"))

    def test_paths_cannot_escape_root(self):
        """Test that '..' segments are clamped at the root."""
        self.fs.write("../../outside.txt", b"x")
        self.assertTrue(os.path.isfile(os.path.join(self.root, "outside.txt")))
        self.assertFalse(os.path.exists(os.path.join(self.temp_dir, "outside.txt")))

    def test_read(self):
        """Test reads of files, directories and absent paths."""
        self.assertEqual(self.fs.read("dir1/file2.txt"), b"File 2 content")
        with self.assertRaises(IsNotFileError):
            self.fs.read("dir1")
        with self.assertRaises(PathNotFoundError):
            self.fs.read("missing.txt")

    def test_read_stream(self):
        """Test that read_stream returns the file content."""
        with self.fs.read_stream("file1.txt") as stream:
            self.assertEqual(stream.read(), b"File 1 content")

    def test_read_dir(self):
        """Test that listings are sorted and describe each entry."""
        entries = self.fs.read_dir("")
        self.assertEqual([entry.name for entry in entries], ["dir1", "dir2", "file1.txt"])
        self.assertTrue(entries[0].is_dir)
        self.assertEqual(entries[2].size, 14)
        with self.assertRaises(IsNotDirectoryError):
            self.fs.read_dir("file1.txt")
        with self.assertRaises(PathNotFoundError):
            self.fs.read_dir("missing")

    def test_write_and_append(self):
        """Test truncating and appending writes."""
        self.fs.write("new/nested/file.txt", b"hello")
        self.fs.write("new/nested/file.txt", b" world", WriteConfig(write_flag=WriteFlag.APPEND))
        self.assertEqual(self.fs.read("new/nested/file.txt"), b"hello world")
        self.fs.write("new/nested/file.txt", b"B", {"write_flag": "truncate"})
        self.assertEqual(self.fs.read("new/nested/file.txt"), b"B")

    def test_write_errors(self):
        """Test that writes over directories and below files fail."""
        with self.assertRaises(IsNotFileError):
            self.fs.write("dir1", b"x")
        with self.assertRaises(AlreadyExistsError):
            self.fs.write("file1.txt/child", b"x")

    def test_write_applies_permissions(self):
        """Test that created files and directories get the configured modes."""
        self.fs.write("secret/key.txt", b"k", PRIVATE_FILE)
        self.assertEqual(_mode(os.path.join(self.root, "secret")), 0o700)
        self.assertEqual(_mode(os.path.join(self.root, "secret", "key.txt")), 0o600)
        self.assertEqual(self.fs.visibility("secret/key.txt"), "private")
        self.fs.write("open/file.txt", b"o")
        self.assertEqual(_mode(os.path.join(self.root, "open")), 0o755)
        self.assertEqual(self.fs.visibility("open/file.txt"), "public")

    def test_set_visibility(self):
        """Test that visibility changes are applied with chmod."""
        self.fs.set_visibility("file1.txt", "private")
        self.assertEqual(_mode(os.path.join(self.root, "file1.txt")), 0o600)
        self.assertEqual(self.fs.visibility("file1.txt"), "private")
        self.fs.set_visibility("dir1", "private")
        self.assertEqual(_mode(os.path.join(self.root, "dir1")), 0o700)
        with self.assertRaises(PathNotFoundError):
            self.fs.set_visibility("missing", "public")

    def test_custom_converter(self):
        """Test that a configured converter decides the permission bits."""
        converter = UnixVisibilityConverter.from_mapping({"file_public": "0640", "dir_public": "0750"})
        fs = LocalFileSystem(os.path.join(self.temp_dir, "custom"), visibility_converter=converter)
        fs.write("d/f.txt", b"")
        self.assertEqual(_mode(os.path.join(fs.root, "d")), 0o750)
        self.assertEqual(_mode(os.path.join(fs.root, "d", "f.txt")), 0o640)

    def test_delete(self):
        """Test deletion of files, directories and absent paths."""
        self.fs.delete("missing.txt")
        self.fs.delete_dir("missing")
        with self.assertRaises(IsNotFileError):
            self.fs.delete("dir1")
        with self.assertRaises(IsNotDirectoryError):
            self.fs.delete_dir("file1.txt")
        self.fs.delete("file1.txt")
        self.assertFalse(os.path.exists(os.path.join(self.root, "file1.txt")))
        self.fs.delete_dir("dir2")
        self.assertFalse(os.path.exists(os.path.join(self.root, "dir2")))

    def test_delete_root_empties_it(self):
        """Test that deleting the root keeps the directory itself."""
        self.fs.delete_dir("")
        self.assertTrue(os.path.isdir(self.root))
        self.assertEqual(os.listdir(self.root), [])

    def test_create_dir(self):
        """Test idempotent directory creation and the file-in-the-way failure."""
        self.fs.create_dir("a/b/c")
        self.fs.create_dir("a/b/c")
        self.assertTrue(os.path.isdir(os.path.join(self.root, "a", "b", "c")))
        with self.assertRaises(AlreadyExistsError):
            self.fs.create_dir("file1.txt/sub")

    def test_move(self):
        """Test moving files and directories and the guarded cases."""
        self.fs.move("file1.txt", "moved/file1.txt")
        self.assertFalse(self.fs.exists("file1.txt"))
        self.assertEqual(self.fs.read("moved/file1.txt"), b"File 1 content")

        self.fs.move("dir1", "dir2/dir1")
        self.assertEqual(self.fs.read("dir2/dir1/file2.txt"), b"File 2 content")

        with self.assertRaises(AlreadyExistsError):
            self.fs.move("moved/file1.txt", "dir2/dir1/file2.txt")
        with self.assertRaises(PathNotFoundError):
            self.fs.move("missing", "elsewhere")
        with self.assertRaises(InvalidPathError):
            self.fs.move("dir2", "dir2/subdir/dir2")

    def test_copy(self):
        """Test copies and the overwrite rules."""
        self.fs.copy("file1.txt", "copies/file1.txt")
        self.assertEqual(self.fs.read("copies/file1.txt"), b"File 1 content")
        with self.assertRaises(AlreadyExistsError):
            self.fs.copy("dir1/file2.txt", "copies/file1.txt")
        self.fs.copy("dir1/file2.txt", "copies/file1.txt", {"write_flag": WriteFlag.TRUNCATE})
        self.assertEqual(self.fs.read("copies/file1.txt"), b"File 2 content")
        with self.assertRaises(IsNotFileError):
            self.fs.copy("dir1", "dir1-copy")
        with self.assertRaises(PathNotFoundError):
            self.fs.copy("missing", "x")

    def test_copy_onto_itself_keeps_content(self):
        """Test that copying a file onto its own path with TRUNCATE leaves the content intact."""
        self.fs.write("a.txt", b"precious")
        self.fs.copy("a.txt", "./a.txt", WriteConfig(write_flag=WriteFlag.TRUNCATE))
        self.assertEqual(self.fs.read("a.txt"), b"precious")
        with self.assertRaises(AlreadyExistsError):
            self.fs.copy("a.txt", "/a.txt")
        self.fs.copy("a.txt", "a.txt", WriteConfig(write_flag=WriteFlag.TRUNCATE, file_visibility="private"))
        self.assertEqual(self.fs.visibility("a.txt"), "private")
        self.assertEqual(self.fs.read("a.txt"), b"precious")

    def test_copy_ignores_append(self):
        """Test that copy replaces the destination even when APPEND is set."""
        self.fs.write("src.txt", b"SRC")
        self.fs.write("dst.txt", b"DST")
        self.fs.copy("src.txt", "dst.txt", WriteConfig(write_flag=WriteFlag.TRUNCATE | WriteFlag.APPEND))
        self.assertEqual(self.fs.read("dst.txt"), b"SRC")
        self.fs.copy("src.txt", "fresh.txt", WriteConfig(write_flag=WriteFlag.APPEND))
        self.assertEqual(self.fs.read("fresh.txt"), b"SRC")

    def test_metadata(self):
        """Test size, MIME type and modification time."""
        self.assertEqual(self.fs.file_size("file1.txt"), 14)
        self.assertEqual(self.fs.file_size("dir1"), 0)
        self.assertEqual(self.fs.mime_type("file1.txt"), "text/plain")
        self.assertIsNotNone(self.fs.last_modified("file1.txt").tzinfo)
        with self.assertRaises(IsNotFileError):
            self.fs.mime_type("dir1")
        with self.assertRaises(PathNotFoundError):
            self.fs.stat("missing")

    def test_walk(self):
        """Test a pre-order walk with a skipped directory."""
        visited = []

        def visit(path, entry, error):
            visited.append(path)
            return WalkAction.SKIP_DIR if path == "dir2" else None

        self.fs.walk("", visit)
        self.assertEqual(visited, ["", "dir1", "dir1/file2.txt", "dir2", "file1.txt"])


if __name__ == "__main__":
    unittest.main()
