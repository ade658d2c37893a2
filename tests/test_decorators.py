"""
Unit tests for the read-only and deferred-initialization decorators.
"""

import io
import threading
import unittest

from FileSystem.deferred import DeferredFileSystem
from FileSystem.exceptions import PermissionDeniedError, ReadOnlyError
from FileSystem.memory import MemoryFileSystem
from FileSystem.readonly import ReadOnlyFileSystem


class TestReadOnlyFileSystem(unittest.TestCase):
    """Test cases for the ReadOnlyFileSystem class."""

    def setUp(self):
        """Set up test fixtures."""
        self.inner = MemoryFileSystem()
        self.inner.write("docs/readme.txt", b"read me")
        self.fs = ReadOnlyFileSystem(self.inner)

    def test_reads_are_forwarded(self):
        """Test that read operations reach the wrapped filesystem."""
        self.assertTrue(self.fs.file_exists("docs/readme.txt"))
        self.assertEqual(self.fs.read("docs/readme.txt"), b"read me")
        self.assertEqual([entry.name for entry in self.fs.read_dir("docs")], ["readme.txt"])
        self.assertEqual(self.fs.file_size("docs/readme.txt"), 7)
        self.assertEqual(self.fs.visibility("docs/readme.txt"), "public")
        visited = []
        self.fs.walk("", lambda path, entry, error: visited.append(path))
        self.assertEqual(visited, ["", "docs", "docs/readme.txt"])

    def test_mutations_are_rejected(self):
        """Test that every mutation raises ReadOnlyError and changes nothing."""
        mutations = [
            lambda: self.fs.write("docs/new.txt", b"x"),
            lambda: self.fs.write_stream("docs/new.txt", io.BytesIO(b"x")),
            lambda: self.fs.set_visibility("docs/readme.txt", "private"),
            lambda: self.fs.delete("docs/readme.txt"),
            lambda: self.fs.delete_dir("docs"),
            lambda: self.fs.create_dir("other"),
            lambda: self.fs.move("docs/readme.txt", "moved.txt"),
            lambda: self.fs.copy("docs/readme.txt", "copied.txt"),
        ]
        for mutation in mutations:
            with self.assertRaises(ReadOnlyError):
                mutation()
        self.assertEqual(self.inner.read("docs/readme.txt"), b"read me")
        self.assertEqual(self.inner.visibility("docs/readme.txt"), "public")
        self.assertEqual([entry.name for entry in self.inner.read_dir("")], ["docs"])

    def test_read_only_error_is_permission_denied(self):
        """Test that the read-only failure is a kind of permission failure."""
        with self.assertRaises(PermissionDeniedError) as ctx:
            self.fs.move("a", "b")
        self.assertEqual(ctx.exception.destination, "b")
        self.assertIn("read-only", str(ctx.exception))


class TestDeferredFileSystem(unittest.TestCase):
    """Test cases for the DeferredFileSystem class."""

    def test_factory_runs_on_first_use(self):
        """Test that construction waits for the first call and runs once."""
        calls = []

        def factory():
            calls.append(1)
            return MemoryFileSystem()

        fs = DeferredFileSystem(factory, name="lazy")
        self.assertFalse(fs.initialized)
        self.assertEqual(calls, [])

        fs.write("a.txt", b"a")
        self.assertTrue(fs.initialized)
        self.assertEqual(fs.read("a.txt"), b"a")
        self.assertEqual(len(calls), 1)

    def test_failed_initialization_is_retried(self):
        """Test that a failing factory is called again on the next use."""
        attempts = []

        def factory():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("backend unavailable")
            return MemoryFileSystem()

        fs = DeferredFileSystem(factory)
        with self.assertRaises(RuntimeError):
            fs.exists("a")
        self.assertFalse(fs.initialized)
        self.assertFalse(fs.exists("a"))
        self.assertEqual(len(attempts), 2)

    def test_concurrent_first_use_builds_once(self):
        """Test that racing first calls share a single instance."""
        calls = []
        gate = threading.Event()

        def factory():
            calls.append(1)
            gate.wait(1)
            return MemoryFileSystem()

        fs = DeferredFileSystem(factory)
        threads = [threading.Thread(target=fs.write, args=(f"f{i}", b"x")) for i in range(10)]
        for thread in threads:
            thread.start()
        gate.set()
        for thread in threads:
            thread.join()

        self.assertEqual(len(calls), 1)
        self.assertEqual(len(fs.read_dir("")), 10)

    def test_composes_with_read_only(self):
        """Test that a read-only wrapper around a deferred one rejects writes without building it."""
        deferred = DeferredFileSystem(MemoryFileSystem)
        fs = ReadOnlyFileSystem(deferred)
        with self.assertRaises(ReadOnlyError):
            fs.write("a", b"a")
        self.assertFalse(deferred.initialized)
        self.assertFalse(fs.exists("a"))
        self.assertTrue(deferred.initialized)


if __name__ == "__main__":
    unittest.main()
