"""
Deferred-initialization filesystem decorator.

The wrapped filesystem is built by a factory on the first call that needs
it. Construction runs at most once at a time; if the factory raises, the
error propagates to that caller and the next call tries again.
"""

import logging
import threading
from typing import Callable, Optional

from FileSystem.base import DelegatingFileSystem, FileSystem


class DeferredFileSystem(DelegatingFileSystem):
    """Builds the inner filesystem lazily and then forwards every call to it."""

    def __init__(self, factory: Callable[[], FileSystem], name: Optional[str] = None) -> None:
        """
        Initialize the wrapper without building anything.

        Args:
            factory: Zero-argument callable returning the filesystem to wrap
            name: Label used in log messages
        """
        super().__init__(None)
        self.logger = logging.getLogger(__name__)
        self._factory = factory
        self._name = name or getattr(factory, "__name__", "filesystem")
        self._init_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._inner is not None

    def _target(self) -> FileSystem:
        inner = self._inner
        if inner is not None:
            return inner
        with self._init_lock:
            if self._inner is None:
                self.logger.info(f"Initializing deferred filesystem: {self._name}")
                self._inner = self._factory()
            return self._inner
