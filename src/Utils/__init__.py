"""
Utility functions for the filesystem layer.

This module provides utilities for logging setup and thread synchronisation.
"""

from .locks import ReadWriteLock
from .logging import setup_logging

__all__ = ["ReadWriteLock", "setup_logging"]
