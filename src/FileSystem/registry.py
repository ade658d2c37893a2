"""
Filesystem driver table.

This module maps driver names to factories building a filesystem from an
untyped option mapping. The default table is read-only; callers needing other
drivers pass their own mapping instead of registering into a global one.
"""

import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from Configuration.DriverConfig import LocalDriverConfig, MemoryDriverConfig
from FileSystem.base import FileSystem
from FileSystem.local import LocalFileSystem
from FileSystem.memory import MemoryFileSystem
from FileSystem.visibility import UnixVisibilityConverter

DriverFactory = Callable[[Optional[Mapping[str, Any]]], FileSystem]

logger = logging.getLogger(__name__)


class UnknownDriverError(ValueError):
    """Raised when no factory exists for the requested driver name."""

    def __init__(self, driver: str) -> None:
        self.driver = driver
        super().__init__(f"Filesystem driver not registered: {driver}")


def open_memory(options: Optional[Mapping[str, Any]] = None) -> FileSystem:
    """
    Build an in-memory filesystem.

    Args:
        options: Mapping with an optional "visibility" key

    Returns:
        A new MemoryFileSystem
    """
    config = MemoryDriverConfig.from_options(options)
    return MemoryFileSystem(visibility=config.visibility)


def open_local(options: Optional[Mapping[str, Any]] = None) -> FileSystem:
    """
    Build a local disk filesystem.

    Args:
        options: Mapping with "root" and optionally "deferRootCreation",
            "permissions" and "visibility"

    Returns:
        A new LocalFileSystem

    Raises:
        pydantic.ValidationError: If "root" is missing or empty
    """
    config = LocalDriverConfig.from_options(options)
    converter = UnixVisibilityConverter.from_mapping(config.converter_options())
    return LocalFileSystem(
        config.root,
        visibility_converter=converter,
        defer_root_creation=config.defer_root_creation,
    )


DEFAULT_DRIVERS: Mapping[str, DriverFactory] = MappingProxyType({
    "memory": open_memory,
    "local": open_local,
})


def get_filesystem(
    driver: str,
    options: Optional[Mapping[str, Any]] = None,
    drivers: Optional[Mapping[str, DriverFactory]] = None,
) -> FileSystem:
    """
    Build a filesystem by driver name.

    Args:
        driver: The name of the driver
        options: Options passed to the driver factory
        drivers: The driver table to look in (default: DEFAULT_DRIVERS)

    Returns:
        A new filesystem instance

    Raises:
        UnknownDriverError: If the driver is not in the table
    """
    table = DEFAULT_DRIVERS if drivers is None else drivers
    logger.debug(f"Getting filesystem for driver: {driver}")
    factory = table.get(driver)
    if factory is None:
        raise UnknownDriverError(driver)
    return factory(options)
