"""
Initializes the Configuration package.

This module provides centralized access to the filesystem constants, the
typed driver option models and the YAML configuration loader.
"""

from .FileSystemConfig import FileSystemConfig

from .DriverConfig import (
    OptionsModel,
    MemoryDriverConfig,
    LocalDriverConfig,
    PermissionsConfig,
    DiskConfig,
    ManagerConfig,
)

from .ConfigLoader import ConfigLoader, ConfigurationError, expand_env

__all__ = [
    # Constants
    "FileSystemConfig",

    # Driver options
    "OptionsModel",
    "MemoryDriverConfig",
    "LocalDriverConfig",
    "PermissionsConfig",
    "DiskConfig",
    "ManagerConfig",

    # Loading
    "ConfigLoader",
    "ConfigurationError",
    "expand_env",
]
