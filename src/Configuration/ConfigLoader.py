# File: ConfigLoader.py
import os
import logging
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from .DriverConfig import ManagerConfig

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a manager configuration cannot be loaded."""


def expand_env(value: Any) -> Any:
    """Expand $VAR and ${VAR} references in every string of a nested structure."""
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    return value


class ConfigLoader:
    def load(self, file_path: Union[str, Path]) -> ManagerConfig:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                root = yaml.safe_load(f)
        except FileNotFoundError as e:
            logger.error(f"Filesystem config file not found: {file_path}")
            raise ConfigurationError(f"Config file not found: {file_path}") from e
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML file {file_path}: {e}")
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e
        return self.load_mapping(root or {}, source=str(file_path))

    def load_mapping(self, data: Any, source: str = "<mapping>") -> ManagerConfig:
        if not isinstance(data, dict):
            logger.error(f"Filesystem config {source} root is not a dict: {type(data)}")
            raise ConfigurationError(f"Config root must be a mapping in {source}")
        try:
            config = ManagerConfig.model_validate(expand_env(data))
        except ValidationError as e:
            logger.error(f"Invalid filesystem config {source}: {e}")
            raise ConfigurationError(f"Invalid filesystem config {source}: {e}") from e
        logger.info(f"Loaded {len(config.disks)} filesystem definitions from {source}")
        return config
