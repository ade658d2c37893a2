"""
Per-operation write options.

A WriteConfig overrides the visibility of created directories and files and
selects how an existing file is written to. Every field is optional; absent
fields fall back to the adapter's defaults.
"""

import os
import enum
from typing import Any, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from Configuration.FileSystemConfig import FileSystemConfig


class WriteFlag(enum.IntFlag):
    """Write mode bits, numerically compatible with the os.O_* flags."""

    CREATE = os.O_CREAT
    TRUNCATE = os.O_TRUNC
    APPEND = os.O_APPEND

    @classmethod
    def parse(cls, value: Union[int, str, "WriteFlag"]) -> "WriteFlag":
        """
        Parse a flag from an int or from names such as "APPEND" or "create|truncate".

        Raises:
            ValueError: If a name is not a known flag
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            flag = cls(0)
            for name in value.replace(",", "|").split("|"):
                name = name.strip().upper()
                if not name:
                    continue
                if name not in cls.__members__:
                    raise ValueError(f"Unknown write flag: {name}")
                flag |= cls[name]
            return flag
        return cls(int(value))


DEFAULT_WRITE_FLAG = WriteFlag.CREATE | WriteFlag.TRUNCATE


class WriteConfig(BaseModel):
    """Visibility and write-mode overrides for a single operation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dir_visibility: Optional[str] = None
    file_visibility: Optional[str] = None
    write_flag: Optional[WriteFlag] = Field(
        default=None, validation_alias=AliasChoices("write_flag", "file_write_flag")
    )

    @field_validator("write_flag", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        if value is None:
            return None
        return WriteFlag.parse(value)

    def with_write_flag(self, write_flag: Union[int, str, WriteFlag]) -> "WriteConfig":
        """Return a copy of this config using a different write flag."""
        return self.model_copy(update={"write_flag": WriteFlag.parse(write_flag)})

    def resolve_dir_visibility(self, default: str) -> str:
        return self.dir_visibility if self.dir_visibility is not None else default

    def resolve_file_visibility(self, default: str) -> str:
        return self.file_visibility if self.file_visibility is not None else default

    def has_flag(self, flag: WriteFlag, default: WriteFlag = DEFAULT_WRITE_FLAG) -> bool:
        current = self.write_flag if self.write_flag is not None else default
        return bool(current & flag)

    @classmethod
    def coerce(cls, config: Union["WriteConfig", Mapping[str, Any], None]) -> "WriteConfig":
        """
        Accept a WriteConfig, an untyped mapping or None.

        Args:
            config: The value passed by the caller

        Returns:
            A WriteConfig; None becomes an empty config so defaults apply
        """
        if config is None:
            return EMPTY_CONFIG
        if isinstance(config, cls):
            return config
        return cls.model_validate(dict(config))


EMPTY_CONFIG = WriteConfig()

PUBLIC_DIR = WriteConfig(dir_visibility=FileSystemConfig.VISIBILITY_PUBLIC)
PRIVATE_DIR = WriteConfig(dir_visibility=FileSystemConfig.VISIBILITY_PRIVATE)
PUBLIC_FILE = WriteConfig(
    dir_visibility=FileSystemConfig.VISIBILITY_PUBLIC,
    file_visibility=FileSystemConfig.VISIBILITY_PUBLIC,
)
PRIVATE_FILE = WriteConfig(
    dir_visibility=FileSystemConfig.VISIBILITY_PRIVATE,
    file_visibility=FileSystemConfig.VISIBILITY_PRIVATE,
)
PUBLIC_FILE_WITH_PRIVATE_DIR = WriteConfig(
    dir_visibility=FileSystemConfig.VISIBILITY_PRIVATE,
    file_visibility=FileSystemConfig.VISIBILITY_PUBLIC,
)
PRIVATE_FILE_WITH_PUBLIC_DIR = WriteConfig(
    dir_visibility=FileSystemConfig.VISIBILITY_PUBLIC,
    file_visibility=FileSystemConfig.VISIBILITY_PRIVATE,
)
