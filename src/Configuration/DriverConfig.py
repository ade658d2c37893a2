"""
Typed configuration models for filesystem drivers and the manager.

Driver options arrive as untyped mappings (from YAML or from code). These
models decode them, matching keys case-insensitively and ignoring '-' and '_'
so that ``deferRootCreation``, ``defer-root-creation`` and
``defer_root_creation`` all populate the same field.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .FileSystemConfig import FileSystemConfig


def _fold(key: str) -> str:
    return key.lower().replace("-", "").replace("_", "")


class OptionsModel(BaseModel):
    """Base model that normalizes the keys of the incoming option mapping."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        fields = {_fold(name): name for name in cls.model_fields}
        normalized: Dict[str, Any] = {}
        for key, value in data.items():
            field_name = fields.get(_fold(str(key)))
            normalized[field_name or str(key)] = value
        return normalized

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]]):
        """
        Decode an untyped option mapping.

        Args:
            options: The mapping to decode, or None for all defaults

        Returns:
            An instance of the model
        """
        return cls.model_validate(dict(options or {}))


class MemoryDriverConfig(OptionsModel):
    """Options of the in-memory driver."""

    visibility: str = FileSystemConfig.DEFAULT_VISIBILITY


class PermissionPair(OptionsModel):
    """A public/private permission pair; zero means "keep the converter default"."""

    public: int = 0
    private: int = 0

    @field_validator("public", "private", mode="before")
    @classmethod
    def _parse_octal(cls, value: Any) -> Any:
        # "0755" from a config file is an octal permission, not decimal 755
        if isinstance(value, str):
            text = value.strip().lower()
            if text.startswith("0o"):
                text = text[2:]
            return int(text, 8) if text else 0
        return value


class PermissionsConfig(OptionsModel):
    file: PermissionPair = Field(default_factory=PermissionPair)
    directory: PermissionPair = Field(default_factory=PermissionPair)


class VisibilityDefaults(OptionsModel):
    file: str = ""
    directory: str = ""


class LocalDriverConfig(OptionsModel):
    """Options of the local disk driver."""

    root: str
    defer_root_creation: bool = False
    permissions: PermissionsConfig = Field(default_factory=PermissionsConfig)
    visibility: VisibilityDefaults = Field(default_factory=VisibilityDefaults)

    @field_validator("root")
    @classmethod
    def _root_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("root must not be empty")
        return value

    def converter_options(self) -> Dict[str, str]:
        """Translate the permission settings into visibility converter options."""
        options: Dict[str, str] = {}
        if self.permissions.file.public:
            options["file_public"] = format(self.permissions.file.public, "o")
        if self.permissions.file.private:
            options["file_private"] = format(self.permissions.file.private, "o")
        if self.permissions.directory.public:
            options["dir_public"] = format(self.permissions.directory.public, "o")
        if self.permissions.directory.private:
            options["dir_private"] = format(self.permissions.directory.private, "o")
        if self.visibility.file:
            options["file_default_visibility"] = self.visibility.file
        if self.visibility.directory:
            options["dir_default_visibility"] = self.visibility.directory
        return options


class DiskConfig(OptionsModel):
    """One named filesystem in the manager configuration."""

    driver: str
    options: Dict[str, Any] = Field(default_factory=dict)
    lazy: bool = False
    """Defer constructing the filesystem until its first use."""
    read_only: bool = False
    """Wrap the filesystem so that every mutation is rejected."""


class ManagerConfig(OptionsModel):
    """The set of filesystems a manager routes to, keyed by name."""

    disks: Dict[str, DiskConfig] = Field(default_factory=dict)
