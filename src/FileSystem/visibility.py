"""
Visibility converters.

A converter translates the abstract "public"/"private" labels into the
permission representation of a backend (unix mode bits, canned ACL names)
and back. Translation is pure; no I/O happens here.
"""

import logging
from typing import Any, Dict, Generic, Iterable, Mapping, Optional, TypeVar

from Configuration.FileSystemConfig import FileSystemConfig

PUBLIC = FileSystemConfig.VISIBILITY_PUBLIC
PRIVATE = FileSystemConfig.VISIBILITY_PRIVATE

P = TypeVar("P")

logger = logging.getLogger(__name__)


class VisibilityConverter(Generic[P]):
    """
    Two-way mapping between visibility labels and permission values.

    Unknown labels map to the permission of the default label. The inverse
    lookup is an exact match on the permission value; anything else maps back
    to the default label.
    """

    def __init__(
        self,
        file_public: P,
        file_private: P,
        dir_public: P,
        dir_private: P,
        file_default_visibility: str = PUBLIC,
        dir_default_visibility: str = PUBLIC,
    ) -> None:
        self.file_public = file_public
        self.file_private = file_private
        self.dir_public = dir_public
        self.dir_private = dir_private
        self.file_default_visibility = PUBLIC
        self.dir_default_visibility = PUBLIC
        self.set_file_default_visibility(file_default_visibility)
        self.set_dir_default_visibility(dir_default_visibility)

    def set_file_default_visibility(self, visibility: str) -> None:
        """Only "public" and "private" are accepted; anything else is ignored."""
        if visibility in (PUBLIC, PRIVATE):
            self.file_default_visibility = visibility

    def set_dir_default_visibility(self, visibility: str) -> None:
        """Only "public" and "private" are accepted; anything else is ignored."""
        if visibility in (PUBLIC, PRIVATE):
            self.dir_default_visibility = visibility

    def for_file(self, visibility: str) -> P:
        if visibility not in (PUBLIC, PRIVATE):
            visibility = self.file_default_visibility
        return self.file_public if visibility == PUBLIC else self.file_private

    def for_dir(self, visibility: str) -> P:
        if visibility not in (PUBLIC, PRIVATE):
            visibility = self.dir_default_visibility
        return self.dir_public if visibility == PUBLIC else self.dir_private

    def inverse_for_file(self, permission: P) -> str:
        if permission == self.file_public:
            return PUBLIC
        if permission == self.file_private:
            return PRIVATE
        return self.file_default_visibility

    def inverse_for_dir(self, permission: P) -> str:
        if permission == self.dir_public:
            return PUBLIC
        if permission == self.dir_private:
            return PRIVATE
        return self.dir_default_visibility

    def default_for_file(self) -> P:
        return self.for_file(self.file_default_visibility)

    def default_for_dir(self) -> P:
        return self.for_dir(self.dir_default_visibility)


def _parse_mode(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 8)
    except ValueError:
        logger.warning(f"Ignoring unparseable permission value: {value!r}")
        return None


class UnixVisibilityConverter(VisibilityConverter[int]):
    """Maps visibility to unix permission bits (0o755/0o700 dirs, 0o644/0o600 files)."""

    def __init__(
        self,
        file_public: int = FileSystemConfig.UNIX_FILE_PUBLIC,
        file_private: int = FileSystemConfig.UNIX_FILE_PRIVATE,
        dir_public: int = FileSystemConfig.UNIX_DIR_PUBLIC,
        dir_private: int = FileSystemConfig.UNIX_DIR_PRIVATE,
        file_default_visibility: str = PUBLIC,
        dir_default_visibility: str = PUBLIC,
    ) -> None:
        super().__init__(file_public, file_private, dir_public, dir_private,
                         file_default_visibility, dir_default_visibility)

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "UnixVisibilityConverter":
        """
        Build a converter from an option mapping.

        Supported keys: dir_public, dir_private, file_public, file_private
        (octal strings such as "0755" or ints) and dir_default_visibility,
        file_default_visibility. Missing or unparseable values keep the default.
        """
        converter = cls()
        if not options:
            return converter
        for key in ("dir_public", "dir_private", "file_public", "file_private"):
            mode = _parse_mode(options.get(key))
            if mode is not None:
                setattr(converter, key, mode)
        if "dir_default_visibility" in options:
            converter.set_dir_default_visibility(options["dir_default_visibility"])
        if "file_default_visibility" in options:
            converter.set_file_default_visibility(options["file_default_visibility"])
        return converter


class AclVisibilityConverter(VisibilityConverter[str]):
    """Maps visibility to canned object ACLs ("public-read" / "private")."""

    def __init__(
        self,
        public_acl: str = FileSystemConfig.ACL_PUBLIC_READ,
        private_acl: str = FileSystemConfig.ACL_PRIVATE,
        file_default_visibility: str = PUBLIC,
        dir_default_visibility: str = PUBLIC,
    ) -> None:
        super().__init__(public_acl, private_acl, public_acl, private_acl,
                         file_default_visibility, dir_default_visibility)

    @staticmethod
    def acl_to_visibility(owner_id: str, grants: Iterable[Mapping[str, Any]]) -> str:
        """
        Recognize the canned ACL behind an S3-style grant list.

        Each grant is a mapping with "Permission" and "Grantee" keys, the
        grantee holding optional "ID" and "URI" entries.

        Returns:
            The canned ACL name, or "" when the grants match none of them
        """
        grants = list(grants)

        def grantee(grant: Mapping[str, Any]) -> Dict[str, Any]:
            return dict(grant.get("Grantee") or {})

        if len(grants) == 1:
            grant = grants[0]
            if not grantee(grant).get("URI") and grant.get("Permission") == FileSystemConfig.ACL_PERMISSION_FULL_CONTROL:
                return FileSystemConfig.ACL_PRIVATE
        elif len(grants) == 2:
            for grant in grants:
                uri = grantee(grant).get("URI")
                permission = grant.get("Permission")
                if uri == FileSystemConfig.ACL_PUBLIC_GRANTEE_URI and permission == FileSystemConfig.ACL_PERMISSION_READ:
                    return FileSystemConfig.ACL_PUBLIC_READ
                if uri == FileSystemConfig.ACL_AUTHENTICATED_GRANTEE_URI and permission == FileSystemConfig.ACL_PERMISSION_READ:
                    return FileSystemConfig.ACL_AUTHENTICATED_READ
                if permission == FileSystemConfig.ACL_PERMISSION_READ and grantee(grant).get("ID") == owner_id:
                    return FileSystemConfig.ACL_BUCKET_OWNER_READ
        elif len(grants) == 3:
            for grant in grants:
                if (grantee(grant).get("URI") == FileSystemConfig.ACL_PUBLIC_GRANTEE_URI
                        and grant.get("Permission") == FileSystemConfig.ACL_PERMISSION_WRITE):
                    return FileSystemConfig.ACL_PUBLIC_READ_WRITE
        return ""
