"""
Filesystem constants shared by every adapter.

This module contains the visibility labels, permission defaults, routing
separator and MIME defaults used throughout the filesystem layer.
"""

class FileSystemConfig:
    """Constants used by the filesystem adapters and the manager."""

    # --- Visibility labels ---
    VISIBILITY_PUBLIC: str = "public"
    """Label for entries readable by everyone."""
    VISIBILITY_PRIVATE: str = "private"
    """Label for entries readable by the owner only."""
    DEFAULT_VISIBILITY: str = "public"
    """Visibility applied when neither the operation nor the adapter specifies one."""

    # --- Routing ---
    SCHEME_SEPARATOR: str = "://"
    """Separator between the filesystem name and the relative path in a logical path."""

    # --- Unix permissions ---
    UNIX_DIR_PUBLIC: int = 0o755
    UNIX_DIR_PRIVATE: int = 0o700
    UNIX_FILE_PUBLIC: int = 0o644
    UNIX_FILE_PRIVATE: int = 0o600

    # --- Canned ACLs ---
    ACL_PUBLIC_READ: str = "public-read"
    ACL_PRIVATE: str = "private"
    ACL_AUTHENTICATED_READ: str = "authenticated-read"
    ACL_BUCKET_OWNER_READ: str = "bucket-owner-read"
    ACL_PUBLIC_READ_WRITE: str = "public-read-write"
    ACL_PUBLIC_GRANTEE_URI: str = "http://acs.amazonaws.com/groups/global/AllUsers"
    ACL_AUTHENTICATED_GRANTEE_URI: str = "http://acs.amazonaws.com/groups/global/AuthenticatedUsers"
    ACL_PERMISSION_READ: str = "READ"
    ACL_PERMISSION_WRITE: str = "WRITE"
    ACL_PERMISSION_FULL_CONTROL: str = "FULL_CONTROL"

    # --- MIME detection ---
    DEFAULT_MIME_TYPE: str = "application/octet-stream"
    """Returned when neither the extension nor the content identifies the type."""
    TEXT_MIME_TYPE: str = "text/plain"
    MIME_SAMPLE_SIZE: int = 512
    """Number of leading bytes inspected when sniffing content."""

    # --- Logging ---
    LOG_FILE_NAME: str = "filesystem.log"
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    """Size at which the log file is rotated."""
    LOG_BACKUP_COUNT: int = 5
