"""
MIME type detection.

Types are looked up from the file extension first; when the extension is
unknown, a sample of the content decides between text and binary.
"""

import mimetypes
from typing import Optional

from Configuration.FileSystemConfig import FileSystemConfig


class MimeTypeDetector:
    """Detects MIME types from paths and content samples."""

    def detect_from_path(self, path: str) -> str:
        mime_type, _ = mimetypes.guess_type(path, strict=False)
        return mime_type or FileSystemConfig.DEFAULT_MIME_TYPE

    def detect_from_content(self, sample: Optional[bytes]) -> str:
        """Classify a content sample as text/plain or application/octet-stream."""
        if not sample:
            return FileSystemConfig.DEFAULT_MIME_TYPE
        sample = sample[:FileSystemConfig.MIME_SAMPLE_SIZE]
        if b"\x00" in sample:
            return FileSystemConfig.DEFAULT_MIME_TYPE
        try:
            sample.decode("utf-8")
        except UnicodeDecodeError as e:
            # a multi-byte character cut by the sample boundary is still text
            if e.start < len(sample) - 3:
                return FileSystemConfig.DEFAULT_MIME_TYPE
        return FileSystemConfig.TEXT_MIME_TYPE

    def detect(self, path: str, sample: Optional[bytes]) -> str:
        """
        Detect the MIME type of a file.

        Args:
            path: The file path; its extension is consulted first
            sample: The leading bytes of the file content

        Returns:
            The MIME type, "application/octet-stream" when nothing matches
        """
        mime_type = self.detect_from_path(path)
        if mime_type != FileSystemConfig.DEFAULT_MIME_TYPE:
            return mime_type
        return self.detect_from_content(sample)
