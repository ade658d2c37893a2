"""
Logging utilities for the filesystem layer.

This module configures the root logger with a size-rotated log file and a
console handler. The console handler writes to stderr so that commands
printing file content to stdout are not interleaved with log lines.
"""

import logging
import os
import sys
import codecs
from logging.handlers import RotatingFileHandler
from typing import Optional, TextIO

from Configuration.FileSystemConfig import FileSystemConfig


def _utf8_stream(stream: TextIO) -> TextIO:
    # Windows consoles default to a legacy code page
    if (getattr(stream, "encoding", None) or "utf-8").lower() != "utf-8" and hasattr(stream, "buffer"):
        return codecs.getwriter("utf-8")(stream.buffer, "strict")
    return stream


def setup_logging(
    log_dir: str,
    log_level: int = logging.INFO,
    log_file_name: str = FileSystemConfig.LOG_FILE_NAME,
    max_bytes: int = FileSystemConfig.LOG_MAX_BYTES,
    backup_count: int = FileSystemConfig.LOG_BACKUP_COUNT,
    console_stream: Optional[TextIO] = None,
) -> None:
    """
    Set up logging to a rotating file and to the console.

    Existing handlers of the root logger are replaced, so calling this twice
    does not duplicate output.

    Args:
        log_dir: The directory to store log files in
        log_level: The logging level (default: logging.INFO)
        log_file_name: The name of the log file (default: "filesystem.log")
        max_bytes: Size at which the log file is rotated (default: 10 MB)
        backup_count: Number of rotated files kept (default: 5)
        console_stream: Stream of the console handler (default: sys.stderr)
    """
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, log_file_name)

    file_handler = RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))

    console_handler = logging.StreamHandler(_utf8_stream(console_stream or sys.stderr))
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info(f"Logging configured with level {logging.getLevelName(log_level)}")
    logging.info(f"Log file: {log_file}")
