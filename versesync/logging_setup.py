"""
Logging setup for versesync.

Console logging plus an optional rotation-tolerant log file. Logging must
never break playback: file write failures are dropped.
"""

import logging
import logging.handlers
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _SafeWatchedFileHandler(logging.handlers.WatchedFileHandler):
    """WatchedFileHandler that drops records it cannot write."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            super().emit(record)
        except (IOError, OSError):
            # Logging failures degrade silently
            pass


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the versesync logger hierarchy.

    Safe to call more than once; handlers are not duplicated.

    Args:
        level: Log level name
        log_file: Optional path of a log file (WatchedFileHandler, rotation tolerant)

    Returns:
        The "versesync" package logger
    """
    root = logging.getLogger("versesync")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    if log_file:
        # Prevent duplicate handlers on repeated configuration
        if not any(isinstance(h, logging.handlers.WatchedFileHandler)
                   and getattr(h, "baseFilename", None) == os.path.abspath(log_file)
                   for h in root.handlers):
            try:
                handler = _SafeWatchedFileHandler(log_file, mode="a")
            except OSError as e:
                root.warning(f"Cannot open log file {log_file}: {e}")
            else:
                handler.setLevel(logging.DEBUG)
                handler.setFormatter(formatter)
                root.addHandler(handler)

    root.propagate = False

    # Suppress httpx INFO level logging (one line per audio fetch)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return root
