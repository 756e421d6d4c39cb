"""
Logging setup for ByteCourier.

Console logging always; an optional log file that tolerates external rotation.
"""

import logging
import logging.handlers
import os
from typing import Optional

from bytecourier.config import CourierConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class SafeWatchedFileHandler(logging.handlers.WatchedFileHandler):
    """WatchedFileHandler whose write failures never reach the caller."""

    def emit(self, record):
        try:
            super().emit(record)
        except OSError:
            # A full or vanished log disk must not take the server down
            pass


def configure_logging(config: CourierConfig) -> Optional[logging.Handler]:
    """
    Configure root logging from config.

    Args:
        config: Loaded configuration

    Returns:
        The file handler that was attached, or None when no log file is configured
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # Suppress per-request INFO lines from the HTTP client stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if not config.log_file:
        return None

    root = logging.getLogger()
    # Prevent duplicate handlers when configured twice
    for existing in root.handlers:
        if isinstance(existing, SafeWatchedFileHandler) and existing.baseFilename == os.path.abspath(config.log_file):
            return existing

    try:
        handler = SafeWatchedFileHandler(config.log_file, mode="a")
    except OSError as e:
        logging.getLogger(__name__).warning(f"Cannot open log file {config.log_file}: {e}")
        return None

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return handler
