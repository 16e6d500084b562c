"""Coloured logging configuration for the cloud reporter.

This module provides a pre-configured logger with coloured console output,
shared by the API client, the provisioning steps and the reporting scripts.
"""

from __future__ import annotations

import logging
import re
from typing import ClassVar

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


class LogMessageFilter(logging.Filter):
    """Strip control characters that remote error payloads sometimes carry."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Clean the message and any cached traceback text.

        Returns:
            Always True, records are never dropped.
        """
        if isinstance(record.msg, str):
            record.msg = _CONTROL_CHARS.sub("", record.msg)
        if record.exc_text:
            record.exc_text = _CONTROL_CHARS.sub("", record.exc_text)
        return True


class ColoredFormatter(logging.Formatter):
    """Formatter that colours each line by log level."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[90m",  # Grey
        "INFO": "\033[92m",  # Green
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[95m",  # Magenta
    }
    RESET: ClassVar[str] = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format the record and wrap it in the colour for its level.

        Returns:
            The coloured log line.
        """
        formatted = super().format(record)
        colour = self.COLORS.get(record.levelname, "")
        return f"{colour}{formatted}{self.RESET}" if colour else formatted


def set_log_level(level: int | str) -> None:
    """Change the level of the shared logger and its console handler."""
    logger.setLevel(level)
    console_handler.setLevel(level)


logger = logging.getLogger("cloud_reporter")
logger.setLevel(logging.INFO)

console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(ColoredFormatter(LOG_FORMAT))
console_handler.addFilter(LogMessageFilter())

logger.addHandler(console_handler)

# Prevent duplicate logs from root logger
logger.propagate = False
