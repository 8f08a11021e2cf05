"""
Categorized logger for the Scoville client.

Every dispatcher attempt is observed here. This is a side channel only: nothing
in the client branches on what the logger does.
"""

import logging
from enum import Enum
from typing import Optional


class LogCategory(str, Enum):
    """Subsystem a log line belongs to."""

    CONFIGURATION = "configuration"
    NETWORK = "network"
    ANALYTICS = "analytics"
    DEVICE = "device"
    LIFECYCLE = "lifecycle"
    NOTIFICATIONS = "notifications"
    STORAGE = "storage"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ScovilleLogger:
    """Append-only sink, categorized by subsystem and leveled log/success/warning/error."""

    SUCCESS_MARK = "✓"
    WARNING_MARK = "⚠️"
    ERROR_MARK = "✗"

    def __init__(self, name: str = "scoville"):
        self.name = name
        self._loggers: dict[LogCategory, logging.Logger] = {}

    def _logger(self, category: LogCategory) -> logging.Logger:
        logger = self._loggers.get(category)
        if logger is None:
            logger = logging.getLogger(f"{self.name}.{category.value}")
            self._loggers[category] = logger
        return logger

    def _emit(self, level: int, category: LogCategory, message: str, mark: str = "") -> None:
        prefix = f"[Scoville][{category.label}]"
        if mark:
            prefix = f"{prefix} {mark}"
        self._logger(category).log(level, "%s %s", prefix, message)

    def log(self, category: LogCategory, message: str) -> None:
        self._emit(logging.INFO, category, message)

    def success(self, category: LogCategory, message: str) -> None:
        self._emit(logging.INFO, category, message, self.SUCCESS_MARK)

    def warning(self, category: LogCategory, message: str) -> None:
        self._emit(logging.WARNING, category, message, self.WARNING_MARK)

    def error(self, category: LogCategory, message: str) -> None:
        self._emit(logging.ERROR, category, message, self.ERROR_MARK)


# Global instance
_logger: Optional[ScovilleLogger] = None


def get_logger() -> ScovilleLogger:
    """Get or create the shared ScovilleLogger instance."""
    global _logger
    if _logger is None:
        _logger = ScovilleLogger()
    return _logger
