"""
Logging configuration for host applications embedding the Scoville client.

The library never installs handlers on its own. Hosts that want console and
file output call setup_logging() once at startup.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from scoville.config import LoggingSettings


def setup_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Set up logging for the scoville logger hierarchy.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a rotating log file

    Returns:
        The "scoville" logger instance
    """
    logger = logging.getLogger("scoville")
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove any existing handlers
    logger.handlers.clear()
    logger.propagate = False

    console_formatter = logging.Formatter('%(message)s')

    # Console handler - only INFO and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # File handler - rotating log file (max 10MB, keep 5 backups)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Quiet noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.debug(f"Logging initialized - log file: {log_file or '(none)'}")

    return logger


def setup_logging_from_settings(settings: "LoggingSettings") -> logging.Logger:
    """Set up logging from the logging section of ScovilleSettings."""
    log_file = Path(settings.file) if settings.file else None
    return setup_logging(settings.level, log_file)
