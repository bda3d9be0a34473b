"""Logging for the shiorictl CLI.

stdout is reserved for the JSON result of a command, so log output goes to
stderr and/or a log file.  Every handler carries ``RedactingFilter`` so a
bearer token or a login body never reaches a log line.
"""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import Config, LoggingConfig

LOGGER_NAME = "shiorictl"
CONSOLE_FORMAT = "%(levelname)-5s [%(name)-22s] %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-5s [%(name)-22s] %(message)s"

_SECRET_PATTERNS = (
    (re.compile(r"(Bearer\s+)\S+"), r"\1***"),
    (re.compile(r'("password"\s*:\s*")(?:[^"\\]|\\.)*(")'), r"\1***\2"),
)

_initialized = False


class RedactingFilter(logging.Filter):
    """Mask bearer tokens and JSON passwords in the formatted message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern, replacement in _SECRET_PATTERNS:
            redacted = pattern.sub(replacement, redacted)
        if redacted != message:
            record.msg, record.args = redacted, None
        return True


def _file_handler(log_config: LoggingConfig) -> logging.Handler:
    path = Path(log_config.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    if log_config.rotate:
        return RotatingFileHandler(
            path,
            maxBytes=log_config.max_size_mb * 1024 * 1024,
            backupCount=log_config.backup_count,
        )
    return logging.FileHandler(path)


def setup_logging(config: Config, verbose: bool = False) -> None:
    """
    Attach handlers to the ``shiorictl`` logger. Only the first call has effect.

    Args:
        config: Application configuration with logging settings
        verbose: If True, override config level to DEBUG
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    log_config = config.logging
    level = logging.DEBUG if verbose else getattr(logging, log_config.level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handlers: list[tuple[logging.Handler, logging.Formatter]] = []
    if log_config.output in ("console", "both"):
        handlers.append((logging.StreamHandler(sys.stderr), logging.Formatter(CONSOLE_FORMAT)))
    if log_config.output in ("file", "both") and log_config.file:
        handlers.append((
            _file_handler(log_config),
            logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"),
        ))

    for handler, formatter in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())
        logger.addHandler(handler)

    # httpx logs every request URL at INFO
    for noisy_logger in ("httpx", "httpcore"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def reset_logging() -> None:
    """Reset logging state for testing purposes."""
    global _initialized
    _initialized = False
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
