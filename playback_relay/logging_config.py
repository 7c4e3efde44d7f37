"""Structured logging for the relay.

JSON lines go to logs/relay.log (rotated at 10MB, 5 backups) and a plain
text copy goes to stdout. Every JSON record carries `service` so relay
logs can be told apart when shipped alongside others.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger.json import JsonFormatter

DEFAULT_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_FILE_NAME = "relay.log"
SERVICE_NAME = "playback-relay"

# Libraries that log every request or frame at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "websockets")


def _build_file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(
        JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
            static_fields={"service": SERVICE_NAME},
        )
    )
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Configure the root logger with a JSON file handler and a console handler.

    Calling it again replaces the handlers from the previous call.

    Args:
        log_level: Console and root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for relay.log, defaults to ./logs next to the package

    Returns:
        Configured root logger
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    root_logger.addHandler(_build_file_handler(log_dir or DEFAULT_LOG_DIR))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for `name`."""
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **extra_fields: Any,
) -> None:
    """Log `message` with structured fields attached to the record.

    The fields become top-level keys in the JSON file log. File and line
    point at the caller, not at this helper.

    Args:
        logger: Logger instance
        level: debug, info, warning, error or critical
        message: Human-readable message
        **extra_fields: Structured context, conventionally including event_type
    """
    logger.log(logging.getLevelName(level.upper()), message, extra=extra_fields, stacklevel=2)
