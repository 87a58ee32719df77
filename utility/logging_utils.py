# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Updated: 2026-10-08
# Description: logging_utils.py
# -----------------------------------------------------------------------------
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog

BASE_LOGGER_NAME = "mp_knowledge"

_TRUTHY = ("1", "true", "yes", "y", "on")

CONSOLE_FORMAT = (
    "%(log_color)s%(asctime)s %(levelname)-8s "
    "%(name)s:%(lineno)d%(reset)s | %(message_log_color)s%(message)s"
)
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}
MESSAGE_COLORS = {
    "WARNING": "yellow",
    "ERROR": "light_red",
    "CRITICAL": "red",
}


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            fmt=CONSOLE_FORMAT,
            datefmt=DATE_FORMAT,
            log_colors=LEVEL_COLORS,
            secondary_log_colors={"message": MESSAGE_COLORS},
        )
    )
    return handler


def _file_handler() -> logging.Handler:
    """Size-rotated file handler; location and limits come from MP_LOG_* env vars."""
    path = Path(os.getenv("MP_LOG_FILE", "./logs/mp_knowledge.log"))
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=int(os.getenv("MP_LOG_MAX_BYTES", str(5 * 1024 * 1024))),
        backupCount=int(os.getenv("MP_LOG_BACKUP_COUNT", "5")),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _create_logger(full_name: str) -> logging.Logger:
    """
    Configure a logger once: colour console output, optional rotating file
    (MP_LOG_TO_FILE=1), level from MP_LOG_LEVEL.

    Propagation is off unless MP_LOG_PROPAGATE=1, so records are not
    printed twice when the host application also configures the root logger.
    """
    logger = logging.getLogger(full_name)
    if logger.handlers:
        return logger

    logger.addHandler(_console_handler())
    if _flag("MP_LOG_TO_FILE"):
        logger.addHandler(_file_handler())

    level_name = os.getenv("MP_LOG_LEVEL", "INFO").strip().upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    logger.propagate = _flag("MP_LOG_PROPAGATE")

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Generic logger that does not include a class name.
    """
    full_name = f"{BASE_LOGGER_NAME}.{name}" if name else BASE_LOGGER_NAME
    return _create_logger(full_name)


def get_class_logger(cls: type) -> logging.Logger:
    """
    Returns a logger whose name includes module + class, e.g.:

      mp_knowledge.services.MPSearchService.MPSearchService
      mp_knowledge.embedding.MPEmbedder.MPEmbedder
    """
    module = getattr(cls, "__module__", "unknown_module")
    classname = getattr(cls, "__name__", "UnknownClass")

    return _create_logger(f"{BASE_LOGGER_NAME}.{module}.{classname}")
