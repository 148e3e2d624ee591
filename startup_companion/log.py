"""Structured ``key=value`` logging for StartUP Companion."""

import logging
import sys
from typing import Any

from .config import get_settings


class StructuredFormatter(logging.Formatter):
    """Render a record as ``key=value`` pairs followed by its context fields."""

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields.update(getattr(record, "context", {}))

        line = " ".join(f"{key}={value}" for key, value in fields.items())
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def get_logger(name: str) -> logging.Logger:
    """Return ``name``'s logger, attaching the stdout handler on first use."""

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(getattr(logging, get_settings().log_level, logging.INFO))
    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **context: Any) -> None:
    """Log ``msg`` with extra fields such as ``session_id`` or ``category``."""

    logger.log(level, msg, extra={"context": context})
