"""
Structured JSON logging for vecstore.

Every library module obtains its logger through :func:`get_logger`. Records
are written to stderr as one JSON object per line so they can be shipped as-is
by whatever embeds the database.
"""

import json
import logging
import os
import sys
from typing import Any

LOG_LEVEL_ENV = "VECSTORE_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING


class JSONFormatter(logging.Formatter):
    """
    Formatter that renders log records as JSON.

    Fields:
    - timestamp: ISO 8601 timestamp
    - level: Log level name
    - logger: Logger name
    - message: Rendered message
    - context: Structured context passed via ``extra={"context": {...}}``
    - exception: Formatted traceback, when present
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as JSON.

        Args:
            record: The log record to format

        Returns:
            JSON-formatted log line
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        context = getattr(record, "context", None)
        if context:
            log_data["context"] = context

        return json.dumps(log_data, ensure_ascii=False, default=str)


def resolve_level(value: str | None) -> int:
    """Translate a level name such as ``"debug"`` into a logging constant.

    Unknown or empty names fall back to WARNING.
    """
    if not value:
        return DEFAULT_LEVEL
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else DEFAULT_LEVEL


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get or create a structured JSON logger.

    Args:
        name: Logger name (typically __name__)
        level: Explicit level; defaults to ``$VECSTORE_LOG_LEVEL`` or WARNING

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Loggers are process-wide singletons; configure once.
    if logger.handlers:
        return logger

    if level is None:
        level = resolve_level(os.getenv(LOG_LEVEL_ENV))

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))

    logger.addHandler(handler)
    logger.propagate = False

    return logger
