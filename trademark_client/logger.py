"""
Structured logging setup for the trademark opposition client.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

# Configure logging level from environment variables with default fallback
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
DEBUG = os.environ.get("DEBUG", "false").lower() == "true"

if DEBUG:
    LOG_LEVEL = "DEBUG"

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """
    Formatter that renders each record as one JSON object per line.

    Fields passed through `extra` (endpoint, status_code, run_id, stage, ...)
    are copied into the object next to the standard ones.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_record[key] = value

        return json.dumps(log_record, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Creates and returns a logger with the specified name,
    configured for structured logging with proper handlers.

    Args:
        name: The name of the logger, typically __name__.

    Returns:
        A configured logger instance.
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers if they already exist
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    return logger


def with_context(context: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Dict[str, Any]:
    """
    Build the `extra` mapping for a log call.

    Args:
        context: Optional dictionary with additional context.
        **kwargs: Additional key-value pairs to include in the log.

    Returns:
        A dict suitable for the `extra` argument of a logging call.
    """
    if context:
        kwargs.update(context)
    return {key: value for key, value in kwargs.items() if value is not None}
