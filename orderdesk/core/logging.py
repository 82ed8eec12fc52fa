"""
orderdesk/core/logging.py

Purpose: Logging configuration

- JSON lines in production, colored one-liners in development
- Request and session context (method, path, status, resource, user) on records
- LogContext for tagging every record inside a synchronous block
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from orderdesk.core.config import Settings, settings

# Record attributes copied into output when a call passes them via extra={...}
CONTEXT_FIELDS = ("user_id", "role", "resource", "method", "path", "status")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    `[12:00:01] WARNING  orderdesk.services.api_client: GET /api/orders failed [method=GET, status=500]`
    """

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelname, _RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        message = f"{color}[{timestamp}] {record.levelname:<8}{_RESET} {record.name}: {record.getMessage()}"

        context = _context(record)
        if context:
            message += " [" + ", ".join(f"{key}={value}" for key, value in context.items()) + "]"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def setup_logging(config: Optional[Settings] = None) -> logging.Logger:
    """
    Installs a single stdout handler on the root logger.
    Uses JSON format in production, human-readable in development.
    """
    config = config or settings
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if config.is_production else DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger("orderdesk")
    logger.info(f"Logging configured ({config.ENVIRONMENT}, level {config.LOG_LEVEL})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Returns a logger under the `orderdesk` namespace."""
    if name.startswith("orderdesk"):
        return logging.getLogger(name)
    return logging.getLogger(f"orderdesk.{name}")


class LogContext:
    """
    Tags every record created inside the block with the given fields.

    Swaps the process-wide record factory, so only wrap synchronous code.

    Usage:
        with LogContext(path="/orders", role="Admin"):
            logger.info("Resolving route")
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._old_factory = None

    def __enter__(self):
        self._old_factory = logging.getLogRecordFactory()
        old_factory = self._old_factory
        context = self.context

        def record_factory(*args, **kwargs):
            record = old_factory(*args, **kwargs)
            for key, value in context.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self._old_factory)
