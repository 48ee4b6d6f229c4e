"""
Structured JSON logging configuration.

Sets up application-wide logging with one JSON object per line on stdout:
- timestamp, level, message, logger
- request fields (path, method, status_code, latency_ms, request_id)
- migration fields (migration tag, statement preview)
- any other field passed through ``extra``
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "asctime",
})

STATEMENT_PREVIEW_CHARS = 80

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%dT%H:%M:%S"


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Example output:
        {"timestamp": "2026-10-16T10:30:00.123456+00:00", "level": "INFO",
         "message": "Registered migration", "logger": "galerie.migrations.preflight",
         "migration": "0003_requests"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_data or key.startswith("_"):
                continue
            if value is not None:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """
    Route every log record to a single stdout handler.

    Called once per process, from the application lifespan or the
    ``galerie-migrate`` entry point. Existing root handlers are dropped so a
    second call does not duplicate output.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: One JSON object per line (True) or plain text (False)
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT, TEXT_DATEFMT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    for noisy in ("asyncio", "aiosqlite", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Example:
        logger = get_logger(__name__)
        logger.info("Migration registered", extra={"migration": "0001_users"})
    """
    return logging.getLogger(name)


def preview(statement: str, limit: int = STATEMENT_PREVIEW_CHARS) -> str:
    """Single-line, truncated rendering of a SQL statement for log output."""
    flat = " ".join(statement.split())
    if len(flat) <= limit:
        return flat
    return flat[:limit] + "…"


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    migration: Optional[str] = None,
    request_id: Optional[str] = None,
    **fields: Any,
) -> None:
    """
    Log ``message`` at ``level`` with the given fields attached as extras.

    Fields set to None are left out of the record.

    Example:
        log_with_context(
            logger,
            "warning",
            "Migration file not found",
            migration="0004_picto_requests",
        )
    """
    fields.update(migration=migration, request_id=request_id)
    extra = {key: value for key, value in fields.items() if value is not None}
    getattr(logger, level.lower())(message, extra=extra)
