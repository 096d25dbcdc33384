"""Structured logging configuration.

Provides JSON-formatted logs with:
- Category detection (protocol, rooms, http, system)
- room_id / participant_id context when a log call passes them via ``extra``
- Structured JSON output for log aggregation
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typing import TextIO


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    # Map logger names to categories
    CATEGORY_MAP = {
        "canvas_sync.handlers": "protocol",
        "canvas_sync.session": "protocol",
        "canvas_sync.connections": "protocol",
        "canvas_sync.registry": "rooms",
        "canvas_sync.operation_log": "rooms",
        "canvas_sync.main": "http",
        "canvas_sync.routes": "http",
        "canvas_sync.shutdown": "system",
        "canvas_sync.config": "system",
        "uvicorn": "http",
        "fastapi": "http",
    }

    # Standard LogRecord fields to exclude from 'extra'
    STANDARD_FIELDS = {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
        # Context fields surfaced at the top level
        "room_id",
        "participant_id",
    }

    def _get_category(self, logger_name: str) -> str:
        for prefix, cat in self.CATEGORY_MAP.items():
            if logger_name.startswith(prefix):
                return cat
        return "system"

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "category": self._get_category(record.name),
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in ("room_id", "participant_id"):
            value = getattr(record, key, None)
            if value is not None:
                log_record[key] = value

        extra = {}
        for key, value in record.__dict__.items():
            if key not in self.STANDARD_FIELDS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    extra[key] = value
                except (TypeError, ValueError):
                    extra[key] = str(value)
        if extra:
            log_record["extra"] = extra

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


class ErrorFilter(logging.Filter):
    """Only lets ERROR and CRITICAL through."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def configure_logging(
    *,
    json_format: bool = True,
    log_level: int = logging.INFO,
    log_file: str | None = None,
    error_log_file: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure application logging.

    Args:
        json_format: Use JSON formatting (True for production, False for dev)
        log_level: Minimum log level
        log_file: Path to main log file (None for stream only)
        error_log_file: Path to error-only log file (None to skip)
        stream: Stream to write to (default: sys.stderr)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter: logging.Formatter
    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)5s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    stream_handler = logging.StreamHandler(stream or sys.stderr)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=100 * 1024 * 1024,  # 100MB
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if error_log_file:
        error_path = Path(error_log_file)
        error_path.parent.mkdir(parents=True, exist_ok=True)
        error_handler = RotatingFileHandler(
            error_log_file,
            maxBytes=100 * 1024 * 1024,  # 100MB
            backupCount=14,
            encoding="utf-8",
        )
        error_handler.setFormatter(formatter)
        error_handler.addFilter(ErrorFilter())
        root_logger.addHandler(error_handler)

    # Silence noisy loggers
    for name in ("watchfiles", "httpcore", "httpx", "websockets"):
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_production_logging(log_file: str, error_log_file: str) -> None:
    """JSON logs to stderr plus rotating files."""
    configure_logging(
        json_format=True,
        log_level=logging.INFO,
        log_file=log_file,
        error_log_file=error_log_file,
    )


def setup_dev_logging(json_format: bool = False) -> None:
    """Human-readable logs to stderr unless JSON is requested."""
    configure_logging(json_format=json_format, log_level=logging.INFO)
