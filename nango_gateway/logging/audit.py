"""Structured JSON logging for the gateway.

Logs go to stdout as JSON lines (12-factor/cloud-native pattern), or to
stderr for the CLI so that stdout carries only command output.
Optional file output via AUDIT_LOG_FILE env var.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import TextIO

LOGGER_NAME = "nango_gateway.audit"

# Request-scoped context for correlating log entries
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_LEVEL_ALIASES = {"warn": "WARNING"}


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(""),
        }
        # Merge any extra fields passed via `extra={}` kwarg
        if hasattr(record, "audit_data"):
            log_entry.update(record.audit_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def level_name(log_level: str) -> str:
    """Map a configured level ("debug", "warn", ...) to a logging level name."""
    name = log_level.lower()
    return _LEVEL_ALIASES.get(name, name.upper())


def setup_logging(log_level: str = "info", log_file: str = "", stream: TextIO | None = None) -> None:
    """Configure the audit logger with JSON output."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level_name(log_level), logging.INFO))
    logger.handlers.clear()

    formatter = JSONFormatter()

    stream_handler = logging.StreamHandler(stream or sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    # Optional file output
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger (avoids duplicate output)
    logger.propagate = False


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


class RequestTimer:
    """Context manager to measure request latency."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
