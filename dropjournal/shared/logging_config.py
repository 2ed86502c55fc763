"""
Structured logging configuration for the journal service.

Usage:
    from dropjournal.shared.logging_config import setup_logging

    # At application startup:
    setup_logging(service_name="drop-journal-service")

    # In modules:
    logger = logging.getLogger("DropJournal.Analysis")
    logger.info("Analysis created", extra={"owner_id": 42, "entry_count": 7})

Production output is one JSON object per line:
    {"timestamp": "...", "level": "INFO", "logger": "DropJournal.Analysis",
     "message": "Analysis created", "service": "drop-journal-service",
     "correlation_id": "1f2e3d4c", "owner_id": 42, "entry_count": 7}
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from dropjournal.shared.correlation import get_correlation_id

_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
}


def _extra_fields(record: logging.LogRecord) -> dict:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class CorrelationIdFilter(logging.Filter):
    """Inject the current correlation_id into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON."""

    def __init__(self, service_name: str = "drop-journal"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id and correlation_id != "-":
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record).items():
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        return json.dumps(log_entry)


class HumanReadableFormatter(logging.Formatter):
    """Formatter for local development, correlation ID up front."""

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", "-")
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        prefix = f"{timestamp} [{record.levelname}] [{correlation_id}]"

        extras = _extra_fields(record)
        suffix = " | " + ", ".join(f"{k}={v}" for k, v in extras.items()) if extras else ""

        formatted = f"{prefix} {record.name}: {record.getMessage()}{suffix}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def setup_logging(
    service_name: str,
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        service_name: Name of the service stamped on every JSON record
        level: Log level name. Defaults to LOG_LEVEL or INFO.
        json_output: JSON lines when True, human-readable when False.
                     Defaults to JSON unless ENVIRONMENT=development.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, level, logging.INFO)

    if json_output is None:
        json_output = os.getenv("ENVIRONMENT", "production").lower() != "development"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter(service_name=service_name) if json_output else HumanReadableFormatter())
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    for logger_name in ("httpx", "httpcore", "hpack", "google.auth", "anthropic", "openai"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(f"{service_name}.startup").info(
        "Logging configured",
        extra={
            "log_level": level,
            "json_output": json_output,
            "environment": os.getenv("ENVIRONMENT", "production"),
        },
    )
