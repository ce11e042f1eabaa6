"""Logging configuration for column encryption.

Provides JSON or human-readable output with contextual fields
(table, column) carried via contextvars.
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Context variables for per-column logging fields
_table: ContextVar[Optional[str]] = ContextVar("table", default=None)
_column: ContextVar[Optional[str]] = ContextVar("column", default=None)


@contextmanager
def log_context(table: Optional[str] = None, column: Optional[str] = None) -> Iterator[None]:
    """Attach table/column fields to log records emitted inside the block."""
    table_token = _table.set(table)
    column_token = _column.set(column)
    try:
        yield
    finally:
        _column.reset(column_token)
        _table.reset(table_token)


def _context_fields() -> dict:
    fields = {}
    table = _table.get()
    if table:
        fields["table"] = table
    column = _column.get()
    if column:
        fields["column"] = column
    return fields


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter with context fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_context_fields())

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable log formatter with context fields for development."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"[{self.formatTime(record, self.datefmt)}]",
            f"{record.levelname:8s}",
            f"{record.name}:",
            record.getMessage(),
        ]

        ctx = _context_fields()
        if ctx:
            parts.append(f"[{', '.join(f'{k}={v}' for k, v in ctx.items())}]")

        msg = " ".join(parts)

        if record.exc_info and record.exc_info[1]:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


def configure_logging(environment: str = "development", log_level: str = "INFO"):
    """Configure root logging.

    Args:
        environment: "production" for JSON output, anything else for human-readable.
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter(datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
