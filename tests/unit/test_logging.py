"""Tests for logging configuration and column context fields."""

import json
import logging
import os
import sys

import pytest

from column_encryption.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    log_context,
)
from column_encryption.security.encryption import AesGcmColumnEncryptionProvider
from column_encryption.security.exceptions import AuthenticationFailedError
from column_encryption.security.types import EncryptedText


def _record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="column_encryption.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


class _ListHandler(logging.Handler):
    def __init__(self, formatter: logging.Formatter):
        super().__init__()
        self.setFormatter(formatter)
        self.lines = []

    def emit(self, record):
        self.lines.append(self.format(record))


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestFormatters:
    """Formatter output with and without context."""

    def test_structured_without_context(self):
        entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "column_encryption.test"
        assert entry["message"] == "hello"
        assert "table" not in entry
        assert "column" not in entry

    def test_structured_with_context(self):
        with log_context(table="customers", column="email"):
            entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["table"] == "customers"
        assert entry["column"] == "email"

    def test_human_readable_with_context(self):
        with log_context(table="customers", column="email"):
            line = HumanReadableFormatter().format(_record())
        assert "WARNING" in line
        assert "hello" in line
        assert "[table=customers, column=email]" in line

    def test_context_reset_on_exit(self):
        with log_context(table="customers", column="email"):
            pass
        assert "table=" not in HumanReadableFormatter().format(_record())

    def test_context_reset_on_error(self):
        with pytest.raises(RuntimeError):
            with log_context(table="customers"):
                raise RuntimeError("boom")
        assert "table" not in json.loads(StructuredFormatter().format(_record()))

    def test_exception_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(StructuredFormatter().format(record))
        assert "ValueError: bad" in entry["exception"]


class TestConfigureLogging:
    """Root logger setup."""

    def test_production_uses_json(self, restore_root_logger):
        configure_logging(environment="production", log_level="warning")
        root = restore_root_logger
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_development_uses_human_readable(self, restore_root_logger):
        configure_logging(environment="development", log_level="DEBUG")
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, HumanReadableFormatter)

    def test_unknown_level_defaults_to_info(self, restore_root_logger):
        configure_logging(log_level="chatty")
        assert restore_root_logger.level == logging.INFO


class TestColumnFailureLogging:
    """EncryptedText tags failures with the table and column."""

    def test_decrypt_failure_carries_column(self):
        handler = _ListHandler(StructuredFormatter())
        types_logger = logging.getLogger("column_encryption.security.types")
        types_logger.addHandler(handler)
        try:
            stored = AesGcmColumnEncryptionProvider(os.urandom(32)).encrypt("secret")
            column_type = EncryptedText(
                AesGcmColumnEncryptionProvider(os.urandom(32)), label="customers.email"
            )
            with pytest.raises(AuthenticationFailedError):
                column_type.process_result_value(stored, None)
        finally:
            types_logger.removeHandler(handler)

        entry = json.loads(handler.lines[-1])
        assert entry["level"] == "ERROR"
        assert entry["table"] == "customers"
        assert entry["column"] == "email"
        assert "secret" not in handler.lines[-1]
