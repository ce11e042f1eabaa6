"""SQLAlchemy TypeDecorator for transparent field-level encryption of Text columns."""

import logging
from typing import Optional

from sqlalchemy import Text, TypeDecorator

from ..observability.logging import log_context
from .encryption import ColumnEncryptionProvider
from .exceptions import ColumnEncryptionError

logger = logging.getLogger(__name__)


class EncryptedText(TypeDecorator):
    """Transparently encrypts on write and decrypts on read.

    - ``process_bind_param``: encrypts plaintext before INSERT/UPDATE.
    - ``process_result_value``: decrypts ciphertext after SELECT.
    - Codec errors propagate; there is no plaintext fallback.

    The provider is passed in explicitly so each column can be wired to the
    codec instance the application built at startup.
    """

    impl = Text
    cache_ok = True

    def __init__(self, provider: ColumnEncryptionProvider, label: Optional[str] = None):
        super().__init__()
        self.provider = provider
        self.label = label

    def _log_failure(self, action: str, error: ColumnEncryptionError) -> None:
        table, _, column = (self.label or "").rpartition(".")
        with log_context(table=table or None, column=column or None):
            logger.error("Failed to %s column value: %s", action, type(error).__name__)

    def process_bind_param(self, value: Optional[str], dialect) -> Optional[str]:
        if value is None:
            return None
        try:
            return self.provider.encrypt(value)
        except ColumnEncryptionError as e:
            self._log_failure("encrypt", e)
            raise

    def process_result_value(self, value: Optional[str], dialect) -> Optional[str]:
        if value is None:
            return None
        try:
            return self.provider.decrypt(value)
        except ColumnEncryptionError as e:
            self._log_failure("decrypt", e)
            raise