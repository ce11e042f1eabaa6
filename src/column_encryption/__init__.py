"""Transparent AES-GCM encryption for string columns."""

from .security import (
    AesGcmColumnEncryptionProvider,
    ColumnEncryptionError,
    ColumnEncryptionProvider,
    EncryptedText,
    provider_from_settings,
)
from .database import EncryptedColumns, use_column_encryption

__version__ = "0.1.0"

__all__ = [
    "AesGcmColumnEncryptionProvider",
    "ColumnEncryptionError",
    "ColumnEncryptionProvider",
    "EncryptedColumns",
    "EncryptedText",
    "provider_from_settings",
    "use_column_encryption",
]
