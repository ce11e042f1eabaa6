"""Database integration for encrypted columns."""

from .columns import EncryptedColumns, use_column_encryption

__all__ = ["EncryptedColumns", "use_column_encryption"]
