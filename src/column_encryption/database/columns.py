"""Explicit registration of encrypted columns.

Columns are named at startup instead of being discovered from model
annotations, then resolved against the SQLAlchemy metadata::

    EncryptedColumns(provider).register("customers", "email").apply(Base.metadata)

``apply`` must run before any statement touching the registered tables is
compiled; afterwards the bind/result processors already carry the old type.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import Column, Enum, MetaData, String

from ..security.encryption import ColumnEncryptionProvider
from ..security.exceptions import ColumnRegistrationError
from ..security.types import EncryptedText

logger = logging.getLogger(__name__)


class EncryptedColumns:
    """Builder collecting ``table.column`` pairs to encrypt with one provider."""

    def __init__(self, provider: ColumnEncryptionProvider):
        if provider is None:
            raise ValueError("provider is required")
        self.provider = provider
        self._columns: List[Tuple[str, str]] = []

    @property
    def columns(self) -> List[str]:
        return [f"{table}.{column}" for table, column in self._columns]

    def register(self, table: str, column: Optional[str] = None) -> "EncryptedColumns":
        """Mark a column as encrypted.

        Accepts either ``register("customers", "email")`` or
        ``register("customers.email")``. Schema-qualified table names keep
        their schema prefix (``"billing.invoices.note"``).
        """
        if column is None:
            dotted = table
            table, sep, column = dotted.rpartition(".")
            if not sep or not table or not column:
                raise ColumnRegistrationError(
                    f"Expected 'table.column', got {dotted!r}", table=dotted
                )

        entry = (table, column)
        if entry not in self._columns:
            self._columns.append(entry)
        return self

    def _resolve(self, metadata: MetaData, table_name: str, column_name: str) -> Column:
        table = metadata.tables.get(table_name)
        if table is None:
            raise ColumnRegistrationError(
                f"Unknown table {table_name!r}", table=table_name, column=column_name
            )

        column = table.columns.get(column_name)
        if column is None:
            raise ColumnRegistrationError(
                f"Table {table_name!r} has no column {column_name!r}",
                table=table_name,
                column=column_name,
            )

        if column.primary_key:
            raise ColumnRegistrationError(
                f"Primary key column {table_name}.{column_name} cannot be encrypted",
                table=table_name,
                column=column_name,
            )
        if column.foreign_keys:
            raise ColumnRegistrationError(
                f"Foreign key column {table_name}.{column_name} cannot be encrypted",
                table=table_name,
                column=column_name,
            )

        if isinstance(column.type, EncryptedText):
            if column.type.provider is not self.provider:
                raise ColumnRegistrationError(
                    f"Column {table_name}.{column_name} is already encrypted with a different provider",
                    table=table_name,
                    column=column_name,
                )
            return column
        if not isinstance(column.type, String) or isinstance(column.type, Enum):
            raise ColumnRegistrationError(
                f"Column {table_name}.{column_name} is {column.type!r}, only string columns can be encrypted",
                table=table_name,
                column=column_name,
            )
        return column

    def apply(self, metadata: MetaData) -> List[Column]:
        """Swap every registered column's type to :class:`EncryptedText`.

        All registrations are resolved before any column is changed, so a bad
        entry leaves the metadata untouched.
        """
        resolved = [
            (self._resolve(metadata, table, column), f"{table}.{column}")
            for table, column in self._columns
        ]

        for column, label in resolved:
            if isinstance(column.type, EncryptedText):
                continue
            column.type = EncryptedText(self.provider, label=label)
            logger.debug("Encrypting column %s", label)

        logger.info("Column encryption applied to %d column(s)", len(resolved))
        return [column for column, _ in resolved]


def use_column_encryption(
    metadata: MetaData,
    provider: ColumnEncryptionProvider,
    columns: Iterable[str],
) -> List[Column]:
    """Register ``"table.column"`` names and apply them to *metadata* in one call."""
    registry = EncryptedColumns(provider)
    for name in columns:
        registry.register(name)
    return registry.apply(metadata)
