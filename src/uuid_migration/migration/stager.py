from __future__ import annotations

from dataclasses import dataclass

from uuid_migration.commons.logging import logger
from uuid_migration.core.db import Database
from uuid_migration.migration.exceptions import SchemaError
from uuid_migration.migration.ledger import StagedColumn, TransitoryColumnLedger
from uuid_migration.schema.repository import TableIntrospector
from uuid_migration.schema.statements import StatementBuilder


@dataclass(frozen=True)
class ColumnStager:
    """
    Switch an integer column to UUID while keeping its old value around.

    The old integer is copied to `<column><suffix>` first, then the column is
    retyped. Existing rows are always rewritten through the deterministic
    encoder; `default` only affects rows inserted afterwards.
    """

    database: Database
    introspector: TableIntrospector
    statements: StatementBuilder
    ledger: TransitoryColumnLedger
    legacy_suffix: str = "_orig"

    def legacy_name(self, column: str) -> str:
        return column + self.legacy_suffix

    def stage(self, table: str, column: str, *, default: str | None = None) -> StagedColumn:
        legacy_column = self.legacy_name(column)
        self.introspector.require_column(table, column)
        if (table, legacy_column) in self.ledger or self.introspector.column_exists(
            table, legacy_column
        ):
            raise SchemaError(
                "Column is already staged", f"{table}.{column} -> {legacy_column}"
            )

        logger.info("Staging %s.%s as %s", table, column, legacy_column)
        self.database.execute(self.statements.add_integer_column(table, legacy_column))
        self.database.execute(self.statements.copy_column(table, column, legacy_column))
        self.database.execute(self.statements.alter_to_uuid(table, column, default))
        self.ledger.record(table, legacy_column)
        return StagedColumn(table=table, column=column, legacy_column=legacy_column)

    def staged_primary_key(self, table: str) -> tuple[str, str]:
        """Return (primary key, legacy primary key) of an already staged table."""
        pk = self.introspector.primary_key_column(table)
        legacy_pk = self.legacy_name(pk)
        if not self.introspector.column_exists(table, legacy_pk):
            raise SchemaError(
                "Primary key has not been converted to UUID yet",
                f"{table}.{pk} (missing {legacy_pk})",
            )
        # Join targets must outlive every conversion that reads them.
        self.ledger.record(table, legacy_pk)
        return pk, legacy_pk
