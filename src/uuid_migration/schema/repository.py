from __future__ import annotations

from dataclasses import dataclass

from uuid_migration.core.db import Database
from uuid_migration.migration.exceptions import SchemaError
from uuid_migration.schema.statements import StatementBuilder


@dataclass(frozen=True)
class TableIntrospector:
    """Read-only schema and data queries needed by the converters."""

    database: Database
    statements: StatementBuilder

    def table_exists(self, table: str) -> bool:
        return self.database.table_exists(table)

    def column_exists(self, table: str, column: str) -> bool:
        return column in self.database.column_names(table)

    def require_table(self, table: str) -> None:
        self.statements.ident(table)
        if not self.database.table_exists(table):
            raise SchemaError("Table not found", table)

    def require_column(self, table: str, column: str) -> None:
        self.require_table(table)
        self.statements.ident(column)
        if not self.column_exists(table, column):
            raise SchemaError("Column not found", f"{table}.{column}")

    def primary_key_column(self, table: str) -> str:
        self.require_table(table)
        columns = self.database.primary_key_columns(table)
        if not columns:
            raise SchemaError("Table has no primary key", table)
        if len(columns) > 1:
            raise SchemaError(
                "Composite primary keys are not supported",
                f"{table}: {', '.join(columns)}",
            )
        return columns[0]

    def distinct_values(self, table: str, column: str) -> list[str]:
        self.require_column(table, column)
        values = self.database.query_values(
            self.statements.distinct_values(table, column)
        )
        # Engine collations differ; keep the result order stable in Python too.
        return sorted(set(values))
