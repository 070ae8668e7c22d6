"""
SQL statement builder.

Every table and column name is checked against a plain identifier pattern and
quoted by the database before it is interpolated. Values that come from data
(polymorphic type tags) are always bound parameters.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

import sqlalchemy as sa  # type: ignore[import-not-found]

from uuid_migration.commons.ids import to_uuid_sql
from uuid_migration.migration.exceptions import SchemaError

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_identifier(name: str) -> bool:
    return bool(IDENTIFIER_RE.match(name or ""))


class StatementBuilder:
    def __init__(self, quote: Callable[[str], str]) -> None:
        self._quote = quote

    def ident(self, name: str) -> str:
        if not is_identifier(name):
            raise SchemaError("Invalid SQL identifier", repr(name))
        return self._quote(name)

    # -- introspection -----------------------------------------------------

    def distinct_values(self, table: str, column: str) -> sa.TextClause:
        col = self.ident(column)
        return sa.text(
            f"SELECT {col} FROM {self.ident(table)} "
            f"WHERE {col} IS NOT NULL GROUP BY {col} ORDER BY {col}"
        )

    # -- staging -----------------------------------------------------------

    def add_integer_column(self, table: str, column: str) -> sa.TextClause:
        return sa.text(
            f"ALTER TABLE {self.ident(table)} ADD COLUMN {self.ident(column)} integer"
        )

    def copy_column(self, table: str, source: str, target: str) -> sa.TextClause:
        return sa.text(
            f"UPDATE {self.ident(table)} SET {self.ident(target)} = {self.ident(source)}"
        )

    def alter_to_uuid(
        self, table: str, column: str, default: str | None
    ) -> sa.TextClause:
        col = self.ident(column)
        return sa.text(
            f"ALTER TABLE {self.ident(table)} "
            f"ALTER COLUMN {col} DROP DEFAULT, "
            f"ALTER COLUMN {col} SET DATA TYPE UUID USING ({to_uuid_sql(col)}), "
            f"ALTER COLUMN {col} SET DEFAULT {default if default else 'NULL'}"
        )

    def drop_sequence(self, name: str) -> sa.TextClause:
        return sa.text(f"DROP SEQUENCE IF EXISTS {self.ident(name)}")

    def drop_column(self, table: str, column: str) -> sa.TextClause:
        return sa.text(
            f"ALTER TABLE {self.ident(table)} DROP COLUMN IF EXISTS {self.ident(column)}"
        )

    # -- reference resolution ---------------------------------------------

    def resolve_reference(
        self,
        *,
        table: str,
        column: str,
        legacy_column: str,
        target_table: str,
        target_pk: str,
        target_legacy_pk: str,
        type_column: str | None = None,
        type_name: str | None = None,
    ) -> sa.TextClause:
        """Point `column` at the target's new key by joining on legacy values."""
        sql = (
            f"UPDATE {self.ident(table)} AS t "
            f"SET {self.ident(column)} = f.{self.ident(target_pk)} "
            f"FROM {self.ident(target_table)} AS f "
            f"WHERE f.{self.ident(target_legacy_pk)} = t.{self.ident(legacy_column)}"
        )
        if type_column is None:
            return sa.text(sql)
        sql += f" AND t.{self.ident(type_column)} = :type_name"
        return sa.text(sql).bindparams(type_name=type_name)

    def encode_in_place(
        self, table: str, column: str, type_column: str, type_names: Sequence[str]
    ) -> sa.TextClause:
        col = self.ident(column)
        stmt = sa.text(
            f"UPDATE {self.ident(table)} SET {col} = {to_uuid_sql(col)} "
            f"WHERE {self.ident(type_column)} IN :type_names"
        )
        return stmt.bindparams(
            sa.bindparam("type_names", value=list(type_names), expanding=True)
        )
