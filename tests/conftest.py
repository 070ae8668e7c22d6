"""
Global pytest fixtures.

Unit tests never touch a live database: `FakeDatabase` implements the
`Database` protocol over a schema dictionary, records every statement and
tracks ADD/DROP COLUMN so later introspection sees staged columns.
"""

from __future__ import annotations

import re
from typing import Any

import pytest  # type: ignore[import-not-found]
import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.dialects import postgresql  # type: ignore[import-not-found]

from uuid_migration.core.settings import Settings
from uuid_migration.migration.service import UuidMigration

ADD_COLUMN_RE = re.compile(r"^ALTER TABLE (\w+) ADD COLUMN (\w+) ")
DROP_COLUMN_RE = re.compile(r"^ALTER TABLE (\w+) DROP COLUMN IF EXISTS (\w+)$")
SELECT_RE = re.compile(r"^SELECT (\w+) FROM (\w+) ")


class FakeDatabase:
    def __init__(
        self,
        tables: dict[str, dict[str, Any]],
        *,
        values: dict[tuple[str, str], list[str]] | None = None,
    ) -> None:
        self.tables = tables
        self.values = values or {}
        self.statements: list[str] = []
        self.params: list[dict[str, Any]] = []
        self.fail_on: str | None = None
        self.best_effort_fails = False
        self._preparer = postgresql.dialect().identifier_preparer

    def _record(self, statement: sa.TextClause) -> str:
        sql = " ".join(str(statement).split())
        self.statements.append(sql)
        self.params.append(dict(statement.compile().params))
        return sql

    def execute(self, statement: sa.TextClause) -> int:
        sql = self._record(statement)
        if self.fail_on and self.fail_on in sql:
            raise sa.exc.ProgrammingError(sql, {}, Exception("rejected"))
        if m := ADD_COLUMN_RE.match(sql):
            self.tables[m.group(1)]["columns"].append(m.group(2))
        elif m := DROP_COLUMN_RE.match(sql):
            columns = self.tables[m.group(1)]["columns"]
            if m.group(2) in columns:
                columns.remove(m.group(2))
        return 1

    def execute_best_effort(self, statement: sa.TextClause) -> bool:
        self._record(statement)
        return not self.best_effort_fails

    def query_values(self, statement: sa.TextClause) -> list[str]:
        sql = self._record(statement)
        m = SELECT_RE.match(sql)
        assert m is not None, sql
        return list(self.values.get((m.group(2), m.group(1)), []))

    def primary_key_columns(self, table: str) -> list[str]:
        return list(self.tables[table].get("pk", []))

    def table_exists(self, table: str) -> bool:
        return table in self.tables

    def column_names(self, table: str) -> list[str]:
        return list(self.tables[table]["columns"])

    def quote(self, identifier: str) -> str:
        return self._preparer.quote(identifier)


def shop_schema() -> dict[str, dict[str, Any]]:
    return {
        "orders": {"columns": ["id", "total"], "pk": ["id"]},
        "products": {"columns": ["id", "name"], "pk": ["id"]},
        "line_items": {
            "columns": ["id", "order_id", "product_id", "quantity", "external_id"],
            "pk": ["id"],
        },
        "widgets": {"columns": ["id"], "pk": ["id"]},
        "gadgets": {"columns": ["id"], "pk": ["id"]},
        "comments": {
            "columns": ["id", "commentable_id", "commentable_type", "body"],
            "pk": ["id"],
        },
        "order_products": {
            "columns": ["order_id", "product_id"],
            "pk": ["order_id", "product_id"],
        },
        "audit_log": {"columns": ["message"], "pk": []},
    }


@pytest.fixture()
def fake_db() -> FakeDatabase:
    return FakeDatabase(
        shop_schema(),
        values={("comments", "commentable_type"): ["Widget", "Gadget", "Ghost"]},
    )


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture()
def migration(fake_db: FakeDatabase, test_settings: Settings) -> UuidMigration:
    return UuidMigration(fake_db, config=test_settings)
