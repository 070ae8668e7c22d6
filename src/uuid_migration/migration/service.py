"""
Migration run controller.

One `UuidMigration` per migration run. It owns the ledger of staged legacy
columns, so the order of calls is the only contract the host has to respect:

1. `convert_primary_key` for every table whose key changes.
2. `convert_foreign_keys` / `convert_polymorphic_columns` for every
   referencing table.
3. `drop_staged_columns` once, after everything else.

`migration_run` wraps that lifecycle and runs step 3 on successful exit.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from sqlalchemy.engine import Connection  # type: ignore[import-not-found]

from uuid_migration.commons.logging import logger
from uuid_migration.core.db import Database, SqlAlchemyDatabase
from uuid_migration.core.settings import Settings, settings as default_settings
from uuid_migration.migration.converters import (
    ForeignKeyConverter,
    PolymorphicConverter,
    PrimaryKeyConverter,
)
from uuid_migration.migration.ledger import TransitoryColumnLedger
from uuid_migration.migration.stager import ColumnStager
from uuid_migration.schema.naming import TableNamingConvention
from uuid_migration.schema.repository import TableIntrospector
from uuid_migration.schema.statements import StatementBuilder


class UuidMigration:
    def __init__(
        self,
        database: Database,
        *,
        config: Settings | None = None,
        naming: TableNamingConvention | None = None,
        ledger: TransitoryColumnLedger | None = None,
    ) -> None:
        self.settings = config or default_settings
        self.database = database
        self.ledger = ledger if ledger is not None else TransitoryColumnLedger()
        self.naming = naming or TableNamingConvention(
            foreign_key_suffix=self.settings.FOREIGN_KEY_SUFFIX
        )
        self.statements = StatementBuilder(database.quote)
        self.introspector = TableIntrospector(database, self.statements)
        self.stager = ColumnStager(
            database,
            self.introspector,
            self.statements,
            self.ledger,
            legacy_suffix=self.settings.LEGACY_COLUMN_SUFFIX,
        )
        self.primary_keys = PrimaryKeyConverter(
            database,
            self.introspector,
            self.statements,
            self.stager,
            sequence_suffix=self.settings.SEQUENCE_SUFFIX,
        )
        self.foreign_keys = ForeignKeyConverter(
            database, self.introspector, self.statements, self.stager, self.naming
        )
        self.polymorphic = PolymorphicConverter(
            database, self.introspector, self.statements, self.stager, self.naming
        )

    def convert_primary_key(
        self,
        table: str,
        *,
        primary_key: str | None = None,
        default: str | None = None,
    ) -> str:
        """
        Convert a table's integer primary key to UUID.

        Existing rows get the deterministic encoding of their old id, new rows
        get `default` (the configured UUID function when omitted). Returns the
        legacy column name, which stays joinable until `drop_staged_columns`.
        """
        staged = self.primary_keys.convert(
            table,
            primary_key=primary_key,
            default=default or self.settings.DEFAULT_UUID_FUNCTION,
        )
        return staged.legacy_column

    def convert_foreign_key(self, table: str, column: str) -> str | None:
        """Returns the legacy column name, or None when no target table exists."""
        staged = self.foreign_keys.convert(table, column)
        return staged.legacy_column if staged else None

    def convert_foreign_keys(self, table: str, *columns: str) -> list[str]:
        results = [self.foreign_keys.convert(table, column) for column in columns]
        return [staged.legacy_column for staged in results if staged is not None]

    def infer_table_mapping(self, table: str, type_column: str) -> dict[str, str]:
        return self.polymorphic.infer_table_mapping(table, type_column)

    def convert_polymorphic_column(
        self,
        table: str,
        id_column: str,
        type_column: str,
        table_mapping: Mapping[str, str] | None = None,
    ) -> str:
        if table_mapping is None:
            table_mapping = self.infer_table_mapping(table, type_column)
        staged = self.polymorphic.convert(table, id_column, type_column, table_mapping)
        return staged.legacy_column

    def convert_polymorphic_columns(
        self,
        table: str,
        columns: Mapping[str, str],
        *,
        overrides: Mapping[str, Mapping[str, str]] | None = None,
    ) -> list[str]:
        """
        Convert several `{id_column: type_column}` pairs of one table.

        `overrides` maps an id column to an explicit type -> table mapping for
        tags that do not follow the naming convention.
        """
        overrides = overrides or {}
        return [
            self.convert_polymorphic_column(
                table, id_column, type_column, overrides.get(id_column)
            )
            for id_column, type_column in columns.items()
        ]

    def encode_polymorphic_data(self, table: str, column: str, *entities: str) -> int:
        """
        Rewrite `<column>_id` through the legacy id encoding in place, for rows
        whose `<column>_type` is one of `entities`.

        For polymorphic id columns already widened to a string type, when only
        some of the referenced entities have moved to UUID keys.
        """
        if not entities:
            return 0
        id_column = f"{column}_id"
        type_column = f"{column}_type"
        self.introspector.require_column(table, id_column)
        self.introspector.require_column(table, type_column)
        updated = self.database.execute(
            self.statements.encode_in_place(table, id_column, type_column, entities)
        )
        logger.info("Encoded %s rows of %s.%s", updated, table, id_column)
        return updated

    def drop_staged_columns(self) -> None:
        for table, column in self.ledger.unique():
            logger.info("Dropping staged column %s.%s", table, column)
            self.database.execute(self.statements.drop_column(table, column))


@contextmanager
def migration_run(
    bind: Connection | Database, **kwargs
) -> Iterator[UuidMigration]:
    """Yield a `UuidMigration`; staged columns are dropped only on success."""
    database = SqlAlchemyDatabase(bind) if isinstance(bind, Connection) else bind
    migration = UuidMigration(database, **kwargs)
    yield migration
    migration.drop_staged_columns()
