from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from uuid_migration.commons.logging import logger
from uuid_migration.core.db import Database
from uuid_migration.migration.ledger import StagedColumn
from uuid_migration.migration.stager import ColumnStager
from uuid_migration.schema.naming import TableNamingConvention
from uuid_migration.schema.repository import TableIntrospector
from uuid_migration.schema.statements import StatementBuilder, is_identifier


@dataclass(frozen=True)
class PrimaryKeyConverter:
    database: Database
    introspector: TableIntrospector
    statements: StatementBuilder
    stager: ColumnStager
    sequence_suffix: str = "_seq"

    def convert(
        self, table: str, *, primary_key: str | None = None, default: str
    ) -> StagedColumn:
        column = primary_key or self.introspector.primary_key_column(table)
        staged = self.stager.stage(table, column, default=default)

        sequence = f"{table}_{column}{self.sequence_suffix}"
        if is_identifier(sequence):
            self.database.execute_best_effort(self.statements.drop_sequence(sequence))
        return staged


@dataclass(frozen=True)
class ForeignKeyConverter:
    database: Database
    introspector: TableIntrospector
    statements: StatementBuilder
    stager: ColumnStager
    naming: TableNamingConvention

    def convert(self, table: str, column: str) -> StagedColumn | None:
        target_table = self.naming.table_for_foreign_key(column)
        if not is_identifier(target_table) or not self.introspector.table_exists(
            target_table
        ):
            logger.warning(
                "Skipping %s.%s: no table %r to reference", table, column, target_table
            )
            return None

        target_pk, target_legacy_pk = self.stager.staged_primary_key(target_table)
        staged = self.stager.stage(table, column, default=None)
        updated = self.database.execute(
            self.statements.resolve_reference(
                table=table,
                column=column,
                legacy_column=staged.legacy_column,
                target_table=target_table,
                target_pk=target_pk,
                target_legacy_pk=target_legacy_pk,
            )
        )
        logger.info(
            "Resolved %s.%s -> %s.%s (%s rows)",
            table,
            column,
            target_table,
            target_pk,
            updated,
        )
        return staged


@dataclass(frozen=True)
class PolymorphicConverter:
    database: Database
    introspector: TableIntrospector
    statements: StatementBuilder
    stager: ColumnStager
    naming: TableNamingConvention

    def infer_table_mapping(self, table: str, type_column: str) -> dict[str, str]:
        mapping: dict[str, str] = {}
        for type_name in self.introspector.distinct_values(table, type_column):
            candidate = self.naming.table_for_type(type_name)
            if is_identifier(candidate) and self.introspector.table_exists(candidate):
                mapping[type_name] = candidate
            else:
                logger.warning(
                    "No table for %s.%s = %r (tried %r); rows left encoded",
                    table,
                    type_column,
                    type_name,
                    candidate,
                )
        return mapping

    def convert(
        self,
        table: str,
        id_column: str,
        type_column: str,
        table_mapping: Mapping[str, str],
    ) -> StagedColumn:
        self.introspector.require_column(table, type_column)
        targets = {
            type_name: self.stager.staged_primary_key(target_table)
            for type_name, target_table in table_mapping.items()
        }

        staged = self.stager.stage(table, id_column, default=None)
        for type_name, target_table in table_mapping.items():
            target_pk, target_legacy_pk = targets[type_name]
            updated = self.database.execute(
                self.statements.resolve_reference(
                    table=table,
                    column=id_column,
                    legacy_column=staged.legacy_column,
                    target_table=target_table,
                    target_pk=target_pk,
                    target_legacy_pk=target_legacy_pk,
                    type_column=type_column,
                    type_name=type_name,
                )
            )
            logger.info(
                "Resolved %s.%s where %s = %r -> %s (%s rows)",
                table,
                id_column,
                type_column,
                type_name,
                target_table,
                updated,
            )
        return staged
