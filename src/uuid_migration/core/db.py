"""
Database capability.

The converters only talk to the `Database` protocol. `SqlAlchemyDatabase`
implements it on top of a synchronous SQLAlchemy connection, which is what
Alembic hands to migration scripts. `DatabaseManager` owns an engine for hosts
that do not already have one.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.engine import Connection, Engine  # type: ignore[import-not-found]

from uuid_migration.commons.exceptions import BaseCoreException
from uuid_migration.commons.logging import logger
from uuid_migration.core.settings import Settings, settings as default_settings


class DatabaseException(BaseCoreException):
    pass


class Database(Protocol):
    def execute(self, statement: sa.TextClause) -> int: ...

    def execute_best_effort(self, statement: sa.TextClause) -> bool: ...

    def query_values(self, statement: sa.TextClause) -> list[str]: ...

    def primary_key_columns(self, table: str) -> list[str]: ...

    def table_exists(self, table: str) -> bool: ...

    def column_names(self, table: str) -> list[str]: ...

    def quote(self, identifier: str) -> str: ...


class SqlAlchemyDatabase:
    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def execute(self, statement: sa.TextClause) -> int:
        logger.debug("SQL: %s", statement)
        # Errors are raised as-is; the host rolls back the transaction.
        result = self.connection.execute(statement)
        return result.rowcount

    def execute_best_effort(self, statement: sa.TextClause) -> bool:
        logger.debug("SQL (best effort): %s", statement)
        # A failed statement aborts a PostgreSQL transaction, so isolate it.
        savepoint = self.connection.begin_nested()
        try:
            self.connection.execute(statement)
        except sa.exc.DBAPIError as exc:
            savepoint.rollback()
            logger.warning("Ignoring failed cleanup statement: %s", exc.orig)
            return False
        savepoint.commit()
        return True

    def query_values(self, statement: sa.TextClause) -> list[str]:
        logger.debug("SQL: %s", statement)
        return [str(v) for v in self.connection.execute(statement).scalars()]

    def primary_key_columns(self, table: str) -> list[str]:
        pk = sa.inspect(self.connection).get_pk_constraint(table)
        return list(pk.get("constrained_columns") or [])

    def table_exists(self, table: str) -> bool:
        return sa.inspect(self.connection).has_table(table)

    def column_names(self, table: str) -> list[str]:
        return [c["name"] for c in sa.inspect(self.connection).get_columns(table)]

    def quote(self, identifier: str) -> str:
        return self.connection.dialect.identifier_preparer.quote(identifier)


class DatabaseManager:
    def __init__(self, config: Settings | None = None) -> None:
        self.settings = config or default_settings
        self.engine: Engine | None = None

    def _build_dsn(self) -> str:
        s = self.settings
        return (
            "postgresql+psycopg://"
            f"{s.DB_USER}:{s.DB_PASSWORD}"
            f"@{s.DB_HOST}:{s.DB_PORT}"
            f"/{s.DB_NAME}"
        )

    def initialize(self) -> None:
        if self.engine is not None:
            return
        if not self.settings.DB_HOST:
            raise DatabaseException(
                "Database is not configured", "UUID_MIGRATION_DB_HOST is not set"
            )
        try:
            self.engine = sa.create_engine(self._build_dsn(), echo=False)
            logger.info("Database initialized")
        except Exception as exc:
            raise DatabaseException("Failed to initialize database", str(exc)) from exc

    def shutdown(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        logger.info("Database shut down")

    @contextmanager
    def transaction(self) -> Iterator[SqlAlchemyDatabase]:
        """Yield a database bound to one transaction, committed on success."""
        if self.engine is None:
            raise DatabaseException("Database is not initialized")
        with self.engine.begin() as connection:
            yield SqlAlchemyDatabase(connection)
