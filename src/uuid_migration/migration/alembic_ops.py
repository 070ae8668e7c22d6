"""
Alembic integration.

    from uuid_migration.migration.alembic_ops import alembic_migration_run

    def upgrade() -> None:
        with alembic_migration_run() as m:
            m.convert_primary_key("orders")
            m.convert_primary_key("products")
            m.convert_foreign_keys("line_items", "order_id", "product_id")
            m.convert_polymorphic_columns("comments", {"commentable_id": "commentable_type"})
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from alembic import op

from uuid_migration.core.db import SqlAlchemyDatabase
from uuid_migration.migration.service import UuidMigration, migration_run


@contextmanager
def alembic_migration_run(**kwargs) -> Iterator[UuidMigration]:
    with migration_run(SqlAlchemyDatabase(op.get_bind()), **kwargs) as migration:
        yield migration
