from __future__ import annotations

from uuid_migration.commons.exceptions import BaseCoreException
from uuid_migration.commons.ids import UnsupportedLegacyIdError

__all__ = ["SchemaError", "UnsupportedLegacyIdError", "UuidMigrationException"]


class UuidMigrationException(BaseCoreException):
    pass


class SchemaError(UuidMigrationException):
    """Table, column or primary key missing, ambiguous or invalid."""
