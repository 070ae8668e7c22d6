import pytest  # type: ignore[import-not-found]

from uuid_migration.migration.exceptions import SchemaError
from uuid_migration.schema.repository import TableIntrospector
from uuid_migration.schema.statements import StatementBuilder


@pytest.fixture()
def introspector(fake_db) -> TableIntrospector:
    return TableIntrospector(fake_db, StatementBuilder(fake_db.quote))


def test_primary_key_column(introspector: TableIntrospector) -> None:
    assert introspector.primary_key_column("orders") == "id"


def test_primary_key_column_missing_table(introspector: TableIntrospector) -> None:
    with pytest.raises(SchemaError) as exc:
        introspector.primary_key_column("invoices")
    assert exc.value.message == "Table not found"
    assert exc.value.details == "invoices"


def test_primary_key_column_composite(introspector: TableIntrospector) -> None:
    with pytest.raises(SchemaError, match="Composite"):
        introspector.primary_key_column("order_products")


def test_primary_key_column_absent(introspector: TableIntrospector) -> None:
    with pytest.raises(SchemaError, match="no primary key"):
        introspector.primary_key_column("audit_log")


def test_table_and_column_exists(introspector: TableIntrospector) -> None:
    assert introspector.table_exists("orders")
    assert not introspector.table_exists("invoices")
    assert introspector.column_exists("orders", "total")
    assert not introspector.column_exists("orders", "customer_id")


def test_distinct_values_sorted(introspector: TableIntrospector, fake_db) -> None:
    assert introspector.distinct_values("comments", "commentable_type") == [
        "Gadget",
        "Ghost",
        "Widget",
    ]
    assert fake_db.statements[-1].startswith("SELECT commentable_type FROM comments")


def test_distinct_values_missing_column(introspector: TableIntrospector) -> None:
    with pytest.raises(SchemaError, match="Column not found"):
        introspector.distinct_values("comments", "kind")
