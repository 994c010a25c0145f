"""
Pytest configuration and shared fixtures for tablesync tests.
"""

from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from tablesync.database.connection import ConnectionPool
from tablesync.database.introspection import KeyRole, ObservedColumn
from tablesync.schema.models import ColumnSpec, TableSpec
from tablesync.schema.reconciler import SchemaReconciler


# ============================================================================
# Declaration Fixtures
# ============================================================================

@pytest.fixture
def users_spec() -> TableSpec:
    """The users table: auto-increment primary key and an indexed email."""
    return TableSpec.model_validate({
        "name": "users",
        "engine": "InnoDB",
        "charset": "utf8mb4",
        "collation": "utf8mb4_unicode_ci",
        "columns": [
            {"name": "id", "type": "INT", "autoIncrement": True, "isPrimaryKey": True},
            {"name": "email", "type": "VARCHAR(255)", "isIndex": True},
        ],
    })


def make_table(name: str, columns: List[Dict]) -> TableSpec:
    """Build a TableSpec with default table options."""
    return TableSpec.model_validate({
        "name": name,
        "engine": "InnoDB",
        "charset": "utf8mb4",
        "collation": "utf8mb4_unicode_ci",
        "columns": columns,
    })


def observed(
    field: str,
    type: str = "int",
    key: KeyRole = KeyRole.NONE,
    nullable: bool = False,
    extra: str = "",
) -> ObservedColumn:
    """Build an ObservedColumn."""
    return ObservedColumn(field=field, type=type, is_nullable=nullable, key=key, extra=extra)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def mock_pool():
    """Mock connection pool; execute() calls record the issued statements."""
    pool = MagicMock(spec=ConnectionPool)
    pool.execute = AsyncMock(return_value=0)
    pool.fetch = AsyncMock(return_value=[])
    pool.fetchrow = AsyncMock(return_value=None)
    pool.fetchval = AsyncMock(return_value=None)
    return pool


@pytest.fixture
def reconciler(mock_pool) -> SchemaReconciler:
    """Reconciler over the mock pool."""
    return SchemaReconciler(mock_pool)


def set_live_table(
    reconciler: SchemaReconciler,
    columns: Optional[List[ObservedColumn]],
    indexes: Optional[Dict[str, List[str]]] = None,
) -> None:
    """
    Point the reconciler's inspector at a fake live table.

    ``columns=None`` means the table does not exist. ``indexes`` maps a
    column name to the names of the secondary indexes it leads; by default a
    column reported as MUL leads ``ix_<name>`` and any other column none.
    Column lookups ignore case, as MySQL does.
    """
    inspector = reconciler.inspector
    if columns is None:
        inspector.table_exists = AsyncMock(return_value=False)
        return

    by_name = {column.field.lower(): column for column in columns}
    indexes = indexes or {}

    inspector.table_exists = AsyncMock(return_value=True)
    inspector.get_column = AsyncMock(side_effect=lambda table, name: by_name.get(name.lower()))
    inspector.get_all_column_names = AsyncMock(return_value=[c.field for c in columns])
    inspector.get_primary_key_columns = AsyncMock(
        return_value=[c.field for c in columns if c.key == KeyRole.PRIMARY]
    )
    inspector.get_secondary_index_names = AsyncMock(
        side_effect=lambda table, name: indexes.get(name, _default_indexes(by_name[name.lower()]))
    )


def _default_indexes(column: ObservedColumn) -> List[str]:
    return [f"ix_{column.field}"] if column.key == KeyRole.SECONDARY else []


def issued_sql(pool) -> List[str]:
    """SQL of every statement executed on the mock pool, in order."""
    return [c.args[0] for c in pool.execute.await_args_list]
