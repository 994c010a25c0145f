"""
Database schema introspection for tablesync.

Read-only queries against the live MySQL table. Every call goes to the
database; nothing is cached between calls.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum

from .connection import ConnectionPool, quote_identifier
from ..exceptions import DatabaseError, SchemaError


logger = logging.getLogger(__name__)


class KeyRole(str, Enum):
    """Key role of a column as reported by SHOW COLUMNS."""

    NONE = ""
    PRIMARY = "PRI"
    SECONDARY = "MUL"
    UNIQUE = "UNI"


def _text(value: Any) -> Optional[str]:
    # MySQL 8 reports some SHOW columns as binary strings
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return value


@dataclass
class ObservedColumn:
    """Live state of one column."""

    field: str
    type: str
    is_nullable: bool
    key: KeyRole = KeyRole.NONE
    default: Optional[str] = None
    extra: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ObservedColumn":
        """Build from a SHOW COLUMNS row."""
        key = _text(row.get("Key")) or ""
        try:
            key_role = KeyRole(key)
        except ValueError:
            logger.warning(f"Unknown key role {key!r} for column {row.get('Field')}")
            key_role = KeyRole.NONE

        return cls(
            field=_text(row["Field"]),
            type=_text(row["Type"]),
            is_nullable=_text(row.get("Null")) == "YES",
            key=key_role,
            default=_text(row.get("Default")),
            extra=_text(row.get("Extra")) or "",
        )

    @property
    def is_primary_key(self) -> bool:
        return self.key == KeyRole.PRIMARY

    @property
    def has_secondary_index(self) -> bool:
        return self.key == KeyRole.SECONDARY

    @property
    def is_auto_increment(self) -> bool:
        return "auto_increment" in self.extra.lower()


def _table_ref(table: str) -> str:
    # Quoted table name, safe to embed in a query that also takes %s parameters
    return quote_identifier(table).replace("%", "%%")


class SchemaInspector:
    """Live table introspection."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    async def table_exists(self, table: str) -> bool:
        """Check the catalog for a table in the current database."""
        query = """
            SELECT COUNT(*) FROM information_schema.tables
            WHERE table_schema = DATABASE() AND table_name = %s
        """

        try:
            result = await self.pool.fetchval(query, table)
            return bool(result)
        except Exception as e:
            logger.error(f"Error checking table existence for {table}: {e}")
            raise DatabaseError(f"Failed to check table existence: {e}", {"table": table}) from e

    async def get_column(self, table: str, column: str) -> Optional[ObservedColumn]:
        """Look up one column by name; None if the table has no such column."""
        query = f"SHOW COLUMNS FROM {_table_ref(table)} WHERE Field = %s"

        try:
            row = await self.pool.fetchrow(query, column)
        except Exception as e:
            logger.error(f"Error getting column {table}.{column}: {e}")
            raise SchemaError(f"Failed to get column: {e}", {"table": table, "column": column}) from e

        return ObservedColumn.from_row(row) if row else None

    async def get_columns(self, table: str) -> List[ObservedColumn]:
        """Get all columns of a table in table order."""
        query = f"SHOW COLUMNS FROM {quote_identifier(table)}"

        try:
            rows = await self.pool.fetch(query)
        except Exception as e:
            logger.error(f"Error getting columns for {table}: {e}")
            raise SchemaError(f"Failed to get columns: {e}", {"table": table}) from e

        return [ObservedColumn.from_row(row) for row in rows]

    async def get_all_column_names(self, table: str) -> List[str]:
        """Get all column names of a table in table order."""
        return [column.field for column in await self.get_columns(table)]

    async def get_primary_key_columns(self, table: str) -> List[str]:
        """Get the columns of the table's primary key."""
        return [column.field for column in await self.get_columns(table) if column.is_primary_key]

    async def get_secondary_index_names(self, table: str, column: str) -> List[str]:
        """Names of non-unique indexes whose leading column is ``column``."""
        query = (
            f"SHOW INDEX FROM {_table_ref(table)} "
            "WHERE Column_name = %s AND Seq_in_index = 1 "
            "AND Non_unique = 1 AND Key_name <> 'PRIMARY'"
        )

        try:
            rows = await self.pool.fetch(query, column)
        except Exception as e:
            logger.error(f"Error getting indexes for {table}.{column}: {e}")
            raise SchemaError(f"Failed to get indexes: {e}", {"table": table, "column": column}) from e

        names: List[str] = []
        for row in rows:
            name = _text(row["Key_name"])
            if name not in names:
                names.append(name)
        return names
