"""
Statement intents for schema synchronization.

A ``Statement`` is one pending DDL operation: what it does, the SQL that
does it, and, once executed, how it went. The factory functions below are
the only place DDL text is assembled.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..database.connection import quote_identifier
from .definition import build_definition
from .models import ColumnSpec, TableSpec


# MySQL identifier length limit
MAX_IDENTIFIER_LENGTH = 64


class StatementKind(str, Enum):
    """Kinds of statement the reconciler emits."""

    CREATE_TABLE = "create_table"
    ADD_COLUMN = "add_column"
    CHANGE_COLUMN = "change_column"
    ADD_INDEX = "add_index"
    DROP_INDEX = "drop_index"
    SET_PRIMARY_KEY = "set_primary_key"
    ALTER_TABLE_OPTIONS = "alter_table_options"
    DROP_COLUMN = "drop_column"


@dataclass
class Statement:
    """Represents one DDL statement intent."""

    kind: StatementKind
    table: str
    sql: str
    description: str
    target: Optional[str] = None  # Column or index name

    # Execution results
    executed: bool = False
    execution_time_ms: Optional[float] = None
    error: Optional[str] = None

    @property
    def is_destructive(self) -> bool:
        """Check if this statement removes schema objects."""
        return self.kind in (StatementKind.DROP_COLUMN, StatementKind.DROP_INDEX)

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def statement_id(self) -> str:
        """Get identifier for this statement, used in log lines."""
        target = self.target or self.table
        return f"{self.kind.value}_{self.table}_{target}"


def index_name_for(column_name: str) -> str:
    """Name of the single-column secondary index managed for a column."""
    return f"ix_{column_name}"[:MAX_IDENTIFIER_LENGTH]


def _table_options(spec: TableSpec) -> str:
    return (
        f"ENGINE = {spec.engine} "
        f"DEFAULT CHARACTER SET = {spec.charset} "
        f"COLLATE = {spec.collation}"
    )


def create_table(spec: TableSpec, primary_key: Optional[str] = None) -> Statement:
    """CREATE TABLE with every declared column, in declared order."""
    parts = [
        f"{quote_identifier(column.name)} {build_definition(column)}"
        for column in spec.columns
    ]
    if primary_key:
        parts.append(f"PRIMARY KEY ({quote_identifier(primary_key)})")

    return Statement(
        kind=StatementKind.CREATE_TABLE,
        table=spec.name,
        sql=f"CREATE TABLE {quote_identifier(spec.name)} ({', '.join(parts)}) {_table_options(spec)}",
        description=f"Create table {spec.name} with {len(spec.columns)} columns",
    )


def add_column(
    table: str,
    column: ColumnSpec,
    primary_key: bool = False,
    drop_existing_key: bool = False,
) -> Statement:
    """
    ADD COLUMN, optionally making the new column the primary key in the
    same statement.
    """
    name = quote_identifier(column.name)
    clauses: List[str] = []
    if primary_key and drop_existing_key:
        clauses.append("DROP PRIMARY KEY")
    clauses.append(f"ADD COLUMN {name} {build_definition(column)}")
    if primary_key:
        clauses.append(f"ADD PRIMARY KEY ({name})")

    description = f"Add column {column.name}"
    if primary_key:
        description += " as primary key"

    return Statement(
        kind=StatementKind.ADD_COLUMN,
        table=table,
        sql=f"ALTER TABLE {quote_identifier(table)} {', '.join(clauses)}",
        description=description,
        target=column.name,
    )


def change_column(table: str, column: ColumnSpec) -> Statement:
    name = quote_identifier(column.name)
    return Statement(
        kind=StatementKind.CHANGE_COLUMN,
        table=table,
        sql=(
            f"ALTER TABLE {quote_identifier(table)} "
            f"CHANGE COLUMN {name} {name} {build_definition(column)}"
        ),
        description=f"Change column {column.name}",
        target=column.name,
    )


def add_index(table: str, column_name: str) -> Statement:
    index_name = index_name_for(column_name)
    return Statement(
        kind=StatementKind.ADD_INDEX,
        table=table,
        sql=(
            f"ALTER TABLE {quote_identifier(table)} "
            f"ADD INDEX {quote_identifier(index_name)} ({quote_identifier(column_name)})"
        ),
        description=f"Add index {index_name} on {column_name}",
        target=column_name,
    )


def drop_indexes(table: str, column_name: str, index_names: Sequence[str]) -> Statement:
    """Drop every secondary index led by a column in one statement."""
    clauses = ", ".join(f"DROP INDEX {quote_identifier(name)}" for name in index_names)
    return Statement(
        kind=StatementKind.DROP_INDEX,
        table=table,
        sql=f"ALTER TABLE {quote_identifier(table)} {clauses}",
        description=f"Drop index {', '.join(index_names)} on {column_name}",
        target=column_name,
    )


def set_primary_key(table: str, column_name: str, drop_existing: bool) -> Statement:
    clauses: List[str] = []
    if drop_existing:
        clauses.append("DROP PRIMARY KEY")
    clauses.append(f"ADD PRIMARY KEY ({quote_identifier(column_name)})")
    return Statement(
        kind=StatementKind.SET_PRIMARY_KEY,
        table=table,
        sql=f"ALTER TABLE {quote_identifier(table)} {', '.join(clauses)}",
        description=f"Set primary key to {column_name}",
        target=column_name,
    )


def alter_table_options(spec: TableSpec) -> Statement:
    return Statement(
        kind=StatementKind.ALTER_TABLE_OPTIONS,
        table=spec.name,
        sql=f"ALTER TABLE {quote_identifier(spec.name)} {_table_options(spec)}",
        description=f"Set engine {spec.engine}, charset {spec.charset}, collation {spec.collation}",
    )


def drop_column(table: str, column_name: str) -> Statement:
    return Statement(
        kind=StatementKind.DROP_COLUMN,
        table=table,
        sql=f"ALTER TABLE {quote_identifier(table)} DROP COLUMN {quote_identifier(column_name)}",
        description=f"Drop column {column_name}",
        target=column_name,
    )
