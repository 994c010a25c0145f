"""
Schema reconciliation core logic for tablesync.

Diffs a declared table against the live table and produces the ordered
statements that make the live table match, then applies them one by one.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..database.connection import ConnectionPool
from ..database.introspection import KeyRole, ObservedColumn, SchemaInspector
from ..exceptions import SpecValidationError
from . import statements as ddl
from .definition import render_default
from .executor import StatementExecutor
from .models import TableSpec
from .statements import Statement, StatementKind


logger = logging.getLogger(__name__)


@dataclass
class SyncPlan:
    """Ordered statements for one table, not yet applied."""

    table: str
    creates_table: bool
    statements: List[Statement] = field(default_factory=list)

    @property
    def has_destructive_statements(self) -> bool:
        return any(s.is_destructive for s in self.statements)

    def of_kind(self, kind: StatementKind) -> List[Statement]:
        return [s for s in self.statements if s.kind == kind]


@dataclass
class SyncResult:
    """Result of a completed sync call."""

    table: str
    created: bool
    dry_run: bool
    statements: List[Statement]
    execution_time_ms: float

    @property
    def executed_count(self) -> int:
        """Count of statements applied to the database."""
        return sum(1 for s in self.statements if s.executed)


class SchemaReconciler:
    """
    Declarative table synchronizer.

    The connection pool is injected so tests can hand in a double that
    records the issued statements. No state survives between calls: each
    ``sync`` re-reads the live table before deciding anything.

    Concurrent syncs of the same table are not coordinated and no
    transaction wraps a sync; if a statement fails, the ones before it stay
    applied.

    The primary key is set in one statement after the column statements,
    except for a newly added AUTO_INCREMENT primary-key column: MySQL needs
    that column keyed in the statement that adds it (error 1075), so its
    ADD COLUMN carries the key change itself.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        drop_columns: bool = True,
        dry_run: bool = False,
    ):
        self.pool = pool
        self.drop_columns = drop_columns
        self.dry_run = dry_run

        self.inspector = SchemaInspector(pool)
        self.executor = StatementExecutor(pool, dry_run=dry_run)

    @staticmethod
    def validate(spec: TableSpec) -> None:
        """
        Reject declarations that cannot be reconciled.

        Raises:
            SpecValidationError: duplicate column names, a column that is
                both primary key and secondary index, or an unrenderable
                default value.
        """
        # Column names are case-insensitive in MySQL
        seen = set()
        for column in spec.columns:
            if column.name.lower() in seen:
                raise SpecValidationError(
                    f"Duplicate column '{column.name}' in table '{spec.name}'",
                    table_name=spec.name,
                    column_name=column.name,
                )
            seen.add(column.name.lower())

            if column.is_primary_key and column.is_index is True:
                raise SpecValidationError(
                    f"Column '{column.name}' cannot be both primary key and index",
                    table_name=spec.name,
                    column_name=column.name,
                )

            if column.has_default:
                render_default(column.name, column.default_value)

    async def plan(self, spec: TableSpec) -> SyncPlan:
        """Validate the declaration and compute its statements without applying them."""
        self.validate(spec)

        if not await self.inspector.table_exists(spec.name):
            return SyncPlan(
                table=spec.name,
                creates_table=True,
                statements=self._plan_create(spec),
            )

        return SyncPlan(
            table=spec.name,
            creates_table=False,
            statements=await self._plan_alter(spec),
        )

    async def sync(self, spec: TableSpec) -> SyncResult:
        """
        Make the live table match the declaration.

        Raises:
            SpecValidationError: before any statement is issued.
            StatementExecutionError: a statement failed; the remaining ones
                were not issued and the earlier ones were not rolled back.
        """
        start_time = time.time()

        logger.info(f"Starting sync for table {spec.name}")
        sync_plan = await self.plan(spec)
        logger.info(
            f"Planned {len(sync_plan.statements)} statements for {spec.name} "
            f"({'create' if sync_plan.creates_table else 'alter'})"
        )

        await self.executor.execute_all(sync_plan.statements)

        result = SyncResult(
            table=spec.name,
            created=sync_plan.creates_table,
            dry_run=self.dry_run,
            statements=sync_plan.statements,
            execution_time_ms=(time.time() - start_time) * 1000,
        )

        logger.info(
            f"Sync completed for {spec.name}: {result.executed_count} statements "
            f"executed ({result.execution_time_ms:.1f}ms)"
        )
        return result

    async def sync_all(self, specs: Sequence[TableSpec]) -> List[SyncResult]:
        """Sync several tables in order, stopping at the first failure."""
        for spec in specs:
            self.validate(spec)

        results = []
        for spec in specs:
            results.append(await self.sync(spec))
        return results

    def _plan_create(self, spec: TableSpec) -> List[Statement]:
        primary_key = _declared_primary_key(spec)
        statements = [ddl.create_table(spec, primary_key)]

        # One single-column index per marked column
        for column in spec.columns:
            if column.is_index is True:
                statements.append(ddl.add_index(spec.name, column.name))

        return statements

    async def _secondary_indexes(self, table: str, observed: ObservedColumn) -> List[str]:
        # SHOW COLUMNS reports only the highest-ranked key, so a PRI or UNI
        # column can still lead a non-unique index
        if observed.key == KeyRole.NONE:
            return []
        return await self.inspector.get_secondary_index_names(table, observed.field)

    async def _plan_alter(self, spec: TableSpec) -> List[Statement]:
        statements: List[Statement] = []
        primary_key = _declared_primary_key(spec)
        primary_key_applied = False

        for column in spec.columns:
            observed = await self.inspector.get_column(spec.name, column.name)

            if observed is None:
                if column.name == primary_key and column.auto_increment:
                    # An auto column must be a key in the statement that adds it
                    existing = await self.inspector.get_primary_key_columns(spec.name)
                    statements.append(
                        ddl.add_column(
                            spec.name, column, primary_key=True, drop_existing_key=bool(existing)
                        )
                    )
                    primary_key_applied = True
                else:
                    statements.append(ddl.add_column(spec.name, column))
                if column.is_index is True:
                    statements.append(ddl.add_index(spec.name, column.name))
                continue

            index_names: List[str] = []
            if column.is_index is not None:
                index_names = await self._secondary_indexes(spec.name, observed)

            # Index goes first so a conflicting type change can succeed
            if column.is_index is False and index_names:
                statements.append(ddl.drop_indexes(spec.name, column.name, index_names))

            statements.append(ddl.change_column(spec.name, column))

            if column.is_index is True and not index_names:
                statements.append(ddl.add_index(spec.name, column.name))

        if primary_key and not primary_key_applied:
            existing = await self.inspector.get_primary_key_columns(spec.name)
            statements.append(
                ddl.set_primary_key(spec.name, primary_key, drop_existing=bool(existing))
            )

        statements.append(ddl.alter_table_options(spec))

        if self.drop_columns:
            # MySQL column names are case-insensitive
            declared = {name.lower() for name in spec.column_names}
            for name in await self.inspector.get_all_column_names(spec.name):
                if name.lower() not in declared:
                    statements.append(ddl.drop_column(spec.name, name))

        return statements


def _declared_primary_key(spec: TableSpec) -> Optional[str]:
    # Last marked column wins
    primary_key: Optional[str] = None
    for column in spec.columns:
        if column.is_primary_key:
            primary_key = column.name
    return primary_key
