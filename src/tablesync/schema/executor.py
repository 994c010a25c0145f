"""
Sequential statement execution.

Statements are applied one at a time, each awaited before the next is
issued. The first failure stops the run; statements already applied are
not undone.
"""

import logging
import time
from typing import List, Sequence

from ..database.connection import ConnectionPool
from ..exceptions import StatementExecutionError
from .statements import Statement


logger = logging.getLogger(__name__)


class StatementExecutor:
    """Applies statement intents through the injected connection pool."""

    def __init__(self, pool: ConnectionPool, dry_run: bool = False):
        self.pool = pool
        self.dry_run = dry_run

    async def execute(self, statement: Statement) -> Statement:
        """Execute a single statement and record timing and outcome."""
        if self.dry_run:
            statement.executed = False
            logger.info(f"DRY RUN: {statement.sql}")
            return statement

        start_time = time.time()
        try:
            await self.pool.execute(statement.sql)
        except Exception as e:
            statement.executed = False
            statement.error = str(e)
            logger.error(f"Failed to execute {statement.statement_id}: {e}")
            raise
        finally:
            statement.execution_time_ms = (time.time() - start_time) * 1000

        statement.executed = True
        logger.info(
            f"Executed {statement.statement_id} ({statement.execution_time_ms:.1f}ms)"
        )
        return statement

    async def execute_all(self, statements: Sequence[Statement]) -> List[Statement]:
        """
        Execute statements in order.

        Raises:
            StatementExecutionError: on the first failing statement; its
                ``applied`` attribute lists the statements that ran before it.
        """
        applied: List[Statement] = []

        for index, statement in enumerate(statements):
            try:
                await self.execute(statement)
            except Exception as e:
                raise StatementExecutionError(
                    table=statement.table,
                    statement_index=index,
                    sql=statement.sql,
                    cause=e,
                    applied=applied,
                ) from e
            applied.append(statement)

        return applied
