"""
Schema management package for tablesync.

This package provides:
- Declared table and column models
- Column definition rendering
- Statement intents and sequential execution
- The reconciliation engine
"""

from .models import ColumnSpec, TableSpec
from .definition import build_definition
from .statements import Statement, StatementKind
from .executor import StatementExecutor
from .reconciler import SchemaReconciler, SyncPlan, SyncResult

__all__ = [
    "ColumnSpec",
    "TableSpec",
    "build_definition",
    "Statement",
    "StatementKind",
    "StatementExecutor",
    "SchemaReconciler",
    "SyncPlan",
    "SyncResult",
]
