"""
tablesync: Declarative MySQL table synchronizer.

Describe the table you want; tablesync diffs it against the live table and
issues the DDL statements that make them match.
"""

__version__ = "0.1.0"

from .config import TablesyncConfig
from .exceptions import (
    TablesyncError,
    ConfigurationError,
    DatabaseError,
    SpecValidationError,
    StatementExecutionError,
)
from .schema import ColumnSpec, TableSpec, SchemaReconciler, SyncResult

__all__ = [
    "__version__",
    "TablesyncConfig",
    "TablesyncError",
    "ConfigurationError",
    "DatabaseError",
    "SpecValidationError",
    "StatementExecutionError",
    "ColumnSpec",
    "TableSpec",
    "SchemaReconciler",
    "SyncResult",
]
