"""
Database layer for tablesync.

Provides the async MySQL connection pool and read-only schema inspection.
"""

from .connection import ConnectionConfig, ConnectionPool, quote_identifier
from .introspection import KeyRole, ObservedColumn, SchemaInspector

__all__ = [
    "ConnectionConfig",
    "ConnectionPool",
    "quote_identifier",
    "KeyRole",
    "ObservedColumn",
    "SchemaInspector",
]
