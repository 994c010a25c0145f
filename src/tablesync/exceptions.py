"""
Exception classes for tablesync.
"""

from typing import Any, Dict, List, Optional


class TablesyncError(Exception):
    """Base exception for all tablesync errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            result += f" [{details_str}]"
        if self.cause:
            result += f" (caused by: {self.cause})"
        return result


class ConfigurationError(TablesyncError):
    """Raised when there's an error in configuration."""

    pass


class ValidationError(TablesyncError):
    """Raised when there's a validation error."""

    pass


class SpecValidationError(ValidationError):
    """Raised when a table declaration is malformed or self-contradictory."""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        column_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if table_name:
            details["table"] = table_name
        if column_name:
            details["column"] = column_name
        super().__init__(message, details)
        self.table_name = table_name
        self.column_name = column_name


class UnsupportedDefaultError(SpecValidationError):
    """Raised when a column default has no SQL rendering."""

    def __init__(self, column_name: str, value: Any) -> None:
        super().__init__(
            f"Unsupported default value type {type(value).__name__} "
            f"for column '{column_name}'",
            column_name=column_name,
        )
        self.value = value


class DatabaseError(TablesyncError):
    """Raised when there's an error with database operations."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when there's an error establishing or maintaining database connections."""

    pass


class DatabaseConfigurationError(DatabaseError):
    """Raised when there's an error in database configuration."""

    pass


class SchemaError(DatabaseError):
    """Raised when reading the live schema fails."""

    pass


class StatementExecutionError(DatabaseError):
    """Raised when a DDL statement fails; earlier statements stay applied."""

    def __init__(
        self,
        table: str,
        statement_index: int,
        sql: str,
        cause: Optional[Exception] = None,
        applied: Optional[List[Any]] = None,
    ) -> None:
        super().__init__(
            f"Statement {statement_index} failed for table '{table}'",
            {"sql": sql},
            cause,
        )
        self.table = table
        self.statement_index = statement_index
        self.sql = sql
        self.applied = applied or []
