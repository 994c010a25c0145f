"""
Column definition rendering for MySQL DDL.
"""

from typing import Any

from pymysql.converters import escape_string

from .models import ColumnSpec
from ..exceptions import UnsupportedDefaultError


def render_default(column_name: str, value: Any) -> str:
    """Render a default value as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        raise UnsupportedDefaultError(column_name, value)
    if isinstance(value, (int, float)):
        return repr(value) if isinstance(value, float) else str(value)
    if isinstance(value, str):
        return f"'{escape_string(value)}'"
    raise UnsupportedDefaultError(column_name, value)


def build_definition(column: ColumnSpec) -> str:
    """
    Render the type, nullability, default and auto-increment fragment
    of a column definition.

    The result is ``<type> <NULL|NOT NULL> [DEFAULT <value>] [AUTO_INCREMENT]``.
    The column name is not included.
    """
    parts = [column.type, "NULL" if column.is_null else "NOT NULL"]

    if column.has_default:
        parts.append(f"DEFAULT {render_default(column.name, column.default_value)}")

    if column.auto_increment is True:
        parts.append("AUTO_INCREMENT")

    return " ".join(parts)
