"""
Declared table and column models.

Model files use camelCase keys (``isNull``, ``defaultValue`` ...); both
those and the snake_case field names are accepted.
"""

import math
import re
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator


_OPTION_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


class ColumnSpec(BaseModel):
    """Declared target shape of one column."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Column name")
    type: str = Field(..., min_length=1, description="Vendor type expression, e.g. VARCHAR(255)")
    is_null: StrictBool = Field(False, alias="isNull", description="Allow NULL values")
    default_value: Any = Field(None, alias="defaultValue", description="Column default")
    auto_increment: StrictBool = Field(False, alias="autoIncrement")
    is_primary_key: StrictBool = Field(False, alias="isPrimaryKey")
    is_index: Optional[StrictBool] = Field(
        None,
        alias="isIndex",
        description="True ensures a secondary index, False removes one, None leaves it alone",
    )

    @field_validator("default_value")
    @classmethod
    def validate_default_value(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            if isinstance(v, float) and not math.isfinite(v):
                raise ValueError("default value must be a finite number")
            return v
        raise ValueError(f"unsupported default value type: {type(v).__name__}")

    @property
    def has_default(self) -> bool:
        """True when a default was declared, including an explicit null."""
        return "default_value" in self.model_fields_set


class TableSpec(BaseModel):
    """Declared target shape of one table."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Table name")
    engine: str = Field(..., description="Storage engine, e.g. InnoDB")
    charset: str = Field(..., description="Default character set")
    collation: str = Field(..., description="Default collation")
    columns: Tuple[ColumnSpec, ...] = Field(..., min_length=1)

    @field_validator("engine", "charset", "collation")
    @classmethod
    def validate_option(cls, v: str) -> str:
        # Table options are interpolated into DDL unquoted
        if not _OPTION_PATTERN.match(v):
            raise ValueError(f"invalid table option: {v!r}")
        return v

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def get_column(self, name: str) -> Optional[ColumnSpec]:
        for column in self.columns:
            if column.name == name:
                return column
        return None
