"""
Configuration system for tablesync using Pydantic.
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .database.connection import ConnectionConfig
from .exceptions import ConfigurationError


class SyncSettings(BaseModel):
    """Sync behaviour configuration."""

    drop_columns: bool = Field(
        True, description="Drop live columns that are not declared"
    )
    dry_run: bool = Field(False, description="Plan statements but don't execute them")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Log level"
    )
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file: Optional[str] = Field(None, description="Log file path")

    def apply(self) -> None:
        """Configure the root logger."""
        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            filename=self.file,
            force=True,
        )


class TablesyncConfig(BaseSettings):
    """Main tablesync configuration."""

    database: ConnectionConfig = Field(..., description="Database connection")
    models: List[str] = Field(
        default_factory=list, description="Model files or directories"
    )
    sync: SyncSettings = Field(
        default_factory=SyncSettings, description="Sync behaviour"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TABLESYNC_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TablesyncConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            # Expand environment variables in the data
            data = cls._expand_env_vars(data)

            config = cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

        # Relative model paths are relative to the config file
        base = Path(path).parent
        config.models = [
            str(base / model) if not Path(model).is_absolute() else model
            for model in config.models
        ]
        return config

    @classmethod
    def _expand_env_vars(cls, data: Any) -> Any:
        """Recursively expand environment variables in configuration data."""
        if isinstance(data, dict):
            return {k: cls._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            return os.path.expandvars(data)
        else:
            return data

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_none=True), f, default_flow_style=False, indent=2
            )
