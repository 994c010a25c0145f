"""
Model file loading.

A model file is YAML or JSON holding one table mapping, a list of table
mappings, or a mapping with a ``tables`` list.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import yaml
from pydantic import ValidationError

from .exceptions import SpecValidationError
from .schema.models import TableSpec


logger = logging.getLogger(__name__)

MODEL_SUFFIXES = (".yaml", ".yml", ".json")


def load_table_spec(data: Dict[str, Any]) -> TableSpec:
    """Build a TableSpec from a mapping, raising SpecValidationError on bad data."""
    if not isinstance(data, dict):
        raise SpecValidationError(f"Table model must be a mapping, got {type(data).__name__}")

    try:
        return TableSpec.model_validate(data)
    except ValidationError as e:
        raise SpecValidationError(
            f"Invalid table model: {e}",
            table_name=data.get("name") if isinstance(data.get("name"), str) else None,
        ) from e


def load_model_file(path: Union[str, Path]) -> List[TableSpec]:
    """Load every table declared in one model file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise SpecValidationError(f"Model file not found: {path}")
    except yaml.YAMLError as e:
        raise SpecValidationError(f"Invalid model file {path}: {e}")

    if isinstance(data, dict) and "tables" in data:
        data = data["tables"]
    tables = data if isinstance(data, list) else [data]

    specs = [load_table_spec(table) for table in tables]
    logger.debug(f"Loaded {len(specs)} table models from {path}")
    return specs


def load_models(paths: Iterable[Union[str, Path]]) -> List[TableSpec]:
    """Load model files and directories of model files, in sorted order."""
    specs: List[TableSpec] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            for child in sorted(path.iterdir()):
                if child.suffix.lower() in MODEL_SUFFIXES:
                    specs.extend(load_model_file(child))
        else:
            specs.extend(load_model_file(path))
    return specs
