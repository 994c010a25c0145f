"""
Tests for tablesync.loader module.
"""

import json

import pytest

from tablesync.exceptions import SpecValidationError
from tablesync.loader import load_model_file, load_models, load_table_spec


USERS_YAML = """
name: users
engine: InnoDB
charset: utf8mb4
collation: utf8mb4_unicode_ci
columns:
  - name: id
    type: INT
    autoIncrement: true
    isPrimaryKey: true
  - name: email
    type: VARCHAR(255)
    isIndex: true
"""


def table_dict(name, columns=None):
    return {
        "name": name,
        "engine": "InnoDB",
        "charset": "utf8mb4",
        "collation": "utf8mb4_bin",
        "columns": columns or [{"name": "id", "type": "INT"}],
    }


class TestLoadTableSpec:
    """Test building a TableSpec from raw data."""

    def test_valid(self):
        spec = load_table_spec(table_dict("orders"))

        assert spec.name == "orders"
        assert spec.column_names == ("id",)

    def test_not_a_mapping(self):
        with pytest.raises(SpecValidationError, match="must be a mapping"):
            load_table_spec(["orders"])

    def test_invalid_model_names_table(self):
        with pytest.raises(SpecValidationError) as exc_info:
            load_table_spec(table_dict("orders", [{"name": "id"}]))

        assert exc_info.value.table_name == "orders"
        assert "Invalid table model" in exc_info.value.message


class TestLoadModelFile:
    """Test reading model files."""

    def test_single_table_yaml(self, tmp_path):
        path = tmp_path / "users.yaml"
        path.write_text(USERS_YAML)

        specs = load_model_file(path)

        assert len(specs) == 1
        assert specs[0].get_column("id").is_primary_key is True
        assert specs[0].get_column("email").is_index is True

    def test_tables_key(self, tmp_path):
        path = tmp_path / "models.yaml"
        path.write_text(json.dumps({"tables": [table_dict("a"), table_dict("b")]}))

        assert [s.name for s in load_model_file(path)] == ["a", "b"]

    def test_json_list(self, tmp_path):
        path = tmp_path / "models.json"
        path.write_text(json.dumps([table_dict("a"), table_dict("b")]))

        assert [s.name for s in load_model_file(path)] == ["a", "b"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SpecValidationError, match="Model file not found"):
            load_model_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("name: [unclosed")

        with pytest.raises(SpecValidationError, match="Invalid model file"):
            load_model_file(path)


class TestLoadModels:
    """Test loading several model paths."""

    def test_directory_sorted_and_filtered(self, tmp_path):
        (tmp_path / "b.yaml").write_text(json.dumps(table_dict("b")))
        (tmp_path / "a.json").write_text(json.dumps(table_dict("a")))
        (tmp_path / "notes.txt").write_text("not a model")

        specs = load_models([tmp_path])

        assert [s.name for s in specs] == ["a", "b"]

    def test_files_keep_given_order(self, tmp_path):
        (tmp_path / "z.yaml").write_text(json.dumps(table_dict("z")))
        (tmp_path / "y.yaml").write_text(json.dumps(table_dict("y")))

        specs = load_models([tmp_path / "z.yaml", str(tmp_path / "y.yaml")])

        assert [s.name for s in specs] == ["z", "y"]
