"""
tests/conftest.py
Shared fixtures for the mappergen test suite.

All fixtures are function-scoped unless noted otherwise.
No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict, List

import pytest
import yaml

from mappergen.models import Column, GeneratorConfig, Table


# ---------------------------------------------------------------------------
# Column helpers
# ---------------------------------------------------------------------------


def make_column(name: str, data_type: str, **kwargs: Any) -> Column:
    """Build a Column from a JDBC type name, e.g. ``make_column("id", "BIGINT")``."""
    return Column.model_validate({"name": name, "data_type": data_type, **kwargs})


def wide_columns(count: int) -> List[Column]:
    """``c0 .. c{count-1}``: one BIGINT key followed by NOT NULL INTEGER columns."""
    columns: List[Column] = [make_column("c0", "BIGINT", is_not_null=True)]
    columns.extend(
        make_column(f"c{i}", "INTEGER", is_not_null=True) for i in range(1, count)
    )
    return columns


# ---------------------------------------------------------------------------
# Table fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def emp_table() -> Table:
    """``emp(id BIGINT auto-increment PK, name VARCHAR(30) NOT NULL)``."""
    return Table.from_columns(
        "emp",
        [
            make_column("id", "BIGINT", is_not_null=True, is_auto_increment=True),
            make_column("name", "VARCHAR", size=30, is_not_null=True),
        ],
        primary_keys=["id"],
    )


@pytest.fixture()
def emp_table_without_pk(emp_table: Table) -> Table:
    """Same columns as ``emp_table`` but no declared primary key."""
    return Table.from_columns("emp", emp_table.all_columns)


@pytest.fixture()
def member_table() -> Table:
    """
    A table touching most code paths: nullable text and dates, a timestamp,
    a reserved-word column, a conflicting column name, a generated column.
    """
    return Table.from_columns(
        "member",
        [
            make_column("id", "BIGINT", is_not_null=True, is_auto_increment=True),
            make_column("name", "VARCHAR", size=30, is_not_null=True),
            make_column("description", "VARCHAR", size=1000),
            make_column("birthday", "DATE"),
            make_column("type", "VARCHAR", size=10, is_not_null=True),
            make_column("copy", "INTEGER"),
            make_column("total_score", "INTEGER", is_not_null=True, is_generated=True),
            make_column("created_at", "TIMESTAMP", is_not_null=True),
        ],
        primary_keys=["id"],
    )


@pytest.fixture()
def any_table() -> Table:
    """A table with an untyped (OTHER) column next to a typed one."""
    return Table.from_columns(
        "geo_point",
        [
            make_column("id", "INTEGER", is_not_null=True),
            make_column("location", "OTHER", is_not_null=True),
            make_column("extra", "OTHER"),
        ],
        primary_keys=["id"],
    )


@pytest.fixture()
def wide_table() -> Table:
    """30 columns: wider than one Scala tuple."""
    return Table.from_columns("wide_record", wide_columns(30), primary_keys=["c0"])


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config(tmp_path: pathlib.Path) -> GeneratorConfig:
    """Default config writing below ``tmp_path``, with ScalaTest specs."""
    return GeneratorConfig(
        src_dir=str(tmp_path / "src" / "main" / "scala"),
        test_dir=str(tmp_path / "src" / "test" / "scala"),
        package_name="models",
        test_template="ScalaTestFlatSpec",
    )


@pytest.fixture()
def interpolation_config(config: GeneratorConfig) -> GeneratorConfig:
    return config.with_overrides(template="interpolation")


# ---------------------------------------------------------------------------
# Raw input fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def raw_input_dict(tmp_path: pathlib.Path) -> Dict[str, Any]:
    """The dictionary shape of an input file: ``config`` + ``tables``."""
    return {
        "config": {
            "src_dir": str(tmp_path / "out" / "main"),
            "test_dir": str(tmp_path / "out" / "test"),
            "package_name": "com.example.models",
            "template": "queryDsl",
            "test_template": "specs2unit",
            "return_collection_type": "Vector",
            "table_names_to_skip": ["SCHEMA_VERSION"],
        },
        "tables": [
            {
                "name": "member",
                "primary_keys": ["id"],
                "columns": [
                    {"name": "id", "data_type": "BIGINT", "is_not_null": True, "is_auto_increment": True},
                    {"name": "name", "data_type": "VARCHAR", "size": 30, "is_not_null": True},
                    {"name": "created_at", "data_type": 93, "is_not_null": True},
                ],
            },
            {
                "name": "schema_version",
                "primary_keys": ["version"],
                "columns": [
                    {"name": "version", "data_type": "VARCHAR", "size": 50, "is_not_null": True},
                ],
            },
        ],
    }


@pytest.fixture()
def input_dict(raw_input_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_input_dict)


@pytest.fixture()
def input_yaml_path(input_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the input dict to a temporary YAML file and return its path."""
    path = tmp_path / "tables.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(input_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def input_json_path(input_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the input dict to a temporary JSON file and return its path."""
    path = tmp_path / "tables.json"
    path.write_text(json.dumps(input_dict, indent=2), encoding="utf-8")
    return path
