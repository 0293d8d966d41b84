"""
tests/test_validators.py
Comprehensive unit tests for mappergen.validators module.

Tests cover:
- Table → class naming (duplicates, invalid identifiers, collisions)
- Column → field naming per table
- Primary key presence
- Untyped columns and tables wider than one tuple
- Generator config checks (package, encoding, directories, test template)
- Full validation pipeline (validate_full) and the text report
"""

from __future__ import annotations

from typing import List

import pytest

from conftest import make_column
from mappergen.models import GeneratorConfig, Table
from mappergen.validators import (
    ValidationError,
    ValidationResult,
    validate_column_names,
    validate_column_types,
    validate_full,
    validate_generation_config,
    validate_primary_keys,
    validate_table_names,
)


# ===========================================================================
# Helpers
# ===========================================================================


def _table(name: str, *column_names: str) -> Table:
    columns = [make_column(c, "INTEGER", is_not_null=True) for c in column_names]
    return Table.from_columns(name, columns, primary_keys=[column_names[0]] if columns else [])


def _codes(result: ValidationResult) -> List[str]:
    return result.codes()


# ===========================================================================
# ValidationResult
# ===========================================================================


class TestValidationResult:
    """Tests for the result accumulator."""

    def test_empty_is_valid(self) -> None:
        result = ValidationResult()
        assert result.is_valid
        assert bool(result)
        assert len(result) == 0

    def test_levels(self) -> None:
        result = ValidationResult()
        result.add_error("E", "error")
        result.add_warning("W", "warning")
        result.add_info("I", "info")
        assert not result.is_valid
        assert result.error_count == 1
        assert result.warning_count == 1
        assert len(result) == 3
        assert result.summary() == "Validation: 1 error(s), 1 warning(s), 3 total item(s)."

    def test_merge(self) -> None:
        first, second = ValidationResult(), ValidationResult()
        first.add_warning("A", "a")
        second.add_error("B", "b")
        first.merge(second)
        assert _codes(first) == ["A", "B"]
        assert [item.level for item in first.all_items] == ["warning", "error"]

    def test_error_repr_and_dict(self) -> None:
        error = ValidationError("error", "X", "broken", {"table": "emp"})
        assert str(error) == "[ERROR] X: broken"
        assert error.to_dict()["context"] == {"table": "emp"}

    def test_format_report_hides_info_by_default(self) -> None:
        result = ValidationResult()
        result.add_error("BAD", "bad thing", {"table": "emp"})
        result.add_info("FYI", "note")
        report = result.format_report()
        assert "✗ [BAD] bad thing" in report
        assert "table: emp" in report
        assert "FYI" not in report
        assert "ℹ [FYI] note" in result.format_report(include_info=True)


# ===========================================================================
# Table names
# ===========================================================================


class TestValidateTableNames:
    """Tests for table → class name checks."""

    def test_unique_names_pass(self, emp_table: Table, member_table: Table) -> None:
        result = validate_table_names([emp_table, member_table], GeneratorConfig())
        assert result.is_valid
        assert len(result) == 0

    def test_duplicate_table(self, emp_table: Table) -> None:
        result = validate_table_names([emp_table, emp_table], GeneratorConfig())
        assert _codes(result) == ["DUPLICATE_TABLE_NAME"]

    def test_class_name_collision(self) -> None:
        tables = [_table("member_group", "id"), _table("MEMBER_GROUP", "id")]
        result = validate_table_names(tables, GeneratorConfig())
        assert _codes(result) == ["CLASS_NAME_COLLISION"]
        assert result.errors[0].context["tables"] == ["MEMBER_GROUP", "member_group"]

    @pytest.mark.parametrize("name", ["123abc", "my-table"])
    def test_invalid_class_name(self, name: str) -> None:
        result = validate_table_names([_table(name, "id")], GeneratorConfig())
        assert _codes(result) == ["INVALID_CLASS_NAME"]

    def test_custom_naming_policy(self) -> None:
        config = GeneratorConfig(table_name_to_class_name=lambda name: "Same")
        result = validate_table_names([_table("a", "id"), _table("b", "id")], config)
        assert _codes(result) == ["CLASS_NAME_COLLISION"]


# ===========================================================================
# Column names
# ===========================================================================


class TestValidateColumnNames:
    """Tests for column → field name checks."""

    def test_member_passes(self, member_table: Table) -> None:
        assert len(validate_column_names([member_table], GeneratorConfig())) == 0

    def test_no_columns(self) -> None:
        result = validate_column_names([_table("empty")], GeneratorConfig())
        assert _codes(result) == ["TABLE_HAS_NO_COLUMNS"]

    def test_duplicate_column(self) -> None:
        column = make_column("id", "INTEGER")
        table = Table(name="t", all_columns=[column, column])
        result = validate_column_names([table], GeneratorConfig())
        assert _codes(result) == ["DUPLICATE_COLUMN_NAME"]

    def test_field_name_collision_is_a_warning(self) -> None:
        result = validate_column_names([_table("t", "user_id", "USER_ID")], GeneratorConfig())
        assert _codes(result) == ["FIELD_NAME_COLLISION"]
        assert result.is_valid
        assert result.warnings[0].context["field"] == "userId"

    def test_invalid_field_name(self) -> None:
        result = validate_column_names([_table("t", "id", "my-col")], GeneratorConfig())
        assert _codes(result) == ["INVALID_FIELD_NAME"]

    def test_reserved_words_are_valid(self) -> None:
        result = validate_column_names([_table("t", "type", "class")], GeneratorConfig())
        assert result.is_valid


# ===========================================================================
# Primary keys and types
# ===========================================================================


class TestValidatePrimaryKeys:
    """Tests for the missing-primary-key warning."""

    def test_table_with_pk_passes(self, emp_table: Table) -> None:
        assert len(validate_primary_keys([emp_table])) == 0

    def test_table_without_pk_warns(self, emp_table_without_pk: Table) -> None:
        result = validate_primary_keys([emp_table_without_pk])
        assert _codes(result) == ["NO_PRIMARY_KEY"]
        assert result.is_valid
        assert "all 2 columns" in result.warnings[0].message

    def test_empty_table_is_not_flagged(self) -> None:
        assert len(validate_primary_keys([_table("empty")])) == 0


class TestValidateColumnTypes:
    """Tests for informational type notes."""

    def test_typed_columns_pass(self, member_table: Table) -> None:
        assert len(validate_column_types([member_table], GeneratorConfig())) == 0

    def test_untyped_columns(self, any_table: Table) -> None:
        result = validate_column_types([any_table], GeneratorConfig())
        assert _codes(result) == ["UNTYPED_COLUMN", "UNTYPED_COLUMN"]
        assert result.is_valid
        assert not result.has_warnings

    def test_override_removes_note(self, any_table: Table) -> None:
        config = GeneratorConfig(column_name_to_field_type={"GeoPoint.location": "String", "GeoPoint.extra": "String"})
        assert len(validate_column_types([any_table], config)) == 0

    def test_wide_table(self, wide_table: Table) -> None:
        result = validate_column_types([wide_table], GeneratorConfig())
        assert _codes(result) == ["WIDE_TABLE"]


# ===========================================================================
# Generator config
# ===========================================================================


class TestValidateGenerationConfig:
    """Tests for config checks beyond field constraints."""

    def test_defaults_pass(self) -> None:
        assert len(validate_generation_config(GeneratorConfig())) == 0

    @pytest.mark.parametrize("package_name", ["com.1bad", "com..models", "com.my-app"])
    def test_invalid_package(self, package_name: str) -> None:
        result = validate_generation_config(GeneratorConfig(package_name=package_name))
        assert _codes(result) == ["INVALID_PACKAGE_NAME"]

    def test_empty_package_warns(self) -> None:
        result = validate_generation_config(GeneratorConfig(package_name=""))
        assert _codes(result) == ["EMPTY_PACKAGE_NAME"]
        assert result.is_valid

    def test_unknown_encoding(self) -> None:
        result = validate_generation_config(GeneratorConfig(encoding="no-such-codec"))
        assert _codes(result) == ["UNKNOWN_ENCODING"]

    def test_empty_directories(self) -> None:
        result = validate_generation_config(GeneratorConfig(src_dir="", test_dir=""))
        assert _codes(result) == ["EMPTY_SRC_DIR", "EMPTY_TEST_DIR"]

    def test_unknown_test_template_warns(self) -> None:
        result = validate_generation_config(GeneratorConfig(test_template="junit"))
        assert _codes(result) == ["UNKNOWN_TEST_TEMPLATE"]
        assert result.is_valid

    def test_known_test_template_passes(self) -> None:
        result = validate_generation_config(GeneratorConfig(test_template="specs2acceptance"))
        assert len(result) == 0


# ===========================================================================
# Full pipeline
# ===========================================================================


class TestValidateFull:
    """Tests for validate_full."""

    def test_valid_input(self, emp_table: Table, member_table: Table, config: GeneratorConfig) -> None:
        result = validate_full([emp_table, member_table], config)
        assert result.is_valid
        assert not result.has_warnings

    def test_collects_everything(self, emp_table_without_pk: Table) -> None:
        config = GeneratorConfig(package_name="", encoding="nope")
        result = validate_full([emp_table_without_pk, emp_table_without_pk], config)
        codes = _codes(result)
        assert "DUPLICATE_TABLE_NAME" in codes
        assert "NO_PRIMARY_KEY" in codes
        assert "EMPTY_PACKAGE_NAME" in codes
        assert "UNKNOWN_ENCODING" in codes
        assert not result.is_valid

    def test_skip_unknown_table(self, emp_table: Table, config: GeneratorConfig) -> None:
        result = validate_full([emp_table], config.with_overrides(table_names_to_skip=["ghost"]))
        assert _codes(result) == ["SKIP_UNKNOWN_TABLE"]
        assert result.is_valid

    def test_skip_list_is_case_insensitive(self, emp_table: Table, config: GeneratorConfig) -> None:
        result = validate_full([emp_table], config.with_overrides(table_names_to_skip=["EMP"]))
        assert len(result) == 0
