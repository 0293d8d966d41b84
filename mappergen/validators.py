# File: mappergen/validators.py
"""
mappergen - Table & Configuration Validators
=============================================
A **pure-function validation pipeline** over the Pydantic models defined in
``mappergen.models``.

Pydantic handles per-field structure (and the ``Table`` subset invariant).
This module adds the checks that need the naming policies: duplicate
tables, classes that would land in the same file, field-name collisions,
tables that fall back to "every column is the key", and configuration
sanity.

Nothing here judges whether the schema itself is well designed; the
generator takes introspected metadata as it is.

Usage by downstream modules:
    from mappergen.validators import validate_full
    result = validate_full(tables, config)
    if not result.is_valid:
        raise SystemExit(1)
"""

from __future__ import annotations

import codecs
import logging
import re
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from mappergen.arbitrary import MAX_TUPLE_ARITY
from mappergen.models import GeneratorConfig, JdbcType, Table
from mappergen.specs import resolve_test_template
from mappergen.typemap import TableView, TypeName

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight error descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the pipeline."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "error": "✗",
                "warning": "⚠",
                "info": "ℹ",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            if item.context:
                for k, v in item.context.items():
                    lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_SCALA_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_QUOTED_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^`[^`]+`$")

_KNOWN_JDBC_CODES: Set[int] = {int(t) for t in JdbcType}


def _is_identifier(name: str) -> bool:
    return bool(_SCALA_IDENTIFIER_RE.match(name) or _QUOTED_IDENTIFIER_RE.match(name))


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_table_names(
    tables: Sequence[Table],
    config: GeneratorConfig,
) -> ValidationResult:
    """
    Validate table → class naming:
    - No duplicate table names
    - Class names are valid identifiers
    - No two tables map to the same class (and therefore the same file)
    """
    result: ValidationResult = ValidationResult()
    seen_tables: Set[str] = set()
    classes: Dict[str, List[str]] = defaultdict(list)

    for table in tables:
        ctx: Dict[str, Any] = {"table": table.name}
        if table.name in seen_tables:
            result.add_error(
                "DUPLICATE_TABLE_NAME",
                f"Table '{table.name}' is defined more than once.",
                ctx,
            )
        seen_tables.add(table.name)

        class_name: str = config.table_name_to_class_name(table.name)
        if not class_name or not _SCALA_IDENTIFIER_RE.match(class_name):
            result.add_error(
                "INVALID_CLASS_NAME",
                f"Table '{table.name}' maps to class name '{class_name}', "
                f"which is not a valid identifier.",
                {**ctx, "class_name": class_name},
            )
            continue
        classes[class_name].append(table.name)

    for class_name, owners in classes.items():
        unique_owners: List[str] = sorted(set(owners))
        if len(unique_owners) > 1:
            result.add_error(
                "CLASS_NAME_COLLISION",
                f"Tables {unique_owners} all map to class '{class_name}'.",
                {"class_name": class_name, "tables": unique_owners},
            )

    logger.debug(
        "validate_table_names: checked %d tables, %d issue(s).",
        len(tables),
        len(result),
    )
    return result


def validate_column_names(
    tables: Sequence[Table],
    config: GeneratorConfig,
) -> ValidationResult:
    """
    Validate column → field naming per table:
    - At least one column
    - No duplicate column names
    - Field names are identifiers (possibly back-quoted)
    - Distinct columns do not collapse onto one field name
    """
    result: ValidationResult = ValidationResult()

    for table in tables:
        ctx: Dict[str, Any] = {"table": table.name}
        if not table.all_columns:
            result.add_error(
                "TABLE_HAS_NO_COLUMNS",
                f"Table '{table.name}' has no columns.",
                ctx,
            )
            continue

        seen_columns: Set[str] = set()
        fields: Dict[str, List[str]] = defaultdict(list)
        for column in table.all_columns:
            if column.name in seen_columns:
                result.add_error(
                    "DUPLICATE_COLUMN_NAME",
                    f"Column '{table.name}.{column.name}' is defined more than once.",
                    {**ctx, "column": column.name},
                )
            seen_columns.add(column.name)

            field_name: str = config.column_name_to_field_name(column.name)
            if not _is_identifier(field_name):
                result.add_error(
                    "INVALID_FIELD_NAME",
                    f"Column '{table.name}.{column.name}' maps to field "
                    f"'{field_name}', which is not a valid identifier.",
                    {**ctx, "column": column.name, "field": field_name},
                )
            fields[field_name].append(column.name)

        for field_name, owners in fields.items():
            unique_owners: List[str] = sorted(set(owners))
            if len(unique_owners) > 1:
                result.add_warning(
                    "FIELD_NAME_COLLISION",
                    f"Columns {unique_owners} of '{table.name}' all map to "
                    f"field '{field_name}'; the generated class will not compile.",
                    {**ctx, "field": field_name, "columns": unique_owners},
                )

    return result


def validate_primary_keys(tables: Sequence[Table]) -> ValidationResult:
    """Flag tables whose keyed operations fall back to matching every column."""
    result: ValidationResult = ValidationResult()
    for table in tables:
        if not table.primary_key_columns and table.all_columns:
            result.add_warning(
                "NO_PRIMARY_KEY",
                f"Table '{table.name}' has no primary key; find/save/destroy "
                f"will match on all {len(table.all_columns)} columns.",
                {"table": table.name},
            )
    return result


def validate_column_types(
    tables: Sequence[Table],
    config: GeneratorConfig,
) -> ValidationResult:
    """Report columns that resolve to ``Any`` or tables wider than one tuple."""
    result: ValidationResult = ValidationResult()
    for table in tables:
        view: TableView = TableView.build(table, config)
        for column_view in view.all_columns:
            if column_view.is_any:
                known: bool = column_view.column.data_type in _KNOWN_JDBC_CODES
                result.add_info(
                    "UNTYPED_COLUMN",
                    f"Column '{table.name}.{column_view.name}' "
                    f"({column_view.column.data_type_name or column_view.column.data_type}) "
                    f"maps to {TypeName.ANY}; inserts and updates bind it explicitly.",
                    {"table": table.name, "column": column_view.name, "known_code": known},
                )
        if len(table.all_columns) > MAX_TUPLE_ARITY:
            result.add_info(
                "WIDE_TABLE",
                f"Table '{table.name}' has {len(table.all_columns)} columns; "
                f"the arbitrary generator splits them into groups of {MAX_TUPLE_ARITY}.",
                {"table": table.name},
            )
    return result


def validate_generation_config(config: GeneratorConfig) -> ValidationResult:
    """Semantic checks on ``GeneratorConfig`` beyond Pydantic field constraints."""
    result: ValidationResult = ValidationResult()

    if config.package_name:
        for segment in config.package_name.split("."):
            if not _SCALA_IDENTIFIER_RE.match(segment):
                result.add_error(
                    "INVALID_PACKAGE_NAME",
                    f"Package name '{config.package_name}' has an invalid "
                    f"segment '{segment}'.",
                    {"package_name": config.package_name},
                )
                break
    else:
        result.add_warning(
            "EMPTY_PACKAGE_NAME",
            "package_name is empty; generated files will not compile.",
        )

    try:
        codecs.lookup(config.encoding)
    except LookupError:
        result.add_error(
            "UNKNOWN_ENCODING",
            f"Encoding '{config.encoding}' is not known to Python.",
            {"encoding": config.encoding},
        )

    if not config.src_dir:
        result.add_error("EMPTY_SRC_DIR", "src_dir must not be empty.")
    if not config.test_dir:
        result.add_error("EMPTY_TEST_DIR", "test_dir must not be empty.")

    if config.test_template and resolve_test_template(config.test_template) is None:
        result.add_warning(
            "UNKNOWN_TEST_TEMPLATE",
            f"Test template '{config.test_template}' is not supported; "
            f"no specs will be generated.",
            {"test_template": config.test_template},
        )

    return result


def validate_tables(
    tables: Sequence[Table],
    config: GeneratorConfig,
) -> ValidationResult:
    """Run every table-level validator.  Returns a merged ``ValidationResult``."""
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[], ValidationResult]] = [
        lambda: validate_table_names(tables, config),
        lambda: validate_column_names(tables, config),
        lambda: validate_primary_keys(tables),
        lambda: validate_column_types(tables, config),
    ]
    for validator_fn in validators:
        result.merge(validator_fn())

    logger.info("Table validation complete: %s", result.summary())
    return result


def validate_full(
    tables: Sequence[Table],
    config: GeneratorConfig,
) -> ValidationResult:
    """
    **Master validation entry point.**

    Table-level validators, config validators, and the cross-check of
    ``table_names_to_skip`` against the known tables.
    """
    logger.info("Starting full validation: %d table(s).", len(tables))

    result: ValidationResult = ValidationResult()
    result.merge(validate_tables(tables, config))
    result.merge(validate_generation_config(config))

    known: Set[str] = {t.name.lower() for t in tables}
    for skipped in config.table_names_to_skip:
        if skipped not in known:
            result.add_warning(
                "SKIP_UNKNOWN_TABLE",
                f"table_names_to_skip lists '{skipped}', which is not among the input tables.",
                {"table": skipped},
            )

    if result.has_errors:
        logger.error("Validation FAILED. %s", result.summary())
    else:
        logger.info("Validation PASSED. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_table_names",
    "validate_column_names",
    "validate_primary_keys",
    "validate_column_types",
    "validate_generation_config",
    "validate_tables",
    "validate_full",
]

logger.debug("mappergen.validators loaded: %d public symbols.", len(__all__))
