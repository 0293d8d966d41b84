# File: mappergen/models.py
"""
mappergen - Core Data Models
=============================
Pydantic V2 models for the two inputs of every generation run, the
introspected ``Table`` / ``Column`` metadata and the ``GeneratorConfig``
policy bundle, plus the ``GeneratedUnit`` output value.

All models are frozen: a generation run never mutates its inputs, so every
emitter is a pure function of ``(Table, GeneratorConfig)``.

Policies (naming, type overrides, base types) are stored as plain
callables.  When a config is loaded from YAML/JSON those fields may be
given as mappings instead; a ``before`` validator turns each mapping into
the equivalent lookup function.
"""

from __future__ import annotations

import logging
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from mappergen import utils as naming
from mappergen.utils import count_lines, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class _LenientEnumMixin:
    """Accept either the enum value or the member name (case-insensitive)."""

    @classmethod
    def parse(cls, value: Any) -> Any:
        if isinstance(value, cls):
            return value
        for member in cls:  # type: ignore[attr-defined]
            if value == member.value:
                return member
        if isinstance(value, str):
            wanted: str = value.replace("_", "").replace("-", "").lower()
            for member in cls:  # type: ignore[attr-defined]
                if member.name.replace("_", "").lower() == wanted:
                    return member
        return value


class JdbcType(IntEnum):
    """``java.sql.Types`` codes."""

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    JAVA_OBJECT = 2000
    DISTINCT = 2001
    STRUCT = 2002
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    REF = 2006
    DATALINK = 70
    BOOLEAN = 16
    ROWID = -8
    NCHAR = -15
    NVARCHAR = -9
    LONGNVARCHAR = -16
    NCLOB = 2011
    SQLXML = 2009
    REF_CURSOR = 2012
    TIME_WITH_TIMEZONE = 2013
    TIMESTAMP_WITH_TIMEZONE = 2014


class GeneratorTemplate(_LenientEnumMixin, str, Enum):
    """How generated methods build their SQL."""

    INTERPOLATION = "interpolation"
    QUERY_DSL = "queryDsl"


class TestTemplate(_LenientEnumMixin, str, Enum):
    """Known test-framework identifiers for the spec emitter."""

    __test__ = False

    SCALATEST_FLAT_SPEC = "ScalaTestFlatSpec"
    SPECS2_UNIT = "specs2unit"
    SPECS2_ACCEPTANCE = "specs2acceptance"


class ReturnCollectionType(_LenientEnumMixin, str, Enum):
    """Container returned by multi-row reads and batch inserts."""

    LIST = "List"
    VECTOR = "Vector"
    ARRAY = "Array"
    FACTORY = "Factory"


class DateTimeClass(_LenientEnumMixin, str, Enum):
    """Type used for JDBC ``TIMESTAMP`` columns."""

    JODA_DATE_TIME = "org.joda.time.DateTime"
    ZONED_DATE_TIME = "java.time.ZonedDateTime"
    OFFSET_DATE_TIME = "java.time.OffsetDateTime"
    LOCAL_DATE_TIME = "java.time.LocalDateTime"

    @property
    def simple_name(self) -> str:
        return self.value.rsplit(".", 1)[-1]

    @property
    def is_joda(self) -> bool:
        return self is DateTimeClass.JODA_DATE_TIME

    @property
    def package(self) -> str:
        return self.value.rsplit(".", 1)[0]


class LineBreak(_LenientEnumMixin, str, Enum):
    """Line separator used in every emitted file."""

    CR = "\r"
    LF = "\n"
    CRLF = "\r\n"


# ---------------------------------------------------------------------------
# Mixin: shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Schema metadata
# ---------------------------------------------------------------------------


class Column(BaseModel):
    """
    One introspected column.

    ``data_type`` is the JDBC type code; ``data_type_name`` is the
    driver-reported type name (``varchar``, ``int8``, ...), used by
    type-name overrides.  A JDBC type name such as ``"VARCHAR"`` is also
    accepted for ``data_type``.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Column name as in the database.")
    data_type: int = Field(..., description="JDBC type code (java.sql.Types).")
    data_type_name: str = Field(default="", description="Driver type name.")
    size: int = Field(default=0, ge=0, description="Declared column size.")
    is_not_null: bool = Field(default=False, description="NOT NULL constraint.")
    is_auto_increment: bool = Field(default=False, description="Auto-increment column.")
    is_generated: bool = Field(default=False, description="Generated (computed) column.")

    @model_validator(mode="before")
    @classmethod
    def _accept_jdbc_type_names(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw_type: Any = data.get("data_type")
        if isinstance(raw_type, str) and not raw_type.lstrip("-").isdigit():
            try:
                data["data_type"] = int(JdbcType[raw_type.upper()])
            except KeyError as exc:
                raise ValueError(f"Unknown JDBC type name: {raw_type!r}") from exc
        if not data.get("data_type_name") and data.get("data_type") is not None:
            try:
                data["data_type_name"] = JdbcType(int(data["data_type"])).name
            except ValueError:
                data["data_type_name"] = "OTHER"
        return data

    def __repr__(self) -> str:
        null_flag: str = " NOT NULL" if self.is_not_null else " NULL"
        return f"<Column {self.name} {self.data_type_name}({self.size}){null_flag}>"


class Table(BaseModel):
    """
    Introspected table metadata.

    Invariant: every column in ``auto_increment_columns``,
    ``primary_key_columns`` and ``generated_columns`` also appears in
    ``all_columns`` (matched by name).  When no primary key is declared the
    emitters key every operation on all columns; see ``key_columns``.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Table name.")
    all_columns: List[Column] = Field(
        ..., description="Columns in declaration order."
    )
    auto_increment_columns: List[Column] = Field(default_factory=list)
    primary_key_columns: List[Column] = Field(default_factory=list)
    generated_columns: List[Column] = Field(default_factory=list)
    schema_name: Optional[str] = Field(default=None, description="Database schema.")

    @model_validator(mode="after")
    def _subsets_are_declared(self) -> "Table":
        names: Set[str] = {c.name for c in self.all_columns}
        for label, subset in (
            ("auto_increment_columns", self.auto_increment_columns),
            ("primary_key_columns", self.primary_key_columns),
            ("generated_columns", self.generated_columns),
        ):
            missing: List[str] = [c.name for c in subset if c.name not in names]
            if missing:
                raise ValueError(
                    f"Table '{self.name}': {label} references columns "
                    f"not in all_columns: {missing}"
                )
        return self

    @classmethod
    def from_columns(
        cls,
        name: str,
        columns: Sequence[Column],
        *,
        primary_keys: Sequence[str] = (),
        schema_name: Optional[str] = None,
    ) -> "Table":
        """
        Build a table from a flat column list.

        Auto-increment and generated subsets are derived from the column
        flags; primary keys are given by name, in key order.
        """
        by_name: Dict[str, Column] = {c.name: c for c in columns}
        missing: List[str] = [pk for pk in primary_keys if pk not in by_name]
        if missing:
            raise ValueError(
                f"Table '{name}': primary keys not among columns: {missing}"
            )
        return cls(
            name=name,
            all_columns=list(columns),
            auto_increment_columns=[c for c in columns if c.is_auto_increment],
            primary_key_columns=[by_name[pk] for pk in primary_keys],
            generated_columns=[c for c in columns if c.is_generated],
            schema_name=schema_name,
        )

    # -- Column partitions --------------------------------------------------

    def _names(self, columns: Sequence[Column]) -> Set[str]:
        return {c.name for c in columns}

    @property
    def key_columns(self) -> List[Column]:
        """Primary keys, or every column when none is declared."""
        if self.primary_key_columns:
            return list(self.primary_key_columns)
        return list(self.all_columns)

    @property
    def insert_columns(self) -> List[Column]:
        """All columns minus auto-increment and generated ones."""
        excluded: Set[str] = self._names(self.auto_increment_columns) | self._names(
            self.generated_columns
        )
        return [c for c in self.all_columns if c.name not in excluded]

    @property
    def update_columns(self) -> List[Column]:
        """All columns minus generated ones."""
        excluded: Set[str] = self._names(self.generated_columns)
        return [c for c in self.all_columns if c.name not in excluded]

    def is_auto_increment(self, column: Column) -> bool:
        return column.name in self._names(self.auto_increment_columns)

    def is_generated(self, column: Column) -> bool:
        return column.name in self._names(self.generated_columns)

    def __repr__(self) -> str:
        return (
            f"<Table {self.name} ({len(self.all_columns)} cols, "
            f"pk={[c.name for c in self.primary_key_columns]})>"
        )


# ---------------------------------------------------------------------------
# Policy functions & their mapping adapters
# ---------------------------------------------------------------------------

FieldTypeLookup = Callable[[str, str], Optional[str]]
NameLookup = Callable[[str], Optional[str]]
BaseTypesLookup = Callable[[str], List[str]]


def no_field_type_override(class_name: str, field_name: str) -> Optional[str]:
    return None


def no_override(key: str) -> Optional[str]:
    return None


def no_base_types(table_name: str) -> List[str]:
    return []


def field_type_lookup(mapping: Mapping[Any, str]) -> FieldTypeLookup:
    """
    Turn ``{"Member.createdAt": "ZonedDateTime"}`` (or tuple keys) into a
    ``(class_name, field_name) -> Optional[type]`` lookup.
    """
    table: Dict[Tuple[str, str], str] = {}
    for key, value in mapping.items():
        if isinstance(key, tuple):
            class_name, field_name = key
        else:
            class_name, _, field_name = str(key).partition(".")
        table[(class_name, field_name)] = value

    def _lookup(class_name: str, field_name: str) -> Optional[str]:
        return table.get((class_name, field_name))

    return _lookup


def name_lookup(mapping: Mapping[str, str]) -> NameLookup:
    table: Dict[str, str] = dict(mapping)

    def _lookup(key: str) -> Optional[str]:
        return table.get(key)

    return _lookup


def base_types_lookup(value: Any) -> BaseTypesLookup:
    """A list applies to every table; a mapping is keyed by table name."""
    if isinstance(value, Mapping):
        table: Dict[str, List[str]] = {k: list(v) for k, v in value.items()}

        def _by_table(table_name: str) -> List[str]:
            return list(table.get(table_name, []))

        return _by_table

    types: List[str] = list(value)

    def _for_all(table_name: str) -> List[str]:
        return list(types)

    return _for_all


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Every policy that shapes generated code.

    Pure data: defaults give the out-of-the-box behaviour and each field can
    be replaced on its own (``config.with_overrides(template="interpolation")``).
    """

    model_config = ConfigDict(
        strict=False,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    # -- Output -------------------------------------------------------------
    src_dir: str = Field(default="src/main/scala", description="Model source root.")
    test_dir: str = Field(default="src/test/scala", description="Test source root.")
    package_name: str = Field(default="models", description="Scala package.")
    line_break: LineBreak = Field(default=LineBreak.LF)
    encoding: str = Field(default="UTF-8", min_length=1)

    # -- Templates ----------------------------------------------------------
    template: GeneratorTemplate = Field(default=GeneratorTemplate.QUERY_DSL)
    test_template: str = Field(
        default="",
        description="Test framework id; unknown ids produce no spec.",
    )
    return_collection_type: ReturnCollectionType = Field(
        default=ReturnCollectionType.LIST
    )
    date_time_class: DateTimeClass = Field(default=DateTimeClass.ZONED_DATE_TIME)
    auto_construct: bool = Field(default=False)
    default_auto_session: bool = Field(default=True)
    abstract_spec: bool = Field(default=False)

    # -- Naming policies ----------------------------------------------------
    table_name_to_class_name: Callable[[str], str] = Field(
        default=naming.table_name_to_class_name
    )
    column_name_to_field_name: Callable[[str], str] = Field(
        default=naming.column_name_to_field_name
    )
    table_name_to_syntax_name: Callable[[str], str] = Field(
        default=naming.table_name_to_syntax_name
    )
    table_name_to_syntax_variable_name: Callable[[str], str] = Field(
        default=naming.table_name_to_syntax_name
    )

    # -- Type overrides -----------------------------------------------------
    column_name_to_field_type: Callable[[str, str], Optional[str]] = Field(
        default=no_field_type_override
    )
    column_type_to_field_type: Callable[[str], Optional[str]] = Field(
        default=no_override
    )
    field_type_to_default_value: Callable[[str], Optional[str]] = Field(
        default=no_override
    )

    # -- Tables & extra types -----------------------------------------------
    table_names_to_skip: List[str] = Field(default_factory=list)
    table_name_to_base_types: Callable[[str], List[str]] = Field(default=no_base_types)
    table_name_to_companion_base_types: Callable[[str], List[str]] = Field(
        default=no_base_types
    )
    table_name_to_spec_base_types: Callable[[str], List[str]] = Field(
        default=no_base_types
    )
    additional_imports: List[str] = Field(default_factory=list)
    spec_additional_imports: List[str] = Field(default_factory=list)
    arbitrary_additional_imports: List[str] = Field(default_factory=list)

    # -- Validators ---------------------------------------------------------

    @field_validator(
        "template",
        "return_collection_type",
        "date_time_class",
        "line_break",
        mode="before",
    )
    @classmethod
    def _parse_enum_names(cls, value: Any, info: Any) -> Any:
        enum_type: Any = {
            "template": GeneratorTemplate,
            "return_collection_type": ReturnCollectionType,
            "date_time_class": DateTimeClass,
            "line_break": LineBreak,
        }[info.field_name]
        return enum_type.parse(value)

    @field_validator("column_name_to_field_type", mode="before")
    @classmethod
    def _field_type_mapping(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return field_type_lookup(value)
        return value

    @field_validator(
        "column_type_to_field_type", "field_type_to_default_value", mode="before"
    )
    @classmethod
    def _name_mapping(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return name_lookup(value)
        return value

    @field_validator(
        "table_name_to_base_types",
        "table_name_to_companion_base_types",
        "table_name_to_spec_base_types",
        mode="before",
    )
    @classmethod
    def _base_types_mapping(cls, value: Any) -> Any:
        if isinstance(value, (Mapping, list, tuple)):
            return base_types_lookup(value)
        return value

    @field_validator("table_names_to_skip")
    @classmethod
    def _lower_skip_names(cls, value: List[str]) -> List[str]:
        return [name.lower() for name in value]

    # -- Helpers ------------------------------------------------------------

    @property
    def eol(self) -> str:
        return self.line_break.value

    def should_skip(self, table_name: str) -> bool:
        return table_name.lower() in self.table_names_to_skip

    def with_overrides(self, **changes: Any) -> "GeneratorConfig":
        """Return a validated copy with *changes* applied."""
        data: Dict[str, Any] = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(changes)
        return type(self).model_validate(data)


# ---------------------------------------------------------------------------
# Generated output
# ---------------------------------------------------------------------------


class GeneratedUnit(BaseModel):
    """Source text plus the path it is destined for. Not yet written."""

    model_config = _SHARED_CONFIG

    path: Path = Field(..., description="Destination file path.")
    content: str = Field(..., description="Full file content.")
    target: str = Field(default="", description="Qualified Scala name, e.g. models.Member.")

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        return count_lines(self.content)

    @computed_field  # type: ignore[misc]
    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))

    @computed_field  # type: ignore[misc]
    @property
    def checksum(self) -> str:
        return sha256_hex(self.content)

    def __repr__(self) -> str:
        return f"<GeneratedUnit {self.path} ({self.line_count} lines)>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "JdbcType",
    "GeneratorTemplate",
    "TestTemplate",
    "ReturnCollectionType",
    "DateTimeClass",
    "LineBreak",
    "Column",
    "Table",
    "GeneratorConfig",
    "GeneratedUnit",
    "field_type_lookup",
    "name_lookup",
    "base_types_lookup",
    "no_field_type_override",
    "no_override",
    "no_base_types",
]

logger.debug("mappergen.models loaded: %d public symbols.", len(__all__))
