# File: mappergen/typemap.py
"""
mappergen - Column Type Mapping
================================
Resolves the Scala field type and a sample literal for each column.

Field type resolution, first match wins::

    1. config.column_name_to_field_type(class_name, field_name)
    2. config.column_type_to_field_type(column.data_type_name)
    3. built-in JDBC type code table
    4. "Any"

then ``Option[...]`` wrapping for nullable columns, applied uniformly after
whichever step matched.

Sample literals (used for ``create`` defaults and generated tests) follow
the same shape: override by resolved type, built-in table, ``null``.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from mappergen.models import Column, DateTimeClass, GeneratorConfig, JdbcType, Table
from mappergen.utils import capitalize_first, unquote_identifier

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.typemap")


class TypeName:
    """Scala type names the generator knows about."""

    ANY = "Any"
    ANY_ARRAY = "Array[Any]"
    BYTE_ARRAY = "Array[Byte]"
    LONG = "Long"
    BOOLEAN = "Boolean"
    DATE_TIME = "DateTime"
    LOCAL_DATE = "LocalDate"
    LOCAL_TIME = "LocalTime"
    LOCAL_DATE_TIME = "LocalDateTime"
    ZONED_DATE_TIME = "ZonedDateTime"
    OFFSET_DATE_TIME = "OffsetDateTime"
    STRING = "String"
    BYTE = "Byte"
    INT = "Int"
    SHORT = "Short"
    FLOAT = "Float"
    DOUBLE = "Double"
    BLOB = "Blob"
    CLOB = "Clob"
    REF = "Ref"
    STRUCT = "Struct"
    BIG_DECIMAL = "BigDecimal"
    OPTIONAL_STRING = "Option[String]"


# Marker returned by JDBC codes whose type follows ``config.date_time_class``
_TIMESTAMP_MARKER: str = "<timestamp>"

_JDBC_TYPE_TABLE: Dict[int, str] = {
    JdbcType.ARRAY: TypeName.ANY_ARRAY,
    JdbcType.BIGINT: TypeName.LONG,
    JdbcType.BINARY: TypeName.BYTE_ARRAY,
    JdbcType.BIT: TypeName.BOOLEAN,
    JdbcType.BLOB: TypeName.BLOB,
    JdbcType.BOOLEAN: TypeName.BOOLEAN,
    JdbcType.CHAR: TypeName.STRING,
    JdbcType.CLOB: TypeName.CLOB,
    JdbcType.DATALINK: TypeName.ANY,
    JdbcType.DATE: TypeName.LOCAL_DATE,
    JdbcType.DECIMAL: TypeName.BIG_DECIMAL,
    JdbcType.DISTINCT: TypeName.ANY,
    JdbcType.DOUBLE: TypeName.DOUBLE,
    JdbcType.FLOAT: TypeName.FLOAT,
    JdbcType.INTEGER: TypeName.INT,
    JdbcType.JAVA_OBJECT: TypeName.ANY,
    JdbcType.LONGVARBINARY: TypeName.BYTE_ARRAY,
    JdbcType.LONGVARCHAR: TypeName.STRING,
    JdbcType.NULL: TypeName.ANY,
    JdbcType.NUMERIC: TypeName.BIG_DECIMAL,
    JdbcType.OTHER: TypeName.ANY,
    JdbcType.REAL: TypeName.FLOAT,
    JdbcType.REF: TypeName.REF,
    JdbcType.SMALLINT: TypeName.SHORT,
    JdbcType.STRUCT: TypeName.STRUCT,
    JdbcType.TIME: TypeName.LOCAL_TIME,
    JdbcType.TIMESTAMP: _TIMESTAMP_MARKER,
    JdbcType.TINYINT: TypeName.BYTE,
    JdbcType.VARBINARY: TypeName.BYTE_ARRAY,
    JdbcType.VARCHAR: TypeName.STRING,
    JdbcType.NVARCHAR: TypeName.STRING,
    JdbcType.NCHAR: TypeName.STRING,
    JdbcType.LONGNVARCHAR: TypeName.STRING,
}

_DEFAULT_VALUE_TABLE: Dict[str, str] = {
    TypeName.ANY_ARRAY: "Array[Any]()",
    TypeName.LONG: "1L",
    TypeName.BYTE_ARRAY: "Array[Byte]()",
    TypeName.BOOLEAN: "false",
    TypeName.STRING: '"MyString"',
    TypeName.LOCAL_DATE: "LocalDate.now",
    TypeName.LOCAL_TIME: "LocalTime.now",
    TypeName.BIG_DECIMAL: 'new java.math.BigDecimal("1")',
    TypeName.DOUBLE: "0.1D",
    TypeName.FLOAT: "0.1F",
    TypeName.INT: "123",
    TypeName.SHORT: "123",
    TypeName.BYTE: "1",
    TypeName.DATE_TIME: "DateTime.now",
    TypeName.ZONED_DATE_TIME: "ZonedDateTime.now",
    TypeName.OFFSET_DATE_TIME: "OffsetDateTime.now",
    TypeName.LOCAL_DATE_TIME: "LocalDateTime.now",
}

NULL_LITERAL: str = "null"
NONE_LITERAL: str = "None"

# Types whose imports come from java.time / org.joda.time
TIME_TYPES: FrozenSet[str] = frozenset(
    {TypeName.LOCAL_DATE, TypeName.LOCAL_TIME}
    | {d.simple_name for d in DateTimeClass}
)

# Types whose imports come from java.sql
JAVA_SQL_TYPES: FrozenSet[str] = frozenset(
    {TypeName.BLOB, TypeName.CLOB, TypeName.REF, TypeName.STRUCT}
)


# ---------------------------------------------------------------------------
# Resolution chain
# ---------------------------------------------------------------------------


def first_match(lookups: Sequence[Callable[[], Optional[str]]]) -> Optional[str]:
    """Run *lookups* in order and return the first non-``None`` result."""
    for lookup in lookups:
        result: Optional[str] = lookup()
        if result is not None:
            return result
    return None


def builtin_type_for(data_type: int, date_time_class: DateTimeClass) -> Optional[str]:
    """Built-in JDBC code → Scala type; ``None`` for unrecognised codes."""
    type_name: Optional[str] = _JDBC_TYPE_TABLE.get(data_type)
    if type_name == _TIMESTAMP_MARKER:
        return date_time_class.simple_name
    return type_name


def resolve_raw_type(
    column: Column,
    class_name: str,
    field_name: str,
    config: GeneratorConfig,
) -> str:
    """Scala type for *column* before nullability wrapping."""
    resolved: Optional[str] = first_match((
        lambda: config.column_name_to_field_type(class_name, field_name),
        lambda: config.column_type_to_field_type(column.data_type_name),
        lambda: builtin_type_for(column.data_type, config.date_time_class),
    ))
    if resolved is None:
        logger.debug(
            "No type mapping for %s.%s (code=%d, name=%s); using %s.",
            class_name,
            column.name,
            column.data_type,
            column.data_type_name,
            TypeName.ANY,
        )
        return TypeName.ANY
    return resolved


def wrap_nullable(raw_type: str, is_not_null: bool) -> str:
    if is_not_null:
        return raw_type
    return f"Option[{raw_type}]"


def default_value_for(
    raw_type: str,
    is_not_null: bool,
    config: GeneratorConfig,
) -> str:
    """
    Sample literal for a field of *raw_type*.

    Nullable fields get ``Some(<literal>)``, or ``None`` when no literal is
    known for the inner type.
    """
    field_type: str = wrap_nullable(raw_type, is_not_null)
    override: Optional[str] = config.field_type_to_default_value(field_type)
    if override is not None:
        return override

    inner: str = first_match((
        lambda: config.field_type_to_default_value(raw_type),
        lambda: _DEFAULT_VALUE_TABLE.get(raw_type),
    )) or NULL_LITERAL

    if is_not_null:
        return inner
    if inner == NULL_LITERAL:
        return NONE_LITERAL
    return f"Some({inner})"


# ---------------------------------------------------------------------------
# Column view: a column with its derived attributes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class ColumnView:
    """
    A ``Column`` seen from one generation run.

    All derived attributes are computed lazily and cached; the underlying
    column is never modified.
    """

    column: Column
    class_name: str
    config: GeneratorConfig

    @property
    def name(self) -> str:
        return self.column.name

    @property
    def is_not_null(self) -> bool:
        return self.column.is_not_null

    @property
    def size(self) -> int:
        return self.column.size

    @functools.cached_property
    def field_name(self) -> str:
        """Scala identifier, possibly back-quoted."""
        return self.config.column_name_to_field_name(self.column.name)

    @functools.cached_property
    def bare_field_name(self) -> str:
        """Field name without back-quotes, for string literals and method names."""
        return unquote_identifier(self.field_name)

    @functools.cached_property
    def raw_type(self) -> str:
        return resolve_raw_type(self.column, self.class_name, self.field_name, self.config)

    @functools.cached_property
    def field_type(self) -> str:
        return wrap_nullable(self.raw_type, self.column.is_not_null)

    @functools.cached_property
    def default_value(self) -> str:
        return default_value_for(self.raw_type, self.column.is_not_null, self.config)

    @property
    def is_any(self) -> bool:
        return self.raw_type == TypeName.ANY

    @property
    def gen_method_name(self) -> str:
        return f"gen{capitalize_first(self.bare_field_name)}"

    def __repr__(self) -> str:
        return f"<ColumnView {self.name} → {self.field_name}: {self.field_type}>"


@dataclass(frozen=True, eq=False)
class TableView:
    """
    Everything the emitters derive from a ``(Table, GeneratorConfig)`` pair.

    Built once per emitter call so that the model, spec and arbitrary
    outputs agree on names, types and column partitions.
    """

    table: Table
    config: GeneratorConfig
    class_name: str
    syntax_name: str
    syntax_variable: str
    all_columns: Tuple[ColumnView, ...]
    key_columns: Tuple[ColumnView, ...]
    insert_columns: Tuple[ColumnView, ...]
    update_columns: Tuple[ColumnView, ...]
    auto_increment_columns: Tuple[ColumnView, ...]

    @classmethod
    def build(
        cls,
        table: Table,
        config: GeneratorConfig,
        class_name: Optional[str] = None,
    ) -> "TableView":
        name: str = class_name or config.table_name_to_class_name(table.name)
        views: Dict[str, ColumnView] = {
            c.name: ColumnView(c, name, config) for c in table.all_columns
        }

        def _pick(columns: Sequence[Column]) -> Tuple[ColumnView, ...]:
            return tuple(views[c.name] for c in columns)

        return cls(
            table=table,
            config=config,
            class_name=name,
            syntax_name=config.table_name_to_syntax_name(table.name),
            syntax_variable=config.table_name_to_syntax_variable_name(table.name),
            all_columns=_pick(table.all_columns),
            key_columns=_pick(table.key_columns),
            insert_columns=_pick(table.insert_columns),
            update_columns=_pick(table.update_columns),
            auto_increment_columns=_pick(table.auto_increment_columns),
        )

    @property
    def table_name(self) -> str:
        return self.table.name

    @property
    def qualified_table_name(self) -> str:
        """``schema.table`` when a schema is set, else the bare table name."""
        if self.table.schema_name:
            return f"{self.table.schema_name}.{self.table.name}"
        return self.table.name

    @property
    def generated_key_column(self) -> Optional[ColumnView]:
        """First auto-increment column; receives the insert's generated key."""
        if self.auto_increment_columns:
            return self.auto_increment_columns[0]
        return None

    @property
    def create_field_columns(self) -> List[ColumnView]:
        """Required arguments of ``create``: not null, not auto-increment, not generated."""
        insertable: Set[str] = {c.name for c in self.insert_columns}
        return [c for c in self.all_columns if c.is_not_null and c.name in insertable]

    def raw_types(self) -> List[str]:
        """Distinct raw types in column order."""
        seen: List[str] = []
        for view in self.all_columns:
            if view.raw_type not in seen:
                seen.append(view.raw_type)
        return seen

    def __repr__(self) -> str:
        return f"<TableView {self.table.name} → {self.class_name}>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TypeName",
    "TIME_TYPES",
    "JAVA_SQL_TYPES",
    "NULL_LITERAL",
    "NONE_LITERAL",
    "first_match",
    "builtin_type_for",
    "resolve_raw_type",
    "wrap_nullable",
    "default_value_for",
    "ColumnView",
    "TableView",
]

logger.debug("mappergen.typemap loaded.")
