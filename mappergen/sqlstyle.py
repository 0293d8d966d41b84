# File: mappergen/sqlstyle.py
"""
mappergen - SQL Construction Styles
====================================
The two ways a generated companion object can build its SQL:

    InterpolationStyle   sql"select ${m.result.*} from ${Member as m} ..."
    QueryDslStyle        withSQL { select.from(Member as m).where.eq(...) }

A style only produces method *bodies*.  Signatures are produced once by
``ModelTemplate`` so both styles expose identical APIs.  Bodies are returned
as lists of lines, unindented; the caller places them inside the method.

The clause helpers at the top of the module (column lists, placeholder lists,
predicates, assignments) are shared by both styles.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from mappergen.models import GeneratorTemplate
from mappergen.typemap import ColumnView, TableView, TypeName
from mappergen.utils import margin

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.sqlstyle")

# Scala conversions applied to the Long returned by updateAndReturnGeneratedKey
_GENERATED_KEY_COERCIONS = {
    TypeName.BYTE: "generatedKey.toByte",
    TypeName.INT: "generatedKey.toInt",
    TypeName.SHORT: "generatedKey.toShort",
    TypeName.FLOAT: "generatedKey.toFloat",
    TypeName.DOUBLE: "generatedKey.toDouble",
    TypeName.STRING: "generatedKey.toString",
    TypeName.BIG_DECIMAL: "BigDecimal.valueOf(generatedKey)",
}


# ---------------------------------------------------------------------------
# Clause fragments
# ---------------------------------------------------------------------------


def interpolate(expr: str) -> str:
    """``expr`` → ``${expr}``."""
    return "${" + expr + "}"


def any_binder(value: str) -> str:
    """Explicit binder for values whose static type is ``Any``."""
    return f"ParameterBinder({value}, (ps, i) => ps.setObject(i, {value}))"


def bound_value(view: ColumnView, value: str) -> str:
    """*value* as it is bound into SQL: wrapped in a binder for ``Any`` columns."""
    if view.is_any:
        return any_binder(value)
    return value


def interpolated_predicate(
    columns: Sequence[ColumnView],
    owner: str,
    value_prefix: str = "",
) -> str:
    """``${m.id} = ${id} and ${m.name} = ${name}``"""
    return " and ".join(
        f"{interpolate(owner + '.' + c.field_name)} = {interpolate(value_prefix + c.field_name)}"
        for c in columns
    )


def dsl_predicate(
    columns: Sequence[ColumnView],
    owner: str,
    value_prefix: str = "",
) -> str:
    """``.eq(m.id, id).and.eq(m.name, name)``"""
    return ".and".join(
        f".eq({owner}.{c.field_name}, {value_prefix}{c.field_name})" for c in columns
    )


def interpolated_column_list(columns: Sequence[ColumnView]) -> List[str]:
    """``${column.name}`` per column."""
    return [interpolate("column." + c.field_name) for c in columns]


def interpolated_placeholder_list(
    columns: Sequence[ColumnView],
    value_prefix: str = "",
) -> List[str]:
    """``${name}`` per column, with the binder escape hatch for ``Any``."""
    return [interpolate(bound_value(c, value_prefix + c.field_name)) for c in columns]


def interpolated_assignments(
    columns: Sequence[ColumnView],
    value_prefix: str = "entity.",
) -> List[str]:
    """``${column.name} = ${entity.name}`` per column."""
    return [
        f"{interpolate('column.' + c.field_name)} = "
        f"{interpolate(bound_value(c, value_prefix + c.field_name))}"
        for c in columns
    ]


def dsl_named_values(
    columns: Sequence[ColumnView],
    value_prefix: str = "",
) -> List[str]:
    """``column.name -> name`` per column, or an explicit binder pair for ``Any``."""
    pairs: List[str] = []
    for c in columns:
        value: str = value_prefix + c.field_name
        if c.is_any:
            pairs.append(f"(column.{c.field_name}, {any_binder(value)})")
        else:
            pairs.append(f"column.{c.field_name} -> {value}")
    return pairs


def batch_parameter(view: ColumnView) -> str:
    """``"name" -> toParameterBinder(entity.name)``"""
    value: str = "entity." + view.field_name
    if view.is_any:
        binder: str = any_binder(value)
    else:
        binder = f"toParameterBinder({value})"
    return f'"{view.bare_field_name}" -> {binder}'


def generated_key_expression(view: ColumnView) -> str:
    """The generated key converted to *view*'s type, ``Some``-wrapped if nullable."""
    expr: str = _GENERATED_KEY_COERCIONS.get(view.raw_type, "generatedKey")
    if view.is_not_null:
        return expr
    return f"Some({expr})"


def _indented_list(items: Sequence[str], level: int) -> List[str]:
    """One item per line at *level*, comma-separated."""
    prefix: str = margin(level)
    lines: List[str] = [prefix + item + "," for item in items]
    if lines:
        lines[-1] = lines[-1][:-1]
    return lines


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


class SqlStyle:
    """
    Base class of the two SQL construction styles.

    Subclasses implement the read bodies, ``insert_statement``, ``save_body``,
    ``destroy_body`` and ``where_example``.  Batch inserts always go through
    named placeholders, so ``batch_insert_body`` is shared.
    """

    template: GeneratorTemplate

    # -- Reads --------------------------------------------------------------

    def find_body(self, view: TableView) -> List[str]:
        raise NotImplementedError

    def find_all_body(self, view: TableView, to_result: str) -> List[str]:
        raise NotImplementedError

    def count_all_body(self, view: TableView) -> List[str]:
        raise NotImplementedError

    def find_by_body(self, view: TableView) -> List[str]:
        raise NotImplementedError

    def find_all_by_body(self, view: TableView, to_result: str) -> List[str]:
        raise NotImplementedError

    def count_by_body(self, view: TableView) -> List[str]:
        raise NotImplementedError

    # -- Writes -------------------------------------------------------------

    def insert_statement(self, view: TableView) -> List[str]:
        """The insert expression of ``create``, without its execution suffix."""
        raise NotImplementedError

    def execute_insert(self, view: TableView) -> str:
        """Suffix closing the insert of ``create``."""
        if view.generated_key_column is not None:
            return ".updateAndReturnGeneratedKey.apply()"
        return ".update.apply()"

    def save_body(self, view: TableView) -> List[str]:
        raise NotImplementedError

    def destroy_body(self, view: TableView) -> List[str]:
        raise NotImplementedError

    # -- Spec helpers -------------------------------------------------------

    def where_example(self, view: TableView) -> str:
        raise NotImplementedError

    def syntax_object(self, view: TableView) -> str:
        return ""

    # -- Shared -------------------------------------------------------------

    def create_body(self, view: TableView) -> List[str]:
        """Insert, then build the record from arguments and the generated key."""
        statement: List[str] = self.insert_statement(view)
        key_column = view.generated_key_column
        if key_column is not None:
            statement[0] = "val generatedKey = " + statement[0]
        statement[-1] = statement[-1] + self.execute_insert(view)

        insertable = {c.name for c in view.insert_columns}
        args: List[str] = []
        for c in view.all_columns:
            if key_column is not None and c.name == key_column.name:
                args.append(f"{c.field_name} = {generated_key_expression(c)}")
            elif c.name in insertable:
                args.append(f"{c.field_name} = {c.field_name}")
            elif c.is_not_null:
                args.append(f"{c.field_name} = {c.default_value}")

        lines: List[str] = list(statement)
        lines.append("")
        lines.append(f"{view.class_name}(")
        lines.extend(_indented_list(args, 1))
        lines[-1] = lines[-1] + ")"
        return lines

    def batch_insert_body(self, view: TableView, return_type: str) -> List[str]:
        columns: Sequence[ColumnView] = view.insert_columns
        lines: List[str] = [
            "def toParameterBinder[A](value: A)(implicit ev: ParameterBinderFactory[A]): ParameterBinder = ev(value)",
            "val params: collection.Seq[Seq[(String, Any)]] = entities.map(entity =>",
            margin(1) + "Seq(",
        ]
        lines.extend(_indented_list([batch_parameter(c) for c in columns], 2))
        lines[-1] = lines[-1] + "))"
        lines.append(f'SQL("""insert into {view.qualified_table_name}(')
        lines.extend(_indented_list([c.name for c in columns], 1))
        lines.append(") values (")
        lines.extend(_indented_list(["{" + c.bare_field_name + "}" for c in columns], 1))
        lines.append(f')""").batchByName(params.toSeq: _*).apply[{return_type}]()')
        return lines

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.template.value}>"


class InterpolationStyle(SqlStyle):
    """Raw SQL in ``sql\"\"\"...\"\"\"`` interpolation strings."""

    template = GeneratorTemplate.INTERPOLATION

    def _select_from(self, view: TableView) -> str:
        m: str = view.syntax_variable
        return f"select {interpolate(m + '.result.*')} from {interpolate(view.class_name + ' as ' + m)}"

    def _mapper(self, view: TableView) -> str:
        return f".map({view.class_name}({view.syntax_variable}.resultName))"

    def find_body(self, view: TableView) -> List[str]:
        where: str = interpolated_predicate(view.key_columns, view.syntax_variable)
        return [
            f'sql"""{self._select_from(view)} where {where}"""',
            margin(1) + self._mapper(view) + ".single.apply()",
        ]

    def find_all_body(self, view: TableView, to_result: str) -> List[str]:
        return [f'sql"""{self._select_from(view)}"""{self._mapper(view)}.{to_result}']

    def count_all_body(self, view: TableView) -> List[str]:
        table: str = interpolate(view.class_name + ".table")
        return [f'sql"""select count(1) from {table}""".map(rs => rs.long(1)).single.apply().get']

    def find_by_body(self, view: TableView) -> List[str]:
        return [
            f'sql"""{self._select_from(view)} where ${{where}}"""',
            margin(1) + self._mapper(view) + ".single.apply()",
        ]

    def find_all_by_body(self, view: TableView, to_result: str) -> List[str]:
        return [
            f'sql"""{self._select_from(view)} where ${{where}}"""',
            margin(1) + self._mapper(view) + "." + to_result,
        ]

    def count_by_body(self, view: TableView) -> List[str]:
        source: str = interpolate(view.class_name + " as " + view.syntax_variable)
        return [
            f'sql"""select count(1) from {source} where ${{where}}"""',
            margin(1) + ".map(_.long(1)).single.apply().get",
        ]

    def insert_statement(self, view: TableView) -> List[str]:
        lines: List[str] = [
            'sql"""',
            margin(1) + f"insert into {interpolate(view.class_name + '.table')} (",
        ]
        lines.extend(_indented_list(interpolated_column_list(view.insert_columns), 2))
        lines.append(margin(1) + ") values (")
        lines.extend(_indented_list(interpolated_placeholder_list(view.insert_columns), 2))
        lines.append(margin(1) + ")")
        lines.append(margin(1) + '"""')
        return lines

    def save_body(self, view: TableView) -> List[str]:
        lines: List[str] = [
            'sql"""',
            margin(1) + "update",
            margin(2) + interpolate(view.class_name + ".table"),
            margin(1) + "set",
        ]
        lines.extend(_indented_list(interpolated_assignments(view.update_columns), 2))
        lines.append(margin(1) + "where")
        lines.append(margin(2) + interpolated_predicate(view.key_columns, "column", "entity."))
        lines.append(margin(1) + '""".update.apply()')
        lines.append("entity")
        return lines

    def destroy_body(self, view: TableView) -> List[str]:
        table: str = interpolate(view.class_name + ".table")
        where: str = interpolated_predicate(view.key_columns, "column", "entity.")
        return [f'sql"""delete from {table} where {where}""".update.apply()']

    def where_example(self, view: TableView) -> str:
        first: ColumnView = view.key_columns[0]
        return 'sqls"' + first.name + " = " + interpolate(first.default_value) + '"'


class QueryDslStyle(SqlStyle):
    """scalikejdbc's ``withSQL { ... }`` query builder."""

    template = GeneratorTemplate.QUERY_DSL

    def _source(self, view: TableView) -> str:
        return f"{view.class_name} as {view.syntax_variable}"

    def _mapper(self, view: TableView) -> str:
        return f".map({view.class_name}({view.syntax_variable}.resultName))"

    def find_body(self, view: TableView) -> List[str]:
        where: str = dsl_predicate(view.key_columns, view.syntax_variable)
        return [
            "withSQL {",
            margin(1) + f"select.from({self._source(view)}).where{where}",
            "}" + self._mapper(view) + ".single.apply()",
        ]

    def find_all_body(self, view: TableView, to_result: str) -> List[str]:
        return [f"withSQL(select.from({self._source(view)})){self._mapper(view)}.{to_result}"]

    def count_all_body(self, view: TableView) -> List[str]:
        return [
            f"withSQL(select(sqls.count).from({self._source(view)}))"
            ".map(rs => rs.long(1)).single.apply().get"
        ]

    def find_by_body(self, view: TableView) -> List[str]:
        return [
            "withSQL {",
            margin(1) + f"select.from({self._source(view)}).where.append(where)",
            "}" + self._mapper(view) + ".single.apply()",
        ]

    def find_all_by_body(self, view: TableView, to_result: str) -> List[str]:
        return [
            "withSQL {",
            margin(1) + f"select.from({self._source(view)}).where.append(where)",
            "}" + self._mapper(view) + "." + to_result,
        ]

    def count_by_body(self, view: TableView) -> List[str]:
        return [
            "withSQL {",
            margin(1) + f"select(sqls.count).from({self._source(view)}).where.append(where)",
            "}.map(_.long(1)).single.apply().get",
        ]

    def insert_statement(self, view: TableView) -> List[str]:
        lines: List[str] = [
            "withSQL {",
            margin(1) + f"insert.into({view.class_name}).namedValues(",
        ]
        lines.extend(_indented_list(dsl_named_values(view.insert_columns), 2))
        lines.append(margin(1) + ")")
        lines.append("}")
        return lines

    def save_body(self, view: TableView) -> List[str]:
        lines: List[str] = [
            "withSQL {",
            margin(1) + f"update({view.class_name}).set(",
        ]
        lines.extend(_indented_list(dsl_named_values(view.update_columns, "entity."), 2))
        lines.append(margin(1) + ").where" + dsl_predicate(view.key_columns, "column", "entity."))
        lines.append("}.update.apply()")
        lines.append("entity")
        return lines

    def destroy_body(self, view: TableView) -> List[str]:
        where: str = dsl_predicate(view.key_columns, "column", "entity.")
        return [f"withSQL {{ delete.from({view.class_name}).where{where} }}.update.apply()"]

    def where_example(self, view: TableView) -> str:
        first: ColumnView = view.key_columns[0]
        return f"sqls.eq({view.syntax_variable}.{first.field_name}, {first.default_value})"

    def syntax_object(self, view: TableView) -> str:
        return f'val {view.syntax_variable} = {view.class_name}.syntax("{view.syntax_name}")'


_STYLES = {
    GeneratorTemplate.INTERPOLATION: InterpolationStyle(),
    GeneratorTemplate.QUERY_DSL: QueryDslStyle(),
}


def sql_style_for(template: GeneratorTemplate) -> SqlStyle:
    """Return the (stateless, shared) style instance for *template*."""
    return _STYLES[template]


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "interpolate",
    "any_binder",
    "bound_value",
    "interpolated_predicate",
    "dsl_predicate",
    "interpolated_column_list",
    "interpolated_placeholder_list",
    "interpolated_assignments",
    "dsl_named_values",
    "batch_parameter",
    "generated_key_expression",
    "SqlStyle",
    "InterpolationStyle",
    "QueryDslStyle",
    "sql_style_for",
]

logger.debug("mappergen.sqlstyle loaded.")
