# File: mappergen/templates.py
"""
mappergen - Model Template
===========================
Turns a ``Table`` and a ``GeneratorConfig`` into the model source file:

    1. ``package`` line and imports
    2. ``case class`` with one field per column plus ``save()`` / ``destroy()``
    3. companion ``object`` extending ``SQLSyntaxSupport`` with row mappers
       and ``find``, ``findAll``, ``countAll``, ``findBy``, ``findAllBy``,
       ``countBy``, ``create``, ``batchInsert``, ``save``, ``destroy``

**Assembly contract:**
    - All text is assembled as ``List[str]`` and joined with ``"\\n"``; the
      configured line break is applied once at the end.
    - Method signatures live here; bodies come from the configured
      ``SqlStyle``, so both styles share one API.
    - Template methods keep no state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from mappergen.models import GeneratorConfig, ReturnCollectionType, Table
from mappergen.sqlstyle import SqlStyle, sql_style_for
from mappergen.typemap import JAVA_SQL_TYPES, TIME_TYPES, TableView
from mappergen.utils import (
    apply_line_break,
    column_name_to_field_name_basic,
    indent_lines,
    margin,
    scala_string,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

COMPAT_IMPORT: str = "import scala.collection.compat._"
SCALIKEJDBC_IMPORT: str = "import scalikejdbc._"
JODA_BINDER_IMPORTS: List[str] = [
    "import scalikejdbc.jodatime.JodaParameterBinderFactory._",
    "import scalikejdbc.jodatime.JodaTypeBinder._",
]

_FACTORY_TYPE: str = "C"


# ---------------------------------------------------------------------------
# Return collection shape
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CollectionShape:
    """How multi-row results are declared and materialised."""

    type_param: str
    return_type: str
    to_result: str
    uses_factory: bool

    def factory_param(self, element: str) -> str:
        """Extra implicit parameter needed by the ``Factory`` shape."""
        if not self.uses_factory:
            return ""
        return f", {_FACTORY_TYPE}: Factory[{element}, {_FACTORY_TYPE}[{element}]]"


def collection_shape(kind: ReturnCollectionType) -> CollectionShape:
    if kind is ReturnCollectionType.LIST:
        return CollectionShape("", "List", "list.apply()", False)
    if kind is ReturnCollectionType.VECTOR:
        return CollectionShape("", "Vector", "collection.apply[Vector]()", False)
    if kind is ReturnCollectionType.ARRAY:
        return CollectionShape("", "Array", "collection.apply[Array]()", False)
    return CollectionShape(
        f"[{_FACTORY_TYPE}[_]]",
        _FACTORY_TYPE,
        f"collection.apply[{_FACTORY_TYPE}]()",
        True,
    )


# ---------------------------------------------------------------------------
# Import helpers (shared with the spec and arbitrary templates)
# ---------------------------------------------------------------------------


def time_import_lines(view: TableView) -> List[str]:
    """
    Imports for the date/time types the table uses.

    The configured date-time family picks ``java.time`` or ``org.joda.time``;
    joda additionally needs scalikejdbc's joda binders.
    """
    classes: List[str] = [t for t in view.raw_types() if t in TIME_TYPES]
    if not classes:
        return []
    selector: str = classes[0] if len(classes) == 1 else "{" + ", ".join(classes) + "}"
    if view.config.date_time_class.is_joda:
        return [f"import org.joda.time.{selector}"] + JODA_BINDER_IMPORTS
    return [f"import java.time.{selector}"]


def java_sql_import_lines(view: TableView) -> List[str]:
    classes: List[str] = [t for t in view.raw_types() if t in JAVA_SQL_TYPES]
    if not classes:
        return []
    return ["import java.sql.{" + ", ".join(classes) + "}"]


def additional_import_lines(imports: List[str]) -> List[str]:
    return [f"import {i}" for i in imports]


def with_clause(types: List[str], class_name: str, keyword: str) -> str:
    """``extends A with B `` / ``with A with B ``, or empty for no types."""
    resolved: List[str] = [t.replace("$className", class_name) for t in types]
    if not resolved:
        return ""
    return f"{keyword} " + " with ".join(resolved) + " "


# ---------------------------------------------------------------------------
# Model template
# ---------------------------------------------------------------------------


class ModelTemplate:
    """
    Emits the model source for one table.

    Usage::

        template = ModelTemplate(config)
        source = template.model_all(table)
    """

    def __init__(self, config: GeneratorConfig) -> None:
        self._config: GeneratorConfig = config
        self._style: SqlStyle = sql_style_for(config.template)
        self._shape: CollectionShape = collection_shape(config.return_collection_type)

    @property
    def style(self) -> SqlStyle:
        return self._style

    def _session_param(self, owner: str = "") -> str:
        """``implicit session: DBSession = autoSession`` (or without default)."""
        if not self._config.default_auto_session:
            return "implicit session: DBSession"
        prefix: str = f"{owner}." if owner else ""
        return f"implicit session: DBSession = {prefix}autoSession"

    # -----------------------------------------------------------------
    # Whole file
    # -----------------------------------------------------------------

    def model_all(self, table: Table, class_name: Optional[str] = None) -> str:
        """Complete model source for *table*, using the configured line break."""
        view: TableView = TableView.build(table, self._config, class_name)
        lines: List[str] = [f"package {self._config.package_name}", ""]

        if self._shape.uses_factory:
            lines.append(COMPAT_IMPORT)
        lines.append(SCALIKEJDBC_IMPORT)
        lines.extend(time_import_lines(view))
        lines.extend(java_sql_import_lines(view))
        lines.extend(additional_import_lines(self._config.additional_imports))
        lines.append("")

        lines.extend(self.class_part(view))
        lines.append("")
        lines.extend(self.object_part(view))
        lines.append("")

        content: str = "\n".join(lines)
        logger.debug(
            "Generated model for '%s' (%s): %d lines.",
            table.name,
            view.class_name,
            content.count("\n") + 1,
        )
        return apply_line_break(content, self._config.eol)

    # -----------------------------------------------------------------
    # Case class
    # -----------------------------------------------------------------

    def class_part(self, view: TableView) -> List[str]:
        """
        ::

            case class Member(
              id: Long,
              name: Option[String] = None) {
              def save()...
              def destroy()...
            }
        """
        name: str = view.class_name
        fields: List[str] = [
            f"{c.field_name}: {c.field_type}" + ("" if c.is_not_null else " = None")
            for c in view.all_columns
        ]
        base_types: str = with_clause(
            self._config.table_name_to_base_types(view.table_name), name, "extends"
        )
        session: str = self._session_param(owner=name)

        lines: List[str] = [f"case class {name}("]
        lines.extend(margin(1) + f + "," for f in fields)
        if fields:
            lines[-1] = lines[-1][:-1]
        lines[-1] = lines[-1] + f") {base_types}{{"
        lines.extend([
            "",
            f"  def save()({session}): {name} = {name}.save(this)(session)",
            "",
            f"  def destroy()({session}): Int = {name}.destroy(this)(session)",
            "",
            "}",
        ])
        return lines

    # -----------------------------------------------------------------
    # Companion object
    # -----------------------------------------------------------------

    def object_part(self, view: TableView) -> List[str]:
        name: str = view.class_name
        companion_types: str = with_clause(
            self._config.table_name_to_companion_base_types(view.table_name), name, "with"
        )
        lines: List[str] = [f"object {name} extends SQLSyntaxSupport[{name}] {companion_types}{{", ""]

        if view.table.schema_name:
            lines.append(f"  override val schemaName = Some({scala_string(view.table.schema_name)})")
            lines.append("")

        converters: Optional[str] = self.name_converters(view)
        if converters:
            lines.append(converters)
            lines.append("")

        column_names: str = ", ".join(scala_string(c.name) for c in view.all_columns)
        lines.append(f"  override val tableName = {scala_string(view.table_name)}")
        lines.append("")
        lines.append(f"  override val columns = Seq({column_names})")
        lines.append("")
        lines.extend(self.row_mapper(view))
        lines.append("")
        lines.append(f'  val {view.syntax_variable} = {name}.syntax("{view.syntax_name}")')
        lines.append("")
        lines.append("  override val autoSession = AutoSession")

        for method in (
            self.find_method,
            self.find_all_method,
            self.count_all_method,
            self.find_by_method,
            self.find_all_by_method,
            self.count_by_method,
            self.create_method,
            self.batch_insert_method,
            self.save_method,
            self.destroy_method,
        ):
            lines.append("")
            lines.extend(method(view))

        lines.append("")
        lines.append("}")
        return lines

    def name_converters(self, view: TableView) -> Optional[str]:
        """
        ``nameConverters`` entry for fields whose name is not the plain
        camel-case form of the column (conflict suffixes, custom policies).
        """
        pairs: List[str] = [
            f"{scala_string(c.bare_field_name)} -> {scala_string(c.name)}"
            for c in view.all_columns
            if column_name_to_field_name_basic(c.name) != c.field_name
        ]
        if not pairs:
            return None
        return "  override val nameConverters: Map[String, String] = Map(" + ", ".join(pairs) + ")"

    def row_mapper(self, view: TableView) -> List[str]:
        name: str = view.class_name
        m: str = view.syntax_variable
        if self._config.auto_construct:
            return [
                f"  def apply({m}: SyntaxProvider[{name}])(rs: WrappedResultSet): {name} = autoConstruct(rs, {m})",
                f"  def apply({m}: ResultName[{name}])(rs: WrappedResultSet): {name} = autoConstruct(rs, {m})",
            ]

        assignments: List[str] = []
        for c in view.all_columns:
            getter: str = "get"
            if c.is_any:
                getter = "any" if c.is_not_null else "anyOpt"
            assignments.append(f"    {c.field_name} = rs.{getter}({m}.{c.field_name})")

        lines: List[str] = [
            f"  def apply({m}: SyntaxProvider[{name}])(rs: WrappedResultSet): {name} = apply({m}.resultName)(rs)",
            f"  def apply({m}: ResultName[{name}])(rs: WrappedResultSet): {name} = new {name}(",
        ]
        lines.append(",\n".join(assignments))
        lines.append("  )")
        return "\n".join(lines).split("\n")

    # -----------------------------------------------------------------
    # Methods: signature here, body from the style
    # -----------------------------------------------------------------

    def _method(self, signature: str, body: List[str]) -> List[str]:
        return [margin(1) + signature + " = {"] + indent_lines(body, 2) + [margin(1) + "}"]

    def find_method(self, view: TableView) -> List[str]:
        args: str = ", ".join(f"{c.field_name}: {c.field_type}" for c in view.key_columns)
        return self._method(
            f"def find({args})({self._session_param()}): Option[{view.class_name}]",
            self._style.find_body(view),
        )

    def find_all_method(self, view: TableView) -> List[str]:
        shape: CollectionShape = self._shape
        name: str = view.class_name
        return self._method(
            f"def findAll{shape.type_param}()({self._session_param()}{shape.factory_param(name)})"
            f": {shape.return_type}[{name}]",
            self._style.find_all_body(view, shape.to_result),
        )

    def count_all_method(self, view: TableView) -> List[str]:
        return self._method(
            f"def countAll()({self._session_param()}): Long",
            self._style.count_all_body(view),
        )

    def find_by_method(self, view: TableView) -> List[str]:
        return self._method(
            f"def findBy(where: SQLSyntax)({self._session_param()}): Option[{view.class_name}]",
            self._style.find_by_body(view),
        )

    def find_all_by_method(self, view: TableView) -> List[str]:
        shape: CollectionShape = self._shape
        name: str = view.class_name
        return self._method(
            f"def findAllBy{shape.type_param}(where: SQLSyntax)"
            f"({self._session_param()}{shape.factory_param(name)}): {shape.return_type}[{name}]",
            self._style.find_all_by_body(view, shape.to_result),
        )

    def count_by_method(self, view: TableView) -> List[str]:
        return self._method(
            f"def countBy(where: SQLSyntax)({self._session_param()}): Long",
            self._style.count_by_body(view),
        )

    def create_method(self, view: TableView) -> List[str]:
        args: str = ", ".join(
            f"{c.field_name}: {c.field_type}" + ("" if c.is_not_null else " = None")
            for c in view.insert_columns
        )
        return self._method(
            f"def create({args})({self._session_param()}): {view.class_name}",
            self._style.create_body(view),
        )

    def batch_insert_method(self, view: TableView) -> List[str]:
        shape: CollectionShape = self._shape
        return self._method(
            f"def batchInsert{shape.type_param}(entities: collection.Seq[{view.class_name}])"
            f"({self._session_param()}{shape.factory_param('Int')}): {shape.return_type}[Int]",
            self._style.batch_insert_body(view, shape.return_type),
        )

    def save_method(self, view: TableView) -> List[str]:
        name: str = view.class_name
        return self._method(
            f"def save(entity: {name})({self._session_param()}): {name}",
            self._style.save_body(view),
        )

    def destroy_method(self, view: TableView) -> List[str]:
        return self._method(
            f"def destroy(entity: {view.class_name})({self._session_param()}): Int",
            self._style.destroy_body(view),
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "COMPAT_IMPORT",
    "SCALIKEJDBC_IMPORT",
    "CollectionShape",
    "collection_shape",
    "time_import_lines",
    "java_sql_import_lines",
    "additional_import_lines",
    "with_clause",
    "ModelTemplate",
]

logger.debug("mappergen.templates loaded.")
