# File: mappergen/arbitrary.py
"""
mappergen - ScalaCheck Arbitrary Template
==========================================
Emits ``trait <Class>Arbitrary`` with one generator per column and an
``arbitrary: Arbitrary[<Class>]`` assembling a whole record.

Scala's for-comprehension over generators is combined into tuples, and
tuples stop at 22 elements.  Columns are therefore grouped in batches of at
most ``MAX_TUPLE_ARITY``; each batch becomes ``val genN = for {...} yield
(...)`` and the record is built from ``valueN._k``::

    val gen0 = for { id <- genId(); name <- genName(30) } yield (id, name)
    for { value0 <- gen0 } yield Member(id = value0._1, name = value0._2)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Set

from mappergen.models import GeneratorConfig, ReturnCollectionType, Table
from mappergen.templates import COMPAT_IMPORT, additional_import_lines, time_import_lines
from mappergen.typemap import ColumnView, TableView, TypeName
from mappergen.utils import RESERVED_WORDS, apply_line_break, margin

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.arbitrary")

MAX_TUPLE_ARITY: int = 22

SCALACHECK_IMPORTS: List[str] = [
    "import org.scalacheck.{Arbitrary, Gen}",
    "import org.scalacheck.Arbitrary._",
]


def group_columns(
    columns: Sequence[ColumnView],
    size: int = MAX_TUPLE_ARITY,
) -> List[List[ColumnView]]:
    """Split *columns* into consecutive batches of at most *size*."""
    if size < 1:
        raise ValueError(f"Group size must be positive, got {size}")
    return [list(columns[i:i + size]) for i in range(0, len(columns), size)]


def binding_name(view: ColumnView) -> str:
    """
    Name bound inside the for-comprehension.

    A back-quoted name on the left of ``<-`` is a stable-identifier pattern,
    not a binding, so reserved words get a ``Value`` suffix.
    """
    if view.bare_field_name in RESERVED_WORDS:
        return view.bare_field_name + "Value"
    return view.field_name


def binding_names(columns: Sequence[ColumnView]) -> List[str]:
    """
    ``binding_name`` for every column of a table, made unique.

    A suffixed reserved word must not shadow another column's field, so
    ``type`` next to ``type_value`` binds ``typeValue2``.
    """
    fields: Set[str] = {c.field_name for c in columns}
    names: List[str] = []
    for c in columns:
        base: str = binding_name(c)
        name: str = base
        if name != c.field_name:
            suffix: int = 2
            while name in fields or name in names:
                name = f"{base}{suffix}"
                suffix += 1
        names.append(name)
    return names


def generator_call(view: ColumnView) -> str:
    """``genName(30)`` for text columns, ``genId()`` otherwise."""
    if view.raw_type == TypeName.STRING:
        return f"{view.gen_method_name}({max(view.size, 1)})"
    return f"{view.gen_method_name}()"


def generator_definition(view: ColumnView) -> str:
    name: str = view.gen_method_name
    field_type: str = view.field_type
    if field_type == TypeName.STRING:
        return f"def {name}(size: Int): Gen[{field_type}] = stringArbitrary(size)"
    if field_type == TypeName.OPTIONAL_STRING:
        return f"def {name}(size: Int): Gen[{field_type}] = stringOptArbitrary(size)"
    return f"def {name}(): Gen[{field_type}] = Arbitrary.arbitrary[{field_type}]"


def _tuple_of(names: List[str]) -> str:
    if len(names) == 1:
        return f"Tuple1({names[0]})"
    return "(" + ", ".join(names) + ")"


class ArbitraryTemplate:
    """Emits the ScalaCheck arbitrary trait for one table."""

    def __init__(self, config: GeneratorConfig) -> None:
        self._config: GeneratorConfig = config

    def arbitrary_all(self, table: Table, class_name: Optional[str] = None) -> Optional[str]:
        """
        Complete arbitrary source for *table*.

        Always produces output; the ``Optional`` return matches ``spec_all``
        so callers treat both test artifacts alike.
        """
        view: TableView = TableView.build(table, self._config, class_name)
        lines: List[str] = [f"package {self._config.package_name}", ""]
        if self._config.return_collection_type is ReturnCollectionType.FACTORY:
            lines.append(COMPAT_IMPORT)
        lines.extend(SCALACHECK_IMPORTS)
        lines.extend(time_import_lines(view))
        lines.extend(additional_import_lines(self._config.arbitrary_additional_imports))
        lines.append("")
        lines.extend(self.trait_part(view))
        lines.append("")

        content: str = "\n".join(lines)
        logger.debug(
            "Generated arbitrary for '%s': %d columns in %d group(s).",
            table.name,
            len(view.all_columns),
            len(group_columns(view.all_columns)),
        )
        return apply_line_break(content, self._config.eol)

    def trait_part(self, view: TableView) -> List[str]:
        lines: List[str] = [f"trait {view.class_name}Arbitrary {{", ""]
        lines.extend(self.arbitrary_method(view))
        lines.append("")
        lines.extend(self.generator_methods(view))
        lines.append("}")
        return lines

    def arbitrary_method(self, view: TableView) -> List[str]:
        groups: List[List[ColumnView]] = group_columns(view.all_columns)
        bindings: List[str] = binding_names(view.all_columns)
        lines: List[str] = [
            f"  def arbitrary: Arbitrary[{view.class_name}] = Arbitrary {{",
            "",
        ]
        for index, group in enumerate(groups):
            offset: int = index * MAX_TUPLE_ARITY
            names: List[str] = bindings[offset:offset + len(group)]
            lines.append(f"    val gen{index} = for {{")
            for c, name in zip(group, names):
                lines.append(margin(3) + f"{name} <- {generator_call(c)}")
            lines.append(margin(2) + "} yield " + _tuple_of(names))
            lines.append("")

        lines.append("    for {")
        for index in range(len(groups)):
            lines.append(margin(3) + f"value{index} <- gen{index}")

        args: List[str] = [
            margin(3) + f"{c.field_name} = value{index}._{position + 1}"
            for index, group in enumerate(groups)
            for position, c in enumerate(group)
        ]
        lines.append(f"    }} yield {view.class_name}(")
        lines.append(",\n".join(args))
        lines.append("    )")
        lines.append("  }")
        return "\n".join(lines).split("\n")

    def generator_methods(self, view: TableView) -> List[str]:
        lines: List[str] = []
        raw_types: List[str] = [c.raw_type for c in view.all_columns]
        field_types: List[str] = [c.field_type for c in view.all_columns]
        if TypeName.STRING in raw_types:
            lines.append("  def stringArbitrary(max: Int): Gen[String] =")
            lines.append(
                "    Gen.choose[Int](1, max).flatMap(Gen.listOfN[Char](_, Gen.alphaChar)).map(_.mkString)"
            )
            lines.append("")
        if TypeName.OPTIONAL_STRING in field_types:
            lines.append("  def stringOptArbitrary(max: Int): Gen[Option[String]] =")
            lines.append("    Gen.option(stringArbitrary(max))")
            lines.append("")
        for c in view.all_columns:
            lines.append(margin(1) + generator_definition(c))
            lines.append("")
        if lines:
            lines.pop()
        return lines


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MAX_TUPLE_ARITY",
    "SCALACHECK_IMPORTS",
    "group_columns",
    "binding_name",
    "binding_names",
    "generator_call",
    "generator_definition",
    "ArbitraryTemplate",
]

logger.debug("mappergen.arbitrary loaded.")
