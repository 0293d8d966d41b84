"""
tests/test_templates.py
Unit tests for mappergen.templates (model source) and mappergen.sqlstyle.

Tests cover:
- The emp end-to-end scenarios (auto-increment key, no-PK fallback)
- Identical signatures across the query-DSL and interpolation styles
- Return collection types threaded through every multi-row method
- The explicit binder for untyped columns
- Imports, base types, schema name, name converters, line breaks
"""

from __future__ import annotations

import importlib
import pkgutil
import re
from typing import List

import pytest

import mappergen
from conftest import make_column
from mappergen.models import GeneratorConfig, GeneratorTemplate, ReturnCollectionType, Table
from mappergen.sqlstyle import (
    InterpolationStyle,
    QueryDslStyle,
    dsl_predicate,
    generated_key_expression,
    interpolated_predicate,
    sql_style_for,
)
from mappergen.templates import ModelTemplate, collection_shape, with_clause
from mappergen.typemap import TableView


def _signatures(source: str) -> List[str]:
    """Every ``def`` line of a generated model, stripped."""
    return [line.strip() for line in source.splitlines() if line.strip().startswith("def ")]


# ===========================================================================
# End-to-end scenarios
# ===========================================================================


class TestEmpModel:
    """emp(id BIGINT auto-increment PK, name VARCHAR(30) NOT NULL)."""

    def test_record_has_two_required_fields(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(emp_table)
        assert "case class Emp(\n  id: Long,\n  name: String) {" in source

    def test_create_omits_auto_increment_column(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(emp_table)
        assert "def create(name: String)(implicit session: DBSession = autoSession): Emp = {" in source

    def test_find_is_keyed_on_id(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(emp_table)
        assert "def find(id: Long)(implicit session: DBSession = autoSession): Option[Emp] = {" in source
        assert "select.from(Emp as e).where.eq(e.id, id)" in source

    def test_create_uses_generated_key(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(emp_table)
        assert "    val generatedKey = withSQL {" in source
        assert "    }.updateAndReturnGeneratedKey.apply()" in source
        assert "    Emp(\n      id = generatedKey,\n      name = name)" in source

    def test_companion_header(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(emp_table)
        assert source.startswith("package models\n\nimport scalikejdbc._\n\ncase class Emp(")
        assert "object Emp extends SQLSyntaxSupport[Emp] {" in source
        assert '  override val tableName = "emp"' in source
        assert '  override val columns = Seq("id", "name")' in source
        assert '  val e = Emp.syntax("e")' in source
        assert "  override val autoSession = AutoSession" in source
        assert "schemaName" not in source
        assert "nameConverters" not in source

    def test_row_mapper(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(emp_table)
        assert "  def apply(e: ResultName[Emp])(rs: WrappedResultSet): Emp = new Emp(" in source
        assert "    id = rs.get(e.id),\n    name = rs.get(e.name)\n  )" in source

    def test_all_ten_methods_present(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(emp_table)
        names = [re.match(r"def (\w+)", s).group(1) for s in _signatures(source)]
        for method in (
            "find", "findAll", "countAll", "findBy", "findAllBy",
            "countBy", "create", "batchInsert", "save", "destroy",
        ):
            assert method in names, f"missing {method}: {names}"

    def test_output_ends_with_newline(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(emp_table)
        assert source.endswith("}\n")

    def test_deterministic(self, emp_table: Table, config: GeneratorConfig) -> None:
        template = ModelTemplate(config)
        assert template.model_all(emp_table) == template.model_all(emp_table)


class TestNoPrimaryKeyFallback:
    """Without a declared key, find/save/destroy match on every column."""

    def test_find_takes_all_columns(
        self, emp_table_without_pk: Table, config: GeneratorConfig
    ) -> None:
        source = ModelTemplate(config).model_all(emp_table_without_pk)
        assert "def find(id: Long, name: String)(" in source
        assert ".where.eq(e.id, id).and.eq(e.name, name)" in source

    def test_save_and_destroy_match_all_columns(
        self, emp_table_without_pk: Table, config: GeneratorConfig
    ) -> None:
        source = ModelTemplate(config).model_all(emp_table_without_pk)
        assert ").where.eq(column.id, entity.id).and.eq(column.name, entity.name)" in source
        assert (
            "withSQL { delete.from(Emp).where.eq(column.id, entity.id)"
            ".and.eq(column.name, entity.name) }.update.apply()"
        ) in source

    def test_interpolation_fallback(
        self, emp_table_without_pk: Table, interpolation_config: GeneratorConfig
    ) -> None:
        source = ModelTemplate(interpolation_config).model_all(emp_table_without_pk)
        assert "where ${e.id} = ${id} and ${e.name} = ${name}" in source
        assert (
            'sql"""delete from ${Emp.table} where ${column.id} = ${entity.id} '
            'and ${column.name} = ${entity.name}""".update.apply()'
        ) in source


# ===========================================================================
# Styles
# ===========================================================================


class TestStyles:
    """Both styles expose the same API; only bodies differ."""

    def test_style_lookup(self) -> None:
        assert isinstance(sql_style_for(GeneratorTemplate.QUERY_DSL), QueryDslStyle)
        assert isinstance(sql_style_for(GeneratorTemplate.INTERPOLATION), InterpolationStyle)

    def test_identical_signatures(
        self,
        member_table: Table,
        config: GeneratorConfig,
        interpolation_config: GeneratorConfig,
    ) -> None:
        dsl = ModelTemplate(config).model_all(member_table)
        interpolation = ModelTemplate(interpolation_config).model_all(member_table)
        assert _signatures(dsl) == _signatures(interpolation)
        assert dsl != interpolation

    def test_interpolation_bodies(
        self, emp_table: Table, interpolation_config: GeneratorConfig
    ) -> None:
        source = ModelTemplate(interpolation_config).model_all(emp_table)
        assert 'sql"""select ${e.result.*} from ${Emp as e} where ${e.id} = ${id}"""' in source
        assert 'sql"""select count(1) from ${Emp.table}""".map(rs => rs.long(1)).single.apply().get' in source
        assert "      insert into ${Emp.table} (" in source
        assert "        ${column.name}" in source
        assert "        ${name}" in source
        assert "        ${column.id} = ${entity.id}," in source

    def test_predicates(self, emp_table_without_pk: Table, config: GeneratorConfig) -> None:
        view = TableView.build(emp_table_without_pk, config)
        assert dsl_predicate(view.key_columns, "e") == ".eq(e.id, id).and.eq(e.name, name)"
        assert (
            interpolated_predicate(view.key_columns, "column", "entity.")
            == "${column.id} = ${entity.id} and ${column.name} = ${entity.name}"
        )


# ===========================================================================
# Generated keys
# ===========================================================================


class TestGeneratedKey:
    """The generated key is coerced to the auto-increment column's type."""

    @pytest.mark.parametrize(
        "jdbc, not_null, expected",
        [
            ("BIGINT", True, "generatedKey"),
            ("INTEGER", True, "generatedKey.toInt"),
            ("SMALLINT", True, "generatedKey.toShort"),
            ("DECIMAL", True, "BigDecimal.valueOf(generatedKey)"),
            ("VARCHAR", True, "generatedKey.toString"),
            ("INTEGER", False, "Some(generatedKey.toInt)"),
        ],
    )
    def test_coercion(self, jdbc: str, not_null: bool, expected: str, config: GeneratorConfig) -> None:
        table = Table.from_columns(
            "counter",
            [make_column("id", jdbc, is_not_null=not_null, is_auto_increment=True)],
            primary_keys=["id"],
        )
        view = TableView.build(table, config)
        assert generated_key_expression(view.all_columns[0]) == expected

    def test_no_auto_increment_uses_plain_update(self, any_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(any_table)
        assert "generatedKey" not in source
        assert "    }.update.apply()\n" in source


# ===========================================================================
# Return collections
# ===========================================================================


class TestReturnCollection:
    """The configured container appears in findAll, findAllBy and batchInsert."""

    @pytest.mark.parametrize(
        "kind, container, to_result",
        [
            ("List", "List", ".list.apply()"),
            ("Vector", "Vector", ".collection.apply[Vector]()"),
            ("Array", "Array", ".collection.apply[Array]()"),
        ],
    )
    def test_plain_containers(
        self,
        kind: str,
        container: str,
        to_result: str,
        emp_table: Table,
        config: GeneratorConfig,
    ) -> None:
        source = ModelTemplate(config.with_overrides(return_collection_type=kind)).model_all(emp_table)
        assert f"def findAll()(implicit session: DBSession = autoSession): {container}[Emp] = {{" in source
        assert f"(where: SQLSyntax)(implicit session: DBSession = autoSession): {container}[Emp] = {{" in source
        assert f"(implicit session: DBSession = autoSession): {container}[Int] = {{" in source
        assert f".batchByName(params.toSeq: _*).apply[{container}]()" in source
        assert source.count(to_result) == 2
        assert "scala.collection.compat" not in source

    def test_factory(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(
            config.with_overrides(return_collection_type=ReturnCollectionType.FACTORY)
        ).model_all(emp_table)
        assert "import scala.collection.compat._" in source
        assert (
            "def findAll[C[_]]()(implicit session: DBSession = autoSession, "
            "C: Factory[Emp, C[Emp]]): C[Emp] = {"
        ) in source
        assert "def findAllBy[C[_]](where: SQLSyntax)(" in source
        assert (
            "def batchInsert[C[_]](entities: collection.Seq[Emp])(implicit session: "
            "DBSession = autoSession, C: Factory[Int, C[Int]]): C[Int] = {"
        ) in source
        assert source.count(".collection.apply[C]()") == 2

    def test_shape_lookup(self) -> None:
        assert collection_shape(ReturnCollectionType.LIST).return_type == "List"
        assert collection_shape(ReturnCollectionType.FACTORY).uses_factory


# ===========================================================================
# Untyped columns
# ===========================================================================


class TestAnyBinder:
    """Columns resolved to Any are bound explicitly in both styles."""

    BINDER = "ParameterBinder(location, (ps, i) => ps.setObject(i, location))"

    def test_query_dsl(self, any_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(any_table)
        assert f"(column.location, {self.BINDER})" in source
        assert "column.id -> id" in source
        assert (
            "(column.location, ParameterBinder(entity.location, "
            "(ps, i) => ps.setObject(i, entity.location)))"
        ) in source

    def test_interpolation(self, any_table: Table, interpolation_config: GeneratorConfig) -> None:
        source = ModelTemplate(interpolation_config).model_all(any_table)
        assert "${" + self.BINDER + "}" in source
        assert "${id}" in source

    def test_batch_insert(self, any_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(any_table)
        assert (
            '"location" -> ParameterBinder(entity.location, '
            "(ps, i) => ps.setObject(i, entity.location))"
        ) in source
        assert '"id" -> toParameterBinder(entity.id)' in source

    def test_row_mapper_uses_any(self, any_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(any_table)
        assert "location = rs.any(gp.location)" in source
        assert "extra = rs.anyOpt(gp.extra)" in source

    def test_create_signature(self, any_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(any_table)
        assert "def create(id: Int, location: Any, extra: Option[Any] = None)(" in source


# ===========================================================================
# Member: imports, naming and generated columns
# ===========================================================================


class TestMemberModel:
    """Nullable columns, reserved words, conflicts, generated columns."""

    def test_fields(self, member_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(member_table)
        assert "  description: Option[String] = None," in source
        assert "  `type`: String," in source
        assert "  copyColumn: Option[Int] = None," in source
        assert "  createdAt: ZonedDateTime) {" in source

    def test_java_time_import(self, member_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(member_table)
        assert "import java.time.{LocalDate, ZonedDateTime}" in source
        assert "org.joda" not in source

    def test_joda_imports(self, member_table: Table, config: GeneratorConfig) -> None:
        joda = config.with_overrides(date_time_class="org.joda.time.DateTime")
        source = ModelTemplate(joda).model_all(member_table)
        assert "import org.joda.time.{LocalDate, DateTime}" in source
        assert "import scalikejdbc.jodatime.JodaParameterBinderFactory._" in source
        assert "createdAt: DateTime" in source

    def test_name_converters_for_conflicts(self, member_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(member_table)
        assert '  override val nameConverters: Map[String, String] = Map("copyColumn" -> "copy")' in source

    def test_create_fills_generated_column(self, member_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(member_table)
        assert (
            "def create(name: String, description: Option[String] = None, "
            "birthday: Option[LocalDate] = None, `type`: String, "
            "copyColumn: Option[Int] = None, createdAt: ZonedDateTime)("
        ) in source
        assert "      totalScore = 123," in source
        assert "column.totalScore" not in source

    def test_batch_insert_lists_insertable_columns(self, member_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config).model_all(member_table)
        assert 'SQL("""insert into member(' in source
        assert "      total_score" not in source
        assert "      {type}," in source
        assert '"type" -> toParameterBinder(entity.`type`)' in source


# ===========================================================================
# Config switches
# ===========================================================================


class TestConfigSwitches:
    """Config fields that reshape the model file."""

    def test_schema_name(self, emp_table: Table, config: GeneratorConfig) -> None:
        scoped = emp_table.model_copy(update={"schema_name": "hr"})
        source = ModelTemplate(config).model_all(scoped)
        assert '  override val schemaName = Some("hr")' in source
        assert 'SQL("""insert into hr.emp(' in source

    def test_base_types(self, emp_table: Table, config: GeneratorConfig) -> None:
        custom = config.with_overrides(
            table_name_to_base_types=["Entity"],
            table_name_to_companion_base_types={"emp": ["CRUDMapper[$className]"]},
        )
        source = ModelTemplate(custom).model_all(emp_table)
        assert "  name: String) extends Entity {" in source
        assert "object Emp extends SQLSyntaxSupport[Emp] with CRUDMapper[Emp] {" in source

    def test_with_clause(self) -> None:
        assert with_clause([], "Emp", "with") == ""
        assert with_clause(["A", "B[$className]"], "Emp", "extends") == "extends A with B[Emp] "

    def test_no_default_auto_session(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config.with_overrides(default_auto_session=False)).model_all(emp_table)
        assert "= autoSession" not in source
        assert "def countAll()(implicit session: DBSession): Long = {" in source
        assert "def save()(implicit session: DBSession): Emp = Emp.save(this)(session)" in source

    def test_auto_construct(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config.with_overrides(auto_construct=True)).model_all(emp_table)
        assert "(rs: WrappedResultSet): Emp = autoConstruct(rs, e)" in source
        assert "rs.get(" not in source

    def test_additional_imports(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config.with_overrides(additional_imports=["com.example.Codecs._"])).model_all(emp_table)
        assert "import scalikejdbc._\nimport com.example.Codecs._\n" in source

    def test_package_name(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config.with_overrides(package_name="com.example")).model_all(emp_table)
        assert source.startswith("package com.example\n")

    def test_crlf_line_break(self, emp_table: Table, config: GeneratorConfig) -> None:
        source = ModelTemplate(config.with_overrides(line_break="CRLF")).model_all(emp_table)
        assert "\r\n" in source
        assert "\n" not in source.replace("\r\n", "")

    def test_java_sql_imports(self, config: GeneratorConfig) -> None:
        table = Table.from_columns(
            "document",
            [make_column("id", "BIGINT", is_not_null=True), make_column("body", "CLOB")],
            primary_keys=["id"],
        )
        source = ModelTemplate(config).model_all(table)
        assert "import java.sql.{Clob}" in source
        assert "body: Option[Clob] = None" in source


# ===========================================================================
# Package modules
# ===========================================================================


class TestPackageModules:
    """Every module of the package imports cleanly."""

    @pytest.mark.parametrize(
        "name", sorted(m.name for m in pkgutil.iter_modules(mappergen.__path__))
    )
    def test_module_imports(self, name: str) -> None:
        module = importlib.import_module(f"mappergen.{name}")
        assert module.__name__ == f"mappergen.{name}"

    def test_sqlstyle_docstring_lists_both_styles(self) -> None:
        assert "QueryDslStyle" in mappergen.sqlstyle.__doc__
        assert "InterpolationStyle" in mappergen.sqlstyle.__doc__
