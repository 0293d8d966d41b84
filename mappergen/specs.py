# File: mappergen/specs.py
"""
mappergen - Test Spec Template
===============================
Fixed test-class bodies for the generated model, one per supported test
framework, filled in by placeholder substitution.

Every body exercises the same behaviours against the generated companion
object: find by primary keys, findBy, findAll, countAll, findAllBy, countBy,
create, save, destroy and batchInsert.

Placeholders::

    %package%          %timeImport%       %additionalImport%
    %modifier%         %specClassName%    %className%
    %baseTypes%        %primaryKeys%      %syntaxObject%
    %whereExample%     %createFields%

An unknown test-framework id is not an error: ``spec_all`` returns ``None``
and nothing gets written.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from mappergen.models import GeneratorConfig, Table, TestTemplate
from mappergen.sqlstyle import SqlStyle, sql_style_for
from mappergen.templates import additional_import_lines, time_import_lines, with_clause
from mappergen.typemap import TableView
from mappergen.utils import apply_line_break

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.specs")

# ---------------------------------------------------------------------------
# Template bodies
# ---------------------------------------------------------------------------

SCALATEST_FLAT_SPEC: str = """package %package%

import org.scalatest.flatspec.FixtureAnyFlatSpec
import org.scalatest.matchers.should.Matchers
import scalikejdbc.scalatest.AutoRollback
import scalikejdbc._
%timeImport%
%additionalImport%

%modifier%class %specClassName% extends FixtureAnyFlatSpec with Matchers with AutoRollback %baseTypes%{
  %syntaxObject%

  behavior of "%className%"

  it should "find by primary keys" in { implicit session =>
    val maybeFound = %className%.find(%primaryKeys%)
    maybeFound.isDefined should be(true)
  }
  it should "find by where clauses" in { implicit session =>
    val maybeFound = %className%.findBy(%whereExample%)
    maybeFound.isDefined should be(true)
  }
  it should "find all records" in { implicit session =>
    val allResults = %className%.findAll()
    allResults.size should be >(0)
  }
  it should "count all records" in { implicit session =>
    val count = %className%.countAll()
    count should be >(0L)
  }
  it should "find all by where clauses" in { implicit session =>
    val results = %className%.findAllBy(%whereExample%)
    results.size should be >(0)
  }
  it should "count by where clauses" in { implicit session =>
    val count = %className%.countBy(%whereExample%)
    count should be >(0L)
  }
  it should "create new record" in { implicit session =>
    val created = %className%.create(%createFields%)
    created should not be(null)
  }
  it should "save a record" in { implicit session =>
    val entity = %className%.findAll().head
    // modify fields as needed
    val modified = entity
    val updated = %className%.save(modified)
    updated should not equal(entity)
  }
  it should "destroy a record" in { implicit session =>
    val entity = %className%.findAll().head
    val deleted = %className%.destroy(entity)
    deleted should be(1)
    val shouldBeNone = %className%.find(%primaryKeys%)
    shouldBeNone.isDefined should be(false)
  }
  it should "perform batch insert" in { implicit session =>
    val entities = %className%.findAll()
    entities.foreach(e => %className%.destroy(e))
    val batchInserted = %className%.batchInsert(entities)
    batchInserted.size should be >(0)
  }
}
"""

SPECS2_UNIT: str = """package %package%

import scalikejdbc.specs2.mutable.AutoRollback
import org.specs2.mutable._
import scalikejdbc._
%timeImport%
%additionalImport%

%modifier%class %specClassName% extends Specification %baseTypes%{

  "%className%" should {

    %syntaxObject%

    "find by primary keys" in new AutoRollback {
      val maybeFound = %className%.find(%primaryKeys%)
      maybeFound.isDefined should beTrue
    }
    "find by where clauses" in new AutoRollback {
      val maybeFound = %className%.findBy(%whereExample%)
      maybeFound.isDefined should beTrue
    }
    "find all records" in new AutoRollback {
      val allResults = %className%.findAll()
      allResults.size should be_>(0)
    }
    "count all records" in new AutoRollback {
      val count = %className%.countAll()
      count should be_>(0L)
    }
    "find all by where clauses" in new AutoRollback {
      val results = %className%.findAllBy(%whereExample%)
      results.size should be_>(0)
    }
    "count by where clauses" in new AutoRollback {
      val count = %className%.countBy(%whereExample%)
      count should be_>(0L)
    }
    "create new record" in new AutoRollback {
      val created = %className%.create(%createFields%)
      created should not beNull
    }
    "save a record" in new AutoRollback {
      val entity = %className%.findAll().head
      // modify fields as needed
      val modified = entity
      val updated = %className%.save(modified)
      updated should not equalTo(entity)
    }
    "destroy a record" in new AutoRollback {
      val entity = %className%.findAll().head
      val deleted = %className%.destroy(entity) == 1
      deleted should beTrue
      val shouldBeNone = %className%.find(%primaryKeys%)
      shouldBeNone.isDefined should beFalse
    }
    "perform batch insert" in new AutoRollback {
      val entities = %className%.findAll()
      entities.foreach(e => %className%.destroy(e))
      val batchInserted = %className%.batchInsert(entities)
      batchInserted.size should be_>(0)
    }
  }

}
"""

SPECS2_ACCEPTANCE: str = """package %package%

import scalikejdbc.specs2.AutoRollback
import org.specs2._
import scalikejdbc._
%timeImport%
%additionalImport%

%modifier%class %specClassName% extends Specification %baseTypes%{ def is =

  "The '%className%' model should" ^
    "find by primary keys"         ! autoRollback().findByPrimaryKeys ^
    "find by where clauses"        ! autoRollback().findBy ^
    "find all records"             ! autoRollback().findAll ^
    "count all records"            ! autoRollback().countAll ^
    "find all by where clauses"    ! autoRollback().findAllBy ^
    "count by where clauses"       ! autoRollback().countBy ^
    "create new record"            ! autoRollback().create ^
    "save a record"                ! autoRollback().save ^
    "destroy a record"             ! autoRollback().destroy ^
    "perform batch insert"         ! autoRollback().batchInsert ^
                                   end

  case class autoRollback() extends AutoRollback {
    %syntaxObject%

    def findByPrimaryKeys = this {
      val maybeFound = %className%.find(%primaryKeys%)
      maybeFound.isDefined should beTrue
    }
    def findBy = this {
      val maybeFound = %className%.findBy(%whereExample%)
      maybeFound.isDefined should beTrue
    }
    def findAll = this {
      val allResults = %className%.findAll()
      allResults.size should be_>(0)
    }
    def countAll = this {
      val count = %className%.countAll()
      count should be_>(0L)
    }
    def findAllBy = this {
      val results = %className%.findAllBy(%whereExample%)
      results.size should be_>(0)
    }
    def countBy = this {
      val count = %className%.countBy(%whereExample%)
      count should be_>(0L)
    }
    def create = this {
      val created = %className%.create(%createFields%)
      created should not beNull
    }
    def save = this {
      val entity = %className%.findAll().head
      // modify fields as needed
      val modified = entity
      val updated = %className%.save(modified)
      updated should not equalTo(entity)
    }
    def destroy = this {
      val entity = %className%.findAll().head
      val deleted = %className%.destroy(entity) == 1
      deleted should beTrue
      val shouldBeNone = %className%.find(%primaryKeys%)
      shouldBeNone.isDefined should beFalse
    }
    def batchInsert = this {
      val entities = %className%.findAll()
      entities.foreach(e => %className%.destroy(e))
      val batchInserted = %className%.batchInsert(entities)
      batchInserted.size should be_>(0)
    }
  }

}
"""

SPEC_BODIES: Dict[TestTemplate, str] = {
    TestTemplate.SCALATEST_FLAT_SPEC: SCALATEST_FLAT_SPEC,
    TestTemplate.SPECS2_UNIT: SPECS2_UNIT,
    TestTemplate.SPECS2_ACCEPTANCE: SPECS2_ACCEPTANCE,
}


def resolve_test_template(test_template: str) -> Optional[TestTemplate]:
    """Known framework for *test_template*, or ``None``."""
    parsed = TestTemplate.parse(test_template)
    if isinstance(parsed, TestTemplate):
        return parsed
    return None


def spec_class_name(class_name: str, abstract: bool) -> str:
    return ("Abstract" + class_name if abstract else class_name) + "Spec"


# ---------------------------------------------------------------------------
# Spec template
# ---------------------------------------------------------------------------


class SpecTemplate:
    """Emits the test spec for one table, or nothing for unknown frameworks."""

    def __init__(self, config: GeneratorConfig) -> None:
        self._config: GeneratorConfig = config
        self._style: SqlStyle = sql_style_for(config.template)

    def spec_all(self, table: Table, class_name: Optional[str] = None) -> Optional[str]:
        framework: Optional[TestTemplate] = resolve_test_template(self._config.test_template)
        if framework is None:
            logger.debug(
                "No spec for '%s': test template %r is not supported.",
                table.name,
                self._config.test_template,
            )
            return None

        view: TableView = TableView.build(table, self._config, class_name)
        content: str = self.substitute(SPEC_BODIES[framework], view)
        logger.debug("Generated %s spec for '%s'.", framework.value, table.name)
        return apply_line_break(content, self._config.eol)

    def placeholders(self, view: TableView) -> Dict[str, str]:
        config: GeneratorConfig = self._config
        key_columns = view.key_columns
        return {
            "%package%": config.package_name,
            "%timeImport%": "\n".join(time_import_lines(view)),
            "%additionalImport%": "\n".join(
                additional_import_lines(config.spec_additional_imports)
            ),
            "%modifier%": "abstract " if config.abstract_spec else "",
            "%specClassName%": spec_class_name(view.class_name, config.abstract_spec),
            "%className%": view.class_name,
            "%baseTypes%": with_clause(
                config.table_name_to_spec_base_types(view.table_name),
                view.class_name,
                "with",
            ),
            "%primaryKeys%": ", ".join(c.default_value for c in key_columns),
            "%syntaxObject%": self._style.syntax_object(view),
            "%whereExample%": self._style.where_example(view) if key_columns else "",
            "%createFields%": ", ".join(
                f"{c.field_name} = {c.default_value}" for c in view.create_field_columns
            ),
        }

    def substitute(self, body: str, view: TableView) -> str:
        for placeholder, value in self.placeholders(view).items():
            body = body.replace(placeholder, value)
        return body


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SCALATEST_FLAT_SPEC",
    "SPECS2_UNIT",
    "SPECS2_ACCEPTANCE",
    "SPEC_BODIES",
    "resolve_test_template",
    "spec_class_name",
    "SpecTemplate",
]

logger.debug("mappergen.specs loaded.")
