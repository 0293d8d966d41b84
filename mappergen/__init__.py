# File: mappergen/__init__.py
"""
mappergen - scalikejdbc Mapper Generator
=========================================

Turns relational table metadata (JSON/YAML, or in-memory ``Table`` objects)
into Scala source for the scalikejdbc library: an immutable case class per
table with a companion object holding the CRUD operations, a test spec for
one of three test frameworks, and a ScalaCheck ``Arbitrary`` trait.

Architecture overview::

    ┌──────────────┐     ┌─────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ MapperGenerator │────▶│  CodeGenerator   │
    │   (cli.py)   │     │ (generator.py)  │     │  (generator.py)  │
    └──────────────┘     └───────┬─────────┘     └────────┬─────────┘
                                 │                        │
                    ┌────────────┤          ┌─────────────┼─────────────┐
                    ▼            ▼          ▼             ▼             ▼
             ┌──────────┐ ┌───────────┐ ┌─────────┐ ┌─────────┐ ┌───────────┐
             │validators│ │ exporters │ │templates│ │  specs  │ │ arbitrary │
             └──────────┘ └───────────┘ └────┬────┘ └─────────┘ └───────────┘
                                             ▼
                                  sqlstyle · typemap · utils · models

Usage::

    # As a library
    from mappergen import CodeGenerator, GeneratorConfig, Table
    gen = CodeGenerator(table, GeneratorConfig(package_name="com.example"))
    gen.write_model_if_nonexistent_and_unskippable()

    # From the command line
    python -m mappergen --input tables.yaml --verbose

Public API:
    - CodeGenerator      - Per-table source generation and writes
    - MapperGenerator    - Batch orchestrator over many tables
    - GeneratorConfig    - Generation settings model
    - Table / Column     - Table metadata models
    - validate_full      - Input validation entry point
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from mappergen.models import (
    Column,
    DateTimeClass,
    GeneratedUnit,
    GeneratorConfig,
    GeneratorTemplate,
    JdbcType,
    LineBreak,
    ReturnCollectionType,
    Table,
    TestTemplate,
)
from mappergen.validators import validate_full, ValidationResult
from mappergen.utils import (
    Timer,
    column_name_to_field_name,
    table_name_to_class_name,
    table_name_to_syntax_name,
    write_file,
)
from mappergen.templates import ModelTemplate
from mappergen.specs import SpecTemplate
from mappergen.arbitrary import ArbitraryTemplate
from mappergen.exporters import SourceWriter, WriteEvent, WriteLog, WriteOutcome
from mappergen.generator import CodeGenerator, GenerationReport, MapperGenerator

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Generators
    "CodeGenerator",
    "MapperGenerator",
    "GenerationReport",
    # Models
    "Column",
    "DateTimeClass",
    "GeneratedUnit",
    "GeneratorConfig",
    "GeneratorTemplate",
    "JdbcType",
    "LineBreak",
    "ReturnCollectionType",
    "Table",
    "TestTemplate",
    # Validation
    "validate_full",
    "ValidationResult",
    # Templates
    "ModelTemplate",
    "SpecTemplate",
    "ArbitraryTemplate",
    # Writing
    "SourceWriter",
    "WriteEvent",
    "WriteLog",
    "WriteOutcome",
    # Utilities
    "Timer",
    "column_name_to_field_name",
    "table_name_to_class_name",
    "table_name_to_syntax_name",
    "write_file",
]
