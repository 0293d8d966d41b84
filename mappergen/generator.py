# File: mappergen/generator.py
"""
mappergen - Generation Facade & Batch Pipeline
===============================================

Two layers:

``CodeGenerator``
    One table, one config.  Produces the model, spec and arbitrary sources
    (``model_all`` / ``spec_all`` / ``arbitrary_all``) and the six write
    operations: forcing ``write_*`` and non-destructive ``*_if_not_exist``.

``MapperGenerator``
    Many tables.  Load → validate → generate/write per table, collecting a
    ``GenerationReport``::

        1. Load tables and config from JSON/YAML (or accept in-memory objects).
        2. Parse into ``Table`` + ``GeneratorConfig`` (models.py).
        3. Run the validation pipeline (validators.py).
        4. Feed each table to ``CodeGenerator``.
        5. Return a ``GenerationReport`` with events, metrics and status.

Error handling strategy:
    - Validation errors are collected and surfaced, not swallowed.
    - Generation and write errors are isolated per table; one bad table
      does not stop the others.
    - The final report gives a clear pass/fail verdict.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from mappergen.arbitrary import ArbitraryTemplate
from mappergen.exporters import SourceWriter, WriteEvent, WriteLog, WriteOutcome
from mappergen.models import Column, GeneratedUnit, GeneratorConfig, Table
from mappergen.specs import SpecTemplate, spec_class_name
from mappergen.templates import ModelTemplate
from mappergen.utils import Timer, package_path, qualified_name
from mappergen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.generator")

SCALA_SUFFIX: str = ".scala"


# ---------------------------------------------------------------------------
# Per-table facade
# ---------------------------------------------------------------------------


class CodeGenerator:
    """
    Generates and writes the sources for a single table.

    Usage::

        gen = CodeGenerator(table, config)
        gen.write_model_if_nonexistent_and_unskippable()
        gen.write_spec_if_not_exist()
        gen.write_arbitrary_if_not_exist()
        print("\\n".join(gen.writer.log.messages()))
    """

    def __init__(
        self,
        table: Table,
        config: Optional[GeneratorConfig] = None,
        *,
        class_name: Optional[str] = None,
        writer: Optional[SourceWriter] = None,
    ) -> None:
        self._table: Table = table
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._class_name: str = class_name or self._config.table_name_to_class_name(table.name)
        self.writer: SourceWriter = writer or SourceWriter(encoding=self._config.encoding)

    # -----------------------------------------------------------------
    # Naming & paths
    # -----------------------------------------------------------------

    @property
    def table(self) -> Table:
        return self._table

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def class_name(self) -> str:
        return self._class_name

    @property
    def spec_class_name(self) -> str:
        return spec_class_name(self._class_name, self._config.abstract_spec)

    @property
    def arbitrary_class_name(self) -> str:
        return self._class_name + "Arbitrary"

    def _source_path(self, root: str, name: str) -> Path:
        return Path(root) / package_path(self._config.package_name) / (name + SCALA_SUFFIX)

    @property
    def model_path(self) -> Path:
        return self._source_path(self._config.src_dir, self._class_name)

    @property
    def spec_path(self) -> Path:
        return self._source_path(self._config.test_dir, self.spec_class_name)

    @property
    def arbitrary_path(self) -> Path:
        return self._source_path(self._config.test_dir, self.arbitrary_class_name)

    @property
    def model_target(self) -> str:
        """Qualified Scala name, e.g. ``models.Member``."""
        return qualified_name(self._config.package_name, self._class_name)

    @property
    def spec_target(self) -> str:
        return qualified_name(self._config.package_name, self.spec_class_name)

    @property
    def arbitrary_target(self) -> str:
        return qualified_name(self._config.package_name, self.arbitrary_class_name)

    @property
    def should_be_skipped(self) -> bool:
        return self._config.should_skip(self._table.name)

    # -----------------------------------------------------------------
    # Source text
    # -----------------------------------------------------------------

    def model_all(self) -> str:
        return ModelTemplate(self._config).model_all(self._table, self._class_name)

    def spec_all(self) -> Optional[str]:
        """Spec source, or ``None`` when the test template is not supported."""
        return SpecTemplate(self._config).spec_all(self._table, self._class_name)

    def arbitrary_all(self) -> Optional[str]:
        return ArbitraryTemplate(self._config).arbitrary_all(self._table, self._class_name)

    def _unit(self, code: str, path: Path, target: str) -> GeneratedUnit:
        return GeneratedUnit(path=path, content=code, target=target)

    # -----------------------------------------------------------------
    # Model writes
    # -----------------------------------------------------------------

    def write_model(self) -> WriteEvent:
        """Write the model, overwriting an existing file."""
        return self.writer.write(self._unit(self.model_all(), self.model_path, self.model_target))

    def write_model_if_nonexistent_and_unskippable(self) -> bool:
        """
        Write the model unless the file exists or the table is listed in
        ``table_names_to_skip``.  Returns whether a write happened.
        """
        if self.should_be_skipped and not self.model_path.exists():
            self.writer.skipped(self.model_target, self.model_path)
            return False
        unit: GeneratedUnit = self._unit(self.model_all(), self.model_path, self.model_target)
        return self.writer.write_if_not_exist(unit).outcome.wrote

    # -----------------------------------------------------------------
    # Spec & arbitrary writes
    # -----------------------------------------------------------------

    def _write_optional(
        self,
        code: Optional[str],
        path: Path,
        target: str,
        *,
        overwrite: bool,
    ) -> WriteEvent:
        if code is None:
            return self.writer.no_output(target, path)
        unit: GeneratedUnit = self._unit(code, path, target)
        if overwrite:
            return self.writer.write(unit)
        return self.writer.write_if_not_exist(unit)

    def write_spec(self, code: Optional[str] = None) -> WriteEvent:
        """
        Write the spec, overwriting an existing file.

        *code* defaults to ``spec_all()``; when no spec can be produced the
        event is ``NO_OUTPUT`` and nothing is written.
        """
        if code is None:
            code = self.spec_all()
        return self._write_optional(code, self.spec_path, self.spec_target, overwrite=True)

    def write_spec_if_not_exist(self, code: Optional[str] = None) -> WriteEvent:
        if code is None:
            code = self.spec_all()
        return self._write_optional(code, self.spec_path, self.spec_target, overwrite=False)

    def write_arbitrary(self, code: Optional[str] = None) -> WriteEvent:
        """Write the arbitrary trait, overwriting an existing file."""
        if code is None:
            code = self.arbitrary_all()
        return self._write_optional(
            code, self.arbitrary_path, self.arbitrary_target, overwrite=True
        )

    def write_arbitrary_if_not_exist(self, code: Optional[str] = None) -> WriteEvent:
        if code is None:
            code = self.arbitrary_all()
        return self._write_optional(
            code, self.arbitrary_path, self.arbitrary_target, overwrite=False
        )

    def __repr__(self) -> str:
        return f"<CodeGenerator {self._table.name} → {self.model_target}>"


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``MapperGenerator.generate()``.

    ``events`` holds every write request in order; the CLI renders their
    messages.
    """

    success: bool = False
    total_tables_processed: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    write_errors: List[str] = field(default_factory=list)
    events: WriteLog = field(default_factory=WriteLog)

    @property
    def files_created(self) -> int:
        return len(self.events.created)

    @property
    def total_bytes(self) -> int:
        return self.events.total_bytes

    @property
    def skipped_tables(self) -> List[str]:
        return [e.target for e in self.events.by_outcome(WriteOutcome.SKIPPED_BY_SETTINGS)]

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append(f"{'=' * 60}")
        lines.append("  mappergen - Generation Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Tables processed: {self.total_tables_processed}")
        lines.append(f"  Files created:    {self.files_created}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─' * 60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        for title, items, icon in (
            ("Input Errors", self.input_errors, "✗"),
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Write Errors", self.write_errors, "✗"),
            ("Skipped Tables", self.skipped_tables, "⊘"),
        ):
            if items:
                lines.append(f"{'─' * 60}")
                lines.append(f"  {title} ({len(items)}):")
                for item in items:
                    lines.append(f"    {icon} {item}")

        lines.append(f"{'=' * 60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Input loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at top level, got {type(data).__name__}.")
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level, got {type(data).__name__}.")
    return data


def load_input_file(path: Path) -> Dict[str, Any]:
    """
    Load an input file (JSON or YAML), dispatching on the extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Input path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s'; trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def parse_table(raw: Dict[str, Any]) -> Table:
    """
    Parse one table entry.

    Two shapes are accepted: the full ``Table`` model (``all_columns`` and
    the subset lists) or the flat shorthand with ``columns`` and
    ``primary_keys``, where auto-increment/generated subsets come from the
    column flags.
    """
    if "columns" in raw:
        extra: List[str] = sorted(set(raw) - {"name", "columns", "primary_keys", "schema_name"})
        if extra:
            raise ValueError(f"Unknown keys in table '{raw.get('name')}': {extra}")
        columns: List[Column] = [Column.model_validate(c) for c in raw["columns"] or []]
        return Table.from_columns(
            raw.get("name", ""),
            columns,
            primary_keys=raw.get("primary_keys") or (),
            schema_name=raw.get("schema_name"),
        )
    return Table.model_validate(raw)


def parse_raw_input(raw: Dict[str, Any]) -> Tuple[List[Table], GeneratorConfig]:
    """
    Parse a raw dictionary (from JSON/YAML) into validated models.

    Expected top-level keys:
        - "tables": list of table entries (see ``parse_table``)
        - "config": ``GeneratorConfig`` fields (optional; defaults apply)

    Raises:
        ValueError: If required keys are missing or validation fails.
    """
    if "tables" not in raw:
        raise ValueError("Cannot find table definitions in input. Expected top-level key: 'tables'.")
    raw_tables: Any = raw["tables"]
    if not isinstance(raw_tables, list):
        raise ValueError(f"'tables' must be a list, got {type(raw_tables).__name__}.")

    config_data: Any = raw.get("config")
    if config_data is None:
        logger.info("No generator config found in input; using defaults.")
        config_data = {}

    tables: List[Table] = []
    for index, entry in enumerate(raw_tables):
        if not isinstance(entry, dict):
            raise ValueError(f"Table entry #{index} must be a mapping.")
        try:
            tables.append(parse_table(entry))
        except ValueError as exc:
            # pydantic.ValidationError is a ValueError
            raise ValueError(f"Table entry #{index} is invalid: {exc}") from exc

    try:
        config: GeneratorConfig = GeneratorConfig.model_validate(config_data)
    except ValueError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    return tables, config


# ---------------------------------------------------------------------------
# MapperGenerator: batch orchestrator
# ---------------------------------------------------------------------------


class MapperGenerator:
    """
    Batch pipeline over many tables.

    Usage::

        generator = MapperGenerator()
        report = generator.generate_from_file(Path("tables.yaml"))
        print(report.summary())

    In the default (non-forcing) mode a table's spec and arbitrary are only
    written when its model was freshly written, so existing or skipped
    models never get new test files next to them.
    """

    def __init__(
        self,
        *,
        force: bool = False,
        with_specs: bool = True,
        with_arbitraries: bool = True,
        strict_validation: bool = True,
        fail_on_warnings: bool = False,
    ) -> None:
        self._force: bool = force
        self._with_specs: bool = with_specs
        self._with_arbitraries: bool = with_arbitraries
        self._strict_validation: bool = strict_validation
        self._fail_on_warnings: bool = fail_on_warnings

        logger.debug(
            "MapperGenerator initialised: force=%s, specs=%s, arbitraries=%s, strict=%s.",
            force,
            with_specs,
            with_arbitraries,
            strict_validation,
        )

    # -----------------------------------------------------------------
    # Public entry points
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        input_path: Path,
        *,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> GenerationReport:
        """Full pipeline: load file → validate → generate → write."""
        report: GenerationReport = GenerationReport()

        with Timer("load_input") as t_load:
            try:
                raw: Dict[str, Any] = load_input_file(input_path)
                if config_overrides:
                    merged: Dict[str, Any] = dict(raw.get("config") or {})
                    merged.update(config_overrides)
                    raw = {**raw, "config": merged}
                tables, config = parse_raw_input(raw)
            except (FileNotFoundError, ValueError) as exc:
                load_error: Optional[str] = str(exc)
            else:
                load_error = None

        report.step_metrics.append(GenerationStepMetric(
            step_name="Load Input",
            success=load_error is None,
            elapsed_seconds=t_load.elapsed,
            detail=load_error or f"{len(tables)} table(s) from {input_path.name}",
        ))
        if load_error is not None:
            logger.error("Failed to load %s: %s", input_path, load_error)
            report.input_errors.append(load_error)
            return self._finalise_report(report, t_load.elapsed)

        return self._run_pipeline(tables, config, report, {})

    def generate(
        self,
        tables: Sequence[Table],
        config: GeneratorConfig,
        *,
        class_names: Optional[Dict[str, str]] = None,
    ) -> GenerationReport:
        """
        Full pipeline from already-parsed tables and config.

        *class_names* maps table names to explicit class names; other tables
        use ``config.table_name_to_class_name``.
        """
        return self._run_pipeline(list(tables), config, GenerationReport(), class_names or {})

    # -----------------------------------------------------------------
    # Internal: pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        tables: List[Table],
        config: GeneratorConfig,
        report: GenerationReport,
        class_names: Dict[str, str],
    ) -> GenerationReport:
        pipeline_start: float = time.perf_counter()

        validation_ok: bool = self._step_validate(tables, config, report)
        if not validation_ok and self._strict_validation:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        self._step_generate(tables, config, report, class_names)
        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    def _step_validate(
        self,
        tables: List[Table],
        config: GeneratorConfig,
        report: GenerationReport,
    ) -> bool:
        with Timer("validation") as t:
            result: ValidationResult = validate_full(tables, config)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.has_warnings:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Input",
            success=result.is_valid,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

        for err in result.errors:
            logger.error("  ✗ %s", err)
        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)

        if result.has_errors:
            return False
        if result.has_warnings and self._fail_on_warnings:
            report.validation_errors.append("Warnings treated as errors (fail_on_warnings).")
            return False
        return True

    def _step_generate(
        self,
        tables: List[Table],
        config: GeneratorConfig,
        report: GenerationReport,
        class_names: Dict[str, str],
    ) -> None:
        writer: SourceWriter = SourceWriter(encoding=config.encoding, log=report.events)

        with Timer("generate") as t:
            for table in tables:
                gen: CodeGenerator = CodeGenerator(
                    table, config, class_name=class_names.get(table.name), writer=writer
                )
                try:
                    self._generate_table(gen)
                except OSError as exc:
                    message: str = f"{table.name}: {type(exc).__name__}: {exc}"
                    report.write_errors.append(message)
                    logger.error("Write failed for %s", message)
                except Exception as exc:
                    message = f"{table.name}: {type(exc).__name__}: {exc}"
                    report.generation_errors.append(message)
                    logger.error("Generation failed for %s", message, exc_info=True)
                report.total_tables_processed += 1

        failed: int = len(report.generation_errors) + len(report.write_errors)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Generate & Write",
            success=failed == 0,
            elapsed_seconds=t.elapsed,
            detail=f"{report.files_created} file(s) created, {failed} table(s) failed",
        ))
        logger.info(
            "Generation complete: %d table(s), %d file(s) created in %.3fs.",
            report.total_tables_processed,
            report.files_created,
            t.elapsed,
        )

    def _generate_table(self, gen: CodeGenerator) -> None:
        if self._force:
            if gen.should_be_skipped:
                gen.writer.skipped(gen.model_target, gen.model_path)
                return
            gen.write_model()
            wrote_model: bool = True
        else:
            wrote_model = gen.write_model_if_nonexistent_and_unskippable()

        if not wrote_model:
            return
        if self._with_specs:
            if self._force:
                gen.write_spec()
            else:
                gen.write_spec_if_not_exist()
        if self._with_arbitraries:
            if self._force:
                gen.write_arbitrary()
            else:
                gen.write_arbitrary_if_not_exist()

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.input_errors
            or report.validation_errors
            or report.generation_errors
            or report.write_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CodeGenerator",
    "MapperGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_input_file",
    "parse_table",
    "parse_raw_input",
]

logger.debug("mappergen.generator loaded.")
