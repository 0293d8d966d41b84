# File: mappergen/cli.py
"""
mappergen - Command-Line Interface
===================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate models, specs and arbitraries for every table
    python -m mappergen --input tables.yaml

    # Only some tables, overwriting what is there
    python -m mappergen -i tables.yaml --table member --table company --force

    # Print the model source to stdout without writing anything
    python -m mappergen -i tables.yaml --table member --echo

    # Validate only (no file output)
    python -m mappergen -i tables.yaml --validate-only

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    3 - write error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_WRITE_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root mappergen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("mappergen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from mappergen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="mappergen",
        description=(
            "mappergen - scalikejdbc mapper generator.\n\n"
            "Turns table metadata (JSON/YAML) into Scala model classes with "
            "CRUD companions, test specs and ScalaCheck arbitraries."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -i tables.yaml\n"
            "  %(prog)s -i tables.yaml --table member --force\n"
            "  %(prog)s -i tables.yaml --table member --echo\n"
            "  %(prog)s -i tables.json --validate-only\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"mappergen v{__version__}",
    )

    parser.add_argument(
        "-i", "--input",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the table metadata file (JSON or YAML).",
    )
    parser.add_argument(
        "-t", "--table",
        dest="tables",
        action="append",
        default=None,
        metavar="NAME",
        help="Only process this table (repeatable). Matching is case-insensitive.",
    )
    parser.add_argument(
        "--class-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Override the generated class name. Requires exactly one --table.",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the input without generating code.",
    )
    mode_group.add_argument(
        "--echo",
        action="store_true",
        default=False,
        help="Print the model source of each selected table instead of writing files.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--src-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Override the model source root.",
    )
    config_group.add_argument(
        "--test-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Override the test source root.",
    )
    config_group.add_argument(
        "--package",
        dest="package_name",
        type=str,
        default=None,
        metavar="PKG",
        help="Override the Scala package (e.g. 'com.example.models').",
    )
    config_group.add_argument(
        "--template",
        type=str,
        default=None,
        choices=["interpolation", "queryDsl"],
        help="Override how the generated methods build SQL.",
    )
    config_group.add_argument(
        "--test-template",
        type=str,
        default=None,
        metavar="NAME",
        help="Override the test framework (ScalaTestFlatSpec, specs2unit, specs2acceptance).",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite existing files (tables in table_names_to_skip stay skipped).",
    )
    behaviour_group.add_argument(
        "--no-spec",
        action="store_true",
        default=False,
        help="Do not write test specs.",
    )
    behaviour_group.add_argument(
        "--no-arbitrary",
        action="store_true",
        default=False,
        help="Do not write ScalaCheck arbitraries.",
    )
    behaviour_group.add_argument(
        "--no-strict",
        action="store_true",
        default=False,
        help="Continue even if validation has errors.",
    )
    behaviour_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat validation warnings as errors.",
    )
    behaviour_group.add_argument(
        "--manifest",
        type=str,
        default=None,
        metavar="PATH",
        help="Write the list of write events as JSON to PATH.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress everything except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Input handling
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.src_dir is not None:
        overrides["src_dir"] = args.src_dir
    if args.test_dir is not None:
        overrides["test_dir"] = args.test_dir
    if args.package_name is not None:
        overrides["package_name"] = args.package_name
    if args.template is not None:
        overrides["template"] = args.template
    if args.test_template is not None:
        overrides["test_template"] = args.test_template

    return overrides


def _load(args: argparse.Namespace) -> Tuple[List[Any], Any]:
    """
    Load, parse and filter the input.

    Raises:
        FileNotFoundError: If the input file doesn't exist.
        ValueError: If parsing fails or a requested table is unknown.
    """
    from mappergen.generator import load_input_file, parse_raw_input

    input_path: Path = Path(args.input).resolve()
    tables, config = parse_raw_input(load_input_file(input_path))

    overrides: Dict[str, Any] = _build_config_overrides(args)
    if overrides:
        config = config.with_overrides(**overrides)

    if args.tables:
        by_name: Dict[str, Any] = {t.name.lower(): t for t in tables}
        missing: List[str] = [n for n in args.tables if n.lower() not in by_name]
        if missing:
            raise ValueError(f"Unknown table(s): {', '.join(missing)}")
        tables = [by_name[n.lower()] for n in args.tables]

    return tables, config


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


def _run_validate_only(tables: List[Any], config: Any) -> int:
    """Run validation only and print a report."""
    from mappergen.utils import Timer
    from mappergen.validators import validate_full

    with Timer("validation") as t:
        result = validate_full(tables, config)

    print(f"\n{'=' * 50}")
    print("  Input Validation Report")
    print(f"{'=' * 50}")
    print(f"  Tables:   {len(tables)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")
    print()
    print(result.format_report())
    print(f"{'=' * 50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


def _run_echo(tables: List[Any], config: Any, class_name: Optional[str]) -> int:
    """Print model sources to stdout."""
    from mappergen.generator import CodeGenerator

    for table in tables:
        try:
            source: str = CodeGenerator(table, config, class_name=class_name).model_all()
        except Exception as exc:
            logger.error("Generation failed for %s: %s", table.name, exc)
            return EXIT_GENERATION_ERROR
        sys.stdout.write(source)
    return EXIT_SUCCESS


def _run_generation(
    tables: List[Any],
    config: Any,
    args: argparse.Namespace,
) -> int:
    """Run the full generation pipeline and return the exit code."""
    from mappergen.generator import GenerationReport, MapperGenerator

    generator: MapperGenerator = MapperGenerator(
        force=args.force,
        with_specs=not args.no_spec,
        with_arbitraries=not args.no_arbitrary,
        strict_validation=not args.no_strict,
        fail_on_warnings=args.fail_on_warnings,
    )

    class_names: Dict[str, str] = {}
    if args.class_name:
        class_names[tables[0].name] = args.class_name
    report: GenerationReport = generator.generate(tables, config, class_names=class_names)

    if not args.quiet:
        for message in report.events.messages():
            print(message)
        print(report.summary(), file=sys.stderr)

    if args.manifest:
        from mappergen.utils import write_file

        write_file(Path(args.manifest), report.events.to_json())
        logger.info("Manifest written to %s", args.manifest)

    if not report.success:
        if report.validation_errors:
            return EXIT_VALIDATION_ERROR
        if report.write_errors:
            return EXIT_WRITE_ERROR
        return EXIT_GENERATION_ERROR

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    _setup_logging(-1 if args.quiet else args.verbose)
    if args.quiet:
        logging.getLogger("mappergen").setLevel(logging.ERROR)

    if args.class_name and len(args.tables or []) != 1:
        logger.error("--class-name requires exactly one --table.")
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    try:
        tables, config = _load(args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load input: %s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    logger.info("Input:   %s", args.input)
    logger.info("Tables:  %d", len(tables))
    logger.info("Force:   %s", args.force)

    if args.validate_only:
        sys.exit(_run_validate_only(tables, config))

    if args.echo:
        sys.exit(_run_echo(tables, config, args.class_name))

    exit_code: int = _run_generation(tables, config, args)
    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_WRITE_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("mappergen.cli loaded.")
