# File: mappergen/__main__.py
"""
mappergen - Module entry point.

Allows running the generator directly via::

    python -m mappergen --input tables.yaml

This module simply delegates to the CLI entry point defined in ``mappergen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from mappergen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
