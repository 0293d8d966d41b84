# File: mappergen/utils.py
"""
mappergen - Naming Functions & Helpers
=======================================
Identifier conversion (table/column names → Scala identifiers), small
text-assembly helpers shared by the emitters, and file I/O helpers used by
the writer.

Naming pipeline for a column::

    raw name ──▶ lower camel case ──▶ quote reserved word ──▶ suffix on conflict
    member_id     memberId              `type`                  copyColumn

Every function here is a pure ``str -> str`` (or returns one), so they can be
stored directly as policy values on ``GeneratorConfig`` and swapped out
independently.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Callable, FrozenSet, List, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.utils")

# ---------------------------------------------------------------------------
# Identifier tables
# ---------------------------------------------------------------------------

_UPPERCASE_RE: re.Pattern[str] = re.compile(r"[A-Z]")

# Scala keywords that must be back-quoted when used as identifiers
RESERVED_WORDS: FrozenSet[str] = frozenset({
    "abstract", "case", "catch", "class", "def",
    "do", "else", "extends", "false", "final",
    "finally", "for", "forSome", "if", "implicit",
    "import", "lazy", "match", "new", "null", "macro",
    "object", "override", "package", "private", "protected",
    "return", "sealed", "super", "then", "this", "throw",
    "trait", "try", "true", "type", "val",
    "var", "while", "with", "yield",
})

# Members every generated case class already has
CONFLICT_METHODS: FrozenSet[str] = frozenset({
    "toString", "hashCode", "wait", "getClass", "notify", "notifyAll",
    "productArity", "productElementName", "productElementNames",
    "productIterator", "productPrefix", "copy",
})

# Names the generated companion object already uses for its own locals
GENERATOR_RESERVED_ALIASES: FrozenSet[str] = frozenset({"rs"})

DEFAULT_SYNTAX_ALIAS: str = "r"
CONFLICT_SUFFIX: str = "Column"


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


def to_proper_case(word: str) -> str:
    """
    Upper-case the first character, lower-case the rest.

        >>> to_proper_case("mEMBER")
        'Member'
    """
    if not word or not word.strip():
        return ""
    return word[0].upper() + word[1:].lower()


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert a snake_case (or any-case) name to UpperCamelCase.

    Splits on ``_`` only; each part is proper-cased, so ``userId`` becomes
    ``Userid`` rather than ``UserId``.

        >>> to_camel_case("member_group")
        'MemberGroup'
        >>> to_camel_case("MEMBER")
        'Member'
    """
    return "".join(to_proper_case(part) for part in name.split("_"))


@functools.lru_cache(maxsize=None)
def lower_camel_case(name: str) -> str:
    """
    Convert a name to lowerCamelCase.

        >>> lower_camel_case("created_at")
        'createdAt'
    """
    camel: str = to_camel_case(name)
    if not camel:
        return ""
    return camel[0].lower() + camel[1:]


def quote_reserved_word(name: str) -> str:
    """Back-quote *name* when it is a Scala keyword."""
    if name in RESERVED_WORDS:
        return f"`{name}`"
    return name


def unquote_identifier(name: str) -> str:
    """Inverse of ``quote_reserved_word``."""
    if len(name) >= 2 and name.startswith("`") and name.endswith("`"):
        return name[1:-1]
    return name


def add_suffix_if_conflict(suffix: str) -> Callable[[str], str]:
    """
    Build a naming step that appends *suffix* to names clashing with a
    case-class member (``copy``, ``hashCode``, ...).
    """

    def _add_suffix(name: str) -> str:
        if name in CONFLICT_METHODS:
            return name + suffix
        return name

    return _add_suffix


def column_name_to_field_name_basic(name: str) -> str:
    """lowerCamelCase plus reserved-word quoting, without conflict suffixing."""
    return quote_reserved_word(lower_camel_case(name))


_add_column_suffix: Callable[[str], str] = add_suffix_if_conflict(CONFLICT_SUFFIX)


def column_name_to_field_name(name: str) -> str:
    """
    Default column → field naming policy.

        >>> column_name_to_field_name("member_id")
        'memberId'
        >>> column_name_to_field_name("type")
        '`type`'
        >>> column_name_to_field_name("copy")
        'copyColumn'
    """
    return _add_column_suffix(column_name_to_field_name_basic(name))


def table_name_to_class_name(name: str) -> str:
    """Default table → class naming policy."""
    return to_camel_case(name)


def table_name_to_syntax_name(name: str) -> str:
    """
    Default short alias for a table: the upper-case letters of its class
    name, lower-cased.

        >>> table_name_to_syntax_name("member_group")
        'mg'
        >>> table_name_to_syntax_name("rank_score")
        'r'
    """
    alias: str = "".join(_UPPERCASE_RE.findall(to_camel_case(name))).lower()
    if not alias or alias in GENERATOR_RESERVED_ALIASES:
        return DEFAULT_SYNTAX_ALIAS
    return alias


def capitalize_first(name: str) -> str:
    """Upper-case only the first character, leaving the rest untouched."""
    if not name:
        return ""
    return name[0].upper() + name[1:]


# ---------------------------------------------------------------------------
# Text assembly helpers
# ---------------------------------------------------------------------------


def margin(level: int, size: int = 2) -> str:
    """Leading whitespace for *level* levels of generated Scala code."""
    return " " * (level * size)


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 2) -> List[str]:
    """Indent a list of lines, returning a new list. Blank lines stay blank."""
    prefix: str = margin(level, size)
    return [prefix + line if line.strip() else line for line in lines]


def apply_line_break(text: str, eol: str) -> str:
    """Re-encode ``\\n`` line breaks of assembled text with *eol*."""
    if eol == "\n":
        return text
    return text.replace("\n", eol)


def scala_string(value: str) -> str:
    """Wrap a value in a Scala double-quoted string literal."""
    escaped: str = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def qualified_name(package_name: str, class_name: str) -> str:
    if not package_name:
        return class_name
    return f"{package_name}.{class_name}"


def package_path(package_name: str) -> Path:
    """``com.example.models`` → ``com/example/models``."""
    if not package_name:
        return Path()
    return Path(*package_name.split("."))


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """
    Create directory (and parents) if it doesn't exist.

    Failure here is the one condition that aborts a write, so ``OSError``
    is left to propagate.
    """
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, encoding: str = "utf-8") -> int:
    """
    Write *content* to *path* atomically (temp file in the same directory,
    then rename).

    The temporary file is always closed, and removed on failure.  Returns the
    number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode(encoding)
    fd: int
    tmp_path: str
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(encoded)
        os.replace(tmp_path, str(path))
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def read_file(path: Path, encoding: str = "utf-8") -> str:
    """Read a file and return its content as a string."""
    return path.read_bytes().decode(encoding)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string. O(n)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("generate models") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RESERVED_WORDS",
    "CONFLICT_METHODS",
    "GENERATOR_RESERVED_ALIASES",
    "DEFAULT_SYNTAX_ALIAS",
    "CONFLICT_SUFFIX",
    "to_proper_case",
    "to_camel_case",
    "lower_camel_case",
    "quote_reserved_word",
    "unquote_identifier",
    "add_suffix_if_conflict",
    "column_name_to_field_name_basic",
    "column_name_to_field_name",
    "table_name_to_class_name",
    "table_name_to_syntax_name",
    "capitalize_first",
    "margin",
    "indent_lines",
    "apply_line_break",
    "scala_string",
    "qualified_name",
    "package_path",
    "ensure_directory",
    "write_file",
    "read_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("mappergen.utils loaded: %d public symbols.", len(__all__))
