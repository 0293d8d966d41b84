# File: mappergen/exporters.py
"""
mappergen - Source Writer (File-System Manager)
================================================

Responsible for:
    1. Creating destination directories recursively.
    2. Writing generated sources atomically (write-to-temp then rename) in
       the configured encoding.
    3. The non-destructive "write only if missing" variants.
    4. Recording one ``WriteEvent`` per request instead of printing, so the
       CLI decides how (and whether) to render them.

Directory-creation failure is the only condition that aborts a write; the
``OSError`` propagates to the caller.  Skips and existing files are
reported as events, never raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from mappergen.models import GeneratedUnit
from mappergen.utils import write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.exporters")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class WriteOutcome(str, Enum):
    """What happened to one write request."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    SKIPPED_BY_SETTINGS = "skipped_by_settings"
    NO_OUTPUT = "no_output"

    @property
    def wrote(self) -> bool:
        return self is WriteOutcome.CREATED


_MESSAGES: Dict[WriteOutcome, str] = {
    WriteOutcome.CREATED: "created.",
    WriteOutcome.ALREADY_EXISTS: "already exists.",
    WriteOutcome.SKIPPED_BY_SETTINGS: "is skipped by settings.",
    WriteOutcome.NO_OUTPUT: "has no output for the configured template.",
}


@dataclass(frozen=True, slots=True)
class WriteEvent:
    """Immutable record of a single write request."""

    target: str
    path: Path
    outcome: WriteOutcome
    size_bytes: int = 0

    @property
    def message(self) -> str:
        """Console line, e.g. ``"models.Member" created.``"""
        return f'"{self.target}" {_MESSAGES[self.outcome]}'

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "path": str(self.path),
            "outcome": self.outcome.value,
            "size_bytes": self.size_bytes,
        }


@dataclass(slots=True)
class WriteLog:
    """
    Ordered events of one writer.

    Serialisable to JSON for a run manifest.
    """

    events: List[WriteEvent] = field(default_factory=list)

    def record(self, event: WriteEvent) -> WriteEvent:
        self.events.append(event)
        logger.debug(event.message)
        return event

    def by_outcome(self, outcome: WriteOutcome) -> List[WriteEvent]:
        return [e for e in self.events if e.outcome is outcome]

    @property
    def created(self) -> List[WriteEvent]:
        return self.by_outcome(WriteOutcome.CREATED)

    @property
    def total_bytes(self) -> int:
        return sum(e.size_bytes for e in self.events)

    def messages(self) -> List[str]:
        """Console lines; ``NO_OUTPUT`` events stay in the manifest only."""
        return [e.message for e in self.events if e.outcome is not WriteOutcome.NO_OUTPUT]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_events": len(self.events),
            "total_created": len(self.created),
            "total_bytes": self.total_bytes,
            "events": [e.to_dict() for e in self.events],
        }

    def to_json(self, indent_size: int = 2) -> str:
        """Serialise the log to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


class SourceWriter:
    """
    Materialises ``GeneratedUnit``s on disk.

    Usage::

        writer = SourceWriter(encoding="UTF-8")
        writer.write_if_not_exist(unit)
        print("\\n".join(writer.log.messages()))
    """

    def __init__(self, encoding: str = "utf-8", log: Optional[WriteLog] = None) -> None:
        self._encoding: str = encoding
        self.log: WriteLog = log if log is not None else WriteLog()

    @property
    def encoding(self) -> str:
        return self._encoding

    def write(self, unit: GeneratedUnit) -> WriteEvent:
        """Write *unit*, overwriting any existing file."""
        size: int = write_file(unit.path, unit.content, encoding=self._encoding)
        logger.debug("Wrote %s (%d bytes, %d lines).", unit.path, size, unit.line_count)
        return self.log.record(
            WriteEvent(unit.target, unit.path, WriteOutcome.CREATED, size)
        )

    def write_if_not_exist(self, unit: GeneratedUnit) -> WriteEvent:
        """Write *unit* unless its destination exists; the file is never touched then."""
        if unit.path.exists():
            return self.already_exists(unit.target, unit.path)
        return self.write(unit)

    def already_exists(self, target: str, path: Path) -> WriteEvent:
        return self.log.record(WriteEvent(target, path, WriteOutcome.ALREADY_EXISTS))

    def skipped(self, target: str, path: Path) -> WriteEvent:
        return self.log.record(WriteEvent(target, path, WriteOutcome.SKIPPED_BY_SETTINGS))

    def no_output(self, target: str, path: Path) -> WriteEvent:
        return self.log.record(WriteEvent(target, path, WriteOutcome.NO_OUTPUT))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "WriteOutcome",
    "WriteEvent",
    "WriteLog",
    "SourceWriter",
]

logger.debug("mappergen.exporters loaded.")
