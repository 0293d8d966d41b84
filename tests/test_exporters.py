"""
tests/test_exporters.py
Unit tests for mappergen.exporters.

Tests cover:
- Forced and conditional writes
- Idempotence: an existing file is never touched by the conditional write
- Event messages and the JSON write log
- Encoding of the written bytes
"""

from __future__ import annotations

import json
import os
import pathlib

import pytest

from mappergen.exporters import SourceWriter, WriteEvent, WriteLog, WriteOutcome
from mappergen.models import GeneratedUnit


def _unit(path: pathlib.Path, content: str = "package models\n") -> GeneratedUnit:
    return GeneratedUnit(path=path, content=content, target="models.Emp")


# ===========================================================================
# Writes
# ===========================================================================


class TestSourceWriter:
    """Tests for SourceWriter against real temporary directories."""

    def test_write_creates_directories(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "src" / "models" / "Emp.scala"
        event = SourceWriter().write(_unit(path))
        assert path.read_text(encoding="utf-8") == "package models\n"
        assert event.outcome is WriteOutcome.CREATED
        assert event.size_bytes == len("package models\n")

    def test_write_overwrites(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "Emp.scala"
        path.write_text("old", encoding="utf-8")
        SourceWriter().write(_unit(path, "new"))
        assert path.read_text(encoding="utf-8") == "new"

    def test_write_if_not_exist_creates(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "Emp.scala"
        event = SourceWriter().write_if_not_exist(_unit(path))
        assert event.outcome.wrote
        assert path.exists()

    def test_write_if_not_exist_leaves_file_untouched(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "Emp.scala"
        path.write_bytes(b"hand edited")
        os.utime(path, (1_000_000, 1_000_000))

        event = SourceWriter().write_if_not_exist(_unit(path))

        assert event.outcome is WriteOutcome.ALREADY_EXISTS
        assert not event.outcome.wrote
        assert path.read_bytes() == b"hand edited"
        assert path.stat().st_mtime == 1_000_000

    def test_second_conditional_write_is_noop(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "Emp.scala"
        writer = SourceWriter()
        writer.write_if_not_exist(_unit(path, "first"))
        writer.write_if_not_exist(_unit(path, "second"))
        assert path.read_text(encoding="utf-8") == "first"
        assert [e.outcome for e in writer.log.events] == [
            WriteOutcome.CREATED,
            WriteOutcome.ALREADY_EXISTS,
        ]

    def test_encoding(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "Emp.scala"
        SourceWriter(encoding="UTF-16").write(_unit(path, "// ü\n"))
        assert path.read_bytes().decode("UTF-16") == "// ü\n"

    def test_directory_failure_propagates(self, tmp_path: pathlib.Path) -> None:
        blocker = tmp_path / "src"
        blocker.write_text("file, not a directory", encoding="utf-8")
        with pytest.raises(OSError):
            SourceWriter().write(_unit(blocker / "models" / "Emp.scala"))

    def test_skip_and_no_output_write_nothing(self, tmp_path: pathlib.Path) -> None:
        writer = SourceWriter()
        writer.skipped("models.Emp", tmp_path / "Emp.scala")
        writer.no_output("models.EmpSpec", tmp_path / "EmpSpec.scala")
        assert list(tmp_path.iterdir()) == []
        assert writer.log.created == []


# ===========================================================================
# Events
# ===========================================================================


class TestWriteEvents:
    """Tests for event messages and the write log."""

    @pytest.mark.parametrize(
        "outcome, message",
        [
            (WriteOutcome.CREATED, '"models.Emp" created.'),
            (WriteOutcome.ALREADY_EXISTS, '"models.Emp" already exists.'),
            (WriteOutcome.SKIPPED_BY_SETTINGS, '"models.Emp" is skipped by settings.'),
            (WriteOutcome.NO_OUTPUT, '"models.Emp" has no output for the configured template.'),
        ],
    )
    def test_messages(self, outcome: WriteOutcome, message: str) -> None:
        event = WriteEvent("models.Emp", pathlib.Path("Emp.scala"), outcome)
        assert event.message == message

    def test_log_totals_and_json(self, tmp_path: pathlib.Path) -> None:
        log = WriteLog()
        writer = SourceWriter(log=log)
        writer.write(_unit(tmp_path / "Emp.scala", "abc"))
        writer.already_exists("models.Emp", tmp_path / "Emp.scala")

        assert log.total_bytes == 3
        assert len(log.created) == 1
        assert log.messages() == ['"models.Emp" created.', '"models.Emp" already exists.']

        data = json.loads(log.to_json())
        assert data["total_events"] == 2
        assert data["total_created"] == 1
        assert data["events"][1]["outcome"] == "already_exists"

    def test_generated_unit_metrics(self, tmp_path: pathlib.Path) -> None:
        unit = _unit(tmp_path / "Emp.scala", "a\nb\n")
        assert unit.line_count == 2
        assert unit.size_bytes == 4
        assert len(unit.checksum) == 64

    def test_messages_leave_out_no_output(self, tmp_path: pathlib.Path) -> None:
        writer = SourceWriter()
        writer.write(_unit(tmp_path / "Emp.scala"))
        writer.no_output("models.EmpSpec", tmp_path / "EmpSpec.scala")
        assert writer.log.messages() == ['"models.Emp" created.']
        assert len(writer.log.events) == 2
        assert json.loads(writer.log.to_json())["events"][1]["outcome"] == "no_output"
