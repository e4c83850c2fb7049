# tests/test_cli.py
"""
Tests for the Lifeline command-line interface (CLI).

Scope
-----
These tests verify the interaction layer provided by Typer:
1.  **Command Registration**: `--help` lists the commands.
2.  **Round trips through the data file**: each invocation opens a fresh
    session on the per-test `LIFELINE_DATA_FILE`, so state only survives via
    the JSON file, exactly as between real runs.
3.  **Error Handling**: core errors exit with code 1 and a readable message.

We use `typer.testing.CliRunner` to invoke the app in-process.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from lifeline.cli import app
from lifeline.core.store.storage import JsonFileStorage
from lifeline.pipelines.csv_import import CSV_TEMPLATE


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    """Create a fresh CliRunner for each test."""
    return CliRunner()


def _add_samples(runner: CliRunner) -> None:
    r1 = runner.invoke(
        app, ["add", "Residence", "Moved to New York", "2020-01-15", "--end", "2022-06-30"]
    )
    r2 = runner.invoke(app, ["add", "Job", "Software Developer at TechCorp", "2020-03-01"])
    assert r1.exit_code == 0, r1.output
    assert r2.exit_code == 0, r2.output


def test_cli_help_shows_usage(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, f"Help failed: {result.output}"
    assert "Lifeline" in result.output
    for command in ("add", "list", "import", "export", "at"):
        assert command in result.output


def test_add_persists_to_data_file(runner: CliRunner, data_file: Path) -> None:
    _add_samples(runner)
    saved = JsonFileStorage(data_file).load()
    assert saved is not None
    assert [e.title for e in saved] == ["Moved to New York", "Software Developer at TechCorp"]

    listed = runner.invoke(app, ["list"])
    assert listed.exit_code == 0
    assert "2 event(s)" in listed.output


def test_add_rejects_bad_date(runner: CliRunner, data_file: Path) -> None:
    result = runner.invoke(app, ["add", "Job", "Dev", "yesterday"])
    assert result.exit_code == 1, result.output
    assert "Add failed" in result.output
    assert not data_file.exists()


def test_add_rejects_unknown_category(runner: CliRunner) -> None:
    result = runner.invoke(app, ["add", "Pets", "Rex", "2020-01-01"])
    assert result.exit_code == 2


def test_at_groups_by_category(runner: CliRunner) -> None:
    _add_samples(runner)
    result = runner.invoke(app, ["at", "2021-01-01"])
    assert result.exit_code == 0, result.output
    assert "Moved to New York" in result.output
    assert "Software Developer at TechCorp" in result.output
    assert "Relationship" in result.output and "None" in result.output


def test_import_csv_then_export_json(runner: CliRunner, tmp_path: Path) -> None:
    csv_file = tmp_path / "events.csv"
    csv_file.write_text(CSV_TEMPLATE, encoding="utf-8")

    result = runner.invoke(app, ["import", str(csv_file)])
    assert result.exit_code == 0, result.output
    assert "Successfully imported 3 events" in result.output

    again = runner.invoke(app, ["import", str(csv_file)])
    assert "Successfully imported 0 events" in again.output

    exported = runner.invoke(app, ["export"])
    assert exported.exit_code == 0
    payload = json.loads(exported.output)
    assert [item["title"] for item in payload] == [
        "My First Apartment",
        "Software Developer",
        "Honda Civic",
    ]


def test_import_bad_csv_reports_line(runner: CliRunner, tmp_path: Path, data_file: Path) -> None:
    bad = tmp_path / "bad.csv"
    bad.write_text("h\nJob,Dev,2020-01-01,,\nPets,Rex,2021-01-01,,\n", encoding="utf-8")

    result = runner.invoke(app, ["import", str(bad)])
    assert result.exit_code == 1
    assert "line 3" in result.output
    assert not data_file.exists()


def test_json_backup_restore_replaces(runner: CliRunner, tmp_path: Path) -> None:
    _add_samples(runner)
    backup = tmp_path / "backup.json"
    assert runner.invoke(app, ["export", "-o", str(backup)]).exit_code == 0

    runner.invoke(app, ["clear", "--yes"])
    assert "No events yet" in runner.invoke(app, ["list"]).output

    restored = runner.invoke(app, ["import", str(backup)])
    assert restored.exit_code == 0, restored.output
    assert "Successfully imported 2 events" in restored.output


def test_delete_asks_for_confirmation(runner: CliRunner, data_file: Path) -> None:
    _add_samples(runner)
    target = (JsonFileStorage(data_file).load() or [])[0]

    kept = runner.invoke(app, ["delete", target.id], input="n\n")
    assert kept.exit_code == 0
    assert "Cancelled" in kept.output
    assert len(JsonFileStorage(data_file).load() or []) == 2

    gone = runner.invoke(app, ["delete", target.id], input="y\n")
    assert gone.exit_code == 0, gone.output
    remaining = JsonFileStorage(data_file).load() or []
    assert [e.id for e in remaining if e.id == target.id] == []
    assert len(remaining) == 1


def test_delete_unknown_id_fails(runner: CliRunner) -> None:
    result = runner.invoke(app, ["delete", "ghost", "--yes"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_edit_replaces_selected_fields(runner: CliRunner, data_file: Path) -> None:
    _add_samples(runner)
    job = (JsonFileStorage(data_file).load() or [])[1]

    result = runner.invoke(app, ["edit", job.id, "--title", "Staff Engineer", "--end", "2023-12-31"])
    assert result.exit_code == 0, result.output

    updated = (JsonFileStorage(data_file).load() or [])[1]
    assert updated.id == job.id
    assert updated.title == "Staff Engineer"
    assert updated.end is not None and updated.end.isoformat() == "2023-12-31"
    assert updated.start == job.start


def test_template_and_layout(runner: CliRunner) -> None:
    tpl = runner.invoke(app, ["template"])
    assert tpl.exit_code == 0
    assert tpl.output.startswith("Category,Title,Start Date,End Date,Notes")

    _add_samples(runner)
    geo = runner.invoke(app, ["layout", "--width", "1000"])
    assert geo.exit_code == 0, geo.output
    assert "Ticks" in geo.output and "Bars" in geo.output


def test_import_non_utf8_file_fails_cleanly(runner: CliRunner, tmp_path: Path) -> None:
    blob = tmp_path / "backup.json"
    blob.write_bytes(b"\xff\xfe[")

    result = runner.invoke(app, ["import", str(blob)])
    assert result.exit_code == 1
    assert "not valid UTF-8" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_corrupt_data_file_reports_error(runner: CliRunner, data_file: Path) -> None:
    data_file.write_text("{broken", encoding="utf-8")

    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "Load failed" in result.output
    assert data_file.read_text(encoding="utf-8") == "{broken"
