"""Tests for the histrack command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from histrack.cli import cli


@pytest.fixture
def base_path(tmp_path: Path) -> Path:
    return tmp_path / "history"


@pytest.fixture
def runner(base_path: Path) -> CliRunner:
    return CliRunner(env={"HISTRACK_BASE_PATH": str(base_path), "HISTRACK_LOG_LEVEL": "error"})


@pytest.fixture
def change_config(tmp_path: Path) -> Path:
    path = tmp_path / "change.json"
    path.write_text(json.dumps({"idField": "id", "trackedFields": ["status"], "softUpdateFields": ["notes"]}))
    return path


def _entity_file(tmp_path: Path, payload: object, name: str = "entity.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return path


def _process(runner: CliRunner, entity: Path, config: Path, *extra: str):
    return runner.invoke(
        cli,
        ["process", "dataview", str(entity), "--entity-type", "plugin", "--config", str(config), *extra],
    )


class TestProcess:
    def test_first_run_prints_result(self, runner: CliRunner, tmp_path: Path, change_config: Path) -> None:
        entity = _entity_file(tmp_path, {"id": "dataview", "status": "open"})
        result = _process(runner, entity, change_config)

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["identifier"] == "dataview"
        assert payload["snapshot"]["type"] == "created"
        assert [c["type"] for c in payload["changes"]] == ["add"]
        assert payload["changes"][0]["entityType"] == "plugin"

    def test_rerun_same_day_is_skipped(
        self, runner: CliRunner, tmp_path: Path, change_config: Path, base_path: Path
    ) -> None:
        entity = _entity_file(tmp_path, {"id": "dataview", "status": "open"})
        _process(runner, entity, change_config)
        result = _process(runner, entity, change_config)

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["snapshot"]["type"] == "skipped"
        assert payload["changes"] is None
        assert len(json.loads((base_path / "dataview" / "changelog.json").read_text())) == 1

    def test_entity_folder_flag(self, runner: CliRunner, tmp_path: Path, change_config: Path, base_path: Path) -> None:
        entity = _entity_file(tmp_path, {"id": "dataview"})
        result = _process(runner, entity, change_config, "--entity-folder")
        assert result.exit_code == 0, result.output
        assert (base_path / "d" / "dataview" / "changelog.json").exists()

    def test_config_without_id_field_fails(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "bad.json"
        config.write_text(json.dumps({"trackedFields": ["status"]}))
        entity = _entity_file(tmp_path, {"id": "dataview"})

        result = _process(runner, entity, config)
        assert result.exit_code == 1
        assert "idField" in result.output

    def test_entity_without_id_fails(self, runner: CliRunner, tmp_path: Path, change_config: Path) -> None:
        entity = _entity_file(tmp_path, {"status": "open"})
        result = _process(runner, entity, change_config)
        assert result.exit_code == 1
        assert "missing required id field" in result.output


class TestChanges:
    def test_lists_and_filters_records(self, runner: CliRunner, tmp_path: Path, change_config: Path) -> None:
        _process(runner, _entity_file(tmp_path, [{"id": "a"}, {"id": "b"}]), change_config)

        result = runner.invoke(cli, ["changes", "dataview"])
        assert result.exit_code == 0, result.output
        assert [c["id"] for c in json.loads(result.output)] == ["a", "b"]

        limited = runner.invoke(cli, ["changes", "dataview", "--type", "add", "--limit", "1"])
        assert [c["id"] for c in json.loads(limited.output)] == ["a"]

        removals = runner.invoke(cli, ["changes", "dataview", "--type", "removal"])
        assert json.loads(removals.output) == []

    def test_unknown_identifier_is_empty(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["changes", "nobody"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == []


class TestLatest:
    def test_prints_latest_snapshot(self, runner: CliRunner, tmp_path: Path, change_config: Path) -> None:
        _process(runner, _entity_file(tmp_path, {"id": "dataview", "status": "open"}), change_config)
        result = runner.invoke(cli, ["latest", "dataview"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"id": "dataview", "status": "open"}

    def test_missing_snapshot_fails(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["latest", "nobody"])
        assert result.exit_code == 1
        assert "No snapshot for nobody" in result.output

    def test_unsafe_identifier_fails(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["latest", "../etc"])
        assert result.exit_code == 1
        assert "Invalid path segment" in result.output
