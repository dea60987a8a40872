"""Tests for environment and file based configuration loading."""

from __future__ import annotations

import json

import pytest

from histrack.config import load_change_config, load_config
from histrack.models.config import ChangeDetectorConfig


class TestLoadConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key in ("BASE_PATH", "SNAPSHOT_RETENTION", "USE_ENTITY_FOLDER", "LOG_LEVEL", "LOG_JSON"):
            monkeypatch.delenv(f"HISTRACK_{key}", raising=False)
        config = load_config()
        assert config.storage.base_path == "data/history"
        assert config.storage.snapshot_retention == 2
        assert config.storage.use_entity_folder is False
        assert config.log.level == "info"
        assert config.log.json_output is True

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HISTRACK_BASE_PATH", "/srv/history")
        monkeypatch.setenv("HISTRACK_SNAPSHOT_RETENTION", "7")
        monkeypatch.setenv("HISTRACK_USE_ENTITY_FOLDER", "yes")
        monkeypatch.setenv("HISTRACK_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("HISTRACK_LOG_JSON", "false")
        config = load_config()
        assert config.storage.base_path == "/srv/history"
        assert config.storage.snapshot_retention == 7
        assert config.storage.use_entity_folder is True
        assert config.log.level == "debug"
        assert config.log.json_output is False

    def test_retention_is_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HISTRACK_SNAPSHOT_RETENTION", "-4")
        assert load_config().storage.snapshot_retention == 0
        monkeypatch.setenv("HISTRACK_SNAPSHOT_RETENTION", "10000")
        assert load_config().storage.snapshot_retention == 365

    def test_invalid_log_level_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HISTRACK_LOG_LEVEL", "verbose")
        with pytest.raises(ValueError, match="Invalid log level"):
            load_config()


class TestLoadChangeConfig:
    def test_reads_camel_case_file(self, tmp_path) -> None:
        path = tmp_path / "change.json"
        path.write_text(
            json.dumps({"idField": "id", "trackedFields": ["version"], "softUpdateFields": ["downloads"]}),
            encoding="utf-8",
        )
        assert load_change_config(path) == ChangeDetectorConfig(
            id_field="id",
            tracked_fields=("version",),
            soft_update_fields=("downloads",),
        )

    def test_requires_id_field(self, tmp_path) -> None:
        path = tmp_path / "change.json"
        path.write_text(json.dumps({"trackedFields": ["version"]}), encoding="utf-8")
        with pytest.raises(ValueError, match="idField"):
            load_change_config(path)
