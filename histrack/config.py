"""Configuration loading from environment variables and JSON files.

Only the command-line entry point reads the environment; library callers
build HistoryOptions directly.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from histrack.models.config import (
    ChangeDetectorConfig,
    HistrackConfig,
    LogConfig,
    StorageConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"HISTRACK_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_clamped_int(key: str, default: int, lower: int, upper: int) -> int:
    """Integer setting forced into ``lower..upper``."""
    return min(max(int(_env(key, str(default))), lower), upper)


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> HistrackConfig:
    """Load configuration from HISTRACK_* environment variables."""
    return HistrackConfig(
        storage=StorageConfig(
            base_path=_env("BASE_PATH", "data/history"),
            snapshot_retention=_env_clamped_int("SNAPSHOT_RETENTION", 2, lower=0, upper=365),
            use_entity_folder=_env_bool("USE_ENTITY_FOLDER", False),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            json_output=_env_bool("LOG_JSON", True),
        ),
    )


def load_change_config(path: str | Path) -> ChangeDetectorConfig:
    """Read a classifier config (camelCase keys) from a JSON file.

    Raises:
        ValueError: the file is not a JSON object with an ``idField``.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict) or "idField" not in raw:
        raise ValueError(f"Change config must be a JSON object with 'idField': {path}")
    return ChangeDetectorConfig.from_dict(raw)
