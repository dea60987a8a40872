"""Configuration data structures."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ChangeDetectorConfig:
    """Field paths driving change classification.

    ``update_fields`` is validated alongside the others but is not read by
    the classifier.
    """

    id_field: str
    tracked_fields: tuple[str, ...] = ()
    update_fields: tuple[str, ...] = ()
    soft_update_fields: tuple[str, ...] = ()

    def all_fields(self) -> tuple[str, ...]:
        return (self.id_field, *self.tracked_fields, *self.update_fields, *self.soft_update_fields)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ChangeDetectorConfig:
        """Build from the camelCase form used in JSON config files."""
        return cls(
            id_field=str(raw["idField"]),
            tracked_fields=tuple(raw.get("trackedFields", ())),
            update_fields=tuple(raw.get("updateFields", ())),
            soft_update_fields=tuple(raw.get("softUpdateFields", ())),
        )


@dataclass
class HistoryOptions:
    """Options for one HistoryService (one entity type under one base path)."""

    base_path: str
    entity_type: str
    change_config: ChangeDetectorConfig
    use_entity_folder: bool = False
    snapshot_retention: int = 2


@dataclass
class StorageConfig:
    """Where and how history is stored."""

    base_path: str = "data/history"
    snapshot_retention: int = 2
    use_entity_folder: bool = False


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    json_output: bool = True


@dataclass
class HistrackConfig:
    """Top-level histrack configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    log: LogConfig = field(default_factory=LogConfig)
