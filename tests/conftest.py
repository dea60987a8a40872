"""Shared fixtures for histrack tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest
import structlog

from histrack.models.config import ChangeDetectorConfig, HistoryOptions
from histrack.storage.backend import MemoryBackend

_START = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Controllable UTC clock; call it to read the current time."""

    def __init__(self, start: datetime = _START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0, seconds: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours, seconds=seconds)


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo any structlog configuration a test (or the CLI) installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def status_config() -> ChangeDetectorConfig:
    """id / status (tracked) / notes (soft), the canonical example config."""
    return ChangeDetectorConfig(
        id_field="id",
        tracked_fields=("status",),
        update_fields=(),
        soft_update_fields=("notes",),
    )


@pytest.fixture
def repo_config() -> ChangeDetectorConfig:
    """Nested config resembling repository metadata tracking."""
    return ChangeDetectorConfig(
        id_field="repo.full_name",
        tracked_fields=("repo.default_branch", "release.tag"),
        update_fields=("repo.pushed_at",),
        soft_update_fields=("stats.stars", "stats.forks"),
    )


@pytest.fixture
def history_options(tmp_path, status_config: ChangeDetectorConfig) -> HistoryOptions:
    return HistoryOptions(
        base_path=str(tmp_path / "history"),
        entity_type="plugin",
        change_config=status_config,
        use_entity_folder=False,
        snapshot_retention=2,
    )
