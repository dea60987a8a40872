"""Core data structures for histrack."""

from histrack.models.changes import Change, ChangeQuery, ChangeType
from histrack.models.config import (
    ChangeDetectorConfig,
    HistoryOptions,
    HistrackConfig,
    LogConfig,
    StorageConfig,
)
from histrack.models.snapshots import (
    HistoryResult,
    PreviousSnapshot,
    SnapshotPath,
    SnapshotResult,
    SnapshotType,
)

__all__ = [
    "Change",
    "ChangeDetectorConfig",
    "ChangeQuery",
    "ChangeType",
    "HistoryOptions",
    "HistoryResult",
    "HistrackConfig",
    "LogConfig",
    "PreviousSnapshot",
    "SnapshotPath",
    "SnapshotResult",
    "SnapshotType",
    "StorageConfig",
]
