"""histrack: dated entity snapshots and classified change logs.

Public entry points:
    HistoryService  -- per-entity snapshot + changelog coordination.
    ChangeDetector  -- pure classifier for single entities and collections.
    SnapshotStore   -- dated full-state files with retention.
    ChangeLogStore  -- append-only JSON changelog with filtered reads.
    TaskQueue       -- single-consumer asyncio task serialiser.
"""

from __future__ import annotations

__version__ = "0.1.0"

from histrack.changes import ChangeDetector, ChangeTracker
from histrack.history import HistoryService
from histrack.models import (
    Change,
    ChangeDetectorConfig,
    ChangeQuery,
    ChangeType,
    HistoryOptions,
    HistoryResult,
    SnapshotResult,
    SnapshotType,
)
from histrack.queue import TaskQueue
from histrack.storage import ChangeLogStore, LocalFileBackend, MemoryBackend, SnapshotStore

__all__ = [
    "Change",
    "ChangeDetector",
    "ChangeDetectorConfig",
    "ChangeLogStore",
    "ChangeQuery",
    "ChangeTracker",
    "ChangeType",
    "HistoryOptions",
    "HistoryResult",
    "HistoryService",
    "LocalFileBackend",
    "MemoryBackend",
    "SnapshotResult",
    "SnapshotStore",
    "SnapshotType",
    "TaskQueue",
    "__version__",
]
