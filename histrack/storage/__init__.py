"""Persistence for histrack.

Submodules:
    backend    -- StorageBackend interface with local-file and in-memory implementations.
    snapshot   -- Dated full-state snapshots with retention.
    changelog  -- Append-only JSON changelog with filtered queries.
"""

from histrack.storage.backend import LocalFileBackend, MemoryBackend, StorageBackend
from histrack.storage.changelog import ChangeLogStore
from histrack.storage.snapshot import SnapshotStore

__all__ = [
    "ChangeLogStore",
    "LocalFileBackend",
    "MemoryBackend",
    "SnapshotStore",
    "StorageBackend",
]
