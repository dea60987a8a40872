"""Snapshot and history result data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from histrack.models.changes import Change


class SnapshotType(StrEnum):
    """Outcome of a snapshot update."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SnapshotPath:
    """A dated snapshot file discovered in an entity directory."""

    path: str
    date: str  # YYYY-MM-DD


@dataclass(frozen=True)
class PreviousSnapshot:
    """The snapshot that was latest before an update."""

    path: str
    date: str
    data: Any


@dataclass(frozen=True)
class SnapshotResult:
    """Result of SnapshotStore.update_snapshots().

    For SKIPPED results ``data`` holds the candidate content that was *not*
    written, while ``path`` and ``date`` point at the existing latest file.
    """

    type: SnapshotType
    path: str
    date: str
    data: Any
    previous: PreviousSnapshot | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type.value,
            "path": self.path,
            "date": self.date,
            "data": self.data,
        }
        if self.previous is not None:
            result["previous"] = {
                "path": self.previous.path,
                "date": self.previous.date,
                "data": self.previous.data,
            }
        return result


@dataclass(frozen=True)
class HistoryResult:
    """Unit returned to callers for one processed entity."""

    identifier: str
    snapshot: SnapshotResult
    changes: list[Change] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "snapshot": self.snapshot.to_dict(),
            "changes": None if self.changes is None else [c.to_dict() for c in self.changes],
        }
