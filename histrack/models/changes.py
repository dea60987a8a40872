"""Change record data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ChangeType(StrEnum):
    """Significance of a detected change, ordered by precedence for updates."""

    ADD = "add"
    FULL = "full"
    SOFT = "soft"
    REMOVAL = "removal"


@dataclass(frozen=True)
class Change:
    """One classified diff outcome between two entity states.

    ``data`` is the new entity for add/full/soft records and the old entity
    for removals.  ``timestamp`` is ISO-8601 UTC so that lexicographic
    comparison matches chronological order.
    """

    id: str
    timestamp: str
    type: ChangeType
    entity_type: str
    data: Any

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the on-disk changelog shape."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "type": self.type.value,
            "entityType": self.entity_type,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Change:
        """Build a Change from a changelog entry."""
        return cls(
            id=str(raw["id"]),
            timestamp=str(raw["timestamp"]),
            type=ChangeType(raw["type"]),
            entity_type=str(raw["entityType"]),
            data=raw.get("data"),
        )


@dataclass
class ChangeQuery:
    """Filters applied by ChangeLogStore.query().

    Unset filters match everything.  The date bounds are inclusive and are
    compared as strings, so they must use the same ISO-8601 form as the
    stored timestamps (a bare ``YYYY-MM-DD`` works as a lower bound).
    """

    entity_type: str | None = None
    from_date: str | None = None
    to_date: str | None = None
    change_types: list[ChangeType] | None = None
    limit: int | None = None

    def matches(self, change: Change) -> bool:
        if self.entity_type and change.entity_type != self.entity_type:
            return False
        if self.from_date and change.timestamp < self.from_date:
            return False
        if self.to_date and change.timestamp > self.to_date:
            return False
        if self.change_types and change.type not in self.change_types:
            return False
        return True
