"""Time helpers shared by the classifier and the snapshot store."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_date(moment: datetime) -> str:
    """Calendar date of *moment* in UTC as ``YYYY-MM-DD``."""
    return moment.astimezone(UTC).date().isoformat()
