"""Append-only JSON changelog per entity.

The changelog is a single JSON array of change records.  ``append`` is a
read-modify-write of the whole file and runs on the store's TaskQueue, so
appends issued through one ChangeLogStore never interleave.

Single-writer assumption: nothing coordinates two ChangeLogStore
instances, or two processes, that target the same file.  The later
overwrite wins and silently drops the other writer's records.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import structlog

from histrack.errors import ChangeLogError, ChangeLogPermissionError
from histrack.models.changes import Change, ChangeQuery
from histrack.observability.logging import get_logger
from histrack.observability.metrics import changelog_appends_total, changes_total
from histrack.queue import TaskQueue
from histrack.storage.backend import LocalFileBackend, StorageBackend


def _changelog_error(path: str, message: str, exc: OSError) -> ChangeLogError:
    if isinstance(exc, PermissionError):
        return ChangeLogPermissionError(path, f"Permission denied ({message})")
    return ChangeLogError(path, f"{message}: {exc}")


class ChangeLogStore:
    """Persists change records to per-entity JSON array files."""

    def __init__(
        self,
        backend: StorageBackend | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._backend = backend or LocalFileBackend()
        self._log = logger or get_logger("storage.changelog")
        self._queue = TaskQueue(name="changelog", logger=self._log)

    async def append(self, changes: Change | Sequence[Change], changelog_path: str) -> None:
        """Append *changes* to the changelog at *changelog_path*.

        Raises:
            ChangeLogPermissionError: the file cannot be accessed.
            ChangeLogError:           the existing file is unreadable or
                                      invalid, or the write failed.
        """
        records = [changes] if isinstance(changes, Change) else list(changes)
        try:
            await self._queue.add(lambda: self._append_now(records, changelog_path))
        except ChangeLogError:
            changelog_appends_total.labels(success="false").inc()
            raise
        changelog_appends_total.labels(success="true").inc()
        for record in records:
            changes_total.labels(entity_type=record.entity_type, type=record.type.value).inc()

    async def _append_now(self, records: list[Change], changelog_path: str) -> None:
        existing = await self._read_raw(changelog_path)
        existing.extend(record.to_dict() for record in records)
        try:
            await self._backend.write_text(changelog_path, json.dumps(existing, indent=2, ensure_ascii=False))
        except OSError as exc:
            raise _changelog_error(changelog_path, "Failed to append changes", exc) from exc
        self._log.info("changes_appended", path=changelog_path, appended=len(records), total=len(existing))

    async def query(self, filters: ChangeQuery, changelog_path: str) -> list[Change]:
        """Return records matching *filters*, in file order, up to ``filters.limit``.

        A missing changelog yields an empty list.  Never writes.
        """
        matched: list[Change] = []
        if filters.limit is not None and filters.limit <= 0:
            return matched
        for change in await self.read_all(changelog_path):
            if filters.matches(change):
                matched.append(change)
                if filters.limit is not None and len(matched) >= filters.limit:
                    break
        return matched

    async def read_all(self, changelog_path: str) -> list[Change]:
        """Every record in the changelog, oldest first."""
        raw = await self._read_raw(changelog_path)
        try:
            return [Change.from_dict(entry) for entry in raw]
        except (KeyError, TypeError, ValueError) as exc:
            raise ChangeLogError(changelog_path, f"Malformed change record: {exc}") from exc

    async def _read_raw(self, changelog_path: str) -> list[dict[str, Any]]:
        try:
            text = await self._backend.read_text(changelog_path)
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise _changelog_error(changelog_path, "Failed to read existing changes", exc) from exc

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ChangeLogError(changelog_path, f"Changelog is not valid JSON: {exc}") from exc
        if not isinstance(payload, list):
            raise ChangeLogError(changelog_path, "Changelog root is not a JSON array")
        return payload
