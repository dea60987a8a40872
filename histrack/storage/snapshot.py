"""Dated snapshot storage with retention.

Each entity directory holds at most one ``YYYY-MM-DD.json`` file per
calendar day (UTC).  Files are discovered by name, never through an index;
anything that does not match the pattern is ignored.  After each write the
oldest files beyond ``retain_count`` are deleted concurrently, best effort:
a failed deletion leaves the file behind and is reported, nothing is rolled
back.

Snapshot writes are not queued.  Callers must not write the same entity
directory concurrently from one process.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
from typing import Any

import structlog

from histrack.clock import Clock, utc_date, utc_now
from histrack.errors import SnapshotPermissionError, SnapshotStoreError
from histrack.models.snapshots import PreviousSnapshot, SnapshotPath, SnapshotResult, SnapshotType
from histrack.observability.logging import get_logger
from histrack.observability.metrics import snapshot_rotations_total, snapshots_total
from histrack.storage.backend import LocalFileBackend, StorageBackend

_SNAPSHOT_FILE = re.compile(r"^(\d{4}-\d{2}-\d{2})\.json$")

DEFAULT_RETAIN_COUNT = 2


def _storage_error(path: str, message: str, exc: OSError) -> SnapshotStoreError:
    if isinstance(exc, PermissionError):
        return SnapshotPermissionError(path, f"Permission denied ({message})")
    return SnapshotStoreError(path, f"{message}: {exc}")


class SnapshotStore:
    """Persists and rotates dated full-state snapshots per entity directory.

    Args:
        backend:      Storage backend; defaults to the local filesystem.
        retain_count: Files kept per directory after a write; 0 keeps all.
        force:        Default for ``update_snapshots(force=...)``.
        clock:        Current-time source; the UTC date names the files.
        logger:       structlog logger.
    """

    def __init__(
        self,
        backend: StorageBackend | None = None,
        retain_count: int = DEFAULT_RETAIN_COUNT,
        force: bool = False,
        clock: Clock = utc_now,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._backend = backend or LocalFileBackend()
        self.retain_count = retain_count
        self.force = force
        self._clock = clock
        self._log = logger or get_logger("storage.snapshot")

    def today(self) -> str:
        return utc_date(self._clock())

    # ------------------------------------------------------------------
    # Discovery and reads
    # ------------------------------------------------------------------

    async def list_snapshots(self, entity_path: str) -> list[SnapshotPath]:
        """Return dated snapshots in *entity_path*, oldest first.

        A missing directory yields an empty list.

        Raises:
            SnapshotPermissionError: the directory cannot be accessed.
            SnapshotStoreError:      any other filesystem failure.
        """
        try:
            names = await self._backend.list_dir(entity_path)
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise _storage_error(entity_path, "Failed to read snapshot directory", exc) from exc

        snapshots = []
        for name in names:
            match = _SNAPSHOT_FILE.match(name)
            if match:
                snapshots.append(SnapshotPath(path=os.path.join(entity_path, name), date=match.group(1)))
        snapshots.sort(key=lambda snapshot: snapshot.date)
        return snapshots

    async def get_latest_snapshot(self, entity_path: str) -> Any | None:
        """Parsed content of the newest snapshot, or None."""
        snapshots = await self.list_snapshots(entity_path)
        if not snapshots:
            return None
        return await self._read_json(snapshots[-1].path)

    async def get_previous_snapshot(self, entity_path: str) -> Any | None:
        """Parsed content of the second-newest snapshot, or None."""
        snapshots = await self.list_snapshots(entity_path)
        if len(snapshots) < 2:
            return None
        return await self._read_json(snapshots[-2].path)

    async def should_refresh(self, entity_path: str) -> bool:
        """True when no snapshot exists or the newest one is not from today."""
        snapshots = await self.list_snapshots(entity_path)
        return not snapshots or snapshots[-1].date != self.today()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def update_snapshots(
        self,
        entity_path: str,
        content: Any,
        force: bool | None = None,
        retain_count: int | None = None,
    ) -> SnapshotResult:
        """Write today's snapshot of *content* and apply retention.

        Returns a SKIPPED result, without writing, when today's snapshot
        already exists and *force* is not set.  The skipped result carries
        *content* as ``data`` even though it was not persisted.
        """
        force = self.force if force is None else force
        retain_count = self.retain_count if retain_count is None else retain_count

        snapshots = await self.list_snapshots(entity_path)
        latest = snapshots[-1] if snapshots else None
        date = self.today()

        if latest is not None and latest.date == date and not force:
            self._log.debug("snapshot_skipped", path=latest.path, date=date)
            snapshots_total.labels(result=SnapshotType.SKIPPED.value).inc()
            return SnapshotResult(type=SnapshotType.SKIPPED, path=latest.path, date=latest.date, data=content)

        previous: PreviousSnapshot | None = None
        if latest is not None:
            previous = PreviousSnapshot(path=latest.path, date=latest.date, data=await self._read_json(latest.path))

        new_path = os.path.join(entity_path, f"{date}.json")
        try:
            await self._backend.write_text(new_path, json.dumps(content, indent=2, ensure_ascii=False))
        except OSError as exc:
            raise _storage_error(new_path, "Failed to write snapshot", exc) from exc

        if retain_count > 0:
            await self._rotate(entity_path, retain_count)

        result_type = SnapshotType.CREATED if previous is None else SnapshotType.UPDATED
        snapshots_total.labels(result=result_type.value).inc()
        self._log.info("snapshot_written", path=new_path, date=date, result=result_type.value)
        return SnapshotResult(type=result_type, path=new_path, date=date, data=content, previous=previous)

    async def _rotate(self, entity_path: str, retain_count: int) -> None:
        snapshots = await self.list_snapshots(entity_path)
        if len(snapshots) <= retain_count:
            return

        doomed = snapshots[:-retain_count]
        outcomes = await asyncio.gather(
            *(self._backend.delete(snapshot.path) for snapshot in doomed),
            return_exceptions=True,
        )

        failures: list[tuple[SnapshotPath, BaseException]] = []
        for snapshot, outcome in zip(doomed, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                failures.append((snapshot, outcome))
        deleted = len(doomed) - len(failures)
        if deleted:
            snapshot_rotations_total.inc(deleted)
        self._log.debug("snapshots_rotated", path=entity_path, deleted=deleted, failed=len(failures))

        if failures:
            snapshot, exc = failures[0]
            self._log.error(
                "snapshot_rotation_failed",
                path=entity_path,
                failed=[failed.path for failed, _ in failures],
                error=str(exc),
            )
            if isinstance(exc, OSError):
                raise _storage_error(snapshot.path, "Failed to delete snapshot", exc) from exc
            raise exc

    async def _read_json(self, path: str) -> Any:
        try:
            raw = await self._backend.read_text(path)
        except OSError as exc:
            raise _storage_error(path, "Failed to read snapshot", exc) from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SnapshotStoreError(path, f"Snapshot is not valid JSON: {exc}") from exc
