"""History service: the public facade over snapshots and changelogs.

One HistoryService handles one entity type under one base path.  For each
identifier it resolves an entity directory, keeps dated snapshots there and
appends classified changes to ``changelog.json`` in the same directory.

Snapshot writing and change recording are two independent steps, not a
transaction.  If the changelog append fails after the snapshot has been
written, the error propagates and the snapshot stays on disk; the next run
will then diff against that snapshot and the missed change is not logged.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import Any

import structlog

from histrack.changes.detector import ChangeDetector
from histrack.changes.tracker import ChangeTracker
from histrack.clock import Clock, utc_now
from histrack.history.paths import CHANGELOG_FILENAME, resolve_entity_path
from histrack.models.changes import Change, ChangeQuery
from histrack.models.config import HistoryOptions
from histrack.models.snapshots import HistoryResult
from histrack.observability.logging import ProgressLogger, get_logger
from histrack.storage.backend import LocalFileBackend, StorageBackend
from histrack.storage.changelog import ChangeLogStore
from histrack.storage.snapshot import SnapshotStore


class HistoryService:
    """Coordinates SnapshotStore and ChangeTracker per entity identifier.

    Args:
        options: Base path, entity type, classifier config, sharding and
                 retention.
        backend: Storage backend shared by both stores; local files by default.
        clock:   Current-time source for snapshot dates and change timestamps.
        logger:  structlog logger.
    """

    def __init__(
        self,
        options: HistoryOptions,
        backend: StorageBackend | None = None,
        clock: Clock = utc_now,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.options = options
        self._log = (logger or get_logger("history")).bind(entity_type=options.entity_type)
        backend = backend or LocalFileBackend()

        self.snapshots = SnapshotStore(
            backend=backend,
            retain_count=options.snapshot_retention,
            clock=clock,
            logger=self._component_logger("storage.snapshot"),
        )
        self.changelog = ChangeLogStore(backend=backend, logger=self._component_logger("storage.changelog"))
        self.tracker = ChangeTracker(
            options.change_config,
            options.entity_type,
            store=self.changelog,
            detector=ChangeDetector(
                options.change_config,
                options.entity_type,
                clock=clock,
                logger=self._component_logger("changes.detector"),
            ),
            logger=self._component_logger("changes.tracker"),
        )

    def _component_logger(self, component: str) -> structlog.stdlib.BoundLogger:
        return get_logger(component).bind(entity_type=self.options.entity_type)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def entity_path(self, identifier: str) -> str:
        return resolve_entity_path(self.options.base_path, identifier, self.options.use_entity_folder)

    def changelog_path(self, identifier: str) -> str:
        return os.path.join(self.entity_path(identifier), CHANGELOG_FILENAME)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def process_changes(self, identifier: str, new_entity: Any) -> HistoryResult:
        """Snapshot *new_entity* and log its changes against the latest snapshot."""
        old_entity = await self.get_latest_snapshot(identifier)
        return await self.track_changes(identifier, new_entity, old_entity)

    async def track_changes(self, identifier: str, new_entity: Any, old_entity: Any = None) -> HistoryResult:
        """Write today's snapshot, then classify against *old_entity* and append.

        The two steps are not atomic; see the module docstring.
        """
        entity_path = self.entity_path(identifier)

        snapshot = await self.snapshots.update_snapshots(entity_path, new_entity)
        changes = await self.tracker.track_changes(
            new_entity,
            old_entity,
            os.path.join(entity_path, CHANGELOG_FILENAME),
        )

        self._log.info(
            "history_processed",
            identifier=identifier,
            snapshot=snapshot.type.value,
            changes=len(changes) if changes else 0,
        )
        return HistoryResult(identifier=identifier, snapshot=snapshot, changes=changes)

    async def process_many(self, entities: Iterable[tuple[str, Any]]) -> list[HistoryResult]:
        """Run process_changes for each ``(identifier, entity)`` pair, in order.

        Progress is reported through the logger.  The first failure stops the
        batch and propagates; results already produced are not rolled back.
        """
        items = list(entities)
        progress = ProgressLogger(self._log, task="process_many", total=len(items))
        results: list[HistoryResult] = []
        for identifier, entity in items:
            try:
                results.append(await self.process_changes(identifier, entity))
            except Exception as exc:
                progress.fail(exc)
                raise
            progress.update(identifier)
        progress.complete()
        return results

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_latest_snapshot(self, identifier: str) -> Any | None:
        return await self.snapshots.get_latest_snapshot(self.entity_path(identifier))

    async def get_previous_snapshot(self, identifier: str) -> Any | None:
        return await self.snapshots.get_previous_snapshot(self.entity_path(identifier))

    async def should_refresh(self, identifier: str) -> bool:
        return await self.snapshots.should_refresh(self.entity_path(identifier))

    async def query_changes(self, identifier: str, filters: ChangeQuery | None = None) -> list[Change]:
        return await self.changelog.query(filters or ChangeQuery(), self.changelog_path(identifier))
