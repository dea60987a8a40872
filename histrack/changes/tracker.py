"""Classify-then-append coordination for entity updates."""

from __future__ import annotations

from typing import Any

import structlog

from histrack.changes.detector import ChangeDetector
from histrack.errors import ChangelogPathError
from histrack.models.changes import Change
from histrack.models.config import ChangeDetectorConfig
from histrack.observability.logging import get_logger
from histrack.storage.changelog import ChangeLogStore


class ChangeTracker:
    """Detects changes with a ChangeDetector and records them in a ChangeLogStore.

    Args:
        config:         Classifier field paths.
        entity_type:    Stamped on every record.
        changelog_path: Default changelog file; may be overridden per call.
        store:          Change log store; a private one is created if omitted.
        detector:       Pre-built classifier; built from *config* if omitted.
    """

    def __init__(
        self,
        config: ChangeDetectorConfig,
        entity_type: str,
        changelog_path: str | None = None,
        store: ChangeLogStore | None = None,
        detector: ChangeDetector | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.entity_type = entity_type
        self._changelog_path = changelog_path
        self._log = logger or get_logger("changes.tracker")
        self.detector = detector or ChangeDetector(config, entity_type, logger=self._log)
        self.store = store or ChangeLogStore(logger=self._log)

    async def track_changes(
        self,
        new_entity: Any,
        old_entity: Any = None,
        changelog_path: str | None = None,
    ) -> list[Change] | None:
        """Classify *new_entity* against *old_entity* and append any records.

        Returns the appended records, or None when nothing changed (in which
        case the changelog is not touched).

        Raises:
            ChangelogPathError: no path from the constructor or the call.
        """
        path = changelog_path or self._changelog_path
        if not path:
            raise ChangelogPathError()

        changes = self.detector.detect_changes(new_entity, old_entity)
        if not changes:
            self._log.debug("no_changes", entity_type=self.entity_type, path=path)
            return None

        await self.store.append(changes, path)
        return changes
