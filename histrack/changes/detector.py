"""Change classifier.

Compares a new entity (or list of entities) with its previous state and
emits classified Change records:

    add      -- no previous state for this id
    full     -- at least one tracked field differs
    soft     -- no tracked field differs, but a soft-update field does
    removal  -- id present in the old list, absent from the new one

Full takes precedence over soft; an entity never gets both.  Field values
are compared through a canonical JSON encoding (sorted keys), so two
mappings that differ only in key order are equal.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from histrack.changes.paths import MISSING, get_value_at_path, validate_field_path
from histrack.clock import Clock, format_timestamp, utc_now
from histrack.errors import MissingIdError, ShapeMismatchError
from histrack.models.changes import Change, ChangeType
from histrack.models.config import ChangeDetectorConfig
from histrack.observability.logging import get_logger


def canonical_json(value: Any) -> str:
    """Comparison key for a field value.

    MISSING maps to the empty string, which no JSON document encodes to, so an
    absent field never equals an explicit ``null``.
    """
    if value is MISSING:
        return ""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def _stringify_id(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ChangeDetector:
    """Classifies changes for one entity type.

    Args:
        config:      Field paths; all are validated here, once.
        entity_type: Stamped on every emitted record.
        clock:       Source of the current time (UTC); injectable for tests.
        logger:      structlog logger; defaults to the ``changes.detector`` component.

    Raises:
        FieldPathError: if any configured path is malformed.
    """

    def __init__(
        self,
        config: ChangeDetectorConfig,
        entity_type: str,
        clock: Clock = utc_now,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        for path in config.all_fields():
            validate_field_path(path)
        self.config = config
        self.entity_type = entity_type
        self._clock = clock
        self._log = logger or get_logger("changes.detector")

    def detect_changes(self, new_entity: Any, old_entity: Any = None) -> list[Change]:
        """Return the changes between *old_entity* and *new_entity*.

        Both arguments must be lists or both single entities; *old_entity*
        may be None with either shape, meaning "no previous state".

        Raises:
            ShapeMismatchError: list paired with a non-list.
            MissingIdError:     an entity has no id value.
        """
        new_is_list = isinstance(new_entity, list)
        if old_entity is not None and new_is_list != isinstance(old_entity, list):
            raise ShapeMismatchError()

        if new_is_list:
            changes = self._detect_list_changes(new_entity, old_entity)
        else:
            changes = self._detect_single_changes(new_entity, old_entity, format_timestamp(self._clock()))

        self._log.debug(
            "changes_detected",
            entity_type=self.entity_type,
            count=len(changes),
        )
        return changes

    # ------------------------------------------------------------------
    # Single entity
    # ------------------------------------------------------------------

    def _detect_single_changes(self, new_entity: Any, old_entity: Any, timestamp: str) -> list[Change]:
        entity_id = self.entity_id(new_entity)

        if old_entity is None:
            return [self._make_change(entity_id, new_entity, ChangeType.ADD, timestamp)]
        if self._differs(old_entity, new_entity, self.config.tracked_fields):
            return [self._make_change(entity_id, new_entity, ChangeType.FULL, timestamp)]
        if self._differs(old_entity, new_entity, self.config.soft_update_fields):
            return [self._make_change(entity_id, new_entity, ChangeType.SOFT, timestamp)]
        return []

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def _detect_list_changes(self, new_entities: list[Any], old_entities: list[Any] | None) -> list[Change]:
        timestamp = format_timestamp(self._clock())
        new_ids = [self.entity_id(entity) for entity in new_entities]

        if not old_entities:
            return [
                self._make_change(entity_id, entity, ChangeType.ADD, timestamp)
                for entity_id, entity in zip(new_ids, new_entities, strict=True)
            ]

        old_by_id: dict[str, Any] = {}
        for entity in old_entities:
            old_by_id[self.entity_id(entity)] = entity
        new_id_set = set(new_ids)

        changes: list[Change] = []
        for entity_id, entity in zip(new_ids, new_entities, strict=True):
            if entity_id not in old_by_id:
                changes.append(self._make_change(entity_id, entity, ChangeType.ADD, timestamp))
                continue
            changes.extend(self._detect_single_changes(entity, old_by_id[entity_id], timestamp))

        for entity_id, entity in old_by_id.items():
            if entity_id not in new_id_set:
                changes.append(self._make_change(entity_id, entity, ChangeType.REMOVAL, timestamp))

        return changes

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def entity_id(self, entity: Any) -> str:
        """Resolve the id field of *entity* as a string.

        Raises MissingIdError when the path does not resolve or is null.
        """
        value = get_value_at_path(entity, self.config.id_field)
        if value is MISSING or value is None:
            raise MissingIdError(self.config.id_field)
        return _stringify_id(value)

    @staticmethod
    def _differs(old_entity: Any, new_entity: Any, fields: tuple[str, ...]) -> bool:
        return any(
            canonical_json(get_value_at_path(old_entity, path)) != canonical_json(get_value_at_path(new_entity, path))
            for path in fields
        )

    def _make_change(self, entity_id: str, entity: Any, change_type: ChangeType, timestamp: str) -> Change:
        return Change(
            id=entity_id,
            timestamp=timestamp,
            type=change_type,
            entity_type=self.entity_type,
            data=entity,
        )
