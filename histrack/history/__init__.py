"""Per-entity history: snapshot rotation plus change tracking."""

from histrack.history.paths import get_first_character, resolve_entity_path, validate_path_segment
from histrack.history.service import HistoryService

__all__ = [
    "HistoryService",
    "get_first_character",
    "resolve_entity_path",
    "validate_path_segment",
]
