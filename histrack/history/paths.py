"""Entity directory resolution and identifier validation."""

from __future__ import annotations

import os
import re

from histrack.errors import PathSegmentError

_INVALID_CHARS = re.compile(r'[<>:"|?*]')
_MAX_SEGMENT_LENGTH = 255

CHANGELOG_FILENAME = "changelog.json"


def validate_path_segment(segment: str) -> None:
    """Raise PathSegmentError unless *segment* is safe as a directory name.

    ``plugin-x`` and ``owner__repo`` are fine; ``..``, ``a<b`` and ``\\x``
    are rejected.
    """
    if not segment or not isinstance(segment, str):
        raise PathSegmentError(str(segment), "must be a non-empty string")
    if _INVALID_CHARS.search(segment):
        raise PathSegmentError(segment, "contains invalid characters")
    if ".." in segment or segment.startswith("\\"):
        raise PathSegmentError(segment, "path traversal not allowed")
    if len(segment) > _MAX_SEGMENT_LENGTH:
        raise PathSegmentError(segment, "exceeds maximum length")


def get_first_character(value: str) -> str:
    """Shard key for *value*: its lower-cased first letter, or ``_``."""
    normalized = value.strip().lower()
    if normalized and "a" <= normalized[0] <= "z":
        return normalized[0]
    return "_"


def resolve_entity_path(base_path: str, identifier: str, use_entity_folder: bool = False) -> str:
    """Directory holding the snapshots and changelog of *identifier*.

    Flat layout: ``base/identifier``.  Sharded layout:
    ``base/<first char>/identifier``.
    """
    validate_path_segment(identifier)
    if use_entity_folder:
        return os.path.join(base_path, get_first_character(identifier), identifier)
    return os.path.join(base_path, identifier)
