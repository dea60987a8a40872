"""Exception hierarchy for histrack.

Validation errors are raised synchronously and are never retried.
Storage errors always carry the offending path.  Not-found conditions are
not errors at all: stores treat a missing directory or changelog as empty.
"""

from __future__ import annotations


class HistrackError(Exception):
    """Base class for every error raised by histrack."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class HistrackValidationError(HistrackError, ValueError):
    """Usage or configuration error; fatal to the current call."""


class FieldPathError(HistrackValidationError):
    """A configured dotted field path is malformed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid field path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class MissingIdError(HistrackValidationError):
    """An entity has no value at the configured id field."""

    def __init__(self, id_field: str) -> None:
        super().__init__(f"Entity missing required id field: {id_field}")
        self.id_field = id_field


class ShapeMismatchError(HistrackValidationError):
    """New and old inputs are not both lists or both single entities."""

    def __init__(self) -> None:
        super().__init__("Mismatched input types: both inputs must be either lists or single entities")


class PathSegmentError(HistrackValidationError):
    """An identifier cannot be used safely as a directory name."""

    def __init__(self, segment: str, reason: str) -> None:
        super().__init__(f"Invalid path segment {segment!r}: {reason}")
        self.segment = segment
        self.reason = reason


class ChangelogPathError(HistrackValidationError):
    """No changelog path was configured or supplied."""

    def __init__(self) -> None:
        super().__init__("Changelog path not provided")


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class StorageError(HistrackError):
    """Filesystem failure wrapped with the path that caused it."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class StoragePermissionError(StorageError):
    """Access to a store path was denied."""


class SnapshotStoreError(StorageError):
    """Snapshot directory could not be read or written."""


class SnapshotPermissionError(SnapshotStoreError, StoragePermissionError):
    """Permission denied on a snapshot directory or file."""


class ChangeLogError(StorageError):
    """Changelog file could not be read, parsed or written."""


class ChangeLogPermissionError(ChangeLogError, StoragePermissionError):
    """Permission denied on a changelog file."""
