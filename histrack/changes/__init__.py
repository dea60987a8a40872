"""Change classification and tracking.

Submodules:
    paths     -- Dotted field-path validation and lookup.
    detector  -- Pure classifier producing add/full/soft/removal records.
    tracker   -- Classify-then-append against a ChangeLogStore.
"""

from histrack.changes.detector import ChangeDetector
from histrack.changes.paths import MISSING, get_value_at_path, validate_field_path
from histrack.changes.tracker import ChangeTracker

__all__ = [
    "MISSING",
    "ChangeDetector",
    "ChangeTracker",
    "get_value_at_path",
    "validate_field_path",
]
