"""Prometheus counters for histrack stores."""

from __future__ import annotations

from prometheus_client import Counter

changes_total = Counter(
    "histrack_changes_total",
    "Classified change records appended to changelogs",
    ["entity_type", "type"],
)

snapshots_total = Counter(
    "histrack_snapshots_total",
    "Snapshot update outcomes",
    ["result"],
)

snapshot_rotations_total = Counter(
    "histrack_snapshot_rotations_total",
    "Snapshot files deleted by retention",
)

changelog_appends_total = Counter(
    "histrack_changelog_appends_total",
    "Changelog append attempts",
    ["success"],
)
