"""Tests for dotted field-path validation and lookup."""

from __future__ import annotations

import pytest

from histrack.changes.paths import MISSING, get_value_at_path, validate_field_path
from histrack.errors import FieldPathError, HistrackValidationError

# ---------------------------------------------------------------------------
# validate_field_path
# ---------------------------------------------------------------------------


class TestValidateFieldPath:
    @pytest.mark.parametrize("path", ["name", "metadata.tags", "nested.field.value", "a_1.B2", "items.0.id"])
    def test_accepts_well_formed_paths(self, path: str) -> None:
        """Letters, digits, underscores and single dots are valid."""
        validate_field_path(path)

    @pytest.mark.parametrize("path", ["", "field.", ".field", "a..b", "."])
    def test_rejects_empty_segments(self, path: str) -> None:
        """Empty paths and empty segments raise FieldPathError."""
        with pytest.raises(FieldPathError):
            validate_field_path(path)

    @pytest.mark.parametrize("path", ["field[0]", "a-b", "a b", "a/b", "name$"])
    def test_rejects_invalid_characters(self, path: str) -> None:
        """Brackets, dashes, spaces and other symbols are rejected."""
        with pytest.raises(FieldPathError, match="only letters"):
            validate_field_path(path)

    def test_error_is_a_value_error(self) -> None:
        """FieldPathError is a validation error and a ValueError."""
        with pytest.raises(ValueError):
            validate_field_path("bad-path")
        assert issubclass(FieldPathError, HistrackValidationError)


# ---------------------------------------------------------------------------
# get_value_at_path
# ---------------------------------------------------------------------------


class TestGetValueAtPath:
    def test_top_level_key(self) -> None:
        assert get_value_at_path({"id": "x"}, "id") == "x"

    def test_nested_key(self) -> None:
        entity = {"owner": {"login": "octo", "meta": {"tier": 2}}}
        assert get_value_at_path(entity, "owner.login") == "octo"
        assert get_value_at_path(entity, "owner.meta.tier") == 2

    def test_missing_key_returns_sentinel(self) -> None:
        """A missing key anywhere along the path resolves to MISSING."""
        assert get_value_at_path({"a": {}}, "a.b") is MISSING
        assert get_value_at_path({}, "a.b.c") is MISSING

    def test_explicit_none_is_not_missing(self) -> None:
        """A key holding null resolves to None, not MISSING."""
        assert get_value_at_path({"a": None}, "a") is None

    def test_traversing_a_scalar_returns_missing(self) -> None:
        assert get_value_at_path({"a": "text"}, "a.b") is MISSING
        assert get_value_at_path({"a": 5}, "a.b") is MISSING

    def test_numeric_segment_indexes_lists(self) -> None:
        entity = {"releases": [{"tag": "v1"}, {"tag": "v2"}]}
        assert get_value_at_path(entity, "releases.1.tag") == "v2"
        assert get_value_at_path(entity, "releases.5.tag") is MISSING

    def test_numeric_segment_does_not_index_strings(self) -> None:
        assert get_value_at_path({"name": "abc"}, "name.0") is MISSING

    def test_missing_sentinel_is_falsy_singleton(self) -> None:
        assert not MISSING
        assert repr(MISSING) == "MISSING"
