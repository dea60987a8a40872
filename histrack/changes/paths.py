"""Dotted field-path validation and lookup over JSON-like trees."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Final

from histrack.errors import FieldPathError

_VALID_PATH = re.compile(r"^[a-zA-Z0-9_.]+$")


class _Missing:
    """Sentinel for a path that does not resolve."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def validate_field_path(path: str) -> None:
    """Raise FieldPathError unless *path* is a well-formed dotted path.

    Valid: ``name``, ``metadata.tags``, ``owner.login``.
    Invalid: ``""``, ``field.``, ``.field``, ``a..b``, ``items[0]``.
    """
    if not path:
        raise FieldPathError(path, "path must be non-empty")
    if any(segment == "" for segment in path.split(".")):
        raise FieldPathError(path, "path contains empty segments")
    if not _VALID_PATH.match(path):
        raise FieldPathError(path, "only letters, digits, underscores and dots are allowed")


def get_value_at_path(value: Any, path: str) -> Any:
    """Return the value at dotted *path* inside *value*, or MISSING.

    Mapping keys are matched literally; a digit-only segment indexes into a
    list.  Anything else that cannot be traversed resolves to MISSING.
    """
    current = value
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current
