#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .bounds import MAX_BACKUP_NAME_CHARS


def require_dict(value: object, *, label: str) -> dict[Any, Any]:
    """Validate that value is a dict."""
    if not isinstance(value, dict):
        raise ValueError(f"{label} must be a dict")
    return value


def require_keys(mapping: dict[Any, Any], keys: Iterable[str], *, label: str) -> None:
    """Validate that all keys are present in mapping."""
    for key in keys:
        if key not in mapping:
            raise ValueError(f"{label} {key} is required")


def require_str(value: object, *, label: str) -> str:
    """Validate that value is a string (empty allowed)."""
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string")
    return value


def require_positive_int(value: object, *, label: str) -> int:
    """Validate that value is a positive integer (> 0)."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{label} must be a positive int")
    return value


def require_int_range(value: int, *, min_val: int, max_val: int, label: str) -> int:
    """Validate that integer value is within range [min_val, max_val]."""
    if value < min_val or value > max_val:
        raise ValueError(f"{label} must be between {min_val} and {max_val}")
    return value


def require_version(actual: int, expected: int, *, label: str) -> None:
    """Validate that version matches expected value."""
    if actual != expected:
        raise ValueError(f"unsupported {label} version: {actual}")


def normalize_backup_name(name: object, *, label: str = "backup name") -> str:
    """Validate a store backup name; it becomes part of a file name."""
    if not isinstance(name, str):
        raise ValueError(f"{label} must be a string")
    normalized = name.strip()
    if not normalized:
        raise ValueError(f"{label} must be a non-empty string")
    if len(normalized) > MAX_BACKUP_NAME_CHARS:
        raise ValueError(f"{label} exceeds {MAX_BACKUP_NAME_CHARS} characters")
    if "/" in normalized or "\\" in normalized:
        raise ValueError(f"{label} must not contain path separators")
    if normalized in {".", ".."} or normalized.startswith("."):
        raise ValueError(f"{label} must not start with '.'")
    return normalized
