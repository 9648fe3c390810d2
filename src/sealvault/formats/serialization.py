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

import datetime as _dt
import json

from ..errors import CorruptionError, SerializationError


def serialize(value: object) -> str:
    """Serialize a JSON-representable value to compact JSON text.

    Dates, datetimes and times are narrowed to their ISO-8601 string and come back
    from :func:`deserialize` as plain strings, not date objects.
    """
    try:
        text = json.dumps(
            value,
            default=_narrow,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError(stage="serialize", detail=str(exc)) from exc
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        # lone surrogates pass json.dumps when ensure_ascii is off
        raise SerializationError(
            stage="serialize",
            detail=f"value is not encodable as UTF-8 ({exc.reason})",
        ) from exc
    return text


def deserialize(text: str) -> object:
    try:
        return json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise CorruptionError(
            stage="deserialize",
            detail=f"payload is not valid JSON ({exc.__class__.__name__})",
        ) from exc


def _narrow(value: object) -> object:
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    raise TypeError(f"value of type {type(value).__name__} is not JSON serializable")
