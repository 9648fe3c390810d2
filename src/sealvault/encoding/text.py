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

import base64
import binascii

_URLSAFE_TO_STD = str.maketrans("-_", "+/")


def encode_base64url(data: bytes) -> str:
    """URL-safe base64 without padding or line breaks."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def decode_base64url(text: str) -> bytes:
    if not isinstance(text, str):
        raise ValueError("token must be a string")
    cleaned = "".join(text.split())
    if len(cleaned) % 4 == 1:
        raise ValueError("token has an invalid base64 length")
    try:
        standard = _pad_base64(cleaned).translate(_URLSAFE_TO_STD)
        return base64.b64decode(standard, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("token is not valid base64url") from exc


def _pad_base64(text: str) -> str:
    padding = (-len(text)) % 4
    return text + ("=" * padding)
