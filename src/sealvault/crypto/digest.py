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

import hashlib
import hmac

from ..core.bounds import DIGEST_HEX_LEN

_HEX_DIGITS = frozenset("0123456789abcdef")


def fingerprint(data: str) -> str:
    """SHA-256 of the UTF-8 bytes of ``data`` as lowercase hex."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def verify(data: object, digest: object) -> bool:
    """Return True iff ``digest`` is the fingerprint of ``data``; never raises."""
    if not isinstance(data, str) or not isinstance(digest, str):
        return False
    expected = digest.lower()
    if len(expected) != DIGEST_HEX_LEN or not _HEX_DIGITS.issuperset(expected):
        return False
    try:
        actual = fingerprint(data)
    except UnicodeEncodeError:
        # lone surrogates cannot be hashed as UTF-8
        return False
    return hmac.compare_digest(actual, expected)
