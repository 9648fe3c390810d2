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

# Maximum serialized plaintext accepted by create_backup (UTF-8 bytes).
MAX_BACKUP_BYTES = 100 * 1024 * 1024

# Default cap for the sum of persisted container sizes in a local store.
MAX_STORE_BYTES = 100 * 1024 * 1024

# Fraction of the store cap to shrink down to once the cap is exceeded.
STORE_TRIM_RATIO = 0.8

# Days a stored backup stays listed before it is treated as expired.
BACKUP_RETENTION_DAYS = 30

# PBKDF2-HMAC-SHA256 parameters.
KDF_SALT_LEN = 16
KDF_KEY_LEN = 32
DEFAULT_KDF_ITERATIONS = 100_000
MIN_KDF_ITERATIONS = 1_000
MAX_KDF_ITERATIONS = 10_000_000

# AES-256-GCM parameters.
GCM_NONCE_LEN = 12
GCM_TAG_LEN = 16

# Hex length of a SHA-256 fingerprint.
DIGEST_HEX_LEN = 64

# Maximum length of a store backup name (characters).
MAX_BACKUP_NAME_CHARS = 128


__all__ = [
    "BACKUP_RETENTION_DAYS",
    "DEFAULT_KDF_ITERATIONS",
    "DIGEST_HEX_LEN",
    "GCM_NONCE_LEN",
    "GCM_TAG_LEN",
    "KDF_KEY_LEN",
    "KDF_SALT_LEN",
    "MAX_BACKUP_BYTES",
    "MAX_BACKUP_NAME_CHARS",
    "MAX_KDF_ITERATIONS",
    "MAX_STORE_BYTES",
    "MIN_KDF_ITERATIONS",
    "STORE_TRIM_RATIO",
]
