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

"""Encrypted, tamper-evident backup containers."""

from .crypto import KdfParams, decrypt, encrypt, fingerprint, verify
from .errors import (
    BackupNotFoundError,
    CipherError,
    CodecError,
    CorruptionError,
    IntegrityError,
    SealVaultError,
    SerializationError,
)
from .formats import (
    BackupContainer,
    CompressionConfig,
    create_backup,
    decode,
    deserialize,
    encode,
    restore_backup,
    serialize,
    verify_backup,
)
from .storage import BackupStore

__all__ = [
    "BackupContainer",
    "BackupNotFoundError",
    "BackupStore",
    "CipherError",
    "CodecError",
    "CompressionConfig",
    "CorruptionError",
    "IntegrityError",
    "KdfParams",
    "SealVaultError",
    "SerializationError",
    "create_backup",
    "decode",
    "decrypt",
    "deserialize",
    "encode",
    "encrypt",
    "fingerprint",
    "restore_backup",
    "serialize",
    "verify",
    "verify_backup",
]
