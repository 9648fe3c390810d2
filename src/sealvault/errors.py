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

from dataclasses import dataclass


@dataclass(eq=False)
class SealVaultError(ValueError):
    """Base class for every failure raised by the backup pipeline.

    ``stage`` names the pipeline step that failed (``serialize``, ``encrypt``,
    ``verify``, ``decrypt``, ``decode``, ``deserialize``, ...) so callers can tell
    a tampered container apart from a wrong passphrase or bad input.
    """

    stage: str
    detail: str

    kind = "backup"

    def __str__(self) -> str:
        message = self.detail.strip() or "unknown error"
        return f"{self.kind} failed at {self.stage}: {message}"


class SerializationError(SealVaultError):
    kind = "serialization"


class CipherError(SealVaultError):
    kind = "cipher"


class IntegrityError(SealVaultError):
    kind = "integrity check"


class CorruptionError(SealVaultError):
    kind = "restore"


class CodecError(SealVaultError):
    kind = "codec"


class BackupNotFoundError(SealVaultError, LookupError):
    kind = "backup lookup"


__all__ = [
    "BackupNotFoundError",
    "CipherError",
    "CodecError",
    "CorruptionError",
    "IntegrityError",
    "SealVaultError",
    "SerializationError",
]
