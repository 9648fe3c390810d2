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
from dataclasses import dataclass

from ..core.bounds import MAX_BACKUP_BYTES
from ..core.validation import require_dict, require_keys, require_str
from ..crypto.cipher import KdfParams, decrypt, encrypt
from ..crypto.digest import fingerprint, verify
from ..errors import CipherError, CodecError, CorruptionError, IntegrityError, SerializationError
from . import codec
from .codec import CompressionConfig
from .serialization import deserialize, serialize

CONTAINER_FIELDS = ("encrypted", "hash", "timestamp")


@dataclass(frozen=True)
class BackupContainer:
    ciphertext: str
    digest: str
    created_at: str

    def to_dict(self) -> dict[str, str]:
        return {
            "encrypted": self.ciphertext,
            "hash": self.digest,
            "timestamp": self.created_at,
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: object) -> "BackupContainer":
        try:
            record = require_dict(data, label="container")
            require_keys(record, CONTAINER_FIELDS, label="container")
            extra = sorted(set(record) - set(CONTAINER_FIELDS))
            if extra:
                raise ValueError(f"container has unexpected fields: {', '.join(extra)}")
            ciphertext = require_str(record["encrypted"], label="container encrypted")
            digest = require_str(record["hash"], label="container hash")
            created_at = require_str(record["timestamp"], label="container timestamp")
            _parse_timestamp(created_at)
        except ValueError as exc:
            raise CodecError(stage="container", detail=str(exc)) from exc
        return cls(ciphertext=ciphertext, digest=digest, created_at=created_at)

    @classmethod
    def from_json(cls, text: str | bytes) -> "BackupContainer":
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise CodecError(stage="container", detail="container is not valid JSON") from exc
        return cls.from_dict(data)

    @property
    def created(self) -> _dt.datetime:
        return _parse_timestamp(self.created_at)


def create_backup(
    value: object,
    passphrase: str,
    *,
    kdf: KdfParams | None = None,
    compression: CompressionConfig | None = None,
    max_bytes: int | None = None,
    now: _dt.datetime | None = None,
) -> BackupContainer:
    plaintext = serialize(value)
    limit = MAX_BACKUP_BYTES if max_bytes is None else max_bytes
    size = len(plaintext.encode("utf-8"))
    if size > limit:
        raise SerializationError(
            stage="serialize",
            detail=f"backup exceeds the size limit ({limit} bytes): {size} bytes",
        )
    token = codec.encode(plaintext, config=compression)
    ciphertext = encrypt(token, passphrase, kdf=kdf)
    created = now or _dt.datetime.now(_dt.timezone.utc)
    return BackupContainer(
        ciphertext=ciphertext,
        digest=fingerprint(ciphertext),
        created_at=created.isoformat(),
    )


def verify_backup(container: BackupContainer) -> bool:
    return verify(container.ciphertext, container.digest)


def decrypt_backup(container: BackupContainer, passphrase: str) -> str:
    """Verify ``container`` and return its decrypted codec token.

    Raises IntegrityError when the digest does not match and CorruptionError when
    the passphrase does not open the ciphertext.
    """
    # integrity first: never run the cipher on a container that fails its digest
    if not verify_backup(container):
        raise IntegrityError(
            stage="verify",
            detail="ciphertext does not match its hash; the backup was altered",
        )
    try:
        return decrypt(container.ciphertext, passphrase)
    except CipherError as exc:
        if exc.stage == "key":
            raise
        raise CorruptionError(
            stage="decrypt",
            detail=f"backup does not open with this passphrase ({exc.detail})",
        ) from exc


def restore_backup(container: BackupContainer, passphrase: str) -> object:
    token = decrypt_backup(container, passphrase)
    try:
        plaintext = codec.decode(token)
    except CodecError as exc:
        raise CorruptionError(stage="decode", detail=exc.detail) from exc
    return deserialize(plaintext)


def _parse_timestamp(value: str) -> _dt.datetime:
    try:
        return _dt.datetime.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"container timestamp is not ISO-8601: {value!r}") from exc
