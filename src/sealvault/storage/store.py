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

import json
import os
import tempfile
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..core.bounds import BACKUP_RETENTION_DAYS, MAX_STORE_BYTES, STORE_TRIM_RATIO
from ..core.validation import normalize_backup_name, require_dict, require_keys
from ..errors import BackupNotFoundError
from ..formats.container import BackupContainer, restore_backup

METADATA_FILENAME = "metadata.json"
BACKUP_SUFFIX = ".sealed.json"
_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class BackupRecord:
    id: str
    name: str
    size: int
    digest: str
    created_at: float
    expires_at: float | None

    @property
    def filename(self) -> str:
        return f"{self.name}-{self.id}{BACKUP_SUFFIX}"

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "digest": self.digest,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: object) -> "BackupRecord":
        record = require_dict(data, label="backup record")
        require_keys(
            record,
            ("id", "name", "size", "digest", "created_at", "expires_at"),
            label="backup record",
        )
        expires_at = record["expires_at"]
        return cls(
            id=str(record["id"]),
            name=normalize_backup_name(record["name"]),
            size=int(record["size"]),
            digest=str(record["digest"]),
            created_at=float(record["created_at"]),
            expires_at=None if expires_at is None else float(expires_at),
        )


@dataclass(frozen=True)
class StorageReport:
    total_size: int
    backup_count: int
    deleted_count: int
    remaining_space: int


@dataclass(frozen=True)
class BackupStats:
    total_backups: int
    total_size: int
    oldest: float | None
    newest: float | None
    average_size: float


class BackupStore:
    """Local directory of sealed containers plus a ``metadata.json`` index.

    The store only ever sees containers; passphrases are passed through to
    :func:`restore_backup` and never written anywhere.

    Index updates are serialized per instance. Separate processes or separate
    instances writing to one directory are not coordinated and can lose index
    entries; give each directory a single writer.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        retention_days: int | None = BACKUP_RETENTION_DAYS,
        max_total_bytes: int = MAX_STORE_BYTES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if retention_days is not None and retention_days <= 0:
            raise ValueError("retention_days must be a positive integer or None")
        if max_total_bytes <= 0:
            raise ValueError("max_total_bytes must be a positive integer")
        self.directory = Path(directory)
        self.retention_days = retention_days
        self.max_total_bytes = max_total_bytes
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def metadata_path(self) -> Path:
        return self.directory / METADATA_FILENAME

    def save(self, container: BackupContainer, *, name: str = "backup") -> BackupRecord:
        backup_name = normalize_backup_name(name)
        self.directory.mkdir(parents=True, exist_ok=True)
        now = self._clock()
        expires_at = None
        if self.retention_days is not None:
            expires_at = now + self.retention_days * _SECONDS_PER_DAY
        encoded = container.to_json().encode("utf-8")
        record = BackupRecord(
            id=uuid.uuid4().hex,
            name=backup_name,
            size=len(encoded),
            digest=container.digest,
            created_at=now,
            expires_at=expires_at,
        )
        _atomic_write(self.directory / record.filename, encoded)
        with self._lock:
            records = [item for item in self._read_records() if item.id != record.id]
            records.append(record)
            self._write_records(records)
        return record

    def get(self, backup_id: str) -> BackupRecord:
        for record in self.list_backups():
            if record.id == backup_id:
                return record
        raise BackupNotFoundError(stage="lookup", detail=f"backup not found: {backup_id}")

    def load(self, backup_id: str) -> BackupContainer:
        record = self.get(backup_id)
        path = self.directory / record.filename
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise BackupNotFoundError(
                stage="lookup",
                detail=f"backup file is missing: {record.filename}",
            ) from None
        return BackupContainer.from_json(data)

    def restore(self, backup_id: str, passphrase: str) -> object:
        return restore_backup(self.load(backup_id), passphrase)

    def list_backups(self) -> list[BackupRecord]:
        now = self._clock()
        records = [record for record in self._read_records() if not record.is_expired(now)]
        return sorted(records, key=lambda record: record.created_at)

    def delete_expired(self) -> int:
        with self._lock:
            now = self._clock()
            records = self._read_records()
            kept: list[BackupRecord] = []
            deleted = 0
            for record in records:
                if record.is_expired(now):
                    if self._unlink(record):
                        deleted += 1
                else:
                    kept.append(record)
            if len(kept) != len(records):
                self._write_records(kept)
            return deleted

    def manage_space(self) -> StorageReport:
        with self._lock:
            records = self.list_backups()
            total_size = sum(record.size for record in records)
            deleted = 0
            removed: set[str] = set()
            if total_size > self.max_total_bytes:
                target = self.max_total_bytes * STORE_TRIM_RATIO
                for record in records:
                    if total_size <= target:
                        break
                    # a record whose file is already gone is dropped but not counted
                    if self._unlink(record):
                        deleted += 1
                    removed.add(record.id)
                    total_size -= record.size
                self._write_records([r for r in self._read_records() if r.id not in removed])
            return StorageReport(
                total_size=total_size,
                backup_count=len(records) - len(removed),
                deleted_count=deleted,
                remaining_space=max(self.max_total_bytes - total_size, 0),
            )

    def stats(self) -> BackupStats:
        records = self.list_backups()
        if not records:
            return BackupStats(
                total_backups=0,
                total_size=0,
                oldest=None,
                newest=None,
                average_size=0.0,
            )
        total_size = sum(record.size for record in records)
        return BackupStats(
            total_backups=len(records),
            total_size=total_size,
            oldest=records[0].created_at,
            newest=records[-1].created_at,
            average_size=total_size / len(records),
        )

    def _read_records(self) -> list[BackupRecord]:
        try:
            raw = self.metadata_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise ValueError(f"store index is not valid JSON: {self.metadata_path}") from exc
        if not isinstance(data, list):
            raise ValueError(f"store index must be a list: {self.metadata_path}")
        return [BackupRecord.from_dict(item) for item in data]

    def _write_records(self, records: list[BackupRecord]) -> None:
        payload = json.dumps([record.to_dict() for record in records], indent=2)
        _atomic_write(self.metadata_path, payload.encode("utf-8"))

    def _unlink(self, record: BackupRecord) -> bool:
        try:
            (self.directory / record.filename).unlink()
        except FileNotFoundError:
            return False
        return True


def _atomic_write(path: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
