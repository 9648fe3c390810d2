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

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from ..core.bounds import (
    BACKUP_RETENTION_DAYS,
    DEFAULT_KDF_ITERATIONS,
    MAX_BACKUP_BYTES,
    MAX_STORE_BYTES,
)
from ..crypto.cipher import KdfParams
from ..formats.codec import DEFAULT_ZSTD_LEVEL, CompressionConfig
from .installer import default_backup_dir, resolve_config_path

_COMPRESSION_ALGORITHMS = {"none", "zstd"}
_ZSTD_LEVEL_RANGE = (1, 22)


@dataclass(frozen=True)
class StorageDefaults:
    directory: Path = field(default_factory=default_backup_dir)
    retention_days: int | None = BACKUP_RETENTION_DAYS
    max_total_bytes: int = MAX_STORE_BYTES


@dataclass(frozen=True)
class LimitDefaults:
    max_backup_bytes: int = MAX_BACKUP_BYTES


@dataclass(frozen=True)
class UiDefaults:
    quiet: bool = False
    no_color: bool = False


@dataclass(frozen=True)
class AppConfig:
    kdf: KdfParams = field(default_factory=KdfParams)
    compression: CompressionConfig = field(default_factory=CompressionConfig)
    storage: StorageDefaults = field(default_factory=StorageDefaults)
    limits: LimitDefaults = field(default_factory=LimitDefaults)
    ui: UiDefaults = field(default_factory=UiDefaults)
    source: Path | None = None


def load_app_config(path: str | Path | None = None) -> AppConfig:
    config_path = resolve_config_path(path)
    data = _load_toml(config_path)
    return AppConfig(
        kdf=_parse_kdf(_get_dict(data, "kdf")),
        compression=_parse_compression(_get_dict(data, "compression")),
        storage=_parse_storage(_get_dict(data, "storage"), base=config_path.parent),
        limits=_parse_limits(_get_dict(data, "limits")),
        ui=_parse_ui(_get_dict(data, "ui")),
        source=config_path,
    )


def _parse_kdf(cfg: dict[str, object]) -> KdfParams:
    iterations = _parse_optional_int(cfg.get("iterations"), field="kdf.iterations")
    try:
        return KdfParams(iterations=DEFAULT_KDF_ITERATIONS if iterations is None else iterations)
    except ValueError as exc:
        raise ValueError(f"kdf.iterations: {exc}") from exc


def _parse_compression(cfg: dict[str, object]) -> CompressionConfig:
    enabled = _parse_bool(cfg.get("enabled"), field="compression.enabled", default=True)
    algorithm_value = cfg.get("algorithm", "zstd")
    if not isinstance(algorithm_value, str):
        raise ValueError("compression.algorithm must be a string")
    algorithm = algorithm_value.strip().lower() or "none"
    if algorithm not in _COMPRESSION_ALGORITHMS:
        allowed = ", ".join(sorted(_COMPRESSION_ALGORITHMS))
        raise ValueError(f"compression.algorithm must be one of: {allowed}")
    level = _parse_optional_int(cfg.get("level"), field="compression.level")
    if level is None:
        level = DEFAULT_ZSTD_LEVEL
    low, high = _ZSTD_LEVEL_RANGE
    if level < low or level > high:
        raise ValueError(f"compression.level must be between {low} and {high}")
    return CompressionConfig(enabled=enabled, algorithm=algorithm, level=level)


def _parse_storage(cfg: dict[str, object], *, base: Path) -> StorageDefaults:
    directory_value = _parse_optional_unset_str(cfg.get("directory"), field="storage.directory")
    if directory_value is None:
        directory = default_backup_dir()
    else:
        directory = Path(directory_value).expanduser()
        if not directory.is_absolute():
            directory = base / directory
    retention = _parse_optional_positive_int_or_unset_zero(
        cfg.get("retention_days"),
        field="storage.retention_days",
    )
    if "retention_days" not in cfg:
        retention = BACKUP_RETENTION_DAYS
    max_total = _parse_optional_positive_int_or_unset_zero(
        cfg.get("max_total_bytes"),
        field="storage.max_total_bytes",
    )
    return StorageDefaults(
        directory=directory,
        retention_days=retention,
        max_total_bytes=MAX_STORE_BYTES if max_total is None else max_total,
    )


def _parse_limits(cfg: dict[str, object]) -> LimitDefaults:
    max_bytes = _parse_optional_positive_int_or_unset_zero(
        cfg.get("max_backup_bytes"),
        field="limits.max_backup_bytes",
    )
    return LimitDefaults(max_backup_bytes=MAX_BACKUP_BYTES if max_bytes is None else max_bytes)


def _parse_ui(cfg: dict[str, object]) -> UiDefaults:
    return UiDefaults(
        quiet=_parse_bool(cfg.get("quiet"), field="ui.quiet", default=False),
        no_color=_parse_bool(cfg.get("no_color"), field="ui.no_color", default=False),
    )


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _parse_optional_unset_str(value: object, *, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    normalized = value.strip()
    return normalized or None


def _parse_bool(value: object, *, field: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"{field} must be a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"{field} must be a boolean")
    raise ValueError(f"{field} must be a boolean")


def _parse_optional_int(value: object, *, field: str) -> int | None:
    if value is None:
        return None
    return _parse_int_strict(value, field=field)


def _parse_optional_positive_int_or_unset_zero(value: object, *, field: str) -> int | None:
    if value is None:
        return None
    parsed = _parse_int_strict(value, field=field)
    if parsed == 0:
        return None
    if parsed < 0:
        raise ValueError(f"{field} must be a positive integer or 0")
    return parsed


def _parse_int_strict(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{field} must be an integer")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError(f"{field} must be an integer")
        try:
            return int(text)
        except ValueError as exc:
            raise ValueError(f"{field} must be an integer") from exc
    raise ValueError(f"{field} must be an integer")
