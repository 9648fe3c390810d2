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

import zstandard as zstd

from ..encoding.text import decode_base64url, encode_base64url
from ..encoding.varint import decode_uvarint, encode_uvarint
from ..errors import CodecError

MAGIC = b"SZ"
VERSION = 1

ALGO_NONE = 0
ALGO_ZSTD = 1

DEFAULT_ZSTD_LEVEL = 3


@dataclass(frozen=True)
class CompressionConfig:
    enabled: bool = True
    algorithm: str = "zstd"
    level: int = DEFAULT_ZSTD_LEVEL


@dataclass(frozen=True)
class CompressionInfo:
    algorithm: str
    compressed: bool
    raw_len: int
    wrapped_len: int


def encode(data: str, *, config: CompressionConfig | None = None) -> str:
    """Compress text and return it as a URL-safe transport token."""
    if not isinstance(data, str):
        raise CodecError(stage="encode", detail="data must be a string")
    try:
        raw = data.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise CodecError(stage="encode", detail="data is not valid UTF-8") from exc
    wrapped, _info = wrap_payload(raw, config or CompressionConfig())
    return encode_base64url(wrapped)


def decode(token: str) -> str:
    payload = _token_bytes(token)
    raw, _info = unwrap_payload(payload)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CodecError(stage="decode", detail="payload is not valid UTF-8") from exc


def describe(token: str) -> CompressionInfo:
    _raw, info = unwrap_payload(_token_bytes(token))
    return info


def wrap_payload(payload: bytes, config: CompressionConfig) -> tuple[bytes, CompressionInfo]:
    raw = bytes(payload)
    algorithm = _normalize_algorithm(config)
    algo_id = _algo_id(algorithm)
    if algo_id == ALGO_ZSTD and raw:
        data = zstd.ZstdCompressor(level=config.level).compress(raw)
    else:
        algo_id = ALGO_NONE
        algorithm = "none"
        data = raw

    parts = [
        MAGIC,
        encode_uvarint(VERSION),
        encode_uvarint(algo_id),
        encode_uvarint(len(raw)),
        encode_uvarint(len(data)),
        data,
    ]
    wrapped = b"".join(parts)
    info = CompressionInfo(
        algorithm=algorithm,
        compressed=algo_id != ALGO_NONE,
        raw_len=len(raw),
        wrapped_len=len(wrapped),
    )
    return wrapped, info


def unwrap_payload(payload: bytes) -> tuple[bytes, CompressionInfo]:
    if len(payload) < len(MAGIC) + 1:
        raise CodecError(stage="decode", detail="payload too short")
    if payload[: len(MAGIC)] != MAGIC:
        raise CodecError(stage="decode", detail="invalid payload magic")
    idx = len(MAGIC)
    try:
        version, idx = decode_uvarint(payload, idx)
        if version != VERSION:
            raise ValueError(f"unsupported payload version: {version}")
        algo_id, idx = decode_uvarint(payload, idx)
        raw_len, idx = decode_uvarint(payload, idx)
        data_len, idx = decode_uvarint(payload, idx)
    except ValueError as exc:
        raise CodecError(stage="decode", detail=str(exc)) from exc
    end = idx + data_len
    if end != len(payload):
        raise CodecError(stage="decode", detail="payload length mismatch")
    chunk = payload[idx:end]

    if algo_id == ALGO_NONE:
        if data_len != raw_len:
            raise CodecError(stage="decode", detail="raw payload length mismatch")
        algorithm = "none"
        output = chunk
    elif algo_id == ALGO_ZSTD:
        try:
            output = zstd.ZstdDecompressor().decompress(chunk, max_output_size=raw_len)
        except zstd.ZstdError as exc:
            raise CodecError(stage="decompress", detail=str(exc)) from exc
        if len(output) != raw_len:
            raise CodecError(stage="decompress", detail="decompressed length mismatch")
        algorithm = "zstd"
    else:
        raise CodecError(stage="decode", detail=f"unsupported compression algorithm id: {algo_id}")

    info = CompressionInfo(
        algorithm=algorithm,
        compressed=algo_id != ALGO_NONE,
        raw_len=raw_len,
        wrapped_len=len(payload),
    )
    return output, info


def _token_bytes(token: str) -> bytes:
    try:
        return decode_base64url(token)
    except ValueError as exc:
        raise CodecError(stage="decode", detail=str(exc)) from exc


def _normalize_algorithm(config: CompressionConfig) -> str:
    if not config.enabled:
        return "none"
    return str(config.algorithm or "none").strip().lower()


def _algo_id(algorithm: str) -> int:
    if algorithm in ("none", "off", "false", "0"):
        return ALGO_NONE
    if algorithm == "zstd":
        return ALGO_ZSTD
    raise CodecError(stage="encode", detail=f"unsupported compression algorithm: {algorithm}")
