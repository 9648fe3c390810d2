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

from Crypto.Cipher import AES
from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2
from Crypto.Random import get_random_bytes

from ..core.bounds import (
    DEFAULT_KDF_ITERATIONS,
    GCM_NONCE_LEN,
    GCM_TAG_LEN,
    KDF_KEY_LEN,
    KDF_SALT_LEN,
    MAX_KDF_ITERATIONS,
    MIN_KDF_ITERATIONS,
)
from ..core.validation import require_int_range, require_positive_int, require_version
from ..encoding.text import decode_base64url, encode_base64url
from ..encoding.varint import decode_uvarint, encode_uvarint
from ..errors import CipherError

MAGIC = b"SV"
VERSION = 1

KDF_PBKDF2_SHA256 = 1


@dataclass(frozen=True)
class KdfParams:
    iterations: int = DEFAULT_KDF_ITERATIONS

    def __post_init__(self) -> None:
        require_positive_int(self.iterations, label="kdf iterations")
        require_int_range(
            self.iterations,
            min_val=MIN_KDF_ITERATIONS,
            max_val=MAX_KDF_ITERATIONS,
            label="kdf iterations",
        )


@dataclass(frozen=True)
class CipherHeader:
    version: int
    kdf_id: int
    iterations: int
    salt: bytes
    nonce: bytes
    tag: bytes


def encrypt(plaintext: str, passphrase: str, *, kdf: KdfParams | None = None) -> str:
    if not isinstance(plaintext, str):
        raise CipherError(stage="encrypt", detail="plaintext must be a string")
    try:
        raw = plaintext.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise CipherError(stage="encrypt", detail="plaintext is not valid UTF-8") from exc
    params = kdf or KdfParams()
    salt = get_random_bytes(KDF_SALT_LEN)
    key = _derive_key(passphrase, salt, params.iterations)
    nonce = get_random_bytes(GCM_NONCE_LEN)
    cipher = AES.new(key, AES.MODE_GCM, nonce=nonce, mac_len=GCM_TAG_LEN)
    ciphertext, tag = cipher.encrypt_and_digest(raw)
    parts = [
        MAGIC,
        encode_uvarint(VERSION),
        encode_uvarint(KDF_PBKDF2_SHA256),
        encode_uvarint(params.iterations),
        salt,
        nonce,
        tag,
        ciphertext,
    ]
    return encode_base64url(b"".join(parts))


def decrypt(blob: str, passphrase: str) -> str:
    header, ciphertext = _parse_blob(blob)
    key = _derive_key(passphrase, header.salt, header.iterations)
    cipher = AES.new(key, AES.MODE_GCM, nonce=header.nonce, mac_len=GCM_TAG_LEN)
    try:
        plaintext = cipher.decrypt_and_verify(ciphertext, header.tag)
    except ValueError:
        # GCM tag mismatch: wrong passphrase or altered bytes
        raise CipherError(
            stage="authenticate",
            detail="authentication tag mismatch (wrong passphrase?)",
        ) from None
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CipherError(stage="decrypt", detail="plaintext is not valid UTF-8") from exc


def read_header(blob: str) -> CipherHeader:
    header, _ciphertext = _parse_blob(blob)
    return header


def _parse_blob(blob: str) -> tuple[CipherHeader, bytes]:
    try:
        data = decode_base64url(blob)
    except ValueError as exc:
        raise CipherError(stage="header", detail=str(exc)) from exc
    if len(data) < len(MAGIC) + 1:
        raise CipherError(stage="header", detail="ciphertext too short")
    if data[: len(MAGIC)] != MAGIC:
        raise CipherError(stage="header", detail="invalid ciphertext magic")
    idx = len(MAGIC)
    try:
        version, idx = decode_uvarint(data, idx)
        require_version(version, VERSION, label="ciphertext")
        kdf_id, idx = decode_uvarint(data, idx)
        if kdf_id != KDF_PBKDF2_SHA256:
            raise ValueError(f"unsupported kdf id: {kdf_id}")
        iterations, idx = decode_uvarint(data, idx)
        require_int_range(
            iterations,
            min_val=MIN_KDF_ITERATIONS,
            max_val=MAX_KDF_ITERATIONS,
            label="kdf iterations",
        )
    except ValueError as exc:
        raise CipherError(stage="header", detail=str(exc)) from exc

    fixed_len = KDF_SALT_LEN + GCM_NONCE_LEN + GCM_TAG_LEN
    if len(data) < idx + fixed_len:
        raise CipherError(stage="header", detail="truncated ciphertext header")
    salt = data[idx : idx + KDF_SALT_LEN]
    idx += KDF_SALT_LEN
    nonce = data[idx : idx + GCM_NONCE_LEN]
    idx += GCM_NONCE_LEN
    tag = data[idx : idx + GCM_TAG_LEN]
    idx += GCM_TAG_LEN
    header = CipherHeader(
        version=version,
        kdf_id=kdf_id,
        iterations=iterations,
        salt=salt,
        nonce=nonce,
        tag=tag,
    )
    return header, data[idx:]


def _derive_key(passphrase: str, salt: bytes, iterations: int) -> bytes:
    if not isinstance(passphrase, str) or not passphrase:
        raise CipherError(stage="key", detail="passphrase must be a non-empty string")
    return PBKDF2(
        passphrase.encode("utf-8"),
        salt,
        dkLen=KDF_KEY_LEN,
        count=iterations,
        hmac_hash_module=SHA256,
    )
