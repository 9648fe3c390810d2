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

import io
import os
import tempfile
from contextlib import contextmanager, redirect_stderr, redirect_stdout
from pathlib import Path
from typing import Generator
from unittest import mock

from sealvault.crypto.cipher import KdfParams
from sealvault.formats.container import BackupContainer, create_backup

# =============================================================================
# Test Constants
# =============================================================================

TEST_PASSPHRASE = "correct-horse-battery-staple"
WRONG_PASSPHRASE = "wrong-password"
# Lowest accepted round count; keeps the suite fast without skipping the KDF.
FAST_KDF = KdfParams(iterations=1_000)

TEST_RECORDS = [
    {"id": 1, "name": "محمد", "amount": 1000, "currency": "JOD"},
    {"id": 2, "name": "علي", "amount": 2000, "currency": "USD"},
    {"id": 3, "name": "فاطمة", "amount": 1500, "currency": "EGP"},
]
ARABIC_TEXT = "مرحبا بك في نظام إدارة البيانات الجمركية"
SPECIAL_TEXT = "🔒 بيانات مشفرة مع أحرف خاصة: !@#$%^&*() mixed"

FAST_CONFIG_TOML = """
[kdf]
iterations = 1000

[compression]
enabled = true
algorithm = "zstd"
level = 3

[storage]
directory = "store"
retention_days = 30
"""


# =============================================================================
# Environment Helpers
# =============================================================================


@contextmanager
def temp_env(overrides: dict[str, str], *, clear: bool = False):
    with mock.patch.dict(os.environ, overrides, clear=clear):
        yield


@contextmanager
def suppress_output():
    stdout = io.StringIO()
    stderr = io.StringIO()
    with redirect_stdout(stdout), redirect_stderr(stderr):
        yield


@contextmanager
def temp_directory() -> Generator[Path, None, None]:
    """Create a temporary directory with cleanup."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Container Helpers
# =============================================================================


_DEFAULT_VALUE = object()


def make_container(
    value: object = _DEFAULT_VALUE,
    *,
    passphrase: str = TEST_PASSPHRASE,
) -> BackupContainer:
    """Seal ``value`` (defaults to the sample records) with the fast KDF."""
    payload = {"users": TEST_RECORDS} if value is _DEFAULT_VALUE else value
    return create_backup(payload, passphrase, kdf=FAST_KDF)


def tamper_tail(text: str, replacement: str = "TAMPERED!!") -> str:
    """Replace the last ``len(replacement)`` characters of ``text``."""
    return text[: -len(replacement)] + replacement


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
