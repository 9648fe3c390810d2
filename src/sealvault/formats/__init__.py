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

from .codec import (
    MAGIC as CODEC_MAGIC,
    VERSION as CODEC_VERSION,
    CompressionConfig,
    CompressionInfo,
    decode,
    describe,
    encode,
)
from .container import (
    CONTAINER_FIELDS,
    BackupContainer,
    create_backup,
    decrypt_backup,
    restore_backup,
    verify_backup,
)
from .serialization import deserialize, serialize

__all__ = [
    "CODEC_MAGIC",
    "CODEC_VERSION",
    "CONTAINER_FIELDS",
    "BackupContainer",
    "CompressionConfig",
    "CompressionInfo",
    "create_backup",
    "decode",
    "decrypt_backup",
    "describe",
    "deserialize",
    "encode",
    "restore_backup",
    "serialize",
    "verify_backup",
]
