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

import json
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from sealvault import BackupStore, create_backup, restore_backup, verify_backup
from sealvault.cli import app
from sealvault.config import load_app_config
from sealvault.errors import IntegrityError
from sealvault.formats.container import BackupContainer
from tests.test_support import (
    FAST_CONFIG_TOML,
    TEST_PASSPHRASE,
    TEST_RECORDS,
    FakeClock,
    tamper_tail,
    temp_env,
)


class TestIntegrationBackup(unittest.TestCase):
    def test_api_store_then_cli_open(self) -> None:
        payload = {
            "users": TEST_RECORDS,
            "declarations": [{"ref": f"D-{n:04d}", "weight": n * 1.5} for n in range(200)],
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            config_path = tmp_path / "config.toml"
            config_path.write_text(FAST_CONFIG_TOML, encoding="utf-8")
            config = load_app_config(config_path)

            container = create_backup(
                payload,
                TEST_PASSPHRASE,
                kdf=config.kdf,
                compression=config.compression,
                max_bytes=config.limits.max_backup_bytes,
            )
            store = BackupStore(
                config.storage.directory,
                retention_days=config.storage.retention_days,
                max_total_bytes=config.storage.max_total_bytes,
                clock=FakeClock(),
            )
            record = store.save(container, name="customs")
            stored_path = config.storage.directory / record.filename

            runner = CliRunner()
            with temp_env({"SEALVAULT_PASSPHRASE": TEST_PASSPHRASE}):
                result = runner.invoke(app, ["--config", str(config_path), "open", str(stored_path)])
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertEqual(json.loads(result.stdout), payload)

    def test_cli_seal_then_api_restore_detects_tampering(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            config_path = tmp_path / "config.toml"
            config_path.write_text(FAST_CONFIG_TOML, encoding="utf-8")
            input_path = tmp_path / "input.json"
            input_path.write_text(json.dumps(TEST_RECORDS, ensure_ascii=False), encoding="utf-8")
            output_path = tmp_path / "input.sealed.json"

            runner = CliRunner()
            result = runner.invoke(
                app,
                ["--config", str(config_path), "seal", str(input_path), "-o", str(output_path)],
                env={"SEALVAULT_PASSPHRASE": TEST_PASSPHRASE},
            )
            self.assertEqual(result.exit_code, 0, result.output)

            container = BackupContainer.from_json(output_path.read_text(encoding="utf-8"))
            self.assertTrue(verify_backup(container))
            self.assertEqual(restore_backup(container, TEST_PASSPHRASE), TEST_RECORDS)

            tampered = BackupContainer(
                ciphertext=tamper_tail(container.ciphertext),
                digest=container.digest,
                created_at=container.created_at,
            )
            with self.assertRaises(IntegrityError):
                restore_backup(tampered, TEST_PASSPHRASE)


if __name__ == "__main__":
    unittest.main()
