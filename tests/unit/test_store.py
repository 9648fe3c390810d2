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
import unittest
from concurrent.futures import ThreadPoolExecutor

from sealvault.errors import BackupNotFoundError, CorruptionError, IntegrityError
from sealvault.formats.container import BackupContainer
from sealvault.storage.store import (
    BACKUP_SUFFIX,
    METADATA_FILENAME,
    BackupRecord,
    BackupStore,
)
from tests.test_support import (
    TEST_PASSPHRASE,
    TEST_RECORDS,
    WRONG_PASSPHRASE,
    FakeClock,
    make_container,
    tamper_tail,
    temp_directory,
)

DAY = 24 * 60 * 60


class TestStoreSaveLoad(unittest.TestCase):
    def test_save_and_restore(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp / "backups", clock=FakeClock())
            container = make_container()
            record = store.save(container, name="daily")
            self.assertEqual(record.name, "daily")
            self.assertEqual(record.digest, container.digest)
            self.assertTrue((tmp / "backups" / record.filename).exists())
            self.assertTrue(record.filename.endswith(BACKUP_SUFFIX))
            self.assertEqual(store.load(record.id), container)
            self.assertEqual(store.restore(record.id, TEST_PASSPHRASE), {"users": TEST_RECORDS})

    def test_record_size_matches_file(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            record = store.save(make_container())
            self.assertEqual(record.size, (tmp / record.filename).stat().st_size)

    def test_metadata_index_written(self) -> None:
        with temp_directory() as tmp:
            clock = FakeClock()
            store = BackupStore(tmp, clock=clock)
            record = store.save(make_container())
            data = json.loads((tmp / METADATA_FILENAME).read_text(encoding="utf-8"))
            self.assertEqual(len(data), 1)
            self.assertEqual(BackupRecord.from_dict(data[0]), record)
            self.assertEqual(record.expires_at, clock.now + 30 * DAY)
            leftovers = [path.name for path in tmp.iterdir() if path.name.startswith(".")]
            self.assertEqual(leftovers, [])

    def test_passphrase_is_not_persisted(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            store.save(make_container())
            for path in tmp.iterdir():
                self.assertNotIn(TEST_PASSPHRASE, path.read_text(encoding="utf-8"))

    def test_invalid_names_rejected(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            container = make_container()
            for name in ("", "   ", "../escape", "a/b", "a\\b", ".hidden", "x" * 129):
                with self.subTest(name=name):
                    with self.assertRaises(ValueError):
                        store.save(container, name=name)

    def test_unknown_id(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            with self.assertRaises(BackupNotFoundError) as ctx:
                store.get("missing")
            self.assertEqual(ctx.exception.stage, "lookup")
            with self.assertRaises(LookupError):
                store.load("missing")

    def test_missing_file_reported(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            record = store.save(make_container())
            (tmp / record.filename).unlink()
            with self.assertRaisesRegex(BackupNotFoundError, "missing"):
                store.load(record.id)

    def test_tampered_file_fails_integrity(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            container = make_container()
            record = store.save(container)
            tampered = BackupContainer(
                ciphertext=tamper_tail(container.ciphertext),
                digest=container.digest,
                created_at=container.created_at,
            )
            (tmp / record.filename).write_text(tampered.to_json(), encoding="utf-8")
            with self.assertRaises(IntegrityError):
                store.restore(record.id, TEST_PASSPHRASE)

    def test_wrong_passphrase(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            record = store.save(make_container())
            with self.assertRaises(CorruptionError):
                store.restore(record.id, WRONG_PASSPHRASE)

    def test_invalid_constructor_arguments(self) -> None:
        with temp_directory() as tmp:
            with self.assertRaises(ValueError):
                BackupStore(tmp, retention_days=0)
            with self.assertRaises(ValueError):
                BackupStore(tmp, max_total_bytes=0)

    def test_corrupt_index(self) -> None:
        with temp_directory() as tmp:
            (tmp / METADATA_FILENAME).write_text("{broken", encoding="utf-8")
            with self.assertRaises(ValueError):
                BackupStore(tmp).list_backups()


class TestStoreRetention(unittest.TestCase):
    def test_list_sorted_oldest_first(self) -> None:
        with temp_directory() as tmp:
            clock = FakeClock()
            store = BackupStore(tmp, clock=clock)
            first = store.save(make_container({"n": 1}), name="first")
            clock.advance(60)
            second = store.save(make_container({"n": 2}), name="second")
            self.assertEqual([r.id for r in store.list_backups()], [first.id, second.id])

    def test_expired_backups_are_hidden_and_deleted(self) -> None:
        with temp_directory() as tmp:
            clock = FakeClock()
            store = BackupStore(tmp, retention_days=1, clock=clock)
            old = store.save(make_container({"n": 1}), name="old")
            clock.advance(DAY / 2)
            fresh = store.save(make_container({"n": 2}), name="fresh")
            clock.advance(DAY / 2 + 1)
            self.assertEqual([r.id for r in store.list_backups()], [fresh.id])
            with self.assertRaises(BackupNotFoundError):
                store.get(old.id)
            self.assertEqual(store.delete_expired(), 1)
            self.assertFalse((tmp / old.filename).exists())
            self.assertTrue((tmp / fresh.filename).exists())
            self.assertEqual(store.delete_expired(), 0)

    def test_no_retention_never_expires(self) -> None:
        with temp_directory() as tmp:
            clock = FakeClock()
            store = BackupStore(tmp, retention_days=None, clock=clock)
            record = store.save(make_container())
            self.assertIsNone(record.expires_at)
            clock.advance(10_000 * DAY)
            self.assertEqual(store.delete_expired(), 0)
            self.assertEqual(store.get(record.id), record)


class TestStoreSpace(unittest.TestCase):
    def test_manage_space_trims_oldest_to_eighty_percent(self) -> None:
        with temp_directory() as tmp:
            clock = FakeClock()
            probe = BackupStore(tmp / "probe", clock=clock).save(make_container({"n": 0}))
            cap = probe.size * 3
            store = BackupStore(tmp / "store", max_total_bytes=cap, clock=clock)
            records = []
            for index in range(5):
                records.append(store.save(make_container({"n": index}), name=f"b{index}"))
                clock.advance(1)
            report = store.manage_space()
            self.assertGreater(report.deleted_count, 0)
            self.assertLessEqual(report.total_size, cap * 0.8)
            remaining = store.list_backups()
            self.assertEqual(report.backup_count, len(remaining))
            self.assertEqual(report.remaining_space, cap - report.total_size)
            self.assertEqual(remaining[-1].id, records[-1].id)
            removed = {r.id for r in records} - {r.id for r in remaining}
            for record in records:
                exists = (tmp / "store" / record.filename).exists()
                self.assertEqual(exists, record.id not in removed)
            oldest_kept = min(r.created_at for r in remaining)
            self.assertTrue(all(r.created_at < oldest_kept for r in records if r.id in removed))

    def test_manage_space_does_not_count_missing_files(self) -> None:
        with temp_directory() as tmp:
            clock = FakeClock()
            probe = BackupStore(tmp / "sizing", clock=clock).save(make_container({"n": 0}))
            store = BackupStore(tmp / "store", max_total_bytes=probe.size * 2, clock=clock)
            records = []
            for index in range(3):
                records.append(store.save(make_container({"n": index}), name=f"b{index}"))
                clock.advance(1)
            (tmp / "store" / records[0].filename).unlink()
            report = store.manage_space()
            remaining = {r.id for r in store.list_backups()}
            self.assertNotIn(records[0].id, remaining)
            self.assertEqual(report.backup_count, len(remaining))
            removed_files = sum(1 for r in records[1:] if r.id not in remaining)
            self.assertEqual(report.deleted_count, removed_files)

    def test_manage_space_under_cap_is_noop(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            record = store.save(make_container())
            report = store.manage_space()
            self.assertEqual(report.deleted_count, 0)
            self.assertEqual(report.backup_count, 1)
            self.assertEqual(report.total_size, record.size)


class TestStoreThreads(unittest.TestCase):
    def test_parallel_saves_keep_every_record(self) -> None:
        with temp_directory() as tmp:
            store = BackupStore(tmp, clock=FakeClock())
            containers = [make_container({"n": index}) for index in range(12)]

            with ThreadPoolExecutor(max_workers=6) as pool:
                saved = list(pool.map(lambda c: store.save(c, name="parallel"), containers))

            listed = {record.id for record in store.list_backups()}
            self.assertEqual(listed, {record.id for record in saved})


class TestStoreStats(unittest.TestCase):
    def test_empty_store(self) -> None:
        with temp_directory() as tmp:
            stats = BackupStore(tmp).stats()
            self.assertEqual(stats.total_backups, 0)
            self.assertEqual(stats.total_size, 0)
            self.assertIsNone(stats.oldest)
            self.assertIsNone(stats.newest)
            self.assertEqual(stats.average_size, 0.0)

    def test_stats(self) -> None:
        with temp_directory() as tmp:
            clock = FakeClock()
            store = BackupStore(tmp, clock=clock)
            first = store.save(make_container({"n": 1}))
            clock.advance(30)
            second = store.save(make_container({"n": 2, "extra": "x" * 100}))
            stats = store.stats()
            self.assertEqual(stats.total_backups, 2)
            self.assertEqual(stats.total_size, first.size + second.size)
            self.assertEqual(stats.oldest, first.created_at)
            self.assertEqual(stats.newest, second.created_at)
            self.assertEqual(stats.average_size, (first.size + second.size) / 2)


if __name__ == "__main__":
    unittest.main()
