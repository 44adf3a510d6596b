# tests/test_watch_db.py

"""Tests for the SQLite watch store."""

import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from src.models.errors import StorageFailure
from src.storage.watch_db import WatchDB


class TestWatchDB(unittest.TestCase):
    """Watch management and the monitor's storage contract."""

    def setUp(self) -> None:
        """Create a fresh temp DB for each test."""
        self.tmp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.tmp_dir) / "test.db"
        self.db = WatchDB(db_path=self.db_path)
        self.watch = self.db.add_watch(
            "https://www.flipkart.com/p/1", 999.0, "a@example.com", "flipkart",
        )

    def tearDown(self) -> None:
        self.db.close()

    # ── Watch management ─────────────────────────────────

    def test_add_and_get(self) -> None:
        loaded = self.db.get_watch(self.watch.id)
        assert loaded is not None
        self.assertEqual(loaded.url, "https://www.flipkart.com/p/1")
        self.assertEqual(loaded.target_price, 999.0)
        self.assertEqual(loaded.platform, "flipkart")
        self.assertIsNone(loaded.last_price)
        self.assertTrue(loaded.active)

    def test_add_rejects_non_positive_target(self) -> None:
        with self.assertRaises(ValueError):
            self.db.add_watch("https://x", 0, "e", "flipkart")

    def test_get_missing(self) -> None:
        self.assertIsNone(self.db.get_watch(9999))

    def test_deactivate_hides_from_active_set(self) -> None:
        other = self.db.add_watch(
            "https://www.ajio.com/p/2", 500.0, "b@example.com", "ajio",
        )
        self.assertTrue(self.db.deactivate_watch(self.watch.id))

        active_ids = [w.id for w in self.db.load_active_watches()]
        self.assertEqual(active_ids, [other.id])
        self.assertEqual(len(self.db.list_watches(include_inactive=True)), 2)

    def test_deactivate_keeps_history(self) -> None:
        self.db.append_snapshot(self.watch.id, 950.0, datetime(2026, 1, 1))
        self.db.deactivate_watch(self.watch.id)
        self.assertEqual(
            len(self.db.load_recent_snapshots(self.watch.id, 30)), 1
        )

    def test_deactivate_missing(self) -> None:
        self.assertFalse(self.db.deactivate_watch(9999))

    def test_purge_cascades_snapshots(self) -> None:
        self.db.append_snapshot(self.watch.id, 950.0, datetime(2026, 1, 1))
        self.assertTrue(self.db.purge_watch(self.watch.id))
        self.assertIsNone(self.db.get_watch(self.watch.id))
        self.assertEqual(
            self.db.load_recent_snapshots(self.watch.id, 30), []
        )

    # ── Storage contract ─────────────────────────────────

    def test_update_watch_observation(self) -> None:
        when = datetime(2026, 3, 1, 12, 0)
        self.db.update_watch_observation(self.watch.id, 799.0, when)
        loaded = self.db.get_watch(self.watch.id)
        assert loaded is not None
        self.assertEqual(loaded.last_price, 799.0)
        self.assertEqual(loaded.last_checked, when)

    def test_update_missing_watch(self) -> None:
        with self.assertRaises(StorageFailure):
            self.db.update_watch_observation(9999, 1.0, datetime.now())

    def test_record_observation_updates_watch_and_appends(self) -> None:
        when = datetime(2026, 3, 2, 8, 0)
        snap = self.db.record_observation(self.watch.id, 850.0, when)

        loaded = self.db.get_watch(self.watch.id)
        assert loaded is not None
        self.assertEqual(loaded.last_price, 850.0)
        self.assertEqual(loaded.last_checked, when)
        newest = self.db.load_recent_snapshots(self.watch.id, 1)
        self.assertEqual(newest, [snap])

    def test_record_observation_rolls_back_on_failed_insert(self) -> None:
        """A rejected snapshot leaves last_price and last_checked alone."""
        with self.assertRaises(StorageFailure):
            self.db.record_observation(self.watch.id, -5.0, datetime.now())
        loaded = self.db.get_watch(self.watch.id)
        assert loaded is not None
        self.assertIsNone(loaded.last_price)
        self.assertIsNone(loaded.last_checked)
        self.assertEqual(
            self.db.load_recent_snapshots(self.watch.id, 30), []
        )

    def test_record_observation_missing_watch(self) -> None:
        with self.assertRaises(StorageFailure):
            self.db.record_observation(9999, 1.0, datetime.now())

    def test_recent_snapshots_newest_first_and_bounded(self) -> None:
        for day, price in enumerate([100.0, 90.0, 80.0], start=1):
            self.db.append_snapshot(
                self.watch.id, price, datetime(2026, 1, day),
            )
        recent = self.db.load_recent_snapshots(self.watch.id, 2)
        self.assertEqual([s.price for s in recent], [80.0, 90.0])

    def test_aggregate(self) -> None:
        for price in (100.0, 80.0, 90.0):
            self.db.append_snapshot(self.watch.id, price, datetime.now())
        stats = self.db.load_aggregate(self.watch.id)
        self.assertEqual(stats.count, 3)
        self.assertEqual(stats.minimum, 80.0)
        self.assertEqual(stats.maximum, 100.0)
        self.assertEqual(stats.mean, 90.0)

    def test_aggregate_empty(self) -> None:
        self.assertTrue(self.db.load_aggregate(self.watch.id).empty)

    def test_snapshot_for_unknown_watch_fails(self) -> None:
        """Foreign keys are enforced."""
        with self.assertRaises(StorageFailure):
            self.db.append_snapshot(9999, 1.0, datetime.now())

    def test_negative_snapshot_price_rejected(self) -> None:
        with self.assertRaises(StorageFailure):
            self.db.append_snapshot(self.watch.id, -1.0, datetime.now())

    def test_sqlite_error_wrapped(self) -> None:
        """Backend errors surface as StorageFailure."""
        self.db._conn.close()
        with self.assertRaises(StorageFailure):
            self.db.load_active_watches()


if __name__ == "__main__":
    unittest.main()
