# tests/test_models.py

"""Tests for the Watch and PriceSnapshot data models."""

import dataclasses
import unittest
from datetime import datetime

from src.models.price_snapshot import PriceSnapshot, summarize
from src.models.watch import Watch


class TestWatch(unittest.TestCase):

    def test_defaults(self) -> None:
        watch = Watch(
            id=1,
            url="https://www.flipkart.com/p/1",
            target_price=999.0,
            email="a@example.com",
            platform="flipkart",
        )
        self.assertIsNone(watch.last_price)
        self.assertIsNone(watch.last_checked)
        self.assertTrue(watch.active)

    def test_target_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            Watch(id=1, url="u", target_price=0, email="e", platform="p")


class TestPriceSnapshot(unittest.TestCase):

    def test_snapshot_is_immutable(self) -> None:
        snap = PriceSnapshot(
            id=1, watch_id=1, price=10.0, observed_at=datetime(2026, 1, 1),
        )
        with self.assertRaises(dataclasses.FrozenInstanceError):
            snap.price = 5.0  # type: ignore[misc]

    def test_summarize(self) -> None:
        when = datetime(2026, 1, 1)
        stats = summarize([
            PriceSnapshot(id=i, watch_id=1, price=p, observed_at=when)
            for i, p in enumerate([100.0, 80.0, 90.0])
        ])
        self.assertEqual(stats.count, 3)
        self.assertEqual(stats.minimum, 80.0)
        self.assertEqual(stats.maximum, 100.0)
        self.assertEqual(stats.mean, 90.0)

    def test_summarize_empty(self) -> None:
        stats = summarize([])
        self.assertTrue(stats.empty)
        self.assertIsNone(stats.mean)


if __name__ == "__main__":
    unittest.main()
