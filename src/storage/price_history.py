# src/storage/price_history.py

"""Append-only price history and on-demand statistics for watches."""

import logging
from datetime import datetime

from src.config.settings import Settings
from src.models.price_snapshot import (
    PriceSnapshot,
    PriceStatistics,
    summarize,
)
from src.storage.watch_store import WatchStore

logger = logging.getLogger("price_watch.history")


class PriceHistory:
    """History & statistics accessor over a ``WatchStore``.

    Snapshots are only ever appended.  Aggregates are recomputed from
    the stored snapshots on every read; nothing is cached here.
    """

    def __init__(self, store: WatchStore) -> None:
        self._store = store

    def record(
        self, watch_id: int, price: float, observed_at: datetime,
    ) -> PriceSnapshot:
        """Store the observation on the watch and append its snapshot.

        Both writes land together or not at all.
        """
        if price < 0:
            raise ValueError(f"price must be >= 0, got {price}")
        snapshot = self._store.record_observation(
            watch_id, price, observed_at,
        )
        logger.debug(
            "Recorded snapshot %d for watch %d: %.2f",
            snapshot.id,
            watch_id,
            price,
        )
        return snapshot

    def recent(
        self, watch_id: int, limit: int | None = None,
    ) -> list[PriceSnapshot]:
        """Return the newest snapshots, newest first (display window)."""
        window = limit if limit is not None else Settings.HISTORY_WINDOW
        return self._store.load_recent_snapshots(watch_id, window)

    def statistics(self, watch_id: int) -> PriceStatistics:
        """Full-history min / max / mean / count."""
        return self._store.load_aggregate(watch_id)

    def window_statistics(
        self, watch_id: int, limit: int | None = None,
    ) -> PriceStatistics:
        """Statistics over the recent display window only."""
        return summarize(self.recent(watch_id, limit))
