# src/storage/watch_store.py

"""Read/write contract between the monitor and its storage backend."""

from datetime import datetime
from typing import Protocol

from src.models.price_snapshot import PriceSnapshot, PriceStatistics
from src.models.watch import Watch


class WatchStore(Protocol):
    """Storage operations consumed by the monitor and history accessor.

    Implementations raise ``StorageFailure`` on any backend error and
    serialize their own writes.
    """

    def load_active_watches(self) -> list[Watch]:
        """Return every watch whose ``active`` flag is set."""
        ...

    def update_watch_observation(
        self, watch_id: int, price: float, observed_at: datetime,
    ) -> None:
        """Set a watch's ``last_price`` and ``last_checked``."""
        ...

    def append_snapshot(
        self, watch_id: int, price: float, observed_at: datetime,
    ) -> PriceSnapshot:
        """Append an immutable snapshot and return it."""
        ...

    def record_observation(
        self, watch_id: int, price: float, observed_at: datetime,
    ) -> PriceSnapshot:
        """Set ``last_price``/``last_checked`` and append the matching
        snapshot as one atomic write."""
        ...

    def load_recent_snapshots(
        self, watch_id: int, limit: int,
    ) -> list[PriceSnapshot]:
        """Return at most *limit* snapshots, newest first."""
        ...

    def load_aggregate(self, watch_id: int) -> PriceStatistics:
        """Compute min / max / mean / count over the full history."""
        ...
