# src/models/price_snapshot.py

"""Price observations and the statistics derived from them."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PriceSnapshot:
    """A single immutable price observation for a watch."""

    id: int
    watch_id: int
    price: float
    observed_at: datetime


@dataclass(frozen=True)
class PriceStatistics:
    """Aggregate over a set of snapshots; never persisted."""

    count: int = 0
    minimum: float | None = None
    maximum: float | None = None
    mean: float | None = None

    @property
    def empty(self) -> bool:
        """True when no snapshot contributed to the aggregate."""
        return self.count == 0


def summarize(snapshots: list[PriceSnapshot]) -> PriceStatistics:
    """Compute min / max / mean / count over *snapshots*."""
    if not snapshots:
        return PriceStatistics()
    prices = [s.price for s in snapshots]
    return PriceStatistics(
        count=len(prices),
        minimum=min(prices),
        maximum=max(prices),
        mean=round(sum(prices) / len(prices), 2),
    )
