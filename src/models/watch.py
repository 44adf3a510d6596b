# src/models/watch.py

"""Watch data model: one subscriber monitoring one product URL."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Watch:
    """A product URL monitored against a target price."""

    id: int
    url: str
    target_price: float
    email: str
    platform: str
    last_price: float | None = None
    last_checked: datetime | None = None
    active: bool = True
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if self.target_price <= 0:
            raise ValueError(
                f"target_price must be positive, got {self.target_price}"
            )
