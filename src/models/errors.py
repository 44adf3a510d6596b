# src/models/errors.py

"""Failure taxonomy for a single watch check.

Every per-watch failure is one of these; the monitor catches them,
logs them against the watch id, and moves on to the next watch.
"""


class MonitorError(Exception):
    """Base class for all price_watch failures."""


class UnsupportedPlatform(MonitorError):
    """No registered scraper accepts the URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"No scraper registered for {url}")
        self.url = url


class FetchFailure(MonitorError):
    """Network error, timeout, non-200 status or challenge page."""


class PriceNotFound(MonitorError):
    """Neither structured data nor any selector produced price text."""


class MalformedPrice(MonitorError):
    """Price text was found but is not a valid number."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Not a valid price: {raw!r}")
        self.raw = raw


class StorageFailure(MonitorError):
    """The storage collaborator failed to read or write."""


class NotifyFailure(MonitorError):
    """The notification sink failed to deliver a message."""
