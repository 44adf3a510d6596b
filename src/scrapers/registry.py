# src/scrapers/registry.py

"""Ordered URL → scraper resolution, fixed at construction time."""

import importlib
import logging
from collections.abc import Callable, Sequence
from typing import Any

from src.config.settings import Settings
from src.models.errors import UnsupportedPlatform
from src.scrapers.base_scraper import BaseScraper

logger = logging.getLogger("price_watch.registry")

UrlPredicate = Callable[[str], bool]


def _load_scraper_class(dotted_path: str) -> type[Any]:
    """Dynamically import a scraper class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


class ScraperRegistry:
    """Maps product URLs to the scraper that handles them.

    Entries are tested in registration order and the first predicate
    that accepts the URL wins.  The entry list cannot change after
    construction.
    """

    def __init__(
        self,
        entries: Sequence[tuple[UrlPredicate, BaseScraper]],
    ) -> None:
        self._entries: tuple[tuple[UrlPredicate, BaseScraper], ...] = (
            tuple(entries)
        )

    @classmethod
    def from_scrapers(
        cls, scrapers: Sequence[BaseScraper],
    ) -> "ScraperRegistry":
        """Build a registry keyed on each scraper's own ``can_handle``."""
        return cls([(s.can_handle, s) for s in scrapers])

    @classmethod
    def default(cls) -> "ScraperRegistry":
        """Build the registry from ``Settings.AVAILABLE_PLATFORMS``."""
        scrapers: list[BaseScraper] = []
        for platform in Settings.AVAILABLE_PLATFORMS:
            scraper_cls = _load_scraper_class(platform["scraper"])
            scrapers.append(scraper_cls())
        logger.debug(
            "Registry built with platforms: %s",
            ", ".join(s.platform for s in scrapers),
        )
        return cls.from_scrapers(scrapers)

    @property
    def scrapers(self) -> list[BaseScraper]:
        """Registered scrapers in resolution order."""
        return [scraper for _, scraper in self._entries]

    def platforms(self) -> list[str]:
        """Registered platform tags in resolution order."""
        return [scraper.platform for _, scraper in self._entries]

    def resolve(self, url: str) -> BaseScraper:
        """Return the first scraper whose predicate accepts *url*.

        Raises:
            UnsupportedPlatform: if no predicate matches.
        """
        for predicate, scraper in self._entries:
            if predicate(url):
                return scraper
        raise UnsupportedPlatform(url)

    def detect_platform(self, url: str) -> str | None:
        """Return the platform tag for *url*, or None if unsupported."""
        try:
            return self.resolve(url).platform
        except UnsupportedPlatform:
            return None
