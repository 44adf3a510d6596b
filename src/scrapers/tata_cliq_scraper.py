# src/scrapers/tata_cliq_scraper.py

"""Price scraper for tatacliq.com product pages."""

import re

from src.scrapers.base_scraper import BaseScraper, StateMarker


class TataCliqScraper(BaseScraper):
    """Price scraper for tatacliq.com (JSON-LD offers, then markup)."""

    DOMAINS = ("tatacliq.com",)
    STATE_MARKERS = (
        StateMarker(
            pattern=re.compile(
                r'<script[^>]*type=["\']application/ld\+json["\'][^>]*>\s*',
                re.IGNORECASE,
            ),
            paths=(("offers", "price"), ("offers", "lowPrice")),
        ),
    )

    def __init__(self) -> None:
        super().__init__("tata_cliq")

    def _get_homepage(self) -> str:
        """Return the Tata CLiQ homepage URL."""
        return "https://www.tatacliq.com/"
