# src/scrapers/flipkart_scraper.py

"""Price scraper for flipkart.com product pages."""

import re

from src.scrapers.base_scraper import BaseScraper, StateMarker


class FlipkartScraper(BaseScraper):
    """Price scraper for flipkart.com product pages.

    Flipkart rotates its obfuscated class names frequently, so the
    selector list in ``selectors.json`` keeps several generations.
    """

    DOMAINS = ("flipkart.com",)
    STATE_MARKERS = (
        StateMarker(
            pattern=re.compile(
                r'<script[^>]*type=["\']application/ld\+json["\'][^>]*>\s*',
                re.IGNORECASE,
            ),
            paths=(("offers", "price"),),
        ),
    )

    def __init__(self) -> None:
        super().__init__("flipkart")

    def _get_homepage(self) -> str:
        """Return the Flipkart homepage URL."""
        return "https://www.flipkart.com/"
