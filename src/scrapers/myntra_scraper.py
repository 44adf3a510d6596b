# src/scrapers/myntra_scraper.py

"""Price scraper for myntra.com product pages."""

import re

from src.scrapers.base_scraper import BaseScraper, StateMarker


class MyntraScraper(BaseScraper):
    """Price scraper for myntra.com product pages.

    Myntra renders client-side, but the server response embeds the
    product data as ``pdpData`` (inside ``window.__myx``), which carries
    the discounted price and the MRP.
    """

    DOMAINS = ("myntra.com",)
    STATE_MARKERS = (
        StateMarker(
            pattern=re.compile(r'pdpData["\s:]+'),
            paths=(("price", "discounted"), ("mrp",)),
        ),
        StateMarker(
            pattern=re.compile(r"window\.__myx\s*=\s*"),
            paths=(("pdpData", "price", "discounted"),),
        ),
    )

    def __init__(self) -> None:
        super().__init__("myntra")

    def _get_homepage(self) -> str:
        """Return the Myntra homepage URL."""
        return "https://www.myntra.com/"
