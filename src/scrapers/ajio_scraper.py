# src/scrapers/ajio_scraper.py

"""Price scraper for ajio.com product pages."""

import re

from src.scrapers.base_scraper import BaseScraper, StateMarker


class AjioScraper(BaseScraper):
    """Price scraper for ajio.com, reading ``window.__INITIAL_STATE__``."""

    DOMAINS = ("ajio.com",)
    STATE_MARKERS = (
        StateMarker(
            pattern=re.compile(r"window\.__INITIAL_STATE__\s*=\s*"),
            paths=(
                ("product", "price", "value"),
                ("product", "offerPrice"),
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__("ajio")

    def _get_homepage(self) -> str:
        """Return the Ajio homepage URL."""
        return "https://www.ajio.com/"
