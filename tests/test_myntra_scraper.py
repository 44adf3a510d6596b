# tests/test_myntra_scraper.py

"""Tests for the Myntra scraper's embedded state extraction."""

import unittest
from pathlib import Path

from src.models.errors import PriceNotFound
from src.scrapers.myntra_scraper import MyntraScraper

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestMyntraScraper(unittest.TestCase):
    """Myntra reads pdpData from the page state."""

    def setUp(self) -> None:
        self.scraper = MyntraScraper()

    def test_can_handle(self) -> None:
        self.assertTrue(
            self.scraper.can_handle("https://www.myntra.com/jackets/123/buy")
        )
        self.assertFalse(self.scraper.can_handle("https://www.flipkart.com/x"))

    def test_discounted_price_from_state(self) -> None:
        with open(FIXTURES_DIR / "myntra_product.html", encoding="utf-8") as f:
            markup = f.read()
        self.assertEqual(self.scraper.extract(markup), 1249.0)

    def test_mrp_when_no_discount(self) -> None:
        markup = '<script>var x = {"pdpData": {"mrp": 1999}};</script>'
        self.assertEqual(self.scraper.extract(markup), 1999.0)

    def test_selector_fallback(self) -> None:
        markup = (
            '<div class="pdp-price"><strong>Rs. 899</strong></div>'
        )
        self.assertEqual(self.scraper.extract(markup), 899.0)

    def test_price_not_found(self) -> None:
        with self.assertRaises(PriceNotFound):
            self.scraper.extract("<html><body></body></html>")


if __name__ == "__main__":
    unittest.main()
