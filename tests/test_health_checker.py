# tests/test_health_checker.py

"""Tests for the platform health checker service."""

import asyncio
import unittest
from unittest.mock import MagicMock, patch

from src.scrapers.flipkart_scraper import FlipkartScraper
from src.scrapers.registry import ScraperRegistry
from src.services.health_checker import HealthChecker, probe_platform


class TestProbePlatform(unittest.TestCase):
    """Tests for the per-platform homepage probe."""

    @patch("src.services.health_checker.curl_requests.get")
    def test_ok_status(self, mock_get: MagicMock) -> None:
        """A fast 200 response should return 'ok' status."""
        mock_get.return_value = MagicMock(status_code=200)
        result = probe_platform(FlipkartScraper())
        self.assertEqual(result.status, "ok")
        self.assertEqual(result.platform, "flipkart")
        self.assertEqual(mock_get.call_args[0][0], "https://www.flipkart.com/")

    @patch("src.services.health_checker.curl_requests.get")
    def test_down_on_http_error(self, mock_get: MagicMock) -> None:
        """A non-200 response should return 'down' status."""
        mock_get.return_value = MagicMock(status_code=403)
        result = probe_platform(FlipkartScraper())
        self.assertEqual(result.status, "down")
        self.assertIn("403", result.message)

    @patch("src.services.health_checker.curl_requests.get")
    def test_down_on_exception(self, mock_get: MagicMock) -> None:
        """A network error should return 'down' status."""
        mock_get.side_effect = ConnectionError("Connection refused")
        result = probe_platform(FlipkartScraper())
        self.assertEqual(result.status, "down")
        self.assertIn("refused", result.message)

    @patch("src.services.health_checker.time.monotonic")
    @patch("src.services.health_checker.curl_requests.get")
    def test_slow_status(
        self, mock_get: MagicMock, mock_monotonic: MagicMock,
    ) -> None:
        """Responses over five seconds are flagged slow."""
        mock_get.return_value = MagicMock(status_code=200)
        mock_monotonic.side_effect = [0.0, 6.0]
        result = probe_platform(FlipkartScraper())
        self.assertEqual(result.status, "slow")


class TestHealthChecker(unittest.TestCase):
    """The checker probes every registered platform."""

    @patch("src.services.health_checker.curl_requests.get")
    def test_check_all_covers_registry(self, mock_get: MagicMock) -> None:
        mock_get.return_value = MagicMock(status_code=200)
        checker = HealthChecker(ScraperRegistry.default())
        results = asyncio.run(checker.check_all())
        self.assertEqual(
            sorted(r.platform for r in results),
            ["ajio", "flipkart", "myntra", "tata_cliq"],
        )
        self.assertTrue(all(r.status == "ok" for r in results))


if __name__ == "__main__":
    unittest.main()
