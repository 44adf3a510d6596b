# src/services/health_checker.py

"""Connectivity health checker for every registered platform."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from src.scrapers.base_scraper import BaseScraper
from src.scrapers.registry import ScraperRegistry

logger = logging.getLogger("price_watch.health")

_HEALTH_TIMEOUT = 10  # seconds per platform
_SLOW_MS = 5000


@dataclass
class HealthResult:
    """Result of a single platform health check."""

    platform: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_platform(scraper: BaseScraper) -> HealthResult:
    """GET the platform homepage and classify the response."""
    homepage = scraper._get_homepage()
    start = time.monotonic()
    try:
        resp = curl_requests.get(
            homepage,
            headers=scraper.settings.DEFAULT_HEADERS,
            timeout=_HEALTH_TIMEOUT,
            impersonate=scraper.settings.IMPERSONATE_BROWSER,
        )
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            platform=scraper.platform,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )

    elapsed_ms = (time.monotonic() - start) * 1000
    if resp.status_code != 200:
        return HealthResult(
            platform=scraper.platform,
            status="down",
            latency_ms=elapsed_ms,
            message=f"HTTP {resp.status_code}",
        )
    if elapsed_ms > _SLOW_MS:
        return HealthResult(
            platform=scraper.platform,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )
    return HealthResult(
        platform=scraper.platform,
        status="ok",
        latency_ms=elapsed_ms,
        message="",
    )


class HealthChecker:
    """Runs concurrent homepage probes against all platforms."""

    def __init__(self, registry: ScraperRegistry) -> None:
        self.registry = registry

    async def check_all(self) -> list[HealthResult]:
        """Probe every registered platform concurrently."""
        tasks = [
            asyncio.to_thread(probe_platform, scraper)
            for scraper in self.registry.scrapers
        ]
        results: list[HealthResult] = list(await asyncio.gather(*tasks))
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.platform,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
