# src/scrapers/base_scraper.py

"""Abstract base class for all platform price scrapers."""

import json
import logging
import math
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import FetchFailure, MalformedPrice, PriceNotFound

# Currency glyphs / codes and grouping characters removed before parsing
_PRICE_NOISE_RE = re.compile(r"(?i)rs\.?|inr|aed|[₹$€£,\s ]")

_JSON_DECODER = json.JSONDecoder()


@dataclass(frozen=True)
class StateMarker:
    """Embedded state object in page markup and where its price lives.

    ``pattern`` must end right before the opening brace (or bracket) of
    the JSON value; ``paths`` are tried in order.
    """

    pattern: re.Pattern[str]
    paths: tuple[tuple[str, ...], ...]


def parse_price(text: str) -> float:
    """Parse price text such as ``'₹1,299'`` or ``'Rs. 999.00'``.

    Raises:
        MalformedPrice: if nothing numeric remains after cleanup.
    """
    cleaned = _PRICE_NOISE_RE.sub("", text)
    try:
        value = Decimal(cleaned)
    except InvalidOperation as exc:
        raise MalformedPrice(text) from exc
    if not value.is_finite() or value < 0:
        raise MalformedPrice(text)
    return float(value)


def _resolve_path(data: Any, path: tuple[str, ...]) -> Any:
    """Walk *path* through nested dicts; lists step into their first item."""
    node = data
    for key in path:
        if isinstance(node, list):
            node = node[0] if node else None
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _as_price(value: Any) -> float | None:
    """Coerce a decoded JSON value into a price, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        if math.isfinite(value) and value >= 0:
            return float(value)
        return None
    if isinstance(value, str):
        try:
            return parse_price(value)
        except MalformedPrice:
            return None
    return None


class BaseScraper(ABC):
    """Abstract base class for all platform price scrapers."""

    DOMAINS: tuple[str, ...] = ()
    STATE_MARKERS: tuple[StateMarker, ...] = ()

    # Challenge page markers (checked before the keyword scan)
    _CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "cf-turnstile",
        "_incapsula_resource",
        "px-captcha",
    ]

    def __init__(self, platform: str) -> None:
        self.platform = platform
        self.logger = logging.getLogger(
            f"price_watch.scrapers.{platform}"
        )
        self.settings = Settings()
        self.selectors: list[str] = self._load_selectors()
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _load_selectors(self) -> list[str]:
        """Load the ordered price selectors for this platform."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        platform_selectors: dict[str, Any] = all_selectors.get(
            self.platform, {}
        )
        return list(platform_selectors.get("price", []))

    # ── URL matching ─────────────────────────────────────

    def can_handle(self, url: str) -> bool:
        """Return True if *url* belongs to one of this platform's hosts."""
        host = (urlparse(url).hostname or "").lower()
        return any(
            host == domain or host.endswith("." + domain)
            for domain in self.DOMAINS
        )

    # ── Fetching ─────────────────────────────────────────

    def _validate_response(self, text: str) -> bool:
        """Return False for challenge / CAPTCHA interstitials."""
        lower = text.lower()
        for marker in self._CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "[%s] Challenge page detected (marker: '%s')",
                    self.platform,
                    marker,
                )
                return False

        # Real product pages are large; only scan small bodies
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "[%s] CAPTCHA keyword '%s' detected",
                        self.platform,
                        keyword,
                    )
                    return False
        return True

    def fetch(self, url: str) -> str:
        """GET *url* and return the markup.

        Each call is a standalone request: no session, so no cookies
        carry over between watches.

        Raises:
            FetchFailure: on transport errors, timeouts, non-200
                responses or challenge pages, once retries are spent.
        """
        last_error = "no attempt made"
        for attempt in range(self.settings.MAX_RETRIES):
            if attempt:
                time.sleep(self.settings.REQUEST_DELAY * attempt)
            try:
                resp = curl_requests.get(
                    url,
                    headers=self.settings.DEFAULT_HEADERS,
                    timeout=self._request_timeout,
                    impersonate=self.settings.IMPERSONATE_BROWSER,
                )
            except Exception as exc:
                last_error = str(exc)
                self.logger.warning(
                    "[%s] Request error on attempt %d: %s",
                    self.platform,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                continue

            if resp.status_code != 200:
                last_error = f"HTTP {resp.status_code}"
                self.logger.warning(
                    "[%s] HTTP %d on attempt %d",
                    self.platform,
                    resp.status_code,
                    attempt + 1,
                )
                continue

            text = resp.text
            if not self._validate_response(text):
                raise FetchFailure(f"Challenge page served for {url}")
            return text

        raise FetchFailure(f"{url}: {last_error}")

    # ── Extraction ───────────────────────────────────────

    def _extract_structured(self, markup: str) -> float | None:
        """Decode embedded state objects and read a nested price field."""
        for marker in self.STATE_MARKERS:
            for match in marker.pattern.finditer(markup):
                try:
                    data, _ = _JSON_DECODER.raw_decode(markup, match.end())
                except json.JSONDecodeError:
                    self.logger.debug(
                        "[%s] Undecodable state at offset %d",
                        self.platform,
                        match.end(),
                    )
                    continue
                for path in marker.paths:
                    price = _as_price(_resolve_path(data, path))
                    if price is not None:
                        self.logger.debug(
                            "[%s] Structured price %s at %s",
                            self.platform,
                            price,
                            ".".join(path),
                        )
                        return price
        return None

    def _extract_from_selectors(self, markup: str) -> float:
        """Read the price from the first selector that matches.

        The first matching selector decides: if its text does not
        parse, later selectors are not consulted.
        """
        soup = BeautifulSoup(markup, "lxml")
        for selector in self.selectors:
            element = soup.select_one(selector)
            if element is None:
                continue
            text = element.get_text(" ", strip=True)
            price = parse_price(text)
            self.logger.debug(
                "[%s] Selector %s gave %s", self.platform, selector, price
            )
            return price
        raise PriceNotFound(
            f"[{self.platform}] No price in markup; "
            "site structure may have changed"
        )

    def extract(self, markup: str) -> float:
        """Extract the current price from page markup.

        Raises:
            PriceNotFound: if no method yields any price text.
            MalformedPrice: if the matching text is not numeric.
        """
        price = self._extract_structured(markup)
        if price is not None:
            return price
        return self._extract_from_selectors(markup)

    def get_price(self, url: str) -> float:
        """Fetch *url* and extract its current price."""
        self.logger.info("[%s] Checking %s", self.platform, url)
        price = self.extract(self.fetch(url))
        self.logger.info("[%s] Found price %.2f", self.platform, price)
        return price

    @abstractmethod
    def _get_homepage(self) -> str:
        """Return the platform homepage URL (used for health probes)."""
        ...
