# src/config/settings.py

"""Central configuration for the price_watch monitor."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the price_watch monitor."""

    # --- Fetching ---
    REQUEST_DELAY: float = 2.0          # Seconds between successive fetches
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 2                # Attempts per fetch
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Monitoring ---
    CHECK_INTERVAL: float = float(
        os.getenv("CHECK_INTERVAL", str(6 * 60 * 60))
    )
    HISTORY_WINDOW: int = 30            # Snapshots shown per watch

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
    }

    # --- Email ---
    SMTP_SERVER: str = os.getenv("SMTP_SERVER", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    FROM_EMAIL: str = os.getenv("FROM_EMAIL", "")
    FROM_NAME: str = os.getenv("FROM_NAME", "Price Tracker")
    CURRENCY_SYMBOL: str = "₹"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    DATA_DIR: Path = BASE_DIR / "data"
    DB_PATH: Path = Path(
        os.getenv("PRICE_WATCH_DB", str(DATA_DIR / "price_watch.db"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024  # Rotate a run log past this size
    LOG_BACKUP_COUNT: int = 3           # Rotated segments kept per run
    LOG_KEEP_RUNS: int = 20             # Older run logs are deleted

    # --- Platforms (resolution order matters) ---
    AVAILABLE_PLATFORMS: list[dict[str, str]] = [
        {
            "id": "myntra",
            "label": "Myntra",
            "scraper": "src.scrapers.myntra_scraper.MyntraScraper",
        },
        {
            "id": "flipkart",
            "label": "Flipkart",
            "scraper": "src.scrapers.flipkart_scraper.FlipkartScraper",
        },
        {
            "id": "ajio",
            "label": "Ajio",
            "scraper": "src.scrapers.ajio_scraper.AjioScraper",
        },
        {
            "id": "tata_cliq",
            "label": "Tata CLiQ",
            "scraper": "src.scrapers.tata_cliq_scraper.TataCliqScraper",
        },
    ]

    @classmethod
    def smtp_configured(cls) -> bool:
        """Return True when enough SMTP settings exist to send mail."""
        return bool(
            cls.SMTP_USERNAME and cls.SMTP_PASSWORD and cls.FROM_EMAIL
        )
