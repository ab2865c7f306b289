# src/config/settings.py

"""Central configuration for the affiliate_bot service."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str) -> list[str]:
    """Split a comma-separated environment variable into a list."""
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Central configuration for the affiliate_bot service."""

    # --- Scraping ---
    AMAZON_BASE_URL: str = "https://www.amazon.in"
    MAX_RETRIES: int = 3                # Attempts per fetch
    PRE_REQUEST_DELAY: float = 1.0      # Seconds, multiplied by attempt
    RETRY_BACKOFF: float = 2.0          # Seconds, multiplied by attempt
    REQUEST_TIMEOUT: int = 20           # Seconds before a request times out
    MAX_REDIRECTS: int = 5
    CATEGORY_PACING: float = 1.5        # Seconds between category scrapes
    DEFAULT_DISCOVERY_LIMIT: int = 5

    # --- Anti-bot ---
    HTTP_BACKEND: str = os.getenv("HTTP_BACKEND", "curl_cffi")
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    BLOCK_INDICATORS: list[str] = [
        "robot check",
        "captcha",
        "automated access",
        "api-services-support@amazon",
        "sorry, we just need to make sure",
        "enter the characters you see below",
        "type the characters",
    ]
    USER_AGENTS: list[str] = [
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) "
            "Gecko/20100101 Firefox/121.0"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "Version/17.2 Safari/605.1.15"
        ),
        (
            "Mozilla/5.0 (X11; Linux x86_64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
    ]
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "en-IN,en-GB;q=0.9,en;q=0.8,hi;q=0.7",
        "Accept-Encoding": "gzip, deflate, br",
        "Connection": "keep-alive",
        "Cache-Control": "max-age=0",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Quota ---
    QUOTA_LIMIT: int = 50               # Products per window
    QUOTA_WINDOW: str = os.getenv("QUOTA_WINDOW", "daily")
    OWNER_EMAILS: list[str] = _env_list("OWNER_EMAILS")
    OWNER_USERNAMES: list[str] = _env_list("OWNER_USERNAMES")

    # --- Collaborators ---
    GOOGLE_SHEETS_TOKEN: str = os.getenv("GOOGLE_SHEETS_TOKEN", "")
    SHEETS_API_BASE: str = "https://sheets.googleapis.com/v4/spreadsheets"
    SHEETS_RANGE: str = "Sheet1!A:H"
    SHEET_HEADER: list[str] = [
        "Timestamp",
        "Product Title",
        "Price",
        "Rating",
        "Product URL",
        "WhatsApp Message",
        "Telegram Message",
        "Affiliate Tag",
    ]
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: str = os.getenv("SMTP_PORT", "")
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASS: str = os.getenv("SMTP_PASS", "")
    SMTP_FROM_EMAIL: str = os.getenv(
        "SMTP_FROM_EMAIL", "noreply@affiliatebot.com"
    )
    RAZORPAY_KEY_ID: str = os.getenv("RAZORPAY_KEY_ID", "rzp_test_key")
    RESET_TOKEN_TTL: int = 3600         # Seconds a reset code stays valid
    SUBSCRIPTION_DAYS: int = 30

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING")  # Console threshold

    # --- HTTP API ---
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "5000"))

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    LOGS_DIR: Path = BASE_DIR / "logs"
