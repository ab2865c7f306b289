# src/scrapers/base_scraper.py

"""Abstract base class for marketplace scrapers: fetching and selector helpers."""

import json
import logging
import random
import re
import time
from abc import ABC, abstractmethod
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup, Tag
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.errors import BlockedError, NetworkError, ScraperError
from src.models.product import ProductRecord


class BaseScraper(ABC):
    """Abstract base class for marketplace scrapers."""

    def __init__(
        self,
        source_name: str,
        rng: random.Random | None = None,
    ) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"affiliate_bot.scraper.{source_name}"
        )
        self.settings = Settings()
        self.rng = rng or random.Random()
        self.selectors: dict[str, list[str]] = self._load_selectors()
        self.session: Any = self._build_session()
        self._request_timeout: int = (
            self.settings.REQUEST_TIMEOUT
        )

    def _load_selectors(self) -> dict[str, list[str]]:
        """Load ordered CSS selector fallbacks for this source."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, list[str]] = all_selectors.get(
            self.source_name, {}
        )
        return result

    def _build_session(self) -> Any:
        """Create the HTTP session for the configured backend."""
        if self.settings.HTTP_BACKEND == "cloudscraper":
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            scraper.max_redirects = self.settings.MAX_REDIRECTS
            return scraper
        return curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER,
            max_redirects=self.settings.MAX_REDIRECTS,
        )

    def _build_headers(self) -> dict[str, str]:
        """Browser-like headers with a randomly rotated user agent."""
        return {
            **self.settings.DEFAULT_HEADERS,
            "User-Agent": self.rng.choice(self.settings.USER_AGENTS),
            "Referer": self._get_homepage(),
        }

    def _detect_block(self, text: str) -> None:
        """Raise BlockedError if the body carries an anti-bot indicator."""
        lower = text.lower()
        for indicator in self.settings.BLOCK_INDICATORS:
            if indicator in lower:
                self.logger.warning(
                    "[%s] Block indicator '%s' detected",
                    self.source_name,
                    indicator,
                )
                msg = (
                    "Amazon is temporarily blocking requests "
                    f"(matched '{indicator}')"
                )
                raise BlockedError(msg)

    def _attempt(self, url: str) -> str:
        """Issue one GET and return the body, or raise."""
        resp = self.session.get(
            url,
            headers=self._build_headers(),
            timeout=self._request_timeout,
            allow_redirects=True,
        )
        if resp.status_code >= 400:
            msg = f"HTTP {resp.status_code} for {url}"
            raise NetworkError(msg)
        text = str(resp.text)
        self._detect_block(text)
        return text

    def fetch(self, url: str) -> str:
        """GET a page with pacing, retries and linear backoff.

        Every attempt waits ``attempt * PRE_REQUEST_DELAY`` before the
        request. A failed attempt waits ``attempt * RETRY_BACKOFF`` before
        the next one; the last attempt's error is raised unchanged.
        """
        max_retries = self.settings.MAX_RETRIES
        error: ScraperError = NetworkError(f"No attempts made for {url}")
        for attempt in range(1, max_retries + 1):
            time.sleep(attempt * self.settings.PRE_REQUEST_DELAY)
            try:
                return self._attempt(url)
            except ScraperError as exc:
                error = exc
            except Exception as exc:
                error = NetworkError(f"Request to {url} failed: {exc}")
                error.__cause__ = exc
            self.logger.warning(
                "[%s] Attempt %d/%d failed: %s",
                self.source_name,
                attempt,
                max_retries,
                error,
            )
            if attempt < max_retries:
                time.sleep(attempt * self.settings.RETRY_BACKOFF)
        self.logger.error(
            "[%s] Giving up on %s after %d attempts",
            self.source_name,
            url,
            max_retries,
        )
        raise error

    def _get_page(self, url: str) -> BeautifulSoup:
        """Fetch a page and parse it with lxml."""
        return BeautifulSoup(self.fetch(url), "lxml")

    # ── Selector helpers ─────────────────────────────────

    def _select_text(self, root: Tag, field: str) -> str:
        """Text of the first selector for *field* that yields any."""
        for selector in self.selectors.get(field, []):
            el = root.select_one(selector)
            if el is None:
                continue
            text = el.get_text(" ", strip=True)
            if text:
                return text
        return ""

    def _select_attr(self, root: Tag, field: str, attr: str) -> str:
        """Attribute of the first selector for *field* that has it."""
        for selector in self.selectors.get(field, []):
            el = root.select_one(selector)
            if el is None:
                continue
            value = el.get(attr)
            if isinstance(value, str) and value:
                return value
        return ""

    def _select_all(self, root: Tag, field: str) -> list[Tag]:
        """Elements of the first selector for *field* that matches."""
        for selector in self.selectors.get(field, []):
            found = root.select(selector)
            if found:
                return list(found)
        return []

    @staticmethod
    def extract_price(text: str | None) -> float:
        """Extract a numeric amount from a string like '₹1,299.00'."""
        if not text:
            return 0.0
        cleaned = text.replace(",", "")
        numbers = re.findall(r"\d+\.?\d*", cleaned)
        return float(numbers[0]) if numbers else 0.0

    @abstractmethod
    def _get_homepage(self) -> str:
        """Return the homepage URL for the Referer header."""
        ...

    @abstractmethod
    def search(self, query: str, limit: int) -> list[ProductRecord]:
        """Search for products and return up to *limit* records."""
        ...
