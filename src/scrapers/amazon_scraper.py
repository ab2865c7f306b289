# src/scrapers/amazon_scraper.py

"""Scraper for amazon.in product pages and search results."""

import random
import re
from decimal import ROUND_HALF_UP, Decimal
from urllib.parse import quote

from bs4 import BeautifulSoup, Tag

from src.errors import ParseError, ValidationError
from src.models.product import ProductRecord
from src.scrapers.base_scraper import BaseScraper

RUPEE = "₹"

_ASIN_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"/dp/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/gp/product/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/gp/aw/d/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"asin=([A-Z0-9]{10})", re.IGNORECASE),
]

_ASIN_ATTR = re.compile(r"^[A-Za-z0-9]{10}$")
_DECIMAL = re.compile(r"\d+\.?\d*")
_GROUPED_INT = re.compile(r"\d[\d,]*")

MIN_SEARCH_TITLE = 10
MAX_FEATURES = 5
MIN_FEATURE_LENGTH = 6


def extract_asin(url: str) -> str | None:
    """Pull the 10-character product id out of an Amazon URL."""
    for pattern in _ASIN_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1).upper()
    return None


def compute_discount(price: float, original: float) -> str:
    """Return e.g. ``'50% OFF'`` when *original* exceeds *price*."""
    if price <= 0 or original <= price:
        return ""
    percent = Decimal(str((original - price) / original * 100))
    rounded = percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{rounded}% OFF"


def parse_rating(text: str) -> float:
    """Leading decimal of a label like '4.1 out of 5 stars'."""
    match = _DECIMAL.search(text)
    return float(match.group(0)) if match else 0.0


def parse_review_count(text: str) -> int:
    """Leading comma-grouped integer of a label like '2,45,678 ratings'."""
    match = _GROUPED_INT.search(text)
    return int(match.group(0).replace(",", "")) if match else 0


class AmazonScraper(BaseScraper):
    """Scraper for amazon.in (India)."""

    def __init__(self, rng: random.Random | None = None) -> None:
        super().__init__("amazon_in", rng)

    def _get_homepage(self) -> str:
        """Return the Amazon.in homepage URL."""
        return f"{self.settings.AMAZON_BASE_URL}/"

    def product_url(self, asin: str) -> str:
        """Canonical product page URL for an ASIN."""
        return f"{self.settings.AMAZON_BASE_URL}/dp/{asin}"

    # ── Product page ─────────────────────────────────────

    def _parse_price(self, soup: Tag) -> str:
        """Whole + fraction pair, then alternates, then a zero amount."""
        whole = (
            self._select_text(soup, "price_whole")
            .replace(",", "")
            .rstrip(". ")
        )
        if whole:
            fraction = self._select_text(soup, "price_fraction")
            return f"{RUPEE}{whole}" + (f".{fraction}" if fraction else "")
        alternate = self._select_text(soup, "price_alternates")
        return alternate or f"{RUPEE}0"

    def _parse_features(self, soup: Tag) -> tuple[str, ...]:
        """Bullet-list features, skipping short and 'See more' entries."""
        features: list[str] = []
        for el in self._select_all(soup, "features"):
            feature = el.get_text(" ", strip=True)
            if (
                len(feature) < MIN_FEATURE_LENGTH
                or "See more" in feature
            ):
                continue
            features.append(feature)
            if len(features) >= MAX_FEATURES:
                break
        return tuple(features)

    def extract_product(
        self, markup: str, asin: str = "",
    ) -> ProductRecord:
        """Parse a product detail page into a ProductRecord.

        Raises:
            ParseError: when no title selector matches, which usually
                means the page layout changed or the request was blocked.
        """
        soup = BeautifulSoup(markup, "lxml")

        title = self._select_text(soup, "title")
        if not title:
            msg = (
                "Could not extract product details. "
                "Amazon may be blocking the request."
            )
            raise ParseError(msg)

        price = self._parse_price(soup)
        original_price = (
            self._select_text(soup, "original_price") or price
        )

        savings = self._select_text(soup, "savings")
        if savings:
            percent = savings.replace("-", "").replace("%", "").strip()
            discount = f"{percent}% OFF"
        else:
            discount = compute_discount(
                self.extract_price(price),
                self.extract_price(original_price),
            )

        return ProductRecord(
            title=title,
            price=price,
            original_price=original_price,
            discount=discount,
            rating=parse_rating(self._select_text(soup, "rating")),
            reviews=parse_review_count(
                self._select_text(soup, "reviews")
            ),
            image_url=self._select_attr(soup, "image", "src"),
            features=self._parse_features(soup),
            url=self.product_url(asin) if asin else "",
            asin=asin,
        )

    def scrape_product(self, url: str) -> ProductRecord:
        """Fetch and parse the canonical page for an Amazon product URL."""
        asin = extract_asin(url)
        if not asin:
            msg = (
                "Invalid Amazon URL - could not extract "
                "product ID (ASIN)"
            )
            raise ValidationError(msg)
        page_url = self.product_url(asin)
        self.logger.info("[amazon_in] Scraping product %s", asin)
        return self.extract_product(self.fetch(page_url), asin)

    # ── Search results ───────────────────────────────────

    def _parse_result(self, container: Tag) -> ProductRecord | None:
        """Parse one search-result container, or None if unusable."""
        asin = str(container.get("data-asin") or "")
        if not _ASIN_ATTR.match(asin):
            return None

        title = self._select_text(container, "search_title")
        if len(title) < MIN_SEARCH_TITLE:
            return None

        whole = (
            self._select_text(container, "search_price_whole")
            .replace(",", "")
            .rstrip(". ")
        )
        if not whole:
            return None
        price = f"{RUPEE}{whole}"
        original_price = (
            self._select_text(container, "search_original_price")
            or price
        )

        return ProductRecord(
            title=title,
            price=price,
            original_price=original_price,
            discount=compute_discount(
                self.extract_price(price),
                self.extract_price(original_price),
            ),
            rating=parse_rating(
                self._select_text(container, "search_rating")
            ),
            reviews=parse_review_count(
                self._select_text(container, "search_reviews")
            ),
            image_url=self._select_attr(
                container, "search_image", "src"
            ),
            url=self.product_url(asin),
            asin=asin,
        )

    def extract_search_results(
        self, markup: str, limit: int,
    ) -> list[ProductRecord]:
        """Collect up to *limit* usable products from a search page."""
        soup = BeautifulSoup(markup, "lxml")
        products: list[ProductRecord] = []
        for container in self._select_all(soup, "search_result"):
            if len(products) >= limit:
                break
            product = self._parse_result(container)
            if product is not None:
                products.append(product)
        return products

    def search(self, query: str, limit: int = 5) -> list[ProductRecord]:
        """Search Amazon.in and parse the first results page."""
        url = f"{self.settings.AMAZON_BASE_URL}/s?k={quote(query)}"
        self.logger.info(
            "[amazon_in] Searching '%s' (limit %d)", query, limit
        )
        markup = self.fetch(url)
        products = self.extract_search_results(markup, limit)
        self.logger.info(
            "[amazon_in] Parsed %d products for '%s'",
            len(products),
            query,
        )
        return products
