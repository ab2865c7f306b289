# src/services/discovery.py

"""Category-driven product discovery with static fallback data."""

import asyncio
import logging
import math
import random
from collections.abc import Callable

from src.config.settings import Settings
from src.errors import ValidationError
from src.models.product import DiscoveredProduct, ProductRecord
from src.scrapers.amazon_scraper import AmazonScraper
from src.services.catalog import (
    ALL_CATEGORIES,
    DEAL_SEARCH_TERMS,
    DEALS_TAG,
    HOT_DEALS,
    SEARCH_TERMS,
    category_ids,
    get_fallback_products,
)

logger = logging.getLogger("affiliate_bot.discovery")

_HOT_FALLBACK_CATEGORIES = 3
_HOT_FALLBACK_PER_CATEGORY = 2


def _validate_limit(limit: int) -> None:
    if limit < 1:
        msg = f"limit must be a positive integer, got {limit}"
        raise ValidationError(msg)


class DiscoveryOrchestrator:
    """Turns a category choice into tagged product records.

    Live results come from the Amazon search page; any scraping failure
    or empty page is replaced with the category's fallback products, so
    category discovery never raises for a known category.

    Every search and product scrape builds its own scraper from
    *scraper_factory*; an HTTP session is never shared between the
    worker threads of concurrent requests.
    """

    def __init__(
        self,
        scraper_factory: Callable[[], AmazonScraper] = AmazonScraper,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = Settings()
        self.rng = rng or random.Random()
        self.scraper_factory = scraper_factory

    # ── Private helpers ──────────────────────────────────

    async def _search(
        self, term: str, limit: int,
    ) -> list[ProductRecord]:
        """Run the blocking scraper search off the event loop."""
        scraper = self.scraper_factory()
        products: list[ProductRecord] = await asyncio.to_thread(
            scraper.search, term, limit
        )
        return products

    def _mixed_fallback(self, limit: int) -> list[DiscoveredProduct]:
        """A couple of canned products from each of the first categories."""
        mixed: list[DiscoveredProduct] = []
        for category in category_ids()[:_HOT_FALLBACK_CATEGORIES]:
            mixed.extend(
                get_fallback_products(
                    category, _HOT_FALLBACK_PER_CATEGORY
                )
            )
        return mixed[:limit]

    # ── Discovery modes ──────────────────────────────────

    async def scrape_product(self, url: str) -> ProductRecord:
        """Scrape a single product page with a scraper of its own."""
        scraper = self.scraper_factory()
        product: ProductRecord = await asyncio.to_thread(
            scraper.scrape_product, url
        )
        return product


    async def discover(
        self, category: str, limit: int = 5,
    ) -> list[DiscoveredProduct]:
        """Discover up to *limit* products for one known category."""
        _validate_limit(limit)
        terms = SEARCH_TERMS.get(category)
        if terms is None:
            msg = f"Unknown category '{category}'"
            raise ValidationError(msg)

        term = self.rng.choice(terms)
        logger.info(
            "Discovering products for '%s' using search '%s'",
            category,
            term,
        )
        try:
            products = await self._search(term, limit)
        except Exception as exc:
            logger.warning(
                "Scraping failed for '%s', using fallback: %s",
                category,
                exc,
                exc_info=True,
            )
            return get_fallback_products(category, limit)

        if not products:
            logger.info(
                "No products scraped for '%s', using fallback",
                category,
            )
            return get_fallback_products(category, limit)

        return [
            DiscoveredProduct(product=p, category=category)
            for p in products[:limit]
        ]

    async def discover_all(
        self, limit: int = 5,
    ) -> list[DiscoveredProduct]:
        """Spread *limit* across every category, one category at a time.

        Categories are scraped sequentially with a pacing pause between
        them; collection stops as soon as *limit* products are in hand.
        """
        _validate_limit(limit)
        ids = category_ids()
        per_category = max(1, math.ceil(limit / len(ids)))
        found: list[DiscoveredProduct] = []

        for index, category in enumerate(ids):
            try:
                found.extend(
                    await self.discover(category, per_category)
                )
            except Exception as exc:
                logger.error(
                    "Skipping category '%s': %s",
                    category,
                    exc,
                    exc_info=True,
                )
                continue

            if len(found) >= limit:
                break
            if index < len(ids) - 1:
                await asyncio.sleep(self.settings.CATEGORY_PACING)

        return found[:limit]

    async def discover_hot_deals(
        self, limit: int = 5,
    ) -> list[DiscoveredProduct]:
        """Discover trending deals, falling back to a category mix."""
        _validate_limit(limit)
        term = self.rng.choice(DEAL_SEARCH_TERMS)
        logger.info("Discovering hot deals using '%s'", term)
        try:
            products = await self._search(term, limit)
        except Exception as exc:
            logger.warning(
                "Hot deals scraping failed, using mixed fallback: %s",
                exc,
                exc_info=True,
            )
            return self._mixed_fallback(limit)

        if not products:
            logger.info("No deals scraped, using mixed fallback")
            return self._mixed_fallback(limit)

        return [
            DiscoveredProduct(product=p, category=DEALS_TAG)
            for p in products[:limit]
        ]

    async def discover_for(
        self, category: str, limit: int = 5,
    ) -> list[DiscoveredProduct]:
        """Route a category selector to the matching discovery mode."""
        if category == ALL_CATEGORIES:
            return await self.discover_all(limit)
        if category == HOT_DEALS:
            return await self.discover_hot_deals(limit)
        return await self.discover(category, limit)
