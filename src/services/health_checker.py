# src/services/health_checker.py

"""Amazon India connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass

from src.scrapers.amazon_scraper import AmazonScraper

logger = logging.getLogger("affiliate_bot.health")

_HEALTH_TIMEOUT = 10  # seconds
_SLOW_MS = 5000


@dataclass
class HealthResult:
    """Result of a single connectivity probe."""

    source_id: str
    status: str  # "ok", "slow", "blocked", "down"
    latency_ms: float
    message: str


def probe_amazon(scraper: AmazonScraper | None = None) -> HealthResult:
    """Issue one unretried GET against the homepage and classify it."""
    try:
        scraper = scraper or AmazonScraper()
    except Exception as exc:
        return HealthResult(
            source_id="amazon_in",
            status="down",
            latency_ms=0.0,
            message=f"Failed to build scraper: {exc}",
        )

    start = time.monotonic()
    try:
        resp = scraper.session.get(
            scraper._get_homepage(),
            headers=scraper._build_headers(),
            timeout=_HEALTH_TIMEOUT,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code != 200:
            return HealthResult(
                source_id=scraper.source_name,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        lower = str(resp.text).lower()
        hit = next(
            (i for i in scraper.settings.BLOCK_INDICATORS if i in lower),
            None,
        )
        if hit:
            return HealthResult(
                source_id=scraper.source_name,
                status="blocked",
                latency_ms=elapsed_ms,
                message=f"Block indicator '{hit}'",
            )

        if elapsed_ms > _SLOW_MS:
            return HealthResult(
                source_id=scraper.source_name,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )

        return HealthResult(
            source_id=scraper.source_name,
            status="ok",
            latency_ms=elapsed_ms,
            message="",
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            source_id=scraper.source_name,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )


async def check_amazon() -> HealthResult:
    """Run the probe off the event loop and log the outcome."""
    result = await asyncio.to_thread(probe_amazon)
    logger.info(
        "Health check %s: %s (%.0fms) %s",
        result.source_id,
        result.status,
        result.latency_ms,
        result.message,
    )
    return result
