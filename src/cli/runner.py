# src/cli/runner.py

"""Headless CLI runner: discovery, single-product scrape and health check."""

import json
import logging
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from src.errors import AffiliateBotError
from src.models.product import DiscoveredProduct, ProductRecord
from src.services.catalog import is_known_category
from src.services.discovery import DiscoveryOrchestrator
from src.services.message_templater import MessageTemplater

logger = logging.getLogger("affiliate_bot.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _render(
    templater: MessageTemplater,
    product: ProductRecord,
    affiliate_tag: str,
) -> dict[str, str]:
    return {
        "whatsappMessage": templater.render_whatsapp(product, affiliate_tag),
        "telegramMessage": templater.render_telegram(product, affiliate_tag),
    }


def _print_table(products: list[DiscoveredProduct]) -> None:
    """Render a Rich table of discovered products to stdout."""
    table = Table(
        title="Discovered Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Discount", justify="right", style="yellow")
    table.add_column("Rating", justify="center")
    table.add_column("Category", style="magenta")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, found in enumerate(products, 1):
        p = found.product
        table.add_row(
            str(idx),
            p.title[:60],
            p.price,
            p.discount or "—",
            f"{p.rating:g}" if p.rating > 0 else "—",
            found.category,
            p.url,
        )

    Console().print(table)


def _dump_json(data: Any) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


async def cli_discover(
    category: str,
    affiliate_tag: str,
    limit: int,
    output_format: str,
) -> int:
    """Run a headless discovery and return an exit code (0=ok, 1=fail)."""
    if not is_known_category(category):
        _err.print(f"[red]Unknown category: {category}[/red]")
        return 1

    orchestrator = DiscoveryOrchestrator()
    templater = MessageTemplater()

    _err.print(
        f"[bold]Discovering:[/bold] {category}  [dim]limit={limit}[/dim]"
    )
    try:
        products = await orchestrator.discover_for(category, limit)
    except AffiliateBotError as exc:
        _err.print(f"[red]Error: {exc}[/red]")
        return 1

    if not products:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    _err.print(f"[green]✓ {len(products)} products[/green]")

    if output_format == "table":
        _print_table(products)
    else:
        _dump_json(
            [
                {
                    "product": found.to_dict(),
                    **_render(templater, found.product, affiliate_tag),
                }
                for found in products
            ]
        )
    return 0


async def cli_product(url: str, affiliate_tag: str) -> int:
    """Scrape one product URL and print both posts as JSON."""
    orchestrator = DiscoveryOrchestrator()
    templater = MessageTemplater()
    try:
        product = await orchestrator.scrape_product(url)
    except AffiliateBotError as exc:
        logger.error("Product scrape failed: %s", exc, exc_info=True)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1

    _dump_json(
        {"product": product.to_dict(), **_render(templater, product, affiliate_tag)}
    )
    return 0


async def run_health_check() -> int:
    """Run the Amazon India connectivity check."""
    from src.services.health_checker import check_amazon

    _err.print("[bold]Running scraper health check...[/bold]")
    r = await check_amazon()

    table = Table(
        title="Source Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Source", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    if r.status == "ok":
        status = "[green]✅ OK[/green]"
    elif r.status == "slow":
        status = "[yellow]⚠️  SLOW[/yellow]"
    elif r.status == "blocked":
        status = "[red]🚫 BLOCKED[/red]"
    else:
        status = "[red]❌ DOWN[/red]"

    latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
    table.add_row(r.source_id, status, latency, r.message)

    Console().print(table)
    return 0 if r.status in ("ok", "slow") else 1
