# main.py

"""Entry point for the affiliate_bot service (API server or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings
from src.services.catalog import ALL_CATEGORIES, HOT_DEALS, category_ids

logger = logging.getLogger("affiliate_bot.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join([*category_ids(), ALL_CATEGORIES, HOT_DEALS])

    parser = argparse.ArgumentParser(
        prog="affiliate_bot",
        description="Amazon India affiliate post generator.",
        epilog=f"Available categories: {valid_ids}",
    )
    parser.add_argument(
        "category",
        nargs="?",
        default=None,
        help="Category to discover. Omit to start the HTTP API.",
    )
    parser.add_argument(
        "-t",
        "--tag",
        default=None,
        dest="affiliate_tag",
        help="Amazon affiliate tag appended to product links.",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=Settings.DEFAULT_DISCOVERY_LIMIT,
        help="Number of products to discover (default: 5).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-p",
        "--product",
        default=None,
        dest="product_url",
        help="Scrape a single Amazon product URL instead of discovering.",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check against Amazon India.",
    )
    return parser


def _run_server() -> None:
    """Serve the FastAPI application with uvicorn."""
    import uvicorn

    from src.api.app import create_app

    try:
        uvicorn.run(
            create_app(),
            host=Settings.API_HOST,
            port=Settings.API_PORT,
            log_config=None,
        )
    except Exception:
        logger.critical("Fatal error while serving API", exc_info=True)
        raise
    finally:
        logger.info("affiliate_bot API shutting down")


def _run_discover(args: argparse.Namespace) -> None:
    """Run headless discovery and exit."""
    from src.cli.runner import cli_discover

    exit_code = asyncio.run(
        cli_discover(
            category=args.category,
            affiliate_tag=args.affiliate_tag,
            limit=args.limit,
            output_format=args.output_format,
        )
    )
    sys.exit(exit_code)


def _run_product(args: argparse.Namespace) -> None:
    """Scrape a single product URL and exit."""
    from src.cli.runner import cli_product

    exit_code = asyncio.run(cli_product(args.product_url, args.affiliate_tag))
    sys.exit(exit_code)


def _run_health_check() -> None:
    """Run scraper connectivity health check."""
    from src.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the API server (no args) or a headless CLI action."""
    log_file = setup_logging()
    logger.info("affiliate_bot starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    needs_tag = args.product_url is not None or args.category is not None
    if needs_tag and not args.health and not args.affiliate_tag:
        parser.error("--tag is required for discovery and product scraping")

    if args.health:
        _run_health_check()
    elif args.product_url is not None:
        _run_product(args)
    elif args.category is None:
        _run_server()
    else:
        _run_discover(args)


if __name__ == "__main__":
    main()
