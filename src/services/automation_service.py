# src/services/automation_service.py

"""Request-level flow: quota check, discovery, rendering, persistence, export."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.errors import (
    AuthenticationError,
    NotFoundError,
    ValidationError,
)
from src.integrations.sheets import SheetsClient
from src.models.automation import AutomationRecord, User
from src.models.product import DiscoveredProduct, ProductRecord
from src.services.catalog import is_known_category
from src.services.discovery import DiscoveryOrchestrator
from src.services.message_templater import MessageTemplater, affiliate_url
from src.services.quota_gate import QuotaGate
from src.storage.memory_store import MemoryStore

logger = logging.getLogger("affiliate_bot.service")

SHEETS_URL = "https://docs.google.com/spreadsheets/d/{}"


def spreadsheet_url(spreadsheet_id: str | None) -> str | None:
    return SHEETS_URL.format(spreadsheet_id) if spreadsheet_id else None


@dataclass
class RenderedProduct:
    """A discovered product with both posts and its stored record id."""

    product: DiscoveredProduct
    whatsapp_message: str
    telegram_message: str
    automation_id: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "whatsappMessage": self.whatsapp_message,
            "telegramMessage": self.telegram_message,
            "automationId": self.automation_id,
        }


@dataclass
class DiscoveryOutcome:
    """Everything a discovery request produced."""

    results: list[RenderedProduct] = field(
        default_factory=lambda: list[RenderedProduct]()
    )
    spreadsheet_id: str | None = None
    used: int = 0
    remaining: int = -1  # -1 means unlimited (owner)

    @property
    def count(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "count": self.count,
            "results": [r.to_dict() for r in self.results],
            "spreadsheetId": self.spreadsheet_id,
            "spreadsheetUrl": spreadsheet_url(self.spreadsheet_id),
            "dailyCount": self.used,
            "remaining": self.remaining,
        }


def _validate_tag(affiliate_tag: str) -> str:
    tag = affiliate_tag.strip() if affiliate_tag else ""
    if not tag:
        msg = "affiliateTag must be a non-empty string"
        raise ValidationError(msg)
    return tag


class AutomationService:
    """Coordinates the collaborators behind each inbound request."""

    def __init__(
        self,
        store: MemoryStore,
        orchestrator: DiscoveryOrchestrator | None = None,
        templater: MessageTemplater | None = None,
        quota_gate: QuotaGate | None = None,
        sheets: SheetsClient | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.orchestrator = orchestrator or DiscoveryOrchestrator()
        self.templater = templater or MessageTemplater()
        self.quota_gate = quota_gate or QuotaGate(store)
        self.sheets = sheets or SheetsClient()
        self._clock = clock

    # ── Private helpers ──────────────────────────────────

    def require_user(self, user_id: str | None) -> User:
        """Resolve the caller or raise AuthenticationError."""
        if not user_id:
            msg = "Unauthorized"
            raise AuthenticationError(msg)
        user = self.store.get_user(user_id)
        if user is None:
            msg = "Unauthorized: unknown user"
            raise AuthenticationError(msg)
        return user

    def _sheet_row(
        self,
        product: ProductRecord,
        whatsapp: str,
        telegram: str,
        affiliate_tag: str,
    ) -> list[str]:
        return [
            self._clock().isoformat(),
            product.title,
            product.price,
            f"{product.rating:g}/5 ({product.reviews} reviews)",
            affiliate_url(product.url, affiliate_tag),
            whatsapp,
            telegram,
            affiliate_tag,
        ]

    async def _export(
        self, spreadsheet_id: str | None, row: list[str],
    ) -> None:
        """Append a row to the user's sheet; failures are only logged."""
        if not spreadsheet_id:
            return
        try:
            await asyncio.to_thread(
                self.sheets.append_row, spreadsheet_id, row
            )
        except Exception as exc:
            logger.error(
                "Sheets export failed for '%s': %s",
                row[1],
                exc,
                exc_info=True,
            )

    def _persist(
        self,
        user: User,
        product: ProductRecord,
        whatsapp: str,
        telegram: str,
        affiliate_tag: str,
        spreadsheet_id: str | None,
        product_url: str | None = None,
    ) -> AutomationRecord:
        return self.store.create_automation(
            user_id=user.id,
            product_url=product_url or product.url,
            product_title=product.title,
            price=product.price,
            rating=f"{product.rating:g}/5",
            whatsapp_message=whatsapp,
            telegram_message=telegram,
            affiliate_tag=affiliate_tag,
            spreadsheet_id=spreadsheet_id,
        )

    def _usage(self, user: User) -> tuple[int, int]:
        """(used, remaining) after a request; owners report (0, -1)."""
        if self.quota_gate.is_owner(user):
            return 0, -1
        used = self.quota_gate.used(user.id)
        return used, self.quota_gate.limit - used

    # ── Public operations ────────────────────────────────

    async def run_discovery(
        self,
        user_id: str | None,
        category: str,
        affiliate_tag: str,
        limit: int = 5,
    ) -> DiscoveryOutcome:
        """Discover, render, store and export up to *limit* products."""
        tag = _validate_tag(affiliate_tag)
        if limit < 1:
            msg = "limit must be a positive integer"
            raise ValidationError(msg)
        if not is_known_category(category):
            msg = f"Unknown category '{category}'"
            raise ValidationError(msg)

        user = self.require_user(user_id)
        self.quota_gate.check(user, limit)

        products = await self.orchestrator.discover_for(category, limit)
        if not products:
            msg = (
                "No products found for this category. "
                "Amazon may be rate limiting requests."
            )
            raise NotFoundError(msg)

        outcome = DiscoveryOutcome(spreadsheet_id=user.spreadsheet_id)
        for found in products:
            record = found.product
            whatsapp = self.templater.render_whatsapp(record, tag)
            telegram = self.templater.render_telegram(record, tag)
            await self._export(
                outcome.spreadsheet_id,
                self._sheet_row(record, whatsapp, telegram, tag),
            )
            automation = self._persist(
                user, record, whatsapp, telegram, tag,
                outcome.spreadsheet_id,
            )
            outcome.results.append(
                RenderedProduct(
                    product=found,
                    whatsapp_message=whatsapp,
                    telegram_message=telegram,
                    automation_id=automation.id,
                )
            )

        outcome.used, outcome.remaining = self._usage(user)
        logger.info(
            "User %s discovered %d products in '%s'",
            user.id,
            outcome.count,
            category,
        )
        return outcome

    async def automate_url(
        self,
        user_id: str | None,
        url: str,
        affiliate_tag: str,
        spreadsheet_id: str | None = None,
    ) -> tuple[ProductRecord, AutomationRecord]:
        """Scrape one product URL and process it like a discovery result."""
        tag = _validate_tag(affiliate_tag)
        user = self.require_user(user_id)
        self.quota_gate.check(user, 1)

        product = await self.orchestrator.scrape_product(url)
        whatsapp = self.templater.render_whatsapp(product, tag)
        telegram = self.templater.render_telegram(product, tag)

        sheet_id = spreadsheet_id or user.spreadsheet_id
        if not sheet_id and self.sheets.configured:
            sheet_id = await self.connect_sheet(user.id, quiet=True)

        await self._export(
            sheet_id, self._sheet_row(product, whatsapp, telegram, tag)
        )
        automation = self._persist(
            user, product, whatsapp, telegram, tag, sheet_id,
            product_url=url,
        )
        return product, automation

    async def connect_sheet(
        self, user_id: str, quiet: bool = False,
    ) -> str | None:
        """Create a spreadsheet for the user and remember its id.

        With *quiet* a Sheets failure is logged and ``None`` returned.
        """
        user = self.require_user(user_id)
        title = f"Affiliate Bot - {user.username}"
        try:
            sheet_id = await asyncio.to_thread(
                self.sheets.create_spreadsheet, title
            )
        except Exception as exc:
            if not quiet:
                raise
            logger.error(
                "Could not create spreadsheet for %s: %s",
                user.id,
                exc,
                exc_info=True,
            )
            return None
        self.store.update_user(user.id, spreadsheet_id=sheet_id)
        return sheet_id

    def quota_status(self, user_id: str | None) -> dict[str, Any]:
        """Usage summary for the status and listing endpoints."""
        user = self.require_user(user_id)
        owner = self.quota_gate.is_owner(user)
        used = self.quota_gate.used(user.id)
        return {
            "isPaid": user.is_paid,
            "isOwner": owner,
            "dailyCount": used,
            "dailyLimit": self.quota_gate.limit,
            "window": self.quota_gate.window.value,
            "remaining": -1 if owner else self.quota_gate.limit - used,
        }
