# src/services/quota_gate.py

"""Per-user product quota over a configurable time window."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from enum import Enum

from src.config.settings import Settings
from src.errors import QuotaExceededError
from src.models.automation import User
from src.storage.memory_store import MemoryStore

logger = logging.getLogger("affiliate_bot.quota")


class QuotaWindow(str, Enum):
    """How far back processed products count against the quota."""

    DAILY = "daily"    # since local midnight today
    WEEKLY = "weekly"  # rolling seven days


class QuotaGate:
    """Rejects requests that would push a user past the window limit.

    Owners, matched by email or username from the configured allow-lists,
    are never counted or rejected.
    """

    def __init__(
        self,
        store: MemoryStore,
        limit: int = Settings.QUOTA_LIMIT,
        window: QuotaWindow | str = Settings.QUOTA_WINDOW,
        owner_emails: list[str] | None = None,
        owner_usernames: list[str] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.limit = limit
        self.window = QuotaWindow(window)
        self.owner_emails = [
            e.lower()
            for e in (
                Settings.OWNER_EMAILS
                if owner_emails is None
                else owner_emails
            )
        ]
        self.owner_usernames = [
            u.lower()
            for u in (
                Settings.OWNER_USERNAMES
                if owner_usernames is None
                else owner_usernames
            )
        ]
        self._clock = clock

    def window_start(
        self, window: QuotaWindow | None = None,
    ) -> datetime:
        """Earliest ``created_at`` that still counts against the quota."""
        now = self._clock()
        if (window or self.window) is QuotaWindow.WEEKLY:
            return now - timedelta(days=7)
        return now.replace(hour=0, minute=0, second=0, microsecond=0)

    def used(
        self, user_id: str, window: QuotaWindow | None = None,
    ) -> int:
        """Products a user has processed inside the window."""
        return self.store.count_automations_since(
            user_id, self.window_start(window)
        )

    def remaining_quota(
        self, user_id: str, window: QuotaWindow | None = None,
    ) -> int:
        """``limit - used``; negative when a user is already over."""
        return self.limit - self.used(user_id, window)

    def is_owner(self, user: User) -> bool:
        """True when the user is on the owner allow-list."""
        if user.email and user.email.lower() in self.owner_emails:
            return True
        name = user.username.lower()
        return any(owner in name for owner in self.owner_usernames)

    def check(self, user: User, requested: int) -> int | None:
        """Admit a request for *requested* products or raise.

        Returns the remaining allowance before the request, or ``None``
        for owners, who bypass the gate.

        Raises:
            QuotaExceededError: when the window is already full or the
                request asks for more than what is left.
        """
        if self.is_owner(user):
            return None

        used = self.used(user.id)
        remaining = self.limit - used
        period = "today" if self.window is QuotaWindow.DAILY else "this week"

        if used >= self.limit:
            logger.warning(
                "Quota full for user %s (%d/%d)", user.id, used, self.limit
            )
            msg = (
                f"Limit of {self.limit} products reached {period}. "
                "Come back later!"
            )
            raise QuotaExceededError(msg, used=used, limit=self.limit)

        if requested > remaining:
            logger.warning(
                "User %s asked for %d products with %d left",
                user.id,
                requested,
                remaining,
            )
            msg = (
                f"You can only scrape {remaining} more products {period} "
                f"(limit: {self.limit})."
            )
            raise QuotaExceededError(msg, used=used, limit=self.limit)

        return remaining
