# src/storage/memory_store.py

"""Process-lifetime registry of users and automation records."""

import dataclasses
import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from src.errors import NotFoundError, ValidationError
from src.models.automation import AutomationRecord, User

logger = logging.getLogger("affiliate_bot.store")


class MemoryStore:
    """In-memory store for users and automations.

    Constructed explicitly and handed to whoever needs it, so tests get
    an isolated instance. Nothing survives a restart and automation
    records are never expired or compacted.
    """

    def __init__(
        self, clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._clock = clock
        self._users: dict[str, User] = {}
        self._automations: dict[int, AutomationRecord] = {}
        self._next_automation_id = 1

    # ── Users ────────────────────────────────────────────

    def create_user(
        self, username: str, email: str | None = None,
    ) -> User:
        """Register a user under a fresh UUID."""
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            created_at=self._clock(),
        )
        self._users[user.id] = user
        logger.info("Created user %s (%s)", user.id, username)
        return user

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return next(
            (u for u in self._users.values() if u.username == username),
            None,
        )

    def get_user_by_email(self, email: str) -> User | None:
        wanted = email.lower()
        return next(
            (
                u
                for u in self._users.values()
                if u.email and u.email.lower() == wanted
            ),
            None,
        )

    def update_user(self, user_id: str, **changes: Any) -> User:
        """Replace the given fields on a user and return the new record."""
        user = self._users.get(user_id)
        if user is None:
            msg = "User not found"
            raise NotFoundError(msg)
        updated = dataclasses.replace(user, **changes)
        self._users[user_id] = updated
        return updated

    def set_reset_token(
        self, user_id: str, token: str, expires_in: timedelta,
    ) -> User:
        """Store a password-reset code valid for *expires_in*."""
        return self.update_user(
            user_id,
            reset_token=token,
            reset_token_expiry=self._clock() + expires_in,
        )

    def get_user_by_reset_token(self, token: str) -> User | None:
        """Find the user holding an unexpired reset code."""
        now = self._clock()
        for user in self._users.values():
            if (
                user.reset_token == token
                and user.reset_token_expiry is not None
                and user.reset_token_expiry > now
            ):
                return user
        return None

    def consume_reset_token(self, token: str) -> User:
        """Redeem a reset code once, clearing it from the user."""
        user = self.get_user_by_reset_token(token)
        if user is None:
            msg = "Invalid or expired reset code"
            raise ValidationError(msg)
        return self.update_user(
            user.id, reset_token=None, reset_token_expiry=None
        )

    # ── Automations ──────────────────────────────────────

    def create_automation(
        self,
        user_id: str,
        product_url: str,
        product_title: str,
        price: str,
        rating: str,
        whatsapp_message: str,
        telegram_message: str,
        affiliate_tag: str,
        spreadsheet_id: str | None = None,
    ) -> AutomationRecord:
        """Append one automation record with the next id and a timestamp."""
        record = AutomationRecord(
            id=self._next_automation_id,
            user_id=user_id,
            product_url=product_url,
            product_title=product_title,
            price=price,
            rating=rating,
            whatsapp_message=whatsapp_message,
            telegram_message=telegram_message,
            affiliate_tag=affiliate_tag,
            spreadsheet_id=spreadsheet_id,
            created_at=self._clock(),
        )
        self._automations[record.id] = record
        self._next_automation_id += 1
        logger.debug(
            "Stored automation %d for user %s", record.id, user_id
        )
        return record

    def get_automation(self, automation_id: int) -> AutomationRecord | None:
        return self._automations.get(automation_id)

    def list_automations(
        self, user_id: str, limit: int = 50,
    ) -> list[AutomationRecord]:
        """A user's automations, newest first."""
        mine = [
            a for a in self._automations.values() if a.user_id == user_id
        ]
        mine.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        return mine[:limit]

    def count_automations_since(
        self, user_id: str, since: datetime,
    ) -> int:
        """Number of a user's automations created at or after *since*."""
        return sum(
            1
            for a in self._automations.values()
            if a.user_id == user_id and a.created_at >= since
        )
