# src/models/automation.py

"""User and automation records held by the in-memory store."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class User:
    """An account that runs discoveries."""

    id: str
    username: str
    email: str | None
    created_at: datetime
    spreadsheet_id: str | None = None
    is_paid: bool = False
    subscription_ends_at: datetime | None = None
    reset_token: str | None = None
    reset_token_expiry: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Public view of the user (no reset token)."""
        return {
            "userId": self.id,
            "username": self.username,
            "email": self.email,
            "spreadsheetId": self.spreadsheet_id,
            "isPaid": self.is_paid,
            "subscriptionEndsAt": (
                self.subscription_ends_at.isoformat()
                if self.subscription_ends_at
                else None
            ),
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class AutomationRecord:
    """One processed product: rendered messages plus where they went.

    Append-only; ``created_at`` is what the quota gate buckets on.
    """

    id: int
    user_id: str
    product_url: str
    product_title: str
    price: str
    rating: str
    whatsapp_message: str
    telegram_message: str
    affiliate_tag: str
    created_at: datetime
    spreadsheet_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON shape returned by the API."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "productUrl": self.product_url,
            "productTitle": self.product_title,
            "price": self.price,
            "rating": self.rating,
            "whatsappMessage": self.whatsapp_message,
            "telegramMessage": self.telegram_message,
            "affiliateTag": self.affiliate_tag,
            "spreadsheetId": self.spreadsheet_id,
            "createdAt": self.created_at.isoformat(),
        }
