# src/integrations/payments.py

"""Stubbed payment gateway: mock orders, verification marks users paid."""

import logging
import time
from datetime import datetime, timedelta

from src.config.settings import Settings
from src.models.automation import User
from src.storage.memory_store import MemoryStore

logger = logging.getLogger("affiliate_bot.payments")


class PaymentGateway:
    """Stand-in for the real order API; no money moves here."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store
        self.settings = Settings()

    def create_order(self, user_id: str, amount: int) -> dict[str, object]:
        order_id = f"order_{int(time.time() * 1000)}"
        logger.info(
            "Created mock order %s for user %s (%d)",
            order_id,
            user_id,
            amount,
        )
        return {
            "orderId": order_id,
            "razorpayKey": self.settings.RAZORPAY_KEY_ID,
            "amount": amount,
        }

    def verify(self, user_id: str) -> User:
        """Activate a subscription for the configured number of days."""
        ends_at = datetime.now() + timedelta(
            days=self.settings.SUBSCRIPTION_DAYS
        )
        user = self.store.update_user(
            user_id, is_paid=True, subscription_ends_at=ends_at
        )
        logger.info("User %s marked paid until %s", user_id, ends_at)
        return user
