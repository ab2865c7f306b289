# src/services/message_templater.py

"""Renders WhatsApp and Telegram promo posts for a product."""

import logging
import random
from urllib.parse import quote

from src.errors import ValidationError
from src.models.product import ProductRecord

logger = logging.getLogger("affiliate_bot.templater")

HOOKS: list[str] = [
    "🔥 LOOT DEAL ALERT",
    "😱 PRICE CRASH",
    "⚡ FLASH SALE LIVE",
    "🎯 TRENDING NOW",
    "💎 BESTSELLER ALERT",
    "🚨 LAST FEW LEFT",
    "🔥 MEGA DISCOUNT",
    "💰 UNBELIEVABLE PRICE",
    "⏰ LIMITED TIME OFFER",
    "🛒 MUST GRAB DEAL",
]

CLOSINGS: list[str] = [
    "⚠️ Limited stock - Jaldi grab karo!",
    "⏰ Offer jaldi khatam ho jayega!",
    "🏃‍♂️ Miss mat karo ye deal!",
    "💨 Fast selling - Hurry up!",
    "⚡ Don't miss this deal!",
    "🔥 Selling out fast!",
    "⭐ Top rated product!",
]

WHATSAPP_HASHTAGS = "#AmazonIndia #Deals #Shopping #Loot"
TELEGRAM_HASHTAGS = "#Amazon #India #Deals #Shopping #OnlineShopping"

WHATSAPP_TITLE_MAX = 80
WHATSAPP_FEATURES = 3
WHATSAPP_FEATURE_MAX = 60
TELEGRAM_FEATURES = 4
TELEGRAM_FEATURE_MAX = 70


def affiliate_url(url: str, affiliate_tag: str) -> str:
    """Append ``tag=<affiliate_tag>`` to *url* as a query parameter."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}tag={quote(affiliate_tag, safe='')}"


def format_rupees(price: str) -> str:
    """Prefix a rupee sign unless the price already carries one."""
    return price if "₹" in price else f"₹{price}"


def format_indian_number(value: int) -> str:
    """Group digits the Indian way: 245678 -> '2,45,678'."""
    digits = str(abs(value))
    if len(digits) > 3:
        rest, last = digits[:-3], digits[-3:]
        groups: list[str] = []
        while len(rest) > 2:
            groups.insert(0, rest[-2:])
            rest = rest[:-2]
        if rest:
            groups.insert(0, rest)
        digits = ",".join([*groups, last])
    return f"-{digits}" if value < 0 else digits


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def _rating_line(product: ProductRecord, label: str) -> str:
    line = f"⭐ {label} {product.rating:g}/5"
    if product.reviews > 0:
        line += f" ({format_indian_number(product.reviews)} reviews)"
    return line


class MessageTemplater:
    """Promo post renderer; only the hook and closing lines are random."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def _pick_phrases(self, affiliate_tag: str) -> tuple[str, str]:
        if not affiliate_tag or not affiliate_tag.strip():
            msg = "affiliate tag must be a non-empty string"
            raise ValidationError(msg)
        return self.rng.choice(HOOKS), self.rng.choice(CLOSINGS)

    def render_whatsapp(
        self, product: ProductRecord, affiliate_tag: str,
    ) -> str:
        """WhatsApp post: ``*bold*`` emphasis, ``~strike~`` MRP."""
        hook, closing = self._pick_phrases(affiliate_tag)
        title = _truncate(product.title, WHATSAPP_TITLE_MAX)

        message = f"{hook} 🔥\n\n*{title}*\n\n"
        if product.original_price and product.original_price != product.price:
            message += f"❌ ~MRP: {format_rupees(product.original_price)}~\n"
        message += f"✅ *Deal Price: {format_rupees(product.price)}*"
        if product.discount:
            message += f" ({product.discount})"
        message += "\n\n"

        if product.rating > 0:
            message += _rating_line(product, "*Rating:*") + "\n\n"

        if product.features:
            bullets = "\n".join(
                f"• {_truncate(f, WHATSAPP_FEATURE_MAX)}"
                for f in product.features[:WHATSAPP_FEATURES]
            )
            message += f"✨ *Features:*\n{bullets}\n\n"

        message += (
            f"🛒 *BUY NOW:*\n{affiliate_url(product.url, affiliate_tag)}"
            f"\n\n{closing}\n\n{WHATSAPP_HASHTAGS}"
        )
        logger.debug("Rendered WhatsApp post for %s", product.asin)
        return message

    def render_telegram(
        self, product: ProductRecord, affiliate_tag: str,
    ) -> str:
        """Telegram post: markdown ``**bold**``, ``~~strike~~`` and a link."""
        hook, closing = self._pick_phrases(affiliate_tag)

        message = f"{hook} 🚀\n\n**{product.title}**\n\n"
        if product.original_price and product.original_price != product.price:
            message += f"💸 ~~MRP: {format_rupees(product.original_price)}~~\n"
        message += f"💰 **Deal Price:** {format_rupees(product.price)}"
        if product.discount:
            message += f" 🏷️ {product.discount}"
        message += "\n\n"

        if product.rating > 0:
            message += _rating_line(product, "**Rating:**") + "\n\n"

        if product.features:
            bullets = "\n".join(
                f"🔹 {_truncate(f, TELEGRAM_FEATURE_MAX)}"
                for f in product.features[:TELEGRAM_FEATURES]
            )
            message += f"✨ **Key Features:**\n{bullets}\n\n"

        message += (
            "🛒 **ORDER NOW:** "
            f"[Click Here]({affiliate_url(product.url, affiliate_tag)})"
            f"\n\n{closing}\n\n{TELEGRAM_HASHTAGS}"
        )
        logger.debug("Rendered Telegram post for %s", product.asin)
        return message
