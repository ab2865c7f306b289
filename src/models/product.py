# src/models/product.py

"""Product data models for inter-module data flow."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProductRecord:
    """A single Amazon India listing, scraped or taken from fallback data."""

    title: str
    price: str
    original_price: str = ""
    discount: str = ""
    rating: float = 0.0
    reviews: int = 0
    image_url: str = ""
    features: tuple[str, ...] = field(default_factory=tuple)
    url: str = ""
    asin: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON shape returned by the API."""
        return {
            "title": self.title,
            "price": self.price,
            "originalPrice": self.original_price,
            "discount": self.discount,
            "rating": self.rating,
            "reviews": self.reviews,
            "image": self.image_url,
            "features": list(self.features),
            "url": self.url,
            "asin": self.asin,
        }


@dataclass(frozen=True)
class DiscoveredProduct:
    """A product found by discovery, tagged with the category it came from."""

    product: ProductRecord
    category: str

    def to_dict(self) -> dict[str, Any]:
        """Serialise the product with its category tag."""
        data = self.product.to_dict()
        data["category"] = self.category
        return data
