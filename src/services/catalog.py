# src/services/catalog.py

"""Known discovery categories, their search phrases and fallback products."""

from src.models.product import DiscoveredProduct, ProductRecord

ALL_CATEGORIES = "all"
HOT_DEALS = "hot"
DEALS_TAG = "deals"

CATEGORIES: list[dict[str, str]] = [
    {"id": "electronics", "name": "Electronics", "icon": "📱", "description": "Gadgets & Audio"},
    {"id": "mobile", "name": "Mobiles", "icon": "📲", "description": "Smartphones"},
    {"id": "home", "name": "Home", "icon": "🏠", "description": "Appliances"},
    {"id": "fashion", "name": "Fashion", "icon": "👗", "description": "Clothing & Shoes"},
    {"id": "beauty", "name": "Beauty", "icon": "💄", "description": "Skincare"},
    {"id": "fitness", "name": "Fitness", "icon": "💪", "description": "Sports & Health"},
    {"id": "kitchen", "name": "Kitchen", "icon": "🍳", "description": "Cookware"},
]

SEARCH_TERMS: dict[str, list[str]] = {
    "electronics": [
        "wireless earbuds",
        "smartwatch under 2000",
        "power bank 20000mah",
        "bluetooth speaker",
        "headphones",
    ],
    "mobile": [
        "smartphone under 15000",
        "mobile 5G phone",
        "redmi phone",
        "samsung phone",
        "realme phone",
    ],
    "home": [
        "air purifier",
        "water purifier",
        "mixer grinder",
        "vacuum cleaner",
        "ceiling fan",
    ],
    "fashion": [
        "men casual shoes",
        "women handbag",
        "men wallet leather",
        "women kurta set",
        "sports shoes men",
    ],
    "beauty": [
        "face serum vitamin c",
        "hair dryer",
        "trimmer for men",
        "sunscreen",
        "lipstick",
    ],
    "fitness": [
        "yoga mat",
        "dumbbells",
        "resistance band",
        "protein powder",
        "gym gloves",
    ],
    "kitchen": [
        "non stick pan",
        "pressure cooker",
        "lunch box steel",
        "water bottle",
        "knife set",
    ],
}

DEAL_SEARCH_TERMS: list[str] = [
    "deals today",
    "best sellers",
    "trending products",
    "lightning deals",
]


def _canned(
    asin: str,
    title: str,
    price: str,
    original_price: str,
    discount: str,
    rating: float,
    reviews: int,
    features: list[str],
) -> ProductRecord:
    return ProductRecord(
        title=title,
        price=price,
        original_price=original_price,
        discount=discount,
        rating=rating,
        reviews=reviews,
        features=tuple(features),
        url=f"https://www.amazon.in/dp/{asin}",
        asin=asin,
    )


FALLBACK_PRODUCTS: dict[str, list[ProductRecord]] = {
    "electronics": [
        _canned(
            "B0BDHWDR12",
            "boAt Airdopes 141 Bluetooth Truly Wireless in Ear Earbuds with 42H Playtime",
            "₹1,299", "₹4,490", "71% OFF", 4.1, 245678,
            ["42 hours total playback", "BEAST Mode for gaming", "IPX4 water resistance", "IWP technology"],
        ),
        _canned(
            "B09G9FPHY6",
            'Noise ColorFit Pulse Grand Smart Watch with 1.69" HD Display',
            "₹1,499", "₹4,999", "70% OFF", 4.0, 89234,
            ['1.69" HD display', "150+ watch faces", "24/7 heart rate monitoring", "SpO2 monitoring"],
        ),
    ],
    "mobile": [
        _canned(
            "B0CHX1W1XY",
            "Redmi 13C 5G (Starshine Green, 4GB RAM, 128GB Storage)",
            "₹10,999", "₹14,999", "27% OFF", 4.2, 34567,
            ["MediaTek Dimensity 6100+", "50MP AI Dual Camera", "5000mAh Battery", "90Hz Display"],
        ),
    ],
    "home": [
        _canned(
            "B08R68T5RG",
            "Philips Air Purifier AC0819/20, Removes 99.5% Particles",
            "₹6,999", "₹9,995", "30% OFF", 4.3, 12890,
            ["Removes 99.5% particles", "HEPA filter", "Smart air sensor", "Quiet operation"],
        ),
    ],
    "fashion": [
        _canned(
            "B07FJ5YL8Q",
            "Campus Men's Oxyfit Running Shoes",
            "₹649", "₹1,499", "57% OFF", 4.0, 45678,
            ["Lightweight", "Memory foam insole", "Anti-skid sole", "Breathable mesh"],
        ),
    ],
    "beauty": [
        _canned(
            "B0845XSLTV",
            "Mamaearth Vitamin C Face Wash with Vitamin C and Turmeric, 100ml",
            "₹199", "₹349", "43% OFF", 4.1, 156789,
            ["With Vitamin C & Turmeric", "Cleanses skin impurities", "Made Safe certified", "Paraben free"],
        ),
    ],
    "fitness": [
        _canned(
            "B0B7QWFBVH",
            "Boldfit Yoga Mat for Women and Men, 6mm Extra Thick",
            "₹299", "₹999", "70% OFF", 4.2, 23456,
            ["6mm thick for comfort", "Anti-slip surface", "Lightweight & portable", "Easy to clean"],
        ),
    ],
    "kitchen": [
        _canned(
            "B09JQMJHXY",
            "Prestige Omega Deluxe Induction Base Non-Stick Kitchen Set, 3 Pcs",
            "₹1,149", "₹2,795", "59% OFF", 4.3, 34567,
            ["Induction base", "Non-stick coating", "Cool touch handles", "Dishwasher safe"],
        ),
    ],
}


def category_ids() -> list[str]:
    """Ids of every concrete (non-synthetic) category, in display order."""
    return [c["id"] for c in CATEGORIES]


def is_known_category(category: str) -> bool:
    """True for concrete categories and the 'all' / 'hot' selectors."""
    return category in SEARCH_TERMS or category in (ALL_CATEGORIES, HOT_DEALS)


def get_fallback_products(
    category: str, limit: int,
) -> list[DiscoveredProduct]:
    """Up to *limit* canned products, tagged with *category*."""
    return [
        DiscoveredProduct(product=p, category=category)
        for p in FALLBACK_PRODUCTS.get(category, [])[:limit]
    ]
