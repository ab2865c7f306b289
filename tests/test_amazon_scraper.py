# tests/test_amazon_scraper.py

"""Tests for the amazon.in product page and search result parser."""

import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from src.errors import ParseError, ValidationError
from src.scrapers.amazon_scraper import (
    AmazonScraper,
    compute_discount,
    extract_asin,
    parse_rating,
    parse_review_count,
)

FIXTURES = Path(__file__).parent / "fixtures"


def _load(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class TestExtractAsin(unittest.TestCase):
    """Product id extraction from the URL shapes Amazon hands out."""

    def test_dp_url(self) -> None:
        url = "https://www.amazon.in/boAt-Airdopes/dp/B0BDHWDR12/ref=sr_1_1?keywords=x"
        self.assertEqual(extract_asin(url), "B0BDHWDR12")

    def test_gp_product_url(self) -> None:
        url = "https://www.amazon.in/gp/product/B09G9FPHY6?th=1"
        self.assertEqual(extract_asin(url), "B09G9FPHY6")

    def test_mobile_url(self) -> None:
        self.assertEqual(
            extract_asin("https://www.amazon.in/gp/aw/d/B0CHX1W1XY"),
            "B0CHX1W1XY",
        )

    def test_query_param_lowercase(self) -> None:
        self.assertEqual(
            extract_asin("https://www.amazon.in/x?asin=b08r68t5rg"),
            "B08R68T5RG",
        )

    def test_no_asin(self) -> None:
        self.assertIsNone(extract_asin("https://www.amazon.in/s?k=earbuds"))


class TestParsingHelpers(unittest.TestCase):
    """Discount, rating and review-count helpers."""

    def test_discount_half(self) -> None:
        self.assertEqual(compute_discount(100.0, 200.0), "50% OFF")

    def test_discount_rounds_half_up(self) -> None:
        """62.5% rounds up to 63, not to the even neighbour."""
        self.assertEqual(compute_discount(375.0, 1000.0), "63% OFF")

    def test_no_discount_when_equal(self) -> None:
        self.assertEqual(compute_discount(499.0, 499.0), "")

    def test_no_discount_when_price_missing(self) -> None:
        self.assertEqual(compute_discount(0.0, 999.0), "")

    def test_no_discount_when_original_lower(self) -> None:
        self.assertEqual(compute_discount(999.0, 499.0), "")

    def test_rating(self) -> None:
        self.assertEqual(parse_rating("4.1 out of 5 stars"), 4.1)
        self.assertEqual(parse_rating(""), 0.0)

    def test_review_count(self) -> None:
        self.assertEqual(parse_review_count("2,45,678 ratings"), 245678)
        self.assertEqual(parse_review_count("no reviews"), 0)


@patch("src.scrapers.base_scraper.curl_requests.Session")
class TestExtractProduct(unittest.TestCase):
    """Product detail page extraction with selector fallbacks."""

    def test_full_page(self, mock_session_cls: MagicMock) -> None:
        scraper = AmazonScraper()
        p = scraper.extract_product(_load("amazon_in_product.html"), "B0BDHWDR12")

        self.assertEqual(
            p.title,
            "boAt Rockerz 450 Bluetooth On Ear Headphones with Mic, "
            "Upto 15 Hours Playback",
        )
        self.assertEqual(p.price, "₹1499.00")
        self.assertEqual(p.original_price, "₹3,990")
        self.assertEqual(p.discount, "62% OFF")
        self.assertEqual(p.rating, 4.1)
        self.assertEqual(p.reviews, 245678)
        self.assertEqual(
            p.image_url,
            "https://m.media-amazon.com/images/I/61u1VALn6JL._SL1500_.jpg",
        )
        self.assertEqual(p.url, "https://www.amazon.in/dp/B0BDHWDR12")
        self.assertEqual(p.asin, "B0BDHWDR12")

    def test_features_filtered_and_capped(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Short bullets and 'See more' links are skipped; at most five kept."""
        scraper = AmazonScraper()
        p = scraper.extract_product(_load("amazon_in_product.html"))
        self.assertEqual(len(p.features), 5)
        self.assertTrue(p.features[0].startswith("Playback"))
        self.assertTrue(p.features[-1].startswith("Controls"))
        self.assertNotIn("Ok", p.features)
        self.assertFalse(any("See more" in f for f in p.features))

    def test_alternate_price_selector(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Without the whole/fraction pair an alternate price block is used."""
        markup = (
            '<span id="productTitle">Prestige Iris 750 Watt Mixer Grinder</span>'
            '<span id="priceblock_ourprice">₹2,499.00</span>'
        )
        p = AmazonScraper().extract_product(markup)
        self.assertEqual(p.price, "₹2,499.00")
        self.assertEqual(p.original_price, "₹2,499.00")
        self.assertEqual(p.discount, "")

    def test_zero_price_when_nothing_matches(
        self, mock_session_cls: MagicMock,
    ) -> None:
        markup = '<span id="productTitle">Unavailable gadget listing</span>'
        p = AmazonScraper().extract_product(markup)
        self.assertEqual(p.price, "₹0")
        self.assertEqual(p.rating, 0.0)
        self.assertEqual(p.features, ())

    def test_title_fallback_selector(
        self, mock_session_cls: MagicMock,
    ) -> None:
        markup = (
            '<h1 class="a-size-large">Havells Ceiling Fan 1200mm</h1>'
            '<span class="a-price-whole">1,899</span>'
        )
        p = AmazonScraper().extract_product(markup)
        self.assertEqual(p.title, "Havells Ceiling Fan 1200mm")
        self.assertEqual(p.price, "₹1899")

    def test_discount_computed_without_savings_label(
        self, mock_session_cls: MagicMock,
    ) -> None:
        markup = (
            '<span id="productTitle">Yoga mat extra thick</span>'
            '<span class="a-price-whole">100</span>'
            '<span class="a-price a-text-price">'
            '<span class="a-offscreen">₹200</span></span>'
        )
        p = AmazonScraper().extract_product(markup)
        self.assertEqual(p.discount, "50% OFF")

    def test_missing_title_raises(self, mock_session_cls: MagicMock) -> None:
        with self.assertRaises(ParseError):
            AmazonScraper().extract_product(
                '<span class="a-price-whole">999</span>'
            )


@patch("src.scrapers.base_scraper.curl_requests.Session")
class TestScrapeProduct(unittest.TestCase):
    """scrape_product normalises the URL before fetching."""

    def test_fetches_canonical_url(self, mock_session_cls: MagicMock) -> None:
        scraper = AmazonScraper()
        with patch.object(
            scraper, "fetch", return_value=_load("amazon_in_product.html"),
        ) as mock_fetch:
            p = scraper.scrape_product(
                "https://www.amazon.in/Rockerz-450/dp/B0BDHWDR12/ref=sr_1_3?th=1"
            )
        mock_fetch.assert_called_once_with("https://www.amazon.in/dp/B0BDHWDR12")
        self.assertEqual(p.asin, "B0BDHWDR12")

    def test_invalid_url(self, mock_session_cls: MagicMock) -> None:
        scraper = AmazonScraper()
        with patch.object(scraper, "fetch") as mock_fetch:
            with self.assertRaises(ValidationError):
                scraper.scrape_product("https://www.amazon.in/deals")
        mock_fetch.assert_not_called()

    def test_blocked_page_raises_parse_error(
        self, mock_session_cls: MagicMock,
    ) -> None:
        scraper = AmazonScraper()
        with patch.object(scraper, "fetch", return_value="<html></html>"):
            with self.assertRaises(ParseError):
                scraper.scrape_product("https://www.amazon.in/dp/B0BDHWDR12")


@patch("src.scrapers.base_scraper.curl_requests.Session")
class TestSearchResults(unittest.TestCase):
    """Search page parsing: skipping unusable containers and limits."""

    def test_skips_unusable_results(self, mock_session_cls: MagicMock) -> None:
        """Empty ASIN, short title and missing price are all skipped."""
        products = AmazonScraper().extract_search_results(
            _load("amazon_in_search.html"), limit=10
        )
        self.assertEqual(
            [p.asin for p in products],
            ["B0TEST0001", "B0TEST0004", "B0TEST0005"],
        )

    def test_result_fields(self, mock_session_cls: MagicMock) -> None:
        first, second, third = AmazonScraper().extract_search_results(
            _load("amazon_in_search.html"), limit=10
        )
        self.assertEqual(
            first.title,
            "Noise Buds VS104 Truly Wireless Earbuds with 45H Playtime",
        )
        self.assertEqual(first.price, "₹999")
        self.assertEqual(first.original_price, "₹2,999")
        self.assertEqual(first.discount, "67% OFF")
        self.assertEqual(first.rating, 4.0)
        self.assertEqual(first.reviews, 12345)
        self.assertEqual(first.url, "https://www.amazon.in/dp/B0TEST0001")
        self.assertEqual(
            first.image_url, "https://m.media-amazon.com/images/I/noise-buds.jpg"
        )

        # No strike-through price: original equals price, no discount
        self.assertEqual(second.price, "₹1299")
        self.assertEqual(second.original_price, "₹1299")
        self.assertEqual(second.discount, "")
        self.assertEqual(second.rating, 0.0)

        # Title found through the secondary selector
        self.assertTrue(third.title.startswith("realme Buds T300"))
        self.assertEqual(third.discount, "54% OFF")

    def test_limit_respected(self, mock_session_cls: MagicMock) -> None:
        products = AmazonScraper().extract_search_results(
            _load("amazon_in_search.html"), limit=2
        )
        self.assertEqual(len(products), 2)

    def test_search_builds_encoded_url(
        self, mock_session_cls: MagicMock,
    ) -> None:
        scraper = AmazonScraper()
        with patch.object(
            scraper, "fetch", return_value=_load("amazon_in_search.html"),
        ) as mock_fetch:
            products = scraper.search("wireless earbuds", 5)
        mock_fetch.assert_called_once_with(
            "https://www.amazon.in/s?k=wireless%20earbuds"
        )
        self.assertEqual(len(products), 3)

    def test_empty_page(self, mock_session_cls: MagicMock) -> None:
        products = AmazonScraper().extract_search_results(
            "<html><body>No results</body></html>", limit=5
        )
        self.assertEqual(products, [])


if __name__ == "__main__":
    unittest.main()
