# tests/test_base_scraper.py

"""Tests for BaseScraper fetching: pacing, retries, block detection."""

import random
import unittest
from unittest.mock import MagicMock, call, patch

from src.config.settings import Settings
from src.errors import BlockedError, NetworkError
from src.models.product import ProductRecord
from src.scrapers.base_scraper import BaseScraper

URL = "https://example.com/page"


class _StubScraper(BaseScraper):
    """Concrete scraper exposing protected members for testing."""

    def _get_homepage(self) -> str:
        return "https://example.com/"

    def search(self, query: str, limit: int) -> list[ProductRecord]:
        return []

    def build_headers(self) -> dict[str, str]:
        """Public wrapper for _build_headers."""
        return self._build_headers()


def _response(status: int = 200, text: str = "<html>ok</html>") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    return resp


@patch("src.scrapers.base_scraper.curl_requests.Session")
class TestFetchRetries(unittest.TestCase):
    """Linear pacing before each attempt and backoff after failures."""

    def test_success_first_attempt(self, mock_session_cls: MagicMock) -> None:
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.return_value = _response(text="<p>page</p>")

        scraper = _StubScraper("test")
        with patch("src.scrapers.base_scraper.time.sleep") as mock_sleep:
            body = scraper.fetch(URL)

        self.assertEqual(body, "<p>page</p>")
        mock_sleep.assert_called_once_with(1.0)
        self.assertEqual(mock_session.get.call_count, 1)

    def test_two_failures_then_success(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Pre-request waits 1, 2, 3 and backoff waits 2, 4 seconds."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.side_effect = [
            ConnectionError("reset by peer"),
            ConnectionError("reset by peer"),
            _response(text="<p>third time</p>"),
        ]

        scraper = _StubScraper("test")
        with patch("src.scrapers.base_scraper.time.sleep") as mock_sleep:
            body = scraper.fetch(URL)

        self.assertEqual(body, "<p>third time</p>")
        self.assertEqual(
            mock_sleep.call_args_list,
            [call(1.0), call(2.0), call(2.0), call(4.0), call(3.0)],
        )

    def test_three_failures_raise_last_error(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """No backoff after the final attempt; its error is surfaced."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        last = TimeoutError("third timeout")
        mock_session.get.side_effect = [
            TimeoutError("first timeout"),
            TimeoutError("second timeout"),
            last,
        ]

        scraper = _StubScraper("test")
        with patch("src.scrapers.base_scraper.time.sleep") as mock_sleep:
            with self.assertRaises(NetworkError) as ctx:
                scraper.fetch(URL)

        self.assertIn("third timeout", str(ctx.exception))
        self.assertIs(ctx.exception.__cause__, last)
        self.assertEqual(mock_session.get.call_count, 3)
        self.assertEqual(
            mock_sleep.call_args_list,
            [call(1.0), call(2.0), call(2.0), call(4.0), call(3.0)],
        )

    def test_http_error_status_retried(
        self, mock_session_cls: MagicMock,
    ) -> None:
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.side_effect = [
            _response(status=503),
            _response(text="<p>recovered</p>"),
        ]

        scraper = _StubScraper("test")
        self.assertEqual(scraper.fetch(URL), "<p>recovered</p>")
        self.assertEqual(mock_session.get.call_count, 2)

    def test_http_error_on_every_attempt(
        self, mock_session_cls: MagicMock,
    ) -> None:
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.return_value = _response(status=500)

        scraper = _StubScraper("test")
        with self.assertRaises(NetworkError) as ctx:
            scraper.fetch(URL)
        self.assertIn("HTTP 500", str(ctx.exception))

    def test_request_options(self, mock_session_cls: MagicMock) -> None:
        """Timeout and redirect following are passed to the session."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.return_value = _response()

        scraper = _StubScraper("test")
        scraper.fetch(URL)

        kwargs = mock_session.get.call_args.kwargs
        self.assertEqual(kwargs["timeout"], Settings.REQUEST_TIMEOUT)
        self.assertTrue(kwargs["allow_redirects"])
        mock_session_cls.assert_called_once_with(
            impersonate=Settings.IMPERSONATE_BROWSER,
            max_redirects=Settings.MAX_REDIRECTS,
        )


@patch("src.scrapers.base_scraper.curl_requests.Session")
class TestBlockDetection(unittest.TestCase):
    """Anti-bot pages are treated as failed attempts."""

    def test_captcha_page_retried(self, mock_session_cls: MagicMock) -> None:
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.side_effect = [
            _response(text="<html>Enter the characters you see below</html>"),
            _response(text="<html>real page</html>"),
        ]

        scraper = _StubScraper("test")
        self.assertEqual(scraper.fetch(URL), "<html>real page</html>")

    def test_blocked_on_every_attempt(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Detection is case-insensitive and ends in BlockedError."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.return_value = _response(
            text="<title>Amazon.in</title><h4>ROBOT CHECK</h4>"
        )

        scraper = _StubScraper("test")
        with self.assertRaises(BlockedError) as ctx:
            scraper.fetch(URL)
        self.assertIn("robot check", str(ctx.exception))
        self.assertEqual(
            mock_session.get.call_count, Settings.MAX_RETRIES
        )


@patch("src.scrapers.base_scraper.curl_requests.Session")
class TestHeaders(unittest.TestCase):
    """Browser-like headers with a rotated user agent."""

    def test_user_agent_drawn_from_pool(
        self, mock_session_cls: MagicMock,
    ) -> None:
        scraper = _StubScraper("test", rng=random.Random(7))
        seen = {scraper.build_headers()["User-Agent"] for _ in range(30)}
        self.assertTrue(seen <= set(Settings.USER_AGENTS))
        self.assertGreater(len(seen), 1)

    def test_referer_and_language(self, mock_session_cls: MagicMock) -> None:
        scraper = _StubScraper("test")
        headers = scraper.build_headers()
        self.assertEqual(headers["Referer"], "https://example.com/")
        self.assertIn("en-IN", headers["Accept-Language"])


class TestSessionBackend(unittest.TestCase):
    """HTTP_BACKEND selects the session implementation."""

    @patch("src.scrapers.base_scraper.cloudscraper")
    def test_cloudscraper_backend(self, mock_cloudscraper: MagicMock) -> None:
        session = MagicMock()
        mock_cloudscraper.create_scraper.return_value = session
        with patch.object(Settings, "HTTP_BACKEND", "cloudscraper"):
            scraper = _StubScraper("test")
        self.assertIs(scraper.session, session)
        self.assertEqual(session.max_redirects, Settings.MAX_REDIRECTS)


class TestExtractPrice(unittest.TestCase):
    """Numeric extraction from rupee strings."""

    def test_grouped_rupees(self) -> None:
        self.assertEqual(BaseScraper.extract_price("₹1,299.00"), 1299.0)

    def test_indian_grouping(self) -> None:
        self.assertEqual(BaseScraper.extract_price("₹1,24,999"), 124999.0)

    def test_empty_and_none(self) -> None:
        self.assertEqual(BaseScraper.extract_price(""), 0.0)
        self.assertEqual(BaseScraper.extract_price(None), 0.0)

    def test_no_digits(self) -> None:
        self.assertEqual(BaseScraper.extract_price("Currently unavailable"), 0.0)


if __name__ == "__main__":
    unittest.main()
