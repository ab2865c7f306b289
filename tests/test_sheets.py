# tests/test_sheets.py

"""Tests for the Google Sheets REST client."""

import unittest
from unittest.mock import MagicMock

from src.config.settings import Settings
from src.errors import SheetsError
from src.integrations.sheets import SheetsClient

ROW = [
    "2026-03-10T11:45:00",
    "boAt Airdopes 141",
    "₹1,299",
    "4.1/5 (245678 reviews)",
    "https://www.amazon.in/dp/B0BDHWDR12?tag=mytag-21",
    "wa",
    "tg",
    "mytag-21",
]


def _response(status: int = 200, payload: dict[str, str] | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload or {}
    return resp


class TestAppendRow(unittest.TestCase):
    """Appending automation rows."""

    def setUp(self) -> None:
        self.session = MagicMock()
        self.session.post.return_value = _response()
        self.client = SheetsClient(token="tok", session=self.session)

    def test_posts_append_request(self) -> None:
        self.client.append_row("sheet-1", ROW)

        url = self.session.post.call_args.args[0]
        kwargs = self.session.post.call_args.kwargs
        self.assertEqual(
            url,
            f"{Settings.SHEETS_API_BASE}/sheet-1/values/Sheet1%21A%3AH:append",
        )
        self.assertEqual(kwargs["params"], {"valueInputOption": "RAW"})
        self.assertEqual(kwargs["json"], {"values": [ROW]})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok")

    def test_wrong_row_width(self) -> None:
        with self.assertRaises(SheetsError):
            self.client.append_row("sheet-1", ROW[:5])
        self.session.post.assert_not_called()

    def test_missing_spreadsheet_id(self) -> None:
        with self.assertRaises(SheetsError):
            self.client.append_row("", ROW)

    def test_http_error(self) -> None:
        self.session.post.return_value = _response(status=403)
        with self.assertRaises(SheetsError) as ctx:
            self.client.append_row("sheet-1", ROW)
        self.assertIn("403", str(ctx.exception))

    def test_unconfigured(self) -> None:
        client = SheetsClient(token="", session=self.session)
        self.assertFalse(client.configured)
        with self.assertRaises(SheetsError):
            client.append_row("sheet-1", ROW)


class TestCreateSpreadsheet(unittest.TestCase):
    """Spreadsheet creation with the header row."""

    def test_returns_id(self) -> None:
        session = MagicMock()
        session.post.return_value = _response(payload={"spreadsheetId": "new-id"})
        client = SheetsClient(token="tok", session=session)

        self.assertEqual(client.create_spreadsheet("Affiliate Bot - x"), "new-id")

        body = session.post.call_args.kwargs["json"]
        self.assertEqual(body["properties"]["title"], "Affiliate Bot - x")
        header = body["sheets"][0]["data"][0]["rowData"][0]["values"]
        self.assertEqual(
            [cell["userEnteredValue"]["stringValue"] for cell in header],
            Settings.SHEET_HEADER,
        )

    def test_missing_id_in_response(self) -> None:
        session = MagicMock()
        session.post.return_value = _response(payload={})
        client = SheetsClient(token="tok", session=session)
        with self.assertRaises(SheetsError):
            client.create_spreadsheet("x")


if __name__ == "__main__":
    unittest.main()
