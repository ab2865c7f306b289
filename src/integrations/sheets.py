# src/integrations/sheets.py

"""Google Sheets v4 REST client for exporting automation rows."""

import logging
from typing import Any
from urllib.parse import quote

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.errors import SheetsError

logger = logging.getLogger("affiliate_bot.sheets")

_SHEETS_TIMEOUT = 15  # seconds


class SheetsClient:
    """Appends rows to (and creates) spreadsheets with a bearer token."""

    def __init__(
        self,
        token: str | None = None,
        session: Any = None,
    ) -> None:
        self.settings = Settings()
        self.token = (
            self.settings.GOOGLE_SHEETS_TOKEN if token is None else token
        )
        self.session = session or curl_requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.token)

    def _headers(self) -> dict[str, str]:
        if not self.token:
            msg = "Google Sheets is not configured (GOOGLE_SHEETS_TOKEN)"
            raise SheetsError(msg)
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }

    def _check(self, resp: Any, action: str) -> None:
        if resp.status_code >= 400:
            msg = f"Sheets {action} failed with HTTP {resp.status_code}"
            raise SheetsError(msg)

    def append_row(self, spreadsheet_id: str, row: list[str]) -> None:
        """Append one ordered row to the first sheet."""
        if not spreadsheet_id:
            msg = "No spreadsheet ID provided"
            raise SheetsError(msg)
        expected = len(self.settings.SHEET_HEADER)
        if len(row) != expected:
            msg = f"Sheet rows need {expected} fields, got {len(row)}"
            raise SheetsError(msg)

        url = (
            f"{self.settings.SHEETS_API_BASE}/{spreadsheet_id}"
            f"/values/{quote(self.settings.SHEETS_RANGE)}:append"
        )
        resp = self.session.post(
            url,
            headers=self._headers(),
            params={"valueInputOption": "RAW"},
            json={"values": [row]},
            timeout=_SHEETS_TIMEOUT,
        )
        self._check(resp, "append")
        logger.info(
            "Appended row to sheet %s: %s", spreadsheet_id, row[1]
        )

    def create_spreadsheet(self, title: str) -> str:
        """Create a spreadsheet with the header row; return its id."""
        header_cells = [
            {"userEnteredValue": {"stringValue": name}}
            for name in self.settings.SHEET_HEADER
        ]
        body = {
            "properties": {"title": title},
            "sheets": [
                {
                    "properties": {"title": "Sheet1"},
                    "data": [{"rowData": [{"values": header_cells}]}],
                }
            ],
        }
        resp = self.session.post(
            self.settings.SHEETS_API_BASE,
            headers=self._headers(),
            json=body,
            timeout=_SHEETS_TIMEOUT,
        )
        self._check(resp, "create")
        spreadsheet_id = str(resp.json().get("spreadsheetId", ""))
        if not spreadsheet_id:
            msg = "Sheets create returned no spreadsheetId"
            raise SheetsError(msg)
        logger.info("Created spreadsheet '%s' (%s)", title, spreadsheet_id)
        return spreadsheet_id
