# src/errors.py

"""Exception hierarchy shared by scrapers, services and the HTTP layer."""


class AffiliateBotError(Exception):
    """Base class for every error raised by affiliate_bot."""


class ScraperError(AffiliateBotError):
    """A fetch or extraction step failed."""


class ParseError(ScraperError):
    """No product title could be located in the markup."""


class BlockedError(ScraperError):
    """The response body carried an anti-bot / CAPTCHA indicator."""


class NetworkError(ScraperError):
    """Transport, timeout or HTTP status failure after retries."""


class ValidationError(AffiliateBotError):
    """Malformed input to a discovery, templating or automation call."""


class AuthenticationError(AffiliateBotError):
    """The caller could not be identified."""


class NotFoundError(AffiliateBotError):
    """A requested resource (user, products) does not exist."""


class SheetsError(AffiliateBotError):
    """The spreadsheet collaborator rejected or could not take a row."""


class QuotaExceededError(AffiliateBotError):
    """A request asked for more products than the quota window allows."""

    def __init__(self, message: str, used: int, limit: int) -> None:
        super().__init__(message)
        self.used = used
        self.limit = limit

    @property
    def remaining(self) -> int:
        """Allowance left in the window (may be negative)."""
        return self.limit - self.used
