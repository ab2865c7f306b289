# src/api/schemas.py

"""Request bodies accepted by the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field

from src.config.settings import Settings


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(_CamelModel):
    username: str = Field(min_length=3, max_length=20, pattern=r"^[A-Za-z0-9_]+$")
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class DiscoverRequest(_CamelModel):
    category: str = Field(min_length=1)
    affiliate_tag: str = Field(alias="affiliateTag", min_length=1)
    limit: int = Field(default=Settings.DEFAULT_DISCOVERY_LIMIT, ge=1)


class AutomateRequest(_CamelModel):
    url: str = Field(pattern=r"^https?://")
    affiliate_tag: str = Field(alias="affiliateTag", min_length=1)
    spreadsheet_id: str | None = Field(default=None, alias="spreadsheetId")


class SheetsIdRequest(_CamelModel):
    sheets_id: str = Field(alias="sheetsId", min_length=1)


class ForgotPasswordRequest(_CamelModel):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CreateOrderRequest(_CamelModel):
    amount: int = Field(ge=1)


class ResetPasswordRequest(_CamelModel):
    reset_code: str = Field(alias="resetCode", min_length=1)
