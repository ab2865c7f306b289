# src/api/app.py

"""FastAPI application exposing discovery, automation and account routes."""

import asyncio
import logging
import secrets
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.schemas import (
    AutomateRequest,
    CreateOrderRequest,
    DiscoverRequest,
    ForgotPasswordRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SheetsIdRequest,
)
from src.config.settings import Settings
from src.errors import (
    AffiliateBotError,
    AuthenticationError,
    NotFoundError,
    QuotaExceededError,
    ScraperError,
    SheetsError,
    ValidationError,
)
from src.integrations.email_sender import EmailSender
from src.integrations.payments import PaymentGateway
from src.services.automation_service import AutomationService, spreadsheet_url
from src.services.catalog import CATEGORIES
from src.storage.memory_store import MemoryStore

logger = logging.getLogger("affiliate_bot.api")

_ERROR_STATUS: list[tuple[type[AffiliateBotError], int]] = [
    (AuthenticationError, 401),
    (QuotaExceededError, 429),
    (NotFoundError, 404),
    (ValidationError, 400),
    (ScraperError, 502),
    (SheetsError, 502),
]

router = APIRouter(prefix="/api")


def _service(request: Request) -> AutomationService:
    service: AutomationService = request.app.state.service
    return service


def _store(request: Request) -> MemoryStore:
    store: MemoryStore = request.app.state.store
    return store


# ── Accounts ─────────────────────────────────────────────


@router.post("/users")
async def register_user(payload: RegisterRequest, request: Request) -> dict[str, Any]:
    """Register a user. Credentials are handled outside this service."""
    store = _store(request)
    if store.get_user_by_username(payload.username):
        msg = "Username already exists"
        raise ValidationError(msg)
    if payload.email and store.get_user_by_email(payload.email):
        msg = "Email already registered"
        raise ValidationError(msg)
    user = store.create_user(payload.username, payload.email)
    return user.to_dict()


@router.get("/user/status")
async def user_status(
    request: Request, x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    return _service(request).quota_status(x_user_id)


@router.post("/auth/forgot-password")
async def forgot_password(
    payload: ForgotPasswordRequest, request: Request,
) -> dict[str, Any]:
    """Issue a reset code; hand it back directly if email is unavailable."""
    store = _store(request)
    user = store.get_user_by_email(payload.email)
    if user is None:
        msg = "Email not found"
        raise NotFoundError(msg)

    code = secrets.token_hex(8)
    store.set_reset_token(
        user.id, code, timedelta(seconds=Settings.RESET_TOKEN_TTL)
    )
    sender: EmailSender = request.app.state.email_sender
    sent = await asyncio.to_thread(sender.send_reset_code, payload.email, code)
    if sent:
        return {
            "success": True,
            "message": "Password reset code sent to your email. Check your inbox.",
        }
    logger.warning("Reset code for %s returned in response", user.id)
    return {
        "success": True,
        "message": "Recovery code generated.",
        "resetCode": code,
        "note": "Email service not configured. Use the code shown.",
    }


@router.post("/auth/reset-password")
async def reset_password(
    payload: ResetPasswordRequest, request: Request,
) -> dict[str, Any]:
    """Redeem a reset code. Each code works once and only before expiry."""
    user = _store(request).consume_reset_token(payload.reset_code)
    logger.info("Reset code redeemed by %s", user.id)
    return {
        "success": True,
        "userId": user.id,
        "username": user.username,
        "message": "Reset code accepted",
    }


# ── Discovery & automation ───────────────────────────────


@router.get("/categories")
async def list_categories() -> dict[str, Any]:
    return {"categories": CATEGORIES}


@router.post("/discover")
async def discover(
    payload: DiscoverRequest,
    request: Request,
    x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    outcome = await _service(request).run_discovery(
        x_user_id, payload.category, payload.affiliate_tag, payload.limit
    )
    return outcome.to_dict()


@router.post("/automate")
async def automate(
    payload: AutomateRequest,
    request: Request,
    x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    _, automation = await _service(request).automate_url(
        x_user_id, payload.url, payload.affiliate_tag, payload.spreadsheet_id
    )
    return {
        "success": True,
        "automation": automation.to_dict(),
        "spreadsheetId": automation.spreadsheet_id,
        "spreadsheetUrl": spreadsheet_url(automation.spreadsheet_id),
    }


@router.get("/automations")
async def list_automations(
    request: Request, x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    service = _service(request)
    status = service.quota_status(x_user_id)
    automations = _store(request).list_automations(str(x_user_id))
    return {"automations": [a.to_dict() for a in automations], **status}


# ── Spreadsheets ─────────────────────────────────────────


@router.post("/sheets/connect")
async def connect_sheets(
    request: Request, x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    service = _service(request)
    user = service.require_user(x_user_id)
    sheet_id = await service.connect_sheet(user.id)
    return {"success": True, "spreadsheetId": sheet_id}


@router.get("/user/sheets-id")
async def get_sheets_id(
    request: Request, x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    user = _service(request).require_user(x_user_id)
    return {"sheetsId": user.spreadsheet_id or ""}


@router.get("/sheets/status")
async def sheets_status(
    request: Request, x_user_id: str | None = Header(default=None),
) -> dict[str, bool]:
    user = _service(request).require_user(x_user_id)
    return {"connected": bool(user.spreadsheet_id)}


@router.post("/user/sheets-id")
async def set_sheets_id(
    payload: SheetsIdRequest,
    request: Request,
    x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    user = _service(request).require_user(x_user_id)
    _store(request).update_user(user.id, spreadsheet_id=payload.sheets_id)
    return {"success": True, "sheetsId": payload.sheets_id}


# ── Payments (stubbed) ───────────────────────────────────


@router.post("/payment/create-order")
async def create_order(
    payload: CreateOrderRequest,
    request: Request,
    x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    user = _service(request).require_user(x_user_id)
    gateway: PaymentGateway = request.app.state.payments
    return gateway.create_order(user.id, payload.amount)


@router.post("/payment/verify")
async def verify_payment(
    request: Request, x_user_id: str | None = Header(default=None),
) -> dict[str, Any]:
    user = _service(request).require_user(x_user_id)
    gateway: PaymentGateway = request.app.state.payments
    updated = gateway.verify(user.id)
    return {
        "success": True,
        "message": f"Subscription activated for {Settings.SUBSCRIPTION_DAYS} days",
        "subscriptionEndsAt": updated.to_dict()["subscriptionEndsAt"],
    }


# ── Error mapping ────────────────────────────────────────


def _error_response(exc: AffiliateBotError) -> JSONResponse:
    status = next(
        (code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500
    )
    body: dict[str, Any] = {"success": False, "error": str(exc)}
    if isinstance(exc, QuotaExceededError):
        body["dailyCount"] = exc.used
        body["remaining"] = max(exc.remaining, 0)
    return JSONResponse(status_code=status, content=body)


async def _handle_app_error(request: Request, exc: AffiliateBotError) -> Response:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return _error_response(exc)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError,
) -> Response:
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        detail = f"{field}: {first.get('msg', detail)}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"success": False, "error": detail})


async def _handle_http_error(
    request: Request, exc: StarletteHTTPException,
) -> Response:
    """Unknown routes and wrong methods use the same error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=exc.headers,
    )


async def _catch_unexpected(
    request: Request, call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Last-resort boundary: report unexpected failures as JSON."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(
            "Unhandled error on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc) or "Unknown error"},
        )


def create_app(
    store: MemoryStore | None = None,
    service: AutomationService | None = None,
    email_sender: EmailSender | None = None,
    payments: PaymentGateway | None = None,
) -> FastAPI:
    """Build the API with explicitly supplied (or default) collaborators."""
    store = store or (service.store if service else MemoryStore())
    app = FastAPI(title="Affiliate Bot", version="0.1.0")
    app.state.store = store
    app.state.service = service or AutomationService(store)
    app.state.email_sender = email_sender or EmailSender()
    app.state.payments = payments or PaymentGateway(store)

    app.add_exception_handler(AffiliateBotError, _handle_app_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.middleware("http")(_catch_unexpected)

    @app.get("/health")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)
    return app
