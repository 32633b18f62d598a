# artisan_market/api/errors.py
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from artisan_market.domain.errors import (
    EmailNotVerified,
    MarketplaceError,
    RateLimitExceeded,
)
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMIT_EXCEEDED",
    502: "PAYMENT_GATEWAY_ERROR",
    503: "SERVICE_UNAVAILABLE",
}

SUGGESTED_ENDPOINTS = [
    "GET /health",
    "POST /api/auth/login",
    "GET /api/shopcards",
    "GET /api/auctions",
    "GET /api/resale",
    "GET /api/stories",
    "POST /api/payment/create-order",
    "GET /api/analytics/analytics-status",
]


def http_error(e: MarketplaceError) -> HTTPException:
    """Domain error -> HTTPException carrying the wire body."""
    detail: Dict[str, Any] = {"error": e.message, "code": e.code}
    headers = None
    if isinstance(e, EmailNotVerified):
        detail["userId"] = e.user_id
    if isinstance(e, RateLimitExceeded) and e.retry_after is not None:
        detail["retryAfter"] = e.retry_after
        headers = {"Retry-After": str(e.retry_after)}
    return HTTPException(status_code=e.status_code, detail=detail, headers=headers)


def error_body(status_code: int, detail: Any) -> Dict[str, Any]:
    if isinstance(detail, dict):
        body = {"success": False, **detail}
        body.setdefault("code", DEFAULT_CODES.get(status_code, "ERROR"))
        return body
    return {
        "success": False,
        "error": str(detail),
        "code": DEFAULT_CODES.get(status_code, "ERROR"),
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # starlette's own 404 for unknown routes carries the bare "Not Found" detail
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "error": f"Endpoint {request.method} {request.url.path} not found",
                "code": "ENDPOINT_NOT_FOUND",
                "suggestedEndpoints": SUGGESTED_ENDPOINTS,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    e = http_error(exc)
    return JSONResponse(status_code=e.status_code, content=error_body(e.status_code, e.detail), headers=e.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": f"{field}: {message}" if field else message,
            "code": "VALIDATION_ERROR",
            "details": [
                {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
                for err in errors
            ],
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
