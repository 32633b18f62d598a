# artisan_market/api/deps.py
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from artisan_market.api.errors import http_error
from artisan_market.data.database import SessionLocal, get_db
from artisan_market.data.models.user import UserModel
from artisan_market.domain.errors import AuthError, RateLimitExceeded
from artisan_market.services.auth_service import AuthService
from artisan_market.services.google_client import GoogleOAuthClient
from artisan_market.services.llm_client import GroqClient
from artisan_market.services.lock_service import LockService
from artisan_market.services.media_service import MediaService
from artisan_market.services.payment_gateway import CashfreeClient
from artisan_market.services.rate_limiter import RateLimiter
from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import (
    AUTH_RATE_LIMIT,
    AUTH_RATE_WINDOW_SECONDS,
    SAP_RATE_LIMIT,
    SAP_RATE_WINDOW_SECONDS,
)

logger = get_logger(__name__)

bearer = HTTPBearer(auto_error=False)


#external clients, overridden in tests

# redis-backed clients hold a connection pool, one per process
@lru_cache(maxsize=1)
def get_lock_service() -> LockService:
    return LockService()


def get_payment_gateway() -> CashfreeClient:
    return CashfreeClient()


def get_llm_client() -> GroqClient:
    return GroqClient()


def get_google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()


def get_media_service() -> MediaService:
    return MediaService()


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return RateLimiter()


def get_session_factory():
    """Sessions for handlers that outlive one request (websockets)."""
    return SessionLocal


#identity

def _user_from_token(token: str, db: Session) -> UserModel:
    try:
        return AuthService(db).verify_access_token(token)
    except AuthError as e:
        raise http_error(e)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> UserModel:
    if not credentials:
        raise http_error(AuthError("You are not logged in! Please log in to get access."))
    return _user_from_token(credentials.credentials, db)


def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    user_id: str | None = Header(None, alias="user-id"),
    db: Session = Depends(get_db),
) -> int | None:
    if credentials:
        return _user_from_token(credentials.credentials, db).id
    if user_id:
        try:
            return int(user_id)
        except ValueError:
            raise http_error(AuthError("Invalid user-id header"))
    return None


def get_request_user_id(user_id: int | None = Depends(get_optional_user_id)) -> int:
    """Bearer token or a plain user-id header."""
    if user_id is None:
        raise http_error(AuthError("Authentication required"))
    return user_id


def require_admin(user: UserModel = Depends(get_current_user)) -> UserModel:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail={"error": "Admin access required", "code": "FORBIDDEN"})
    return user


#rate limits

def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _enforce(scope: str, code: str, message: str, limit: int, window: int, request: Request, response: Response, limiter: RateLimiter):
    result = limiter.hit(scope, client_ip(request), limit, window)
    for name, value in result.to_headers().items():
        response.headers[name] = value
    if not result.allowed:
        logger.warning(f"Rate limit {scope} exceeded for {client_ip(request)}")
        raise http_error(RateLimitExceeded(message, code=code, retry_after=result.retry_after))


def sap_rate_limit(request: Request, response: Response, limiter: RateLimiter = Depends(get_rate_limiter)):
    _enforce(
        "sap",
        "RATE_LIMIT_EXCEEDED",
        "Too many SAP API requests, please try again later.",
        SAP_RATE_LIMIT,
        SAP_RATE_WINDOW_SECONDS,
        request,
        response,
        limiter,
    )


def auth_rate_limit(request: Request, response: Response, limiter: RateLimiter = Depends(get_rate_limiter)):
    _enforce(
        "auth",
        "AUTH_RATE_LIMIT",
        "Too many authentication attempts, please try again later.",
        AUTH_RATE_LIMIT,
        AUTH_RATE_WINDOW_SECONDS,
        request,
        response,
        limiter,
    )
