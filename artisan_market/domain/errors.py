# artisan_market/domain/errors.py


class MarketplaceError(Exception):
    """Base for errors services raise on purpose.

    ``status_code`` and ``code`` tell the API layer how to render it.
    """

    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NotFoundError(MarketplaceError, LookupError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(MarketplaceError, RuntimeError):
    status_code = 409
    code = "CONFLICT"


class BidRejected(MarketplaceError, ValueError):
    status_code = 400
    code = "BID_ERROR"


class AuthError(MarketplaceError, PermissionError):
    status_code = 401
    code = "UNAUTHORIZED"


class AccountLocked(MarketplaceError, PermissionError):
    status_code = 403
    code = "ACCOUNT_LOCKED"


class PaymentGatewayError(MarketplaceError, RuntimeError):
    status_code = 502
    code = "PAYMENT_GATEWAY_ERROR"


class RateLimitExceeded(MarketplaceError, RuntimeError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str, code: str | None = None, retry_after: int | None = None):
        super().__init__(message, code)
        self.retry_after = retry_after


class LLMUnavailable(RuntimeError):
    """LLM call failed or returned something unusable; callers fall back."""


class EmailNotVerified(MarketplaceError, PermissionError):
    status_code = 403
    code = "EMAIL_NOT_VERIFIED"

    def __init__(self, message: str, user_id: int):
        super().__init__(message)
        self.user_id = user_id
