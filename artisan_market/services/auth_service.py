import hashlib
import secrets
from datetime import timedelta
from typing import Any, Dict

import bcrypt
import jwt
from sqlalchemy.orm import Session

from artisan_market.data.models.user import UserModel
from artisan_market.domain.errors import (
    AccountLocked,
    AuthError,
    EmailNotVerified,
    NotFoundError,
)
from artisan_market.repos.user_repo import UserRepo
from artisan_market.services.google_client import GoogleOAuthClient
from artisan_market.services.notification_service import NotificationService
from artisan_market.utils.dates import as_utc, utcnow
from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import (
    FRONTEND_URL,
    JWT_ALGORITHM,
    JWT_EXPIRES_SECONDS,
    JWT_SECRET,
    LOGIN_BLOCK_MINUTES,
    MAX_LOGIN_ATTEMPTS,
    OTP_EXPIRE_MINUTES,
    PASSWORD_RESET_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRES_SECONDS,
    REFRESH_TOKEN_SECRET,
)

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def generate_otp() -> str:
    return str(secrets.randbelow(900000) + 100000)


class AuthService:
    """
    Local accounts (email + password + OTP verification) and Google sign-in.
    Issues HS256 access tokens and refresh tokens; only the refresh token hash is stored.
    """

    def __init__(self, db: Session, google: GoogleOAuthClient | None = None):
        self.repo = UserRepo(db)
        self.google = google

    # tokens

    def create_access_token(self, user: UserModel) -> str:
        now = utcnow()
        payload = {
            "id": user.id,
            "isAdmin": user.is_admin,
            "isArtisan": user.is_artisan,
            "iat": now,
            "exp": now + timedelta(seconds=JWT_EXPIRES_SECONDS),
        }
        return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)

    def _issue_tokens(self, user: UserModel) -> Dict[str, Any]:
        now = utcnow()
        refresh_token = jwt.encode(
            {
                "id": user.id,
                "jti": secrets.token_hex(8),
                "iat": now,
                "exp": now + timedelta(seconds=REFRESH_TOKEN_EXPIRES_SECONDS),
            },
            REFRESH_TOKEN_SECRET,
            algorithm=JWT_ALGORITHM,
        )
        user.refresh_token_hash = sha256_hex(refresh_token)
        self.repo.save(user)
        return {
            "status": "success",
            "token": self.create_access_token(user),
            "refresh_token": refresh_token,
            "user": user,
        }

    def verify_access_token(self, token: str) -> UserModel:
        try:
            claims = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        except jwt.InvalidTokenError as e:
            raise AuthError(f"Invalid token: {e}") from e

        user = self.repo.get_user(claims.get("id"))
        if not user:
            raise AuthError("The user belonging to this token no longer exists.")

        changed_at = as_utc(user.password_changed_at)
        if changed_at and int(changed_at.timestamp()) > int(claims.get("iat", 0)):
            raise AuthError("User recently changed password! Please log in again.")
        return user

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(refresh_token, REFRESH_TOKEN_SECRET, algorithms=[JWT_ALGORITHM])
        except jwt.InvalidTokenError as e:
            raise AuthError(f"Invalid refresh token: {e}") from e

        user = self.repo.get_user(claims.get("id"))
        if not user or user.refresh_token_hash != sha256_hex(refresh_token):
            raise AuthError("Invalid refresh token")
        return {"status": "success", "token": self.create_access_token(user)}

    # local accounts

    def _set_otp(self, user: UserModel) -> str:
        otp = generate_otp()
        user.email_verification_otp = otp
        user.email_verification_otp_expires = utcnow() + timedelta(minutes=OTP_EXPIRE_MINUTES)
        return otp

    def register(self, data: Dict[str, Any]) -> UserModel:
        email = data["email"].strip().lower()
        if self.repo.get_by_email(email) or self.repo.get_by_username(data["user_name"]):
            raise ValueError("User with this email or username already exists")

        user = UserModel(
            email=email,
            user_name=data["user_name"],
            full_name=data.get("full_name"),
            password_hash=hash_password(data["password"]),
            is_verified=False,
            auth_provider="local",
        )
        otp = self._set_otp(user)
        user = self.repo.create_user(user)

        NotificationService.send_otp(user.email, otp)
        logger.info(f"Registered user {user.id}, OTP queued")
        return user

    def verify_otp(self, user_id: int, otp: str) -> Dict[str, Any]:
        user = self.repo.get_user(user_id)
        expires = as_utc(user.email_verification_otp_expires) if user else None
        if (
            not user
            or not user.email_verification_otp
            or not secrets.compare_digest(user.email_verification_otp, otp)
            or not expires
            or expires <= utcnow()
        ):
            raise ValueError("Invalid or expired OTP")

        user.is_verified = True
        user.email_verification_otp = None
        user.email_verification_otp_expires = None
        logger.info(f"User {user.id} verified email")
        return self._issue_tokens(user)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        if not email or not password:
            raise ValueError("Please provide email and password")

        user = self.repo.get_by_email(email)
        if not user:
            raise AuthError("Incorrect email or password")

        now = utcnow()
        block_expires = as_utc(user.block_expires)
        if user.is_blocked and block_expires and block_expires > now:
            minutes = max(1, round((block_expires - now).total_seconds() / 60))
            raise AccountLocked(f"Account temporarily locked. Try again in {minutes} minutes")
        if user.is_blocked:
            # block ran out, start counting again
            user.is_blocked = False
            user.block_expires = None
            user.login_attempts = 0

        if not check_password(password, user.password_hash):
            user.login_attempts = (user.login_attempts or 0) + 1
            if user.login_attempts >= MAX_LOGIN_ATTEMPTS:
                user.is_blocked = True
                user.block_expires = now + timedelta(minutes=LOGIN_BLOCK_MINUTES)
                logger.warning(f"User {user.id} blocked after {user.login_attempts} failed logins")
            self.repo.save(user)
            raise AuthError("Incorrect email or password")

        if not user.is_verified:
            otp = self._set_otp(user)
            self.repo.save(user)
            NotificationService.send_otp(user.email, otp)
            raise EmailNotVerified("Email not verified. New OTP sent", user.id)

        user.login_attempts = 0
        user.is_blocked = False
        user.block_expires = None
        return self._issue_tokens(user)

    # google

    def _google_profile(self, code: str) -> Dict[str, Any]:
        if not code:
            raise ValueError("Authorization code not provided")
        if self.google is None:
            raise AuthError("Google sign-in is not configured")
        return self.google.fetch_profile(code)

    def google_login(self, code: str) -> Dict[str, Any]:
        profile = self._google_profile(code)
        user = self.repo.get_by_email(profile["email"])

        if not user:
            user = self.repo.create_user(
                UserModel(
                    email=profile["email"],
                    google_id=profile["sub"],
                    user_name=f"{profile['email'].split('@')[0]}_{secrets.token_hex(3)}",
                    full_name=profile.get("name"),
                    image_url=profile.get("picture"),
                    is_verified=True,
                    auth_provider="google",
                )
            )
            logger.info(f"Created google user {user.id}")
        elif user.auth_provider == "local":
            raise ValueError("Account exists with different login method")
        elif not user.google_id:
            user.google_id = profile["sub"]

        return self._issue_tokens(user)

    def link_google(self, user: UserModel, code: str) -> UserModel:
        profile = self._google_profile(code)
        if profile["email"] != user.email.lower():
            raise ValueError("Google account email does not match your account email")

        owner = self.repo.get_by_google_id(profile["sub"])
        if owner and owner.id != user.id:
            raise ValueError("This Google account is already linked to another user")

        user.google_id = profile["sub"]
        user.auth_provider = "both"
        user.is_verified = True
        logger.info(f"Linked google account to user {user.id}")
        return self.repo.save(user)

    # password reset

    def forgot_password(self, email: str) -> str:
        user = self.repo.get_by_email(email or "")
        if not user:
            raise NotFoundError("There is no user with that email address.")

        reset_token = secrets.token_hex(32)
        user.password_reset_token = sha256_hex(reset_token)
        user.password_reset_expires = utcnow() + timedelta(minutes=PASSWORD_RESET_EXPIRE_MINUTES)
        self.repo.save(user)

        NotificationService.send_password_reset(user.email, f"{FRONTEND_URL}/reset-password/{reset_token}")
        return reset_token

    def reset_password(self, token: str, password: str) -> UserModel:
        user = self.repo.get_by_reset_token(sha256_hex(token))
        expires = as_utc(user.password_reset_expires) if user else None
        if not user or not expires or expires <= utcnow():
            raise ValueError("Token is invalid or has expired")

        user.password_hash = hash_password(password)
        user.password_reset_token = None
        user.password_reset_expires = None
        user.password_changed_at = utcnow()
        user.refresh_token_hash = None
        user.login_attempts = 0
        user.is_blocked = False
        user.block_expires = None
        logger.info(f"User {user.id} reset password")
        return self.repo.save(user)
