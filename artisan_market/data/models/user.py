from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String

from artisan_market.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    user_name = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)  # google-only accounts have none
    image_url = Column(String, nullable=True)
    full_name = Column(String(200), nullable=True)

    is_admin = Column(Boolean, nullable=False, default=False)
    is_artisan = Column(Boolean, nullable=False, default=False)
    joining_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # wallet
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    total_earnings = Column(Numeric(12, 2), nullable=False, default=0)

    # artisan subscription
    has_artisan_subscription = Column(Boolean, nullable=False, default=False)
    subscription_date = Column(DateTime(timezone=True), nullable=True)
    subscription_type = Column(String(20), nullable=True)  # monthly, yearly
    subscription_end_date = Column(DateTime(timezone=True), nullable=True)

    # verification and login protection
    is_verified = Column(Boolean, nullable=False, default=False)
    email_verification_otp = Column(String(6), nullable=True)
    email_verification_otp_expires = Column(DateTime(timezone=True), nullable=True)
    login_attempts = Column(Integer, nullable=False, default=0)
    is_blocked = Column(Boolean, nullable=False, default=False)
    block_expires = Column(DateTime(timezone=True), nullable=True)

    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)
    refresh_token_hash = Column(String(64), nullable=True)

    auth_provider = Column(String(10), nullable=False, default="local")  # local, google, both
    google_id = Column(String(64), nullable=True, unique=True)
