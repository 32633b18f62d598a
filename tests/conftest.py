import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

# Set test environment before the app reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["GROQ_API_KEY"] = ""
os.environ["SENDGRID_API_KEY"] = ""
os.environ["CASHFREE_APP_ID"] = ""
os.environ["CASHFREE_SECRET_KEY"] = ""
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"

from fastapi.testclient import TestClient  # noqa: E402

import artisan_market.data.models  # noqa: E402,F401
from artisan_market.api import deps  # noqa: E402
from artisan_market.celery_worker import celery_app  # noqa: E402
from artisan_market.data.database import Base, SessionLocal, engine  # noqa: E402
from artisan_market.data.models.auction import AuctionModel  # noqa: E402
from artisan_market.data.models.shop_card import ShopCardModel  # noqa: E402
from artisan_market.data.models.user import UserModel  # noqa: E402
from artisan_market.domain.errors import LLMUnavailable  # noqa: E402
from artisan_market.main import create_app  # noqa: E402
from artisan_market.services.rate_limiter import RateLimitResult  # noqa: E402

celery_app.conf.task_always_eager = True
celery_app.conf.task_eager_propagates = True


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


#fakes for external systems

@pytest.fixture
def lock_service():
    lock = MagicMock()
    lock.new_owner_token.return_value = "owner-token"
    lock.acquire_auction_lock.return_value = True
    lock.release_auction_lock.return_value = True
    return lock


@pytest.fixture
def gateway():
    gw = MagicMock()
    gw.is_configured.return_value = True
    gw.create_order.return_value = {
        "payment_session_id": "session_123",
        "payment_link": "https://payments.example/pay/session_123",
    }
    gw.fetch_order.return_value = {"order_status": "ACTIVE"}
    gw.fetch_payments.return_value = []
    return gw


@pytest.fixture
def llm():
    client = MagicMock()
    client.is_configured.return_value = False
    client.model = "test-model"
    client.complete.side_effect = LLMUnavailable("GROQ_API_KEY not configured")
    client.complete_json.side_effect = LLMUnavailable("GROQ_API_KEY not configured")
    return client


@pytest.fixture
def media():
    service = MagicMock()
    service.is_configured.return_value = True
    service.upload_signature.return_value = {
        "timestamp": 1700000000,
        "signature": "abc123",
        "apiKey": "key",
        "cloudName": "demo",
    }
    service.destroy_images.return_value = 1
    return service


@pytest.fixture
def google():
    return MagicMock()


@pytest.fixture
def rate_limiter():
    limiter = MagicMock()
    limiter.hit.return_value = RateLimitResult(True, 100, 99, 1700000900)
    return limiter


@pytest.fixture
def app(lock_service, gateway, llm, media, google, rate_limiter):
    application = create_app()
    application.dependency_overrides[deps.get_lock_service] = lambda: lock_service
    application.dependency_overrides[deps.get_payment_gateway] = lambda: gateway
    application.dependency_overrides[deps.get_llm_client] = lambda: llm
    application.dependency_overrides[deps.get_media_service] = lambda: media
    application.dependency_overrides[deps.get_google_client] = lambda: google
    application.dependency_overrides[deps.get_rate_limiter] = lambda: rate_limiter
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


#data builders

@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(**overrides) -> UserModel:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "user_name": f"user{n}",
            "email": f"user{n}@example.com",
            "full_name": f"User {n}",
            "is_verified": True,
        }
        fields.update(overrides)
        user = UserModel(**fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_card(db):
    def _make(**overrides) -> ShopCardModel:
        fields = {
            "product_name": "Blue Pottery Vase",
            "product_price": Decimal("500.00"),
            "product_state": "Rajasthan",
            "product_category": "Pottery",
            "product_seller_name": "Asha",
            "product_image_url": "https://img.example/vase.jpg",
        }
        fields.update(overrides)
        card = ShopCardModel(**fields)
        db.add(card)
        db.commit()
        db.refresh(card)
        return card

    return _make


@pytest.fixture
def make_auction(db):
    def _make(seller_id: int, **overrides) -> AuctionModel:
        fields = {
            "product_name": "Kantha Quilt",
            "seller_id": seller_id,
            "seller_name": "Seller",
            "base_price": Decimal("100.00"),
            "start_time": datetime.now(timezone.utc) - timedelta(minutes=5),
            "duration": 60,
            "version": 1,
        }
        fields.update(overrides)
        auction = AuctionModel(**fields)
        db.add(auction)
        db.commit()
        db.refresh(auction)
        return auction

    return _make
