import hashlib
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from limits.errors import StorageError
from limits.storage import storage_from_string
from redis.exceptions import ConnectionError as RedisConnectionError

from artisan_market.api import deps
from artisan_market.data.models.order import OrderModel
from artisan_market.services.lock_service import LockService
from artisan_market.services.media_service import MediaService
from artisan_market.services.rate_limiter import RateLimiter
from artisan_market.tasks.expire import expire_pending_orders_task
from artisan_market.utils.dates import add_months


class TestLockService:
    def test_acquire_uses_set_nx_with_ttl(self):
        client = MagicMock()
        client.set.return_value = True
        locks = LockService(client=client)

        assert locks.acquire_auction_lock(7, "tok", ttl=5) is True
        client.set.assert_called_once_with(name="auction:7:lock", value="tok", nx=True, ex=5)

    def test_held_lock(self):
        client = MagicMock()
        client.set.return_value = None
        assert LockService(client=client).acquire_auction_lock(7, "tok") is False

    def test_release_is_owner_checked(self):
        client = MagicMock()
        client.eval.return_value = 0
        locks = LockService(client=client)

        assert locks.release_auction_lock(7, "someone-else") is False
        script, numkeys, key, owner = client.eval.call_args.args
        assert "GET" in script and numkeys == 1
        assert (key, owner) == ("auction:7:lock", "someone-else")

    def test_transient_errors_are_retried(self):
        client = MagicMock()
        client.set.side_effect = [RedisConnectionError("reset"), True]
        assert LockService(client=client).acquire("k", "tok", 5) is True
        assert client.set.call_count == 2

    def test_owner_tokens_differ(self):
        assert LockService.new_owner_token() != LockService.new_owner_token()


class TestRateLimiter:
    @pytest.fixture
    def limiter(self):
        return RateLimiter(storage=storage_from_string("memory://"))

    def test_within_limit(self, limiter):
        for _ in range(3):
            result = limiter.hit("sap", "1.2.3.4", 100, 900)

        assert result.allowed is True
        assert result.remaining == 97
        assert 0 < result.reset_time - time.time() <= 900

    def test_over_limit(self, limiter):
        for _ in range(5):
            assert limiter.hit("auth", "1.2.3.4", 5, 900).allowed is True
        result = limiter.hit("auth", "1.2.3.4", 5, 900)

        assert result.allowed is False
        headers = result.to_headers()
        assert headers["X-RateLimit-Remaining"] == "0"
        assert "Retry-After" in headers

    def test_scopes_and_clients_are_counted_apart(self, limiter):
        limiter.hit("auth", "1.2.3.4", 1, 900)
        assert limiter.hit("auth", "5.6.7.8", 1, 900).allowed is True
        assert limiter.hit("sap", "1.2.3.4", 1, 900).allowed is True
        assert limiter.hit("auth", "1.2.3.4", 1, 900).allowed is False

    def test_storage_down_allows(self, limiter):
        with patch.object(limiter.strategy, "hit", side_effect=StorageError(RedisConnectionError("down"))):
            result = limiter.hit("auth", "1.2.3.4", 5, 900)
        assert result.allowed is True
        assert result.remaining == 5


class TestExpirePendingOrders:
    def test_only_old_pending_orders_expire(self, db, make_user):
        buyer = make_user()
        old = datetime.now(timezone.utc) - timedelta(hours=2)
        rows = [
            ("ORDER_old", "pending", old),
            ("ORDER_new", "pending", datetime.now(timezone.utc)),
            ("ORDER_paid", "paid", old),
        ]
        for order_id, status, created_at in rows:
            db.add(
                OrderModel(
                    order_id=order_id,
                    buyer_id=buyer.id,
                    amount=Decimal("100"),
                    status=status,
                    product_details={},
                    customer_details={},
                    created_at=created_at,
                )
            )
        db.commit()

        assert expire_pending_orders_task(max_age_seconds=3600) == {"expired": 1}

        db.expire_all()
        statuses = {o.order_id: o.status for o in db.query(OrderModel).all()}
        assert statuses == {"ORDER_old": "expired", "ORDER_new": "pending", "ORDER_paid": "paid"}


class TestMediaService:
    def test_signature_matches_cloudinary_scheme(self):
        media = MediaService("demo", "key", "secret")
        signed = media.upload_signature(timestamp=1700000000)

        assert signed["signature"] == hashlib.sha1(b"timestamp=1700000000secret").hexdigest()
        assert signed["cloudName"] == "demo"

    def test_destroy_counts_successes(self):
        media = MediaService("demo", "key", "secret")
        results = [{"result": "ok"}, RuntimeError("network"), {"result": "not found"}]
        with patch("cloudinary.uploader.destroy", side_effect=results):
            assert media.destroy_images(["a", "b", None, "c"]) == 1


class TestDates:
    def test_add_months_clamps_day(self):
        assert add_months(datetime(2025, 1, 31), 1) == datetime(2025, 2, 28)
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
        assert add_months(datetime(2025, 3, 31), 12) == datetime(2026, 3, 31)
        assert add_months(datetime(2025, 11, 15), 3) == datetime(2026, 2, 15)


class TestSharedClients:
    def test_redis_backed_clients_are_built_once(self):
        deps.get_lock_service.cache_clear()
        deps.get_rate_limiter.cache_clear()
        try:
            assert deps.get_lock_service() is deps.get_lock_service()
            assert deps.get_rate_limiter() is deps.get_rate_limiter()
        finally:
            deps.get_lock_service.cache_clear()
            deps.get_rate_limiter.cache_clear()
