from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from artisan_market.data.models.order import OrderModel
from artisan_market.services.analytics_service import range_start, trend_key


class TestRanges:
    def test_range_start(self):
        now = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)
        assert range_start("weekly", now) == datetime(2025, 3, 24, 12, 0, tzinfo=timezone.utc)
        assert range_start("monthly", now) == datetime(2025, 2, 28, 12, 0, tzinfo=timezone.utc)
        assert range_start("yearly", now) == datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)

    def test_trend_keys(self):
        day = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert trend_key(day, "monthly") == "2025-01"
        assert trend_key(day, "weekly") == "2025-W01"


class TestAnalyticsApi:
    @pytest.fixture
    def add_order(self, db):
        counter = {"n": 0}

        def _add(buyer_id, seller_id, amount, status="paid", age_days=1, **details):
            counter["n"] += 1
            order = OrderModel(
                order_id=f"ORDER_{counter['n']}",
                buyer_id=buyer_id,
                seller_id=seller_id,
                amount=Decimal(str(amount)),
                status=status,
                product_details=details,
                customer_details={"name": "Asha"},
                created_at=datetime.now(timezone.utc) - timedelta(days=age_days),
            )
            db.add(order)
            db.commit()
            return order

        return _add

    def test_seller_report(self, client, make_user, make_card, add_order):
        buyer = make_user()
        seller = make_user()
        card = make_card(product_category="Pottery")
        add_order(buyer.id, seller.id, 500, productId=card.id, productCategory="Pottery")
        add_order(buyer.id, seller.id, 300, productId=card.id, productCategory="Pottery")
        add_order(buyer.id, seller.id, 700, status="pending", productId=card.id)
        add_order(buyer.id, seller.id, 900, age_days=90, productId=card.id)

        body = client.get(f"/api/analytics/seller/{seller.id}").json()
        assert body["totalRevenue"] == 800
        assert body["totalOrders"] == 2
        assert body["avgOrderValue"] == 400
        assert body["revenueByCategory"] == [{"category": "Pottery", "revenue": 800}]
        assert body["bestSellingProducts"][0]["id"] == card.id
        assert body["bestSellingProducts"][0]["quantitySold"] == 2
        assert body["bestSellingProducts"][0]["totalRevenue"] == 1000
        assert sum(p["orders"] for p in body["salesTrend"]) == 2
        # recent orders include every status
        assert len(body["recentOrders"]) == 4
        assert body["recentOrders"][0]["customerName"] == "Asha"

        body = client.get(f"/api/analytics/seller/{seller.id}", params={"range": "yearly"}).json()
        assert body["totalOrders"] == 3

    def test_empty_seller(self, client, make_user):
        seller = make_user()
        body = client.get(f"/api/analytics/seller/{seller.id}", params={"range": "weekly"}).json()
        assert body["totalRevenue"] == 0
        assert body["avgOrderValue"] == 0
        assert body["salesTrend"] == []

    def test_invalid_range(self, client, make_user):
        resp = client.get(f"/api/analytics/seller/{make_user().id}", params={"range": "daily"})
        assert resp.status_code == 400

    def test_buyer_report(self, client, make_user, add_order):
        buyer = make_user()
        add_order(buyer.id, None, 200, productCategory="Textiles")
        add_order(buyer.id, None, 300, productCategory="Textiles")
        add_order(buyer.id, None, 100)
        add_order(buyer.id, None, 999, status="failed")

        body = client.get(f"/api/analytics/buyer/{buyer.id}").json()
        assert body["totalOrders"] == 3
        assert body["totalSpent"] == 600
        assert body["categoryStats"]["Textiles"] == {"total": 500, "count": 2}
        assert body["categoryStats"]["Unknown"] == {"total": 100, "count": 1}
        assert sum(body["monthlyTrend"].values()) == 600
