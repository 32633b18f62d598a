from decimal import Decimal

from artisan_market.data.models.order import OrderModel


class TestOrdersApi:
    def test_create_order_is_pending(self, client, make_user):
        buyer = make_user()
        resp = client.post(
            "/api/orders/create",
            json={
                "buyerId": buyer.id,
                "sellerId": 12345,
                "amount": 799,
                "productDetails": {"productId": 3, "productName": "Jute Bag"},
                "customerDetails": {"name": "Buyer"},
            },
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "pending"
        assert body["sellerId"] is None
        assert body["orderId"].startswith("ORDER_")

    def test_subscription_order_needs_type(self, client, make_user):
        buyer = make_user()
        resp = client.post(
            "/api/orders/create",
            json={"buyerId": buyer.id, "amount": 200, "isSubscription": True},
        )
        assert resp.status_code == 400

    def test_buyer_sees_only_paid_orders(self, client, db, make_user):
        buyer = make_user()
        for order_id, status in (("ORDER_a", "paid"), ("ORDER_b", "pending"), ("ORDER_c", "paid")):
            db.add(
                OrderModel(
                    order_id=order_id,
                    buyer_id=buyer.id,
                    amount=Decimal("100"),
                    status=status,
                    product_details={},
                    customer_details={},
                )
            )
        db.commit()

        orders = client.get(f"/api/orders/buyer/{buyer.id}").json()
        assert sorted(o["orderId"] for o in orders) == ["ORDER_a", "ORDER_c"]

    def test_missing_order(self, client):
        resp = client.get("/api/orders/999")
        assert resp.status_code == 404
        assert resp.json()["error"] == "Order not found"
