from artisan_market.data.models.shop_card import DEFAULT_PRODUCT_IMAGE


def card_payload(**overrides):
    payload = {
        "productName": "Madhubani Painting",
        "productPrice": 2500,
        "productState": "Bihar",
        "productCategory": "Paintings",
        "productSellerName": "Sita",
    }
    payload.update(overrides)
    return payload


class TestShopCards:
    def test_create_applies_default_image(self, client):
        resp = client.post("/api/shopcards/", json=card_payload())
        assert resp.status_code == 201
        body = resp.json()
        assert body["productImageUrl"] == DEFAULT_PRODUCT_IMAGE
        assert body["productPrice"] == 2500
        assert body["isCodAvailable"] is False

    def test_create_with_unknown_seller(self, client):
        resp = client.post("/api/shopcards/", json=card_payload(sellerId=404))
        assert resp.status_code == 404
        assert resp.json()["error"] == "Seller not found"

    def test_get_missing_card(self, client):
        resp = client.get("/api/shopcards/999")
        assert resp.status_code == 404
        assert resp.json()["error"] == "Product not found"

    def test_filters(self, client, make_card, make_user):
        seller = make_user()
        make_card(product_category="Pottery", product_state="Rajasthan", seller_id=seller.id)
        make_card(product_category="Textiles", product_state="Gujarat")

        assert len(client.get("/api/shopcards/").json()) == 2
        assert [c["productState"] for c in client.get("/api/shopcards/category/Textiles").json()] == ["Gujarat"]
        assert [c["productCategory"] for c in client.get("/api/shopcards/state/Rajasthan").json()] == ["Pottery"]
        assert len(client.get(f"/api/shopcards/seller/{seller.id}").json()) == 1

        orphans = client.get("/api/shopcards/without-seller").json()
        assert orphans["count"] == 1
        assert orphans["products"][0]["productCategory"] == "Textiles"

    def test_partial_update_and_assign_seller(self, client, make_card, make_user):
        card = make_card()
        seller = make_user()

        resp = client.patch(f"/api/shopcards/{card.id}", json={"productPrice": 750})
        assert resp.json()["productPrice"] == 750
        assert resp.json()["productName"] == card.product_name

        resp = client.patch(f"/api/shopcards/{card.id}/seller", json={"sellerId": seller.id})
        assert resp.json()["sellerId"] == seller.id

    def test_delete(self, client, make_card):
        card = make_card()
        resp = client.delete(f"/api/shopcards/{card.id}")
        assert resp.json() == {"message": "Product deleted successfully"}
        assert client.get(f"/api/shopcards/{card.id}").status_code == 404
