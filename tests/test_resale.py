from decimal import Decimal

import pytest

from artisan_market.services.resale_service import (
    discount_percentage,
    listing_tags,
    normalize_images,
    resale_price,
)


def listing_payload(**overrides):
    payload = {
        "productName": "Chikankari Kurta",
        "category": "Fashion",
        "description": "Hand embroidered, worn once",
        "originalPrice": 2000,
        "condition": "with-tag",
        "images": [
            {"url": "https://img.example/a.jpg", "publicId": "resale/a"},
            {"url": "https://img.example/b.jpg", "publicId": "resale/b"},
        ],
    }
    payload.update(overrides)
    return payload


class TestPricing:
    @pytest.mark.parametrize(
        "condition, expected",
        [("with-tag", Decimal("1700")), ("without-tag", Decimal("1300")), ("lesser-quality", Decimal("900"))],
    )
    def test_condition_multipliers(self, condition, expected):
        assert resale_price(Decimal("2000"), condition) == expected

    def test_price_rounds_half_up(self):
        # 1001 * 0.65 = 650.65
        assert resale_price(Decimal("1001"), "without-tag") == Decimal("651")

    def test_discount(self):
        assert discount_percentage(Decimal("2000"), Decimal("1700")) == 15

    def test_tags(self):
        assert listing_tags("Fashion", "with-tag") == ["fashion", "with-tag", "resale", "handcrafted"]

    def test_first_image_is_primary(self):
        images = normalize_images([{"url": "a"}, {"url": "b"}])
        assert [i["isPrimary"] for i in images] == [True, False]

        images = normalize_images([{"url": "a"}, {"url": "b", "is_primary": True}])
        assert [i["isPrimary"] for i in images] == [False, True]


class TestResaleApi:
    @pytest.fixture
    def seller(self, make_user):
        return make_user(full_name="Nisha")

    @pytest.fixture
    def listing(self, client, seller):
        resp = client.post("/api/resale/", json=listing_payload(), headers={"user-id": str(seller.id)})
        assert resp.status_code == 201
        return resp.json()["data"]

    def test_create_derives_price_and_tags(self, listing, seller):
        assert listing["currentPrice"] == 1700
        assert listing["discountPercentage"] == 15
        assert listing["sellerName"] == "Nisha"
        assert listing["sellerContact"] == seller.email
        assert listing["conditionDetails"]["title"] == "With Tag - Just Like New"
        assert listing["tags"] == ["fashion", "with-tag", "resale", "handcrafted"]
        assert listing["images"][0] == {"url": "https://img.example/a.jpg", "publicId": "resale/a", "isPrimary": True}
        assert listing["location"] == {"state": "India", "city": "", "pincode": ""}

    def test_create_requires_identity(self, client):
        resp = client.post("/api/resale/", json=listing_payload())
        assert resp.status_code == 401

    def test_invalid_category(self, client, seller):
        resp = client.post("/api/resale/", json=listing_payload(category="Cars"), headers={"user-id": str(seller.id)})
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    def test_views_skip_the_seller(self, client, listing, seller, make_user):
        viewer = make_user()
        client.get(f"/api/resale/{listing['id']}", headers={"user-id": str(seller.id)})
        client.get(f"/api/resale/{listing['id']}", headers={"user-id": str(viewer.id)})
        body = client.get(f"/api/resale/{listing['id']}").json()
        assert body["data"]["views"] == 2

    def test_search_filters_and_pagination(self, client, seller, listing):
        headers = {"user-id": str(seller.id)}
        client.post("/api/resale/", json=listing_payload(category="Pottery", condition="lesser-quality"), headers=headers)

        body = client.get("/api/resale/", params={"category": "Pottery"}).json()
        assert [i["category"] for i in body["data"]] == ["Pottery"]

        body = client.get("/api/resale/", params={"category": "all", "sortBy": "currentPrice", "sortOrder": "asc"}).json()
        assert [i["currentPrice"] for i in body["data"]] == [900, 1700]
        assert body["pagination"] == {"currentPage": 1, "totalPages": 1, "totalItems": 2, "itemsPerPage": 12}

        body = client.get("/api/resale/", params={"maxPrice": 1000}).json()
        assert len(body["data"]) == 1

    def test_update_recomputes_price(self, client, listing, seller):
        resp = client.put(
            f"/api/resale/{listing['id']}",
            json={"condition": "lesser-quality"},
            headers={"user-id": str(seller.id)},
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["currentPrice"] == 900
        assert "lesser-quality" in data["tags"]

    def test_only_seller_may_change(self, client, listing, make_user):
        stranger = make_user()
        headers = {"user-id": str(stranger.id)}
        assert client.put(f"/api/resale/{listing['id']}", json={"description": "x"}, headers=headers).status_code == 403
        assert client.delete(f"/api/resale/{listing['id']}", headers=headers).status_code == 403
        assert client.patch(f"/api/resale/{listing['id']}/sold", headers=headers).status_code == 403

    def test_delete_removes_images(self, client, media, listing, seller):
        resp = client.delete(f"/api/resale/{listing['id']}", headers={"user-id": str(seller.id)})
        assert resp.status_code == 200
        media.destroy_images.assert_called_once_with(["resale/a", "resale/b"])
        assert client.get(f"/api/resale/{listing['id']}").status_code == 404

    def test_mark_sold_hides_from_search(self, client, listing, seller):
        resp = client.patch(f"/api/resale/{listing['id']}/sold", headers={"user-id": str(seller.id)})
        assert resp.json()["data"]["status"] == "sold"
        assert client.get("/api/resale/").json()["data"] == []

    def test_interest_rules(self, client, listing, seller, make_user):
        buyer = make_user()
        url = f"/api/resale/{listing['id']}/interest"

        assert client.post(url, json={}, headers={"user-id": str(seller.id)}).status_code == 400
        assert client.post(url, json={}, headers={"user-id": str(buyer.id)}).status_code == 200

        resp = client.post(url, json={"message": "again"}, headers={"user-id": str(buyer.id)})
        assert resp.status_code == 400
        assert resp.json()["error"] == "You have already expressed interest in this listing"

        data = client.get(f"/api/resale/{listing['id']}").json()["data"]
        assert data["interestedBuyers"][0]["message"] == "Interested in this item"

    def test_seller_listings_and_stats(self, client, listing, seller):
        headers = {"user-id": str(seller.id)}
        client.get(f"/api/resale/{listing['id']}")

        listings = client.get("/api/resale/user/listings", headers=headers).json()["data"]
        assert [l["id"] for l in listings] == [listing["id"]]

        stats = client.get("/api/resale/user/stats", headers=headers).json()["data"]
        assert stats == {
            "totalListings": 1,
            "activeListings": 1,
            "soldListings": 0,
            "totalViews": 1,
            "totalInterest": 0,
        }
