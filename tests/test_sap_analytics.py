import time
from unittest.mock import MagicMock, patch

import pytest
import requests

from artisan_market.api import deps
from artisan_market.services.business_ai_service import calculate_price, market_position, string_list
from artisan_market.services.llm_client import GroqClient
from artisan_market.services.rate_limiter import RateLimitResult

PRODUCT = {
    "productName": "Meenakari Earrings",
    "productCategory": "Jewelry",
    "productMaterial": "Silver",
    "productState": "Rajasthan",
    "basePrice": 1500,
}


class TestComputedPricing:
    def test_multipliers(self):
        assert calculate_price({"category": "Jewelry", "material": "Silver", "region": "Rajasthan"}) == 8208
        assert calculate_price({"category": "Pottery"}) == 1800
        assert calculate_price({"category": "Unknown craft"}) == 2800

    @pytest.mark.parametrize("price, position", [(6000, "Premium"), (3000, "Mid-range"), (2500, "Budget")])
    def test_market_position(self, price, position):
        assert market_position(price) == position

    def test_object_arrays_are_flattened(self):
        assert string_list([{"title": "Export", "detail": "growing"}, "Gifts"], []) == ["Export - growing", "Gifts"]
        assert string_list("not a list", ["default"]) == ["default"]


class TestBusinessAI:
    def test_price_fallback(self, client):
        resp = client.post("/api/analytics/predict-price", json=PRODUCT)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["isFallback"] is True
        assert data["suggestedPrice"] == 8208
        assert data["priceRange"] == {"min": 6156, "max": 11081}
        assert resp.headers["X-RateLimit-Limit"] == "100"

    def test_price_from_llm(self, client, llm):
        llm.complete_json.side_effect = None
        llm.complete_json.return_value = {
            "predicted_price": "₹2,400",
            "confidence_score": 91,
            "pricingFactors": [{"factor": "Silver", "weight": "high"}],
        }

        data = client.post("/api/analytics/predict-price", json=PRODUCT).json()["data"]
        assert data["isFallback"] is False
        assert data["suggestedPrice"] == 2400
        assert data["priceRange"] == {"min": 1800, "max": 3240}
        assert data["confidence"] == 91
        assert data["pricingFactors"] == ["Silver - high"]

    @pytest.mark.parametrize("predicted", ["NaN", "Infinity", "-inf", float("nan")])
    def test_non_finite_price_uses_computed_pricing(self, client, llm, predicted):
        llm.complete_json.side_effect = None
        llm.complete_json.return_value = {"predicted_price": predicted, "price_range": {"min": "NaN", "max": 10}}

        resp = client.post("/api/analytics/predict-price", json=PRODUCT)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["isFallback"] is True
        assert data["suggestedPrice"] == 8208

    def test_non_finite_range_bounds_are_ignored(self, client, llm):
        llm.complete_json.side_effect = None
        llm.complete_json.return_value = {"predicted_price": 2000, "price_range": {"min": "NaN", "max": "Infinity"}}

        data = client.post("/api/analytics/predict-price", json=PRODUCT).json()["data"]
        assert data["suggestedPrice"] == 2000
        assert data["priceRange"] == {"min": 1500, "max": 2700}

    def test_llm_html_body_uses_computed_pricing(self, app, client):
        app.dependency_overrides[deps.get_llm_client] = lambda: GroqClient(api_key="k")
        html = MagicMock(status_code=200, text="<html>upstream error</html>")
        html.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)

        with patch("requests.post", return_value=html):
            resp = client.post("/api/analytics/predict-price", json=PRODUCT)

        assert resp.status_code == 200
        assert resp.json()["data"]["isFallback"] is True
        assert resp.json()["data"]["suggestedPrice"] == 8208

    def test_missing_name(self, client):
        resp = client.post("/api/analytics/predict-price", json={"category": "Jewelry"})
        assert resp.status_code == 400
        assert resp.json()["sapError"] == "INVALID_INPUT_DATA"

    def test_description_fallback(self, client):
        body = client.post("/api/analytics/generate-description", json=PRODUCT).json()
        assert body["success"] is True
        assert body["isFallback"] is True
        assert body["description"].startswith("This beautiful handcrafted Meenakari Earrings")

    def test_description_from_llm(self, client, llm):
        llm.complete.side_effect = None
        llm.complete.return_value = "A pair of enamelled silver earrings."
        body = client.post("/api/analytics/generate-description", json=PRODUCT).json()
        assert body["isFallback"] is False
        assert body["description"] == "A pair of enamelled silver earrings."

    def test_content_fallback(self, client):
        data = client.post("/api/analytics/generate-sap-description", json=PRODUCT).json()["data"]
        assert data["isFallback"] is True
        assert len(data["keyFeatures"]) == 5
        assert data["description"].startswith("Exquisite Silver jewelry")

    def test_status(self, client):
        body = client.get("/api/analytics/test-sap-business-ai").json()
        assert body["success"] is True
        assert body["services"]["fallbackIntelligence"] is True


class TestAnalyticsCloud:
    def test_market_intelligence_fallback(self, client):
        body = client.post("/api/analytics/market-intelligence", json=PRODUCT).json()
        assert body["success"] is True
        assert body["source"] == "SAP Analytics Cloud - Market Intelligence"
        assert body["data"]["isFallback"] is True
        assert body["data"]["market_size"] == "Jewelry market in Rajasthan showing steady growth"

    def test_market_intelligence_from_llm(self, client, llm):
        llm.complete_json.side_effect = None
        llm.complete_json.return_value = {
            "market_size": "₹40 crore",
            "key_insights": [{"insight": "Bridal demand"}],
        }
        data = client.post("/api/analytics/market-intelligence", json=PRODUCT).json()["data"]
        assert data["isFallback"] is False
        assert data["market_size"] == "₹40 crore"
        assert data["key_insights"] == ["Bridal demand"]
        assert len(data["opportunities"]) == 3

    def test_pricing_analytics_uses_base_price(self, client):
        data = client.post("/api/analytics/pricing-analytics", json=PRODUCT).json()["data"]
        assert data["optimal_price_range"] == {"min": 1200, "max": 2250, "recommended": 1800}

    def test_customer_segments_fallback(self, client):
        data = client.post("/api/analytics/customer-segments", json=PRODUCT).json()["data"]
        assert [s["name"] for s in data["primary_segments"]] == [
            "Cultural Enthusiasts",
            "Gift Purchasers",
            "Art Collectors",
            "Tourism Market",
        ]

    def test_demand_forecast_fallback(self, client):
        data = client.post("/api/analytics/demand-forecast", json=PRODUCT).json()["data"]
        assert data["isFallback"] is True

    def test_dashboard(self, client):
        body = client.post("/api/analytics/analytics-dashboard", json=PRODUCT).json()
        assert body["isFallback"] is True
        market = body["analytics"]["market_intelligence"]
        for key in ("key_insights", "opportunities", "risk_factors"):
            assert isinstance(market[key], list)
        assert body["product"]["name"] == "Meenakari Earrings"

    def test_sample_run(self, client):
        body = client.get("/api/analytics/test-sac").json()
        assert body["test_results"]["customer_segmentation"]["top_segment"] == "Cultural Enthusiasts"
        assert body["sap_analytics_cloud"]["llm_configured"] is False


class TestSapRateLimit:
    def test_limit_exceeded(self, client, rate_limiter):
        reset = int(time.time()) + 60
        rate_limiter.hit.return_value = RateLimitResult(False, 100, -1, reset)

        resp = client.post("/api/analytics/market-intelligence", json=PRODUCT)
        assert resp.status_code == 429
        assert resp.json()["code"] == "RATE_LIMIT_EXCEEDED"
        assert int(resp.headers["Retry-After"]) > 0

    def test_status_route_is_not_limited(self, client, rate_limiter):
        rate_limiter.hit.return_value = RateLimitResult(False, 100, -1, int(time.time()) + 60)

        resp = client.get("/api/analytics/analytics-status")
        assert resp.status_code == 200
        assert resp.json()["status"] == "operational"
        rate_limiter.hit.assert_not_called()
