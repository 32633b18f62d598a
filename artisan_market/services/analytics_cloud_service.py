import json
from datetime import datetime, timezone
from typing import Any, Dict

from artisan_market.domain.errors import LLMUnavailable
from artisan_market.services.business_ai_service import string_list
from artisan_market.services.llm_client import GroqClient
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCT = {
    "name": "Traditional Rajasthani Handicraft",
    "category": "Handicrafts",
    "material": "Wood and Metal",
    "region": "Rajasthan",
    "basePrice": 1500,
}

ARRAY_RULE = (
    "Arrays must contain plain strings, not objects. "
    'Example: ["Growing demand for authentic crafts", "Export potential increasing"]'
)

LLM_SOURCE = "SAP Analytics Cloud (Groq Intelligence)"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def market_intelligence_fallback(product: Dict[str, Any]) -> Dict[str, Any]:
    category = product.get("category") or "handicrafts"
    region = product.get("region") or "India"
    return {
        "market_size": f"{category} market in {region} showing steady growth",
        "competition_level": "Moderate to High",
        "growth_trends": [
            "Increasing digital adoption in traditional crafts",
            "Growing appreciation for authentic handmade products",
            "Export potential expanding globally",
        ],
        "key_insights": [
            f"{category} category demonstrates strong cultural value",
            "Online marketplaces creating new opportunities",
            "Premium segment willing to pay for authenticity",
            "Seasonal demand patterns favor festival periods",
        ],
        "opportunities": [
            "Premium positioning strategy",
            "Digital marketplace optimization",
            "Gift and collector segments",
        ],
        "risk_factors": [
            "Price competition from mass-produced items",
            "Seasonal demand fluctuations",
        ],
        "source": "SAP Analytics Cloud Intelligence (Computed)",
        "isFallback": True,
    }


def pricing_trends_fallback(product: Dict[str, Any]) -> Dict[str, Any]:
    base = product.get("basePrice") or 1000
    return {
        "optimal_price_range": {
            "min": round(base * 0.8),
            "max": round(base * 1.5),
            "recommended": round(base * 1.2),
        },
        "price_trends": "Stable with upward momentum",
        "seasonal_factors": [
            "Festival seasons: +20-30% premium",
            "Tourist seasons: +15-25% premium",
            "Off-season: Base pricing",
        ],
        "competitive_position": "Well-positioned for premium pricing",
        "source": "SAP Analytics Cloud Pricing Intelligence (Computed)",
        "isFallback": True,
    }


def customer_segments_fallback(product: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "primary_segments": [
            {"name": "Cultural Enthusiasts", "percentage": 35, "characteristics": "Values authenticity and tradition"},
            {"name": "Gift Purchasers", "percentage": 28, "characteristics": "Seeking unique and meaningful gifts"},
            {"name": "Art Collectors", "percentage": 22, "characteristics": "Interested in artistic and investment value"},
            {"name": "Tourism Market", "percentage": 15, "characteristics": "Seeking cultural souvenirs and experiences"},
        ],
        "demographics": {
            "age_groups": {"25-35": 40, "35-45": 35, "45-55": 20, "55+": 5},
            "income_levels": {"Middle Class": 45, "Upper-Middle": 35, "Premium": 20},
            "geographic": {"Urban": 70, "Semi-Urban": 20, "Rural": 10},
        },
        "behavioral_insights": [
            "High value placed on craftsmanship stories",
            "Preference for direct artisan connections",
            "Social media influence on purchase decisions",
        ],
        "source": "SAP Analytics Cloud Customer Intelligence (Computed)",
        "isFallback": True,
    }


def demand_forecast_fallback(product: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "forecast_trend": "Positive growth trajectory",
        "seasonal_peaks": [
            {"period": "October-December", "boost": "40-50%", "reason": "Festival and holiday season"},
            {"period": "March-May", "boost": "25-30%", "reason": "Wedding and tourist season"},
            {"period": "July-September", "boost": "15-20%", "reason": "Monsoon gifting season"},
        ],
        "demand_drivers": [
            "Cultural event calendar alignment",
            "Tourism industry recovery",
            "Growing export opportunities",
            "Digital marketplace expansion",
        ],
        "predicted_growth": "18-22% annually",
        "risk_factors": [
            "Economic fluctuations",
            "Raw material availability",
            "Seasonal workforce challenges",
        ],
        "source": "SAP Analytics Cloud Forecasting Intelligence (Computed)",
        "isFallback": True,
    }


DASHBOARD_SUMMARY = {
    "overall_outlook": "Positive with strong growth potential",
    "key_opportunities": [
        "Premium market segment expansion",
        "Digital channel optimization",
        "Seasonal strategy enhancement",
        "Customer segment targeting",
    ],
    "performance_indicators": {
        "market_attractiveness": "High",
        "competitive_advantage": "Strong",
        "growth_potential": "Excellent",
        "risk_level": "Moderate",
    },
}

DASHBOARD_RECOMMENDATIONS = [
    {
        "category": "Pricing Strategy",
        "recommendation": "Implement dynamic pricing with seasonal adjustments",
        "impact": "High",
        "implementation": "Short-term",
    },
    {
        "category": "Market Expansion",
        "recommendation": "Focus on cultural enthusiasts and gift market segments",
        "impact": "High",
        "implementation": "Medium-term",
    },
    {
        "category": "Inventory Management",
        "recommendation": "Align production with seasonal demand patterns",
        "impact": "Medium",
        "implementation": "Immediate",
    },
    {
        "category": "Digital Strategy",
        "recommendation": "Enhance online presence and storytelling",
        "impact": "High",
        "implementation": "Medium-term",
    },
]


class AnalyticsCloudService:
    """Market, pricing, segment and demand analyses for a product, LLM first, computed fallback second."""

    def __init__(self, llm: GroqClient):
        self.llm = llm

    def _ask(self, kind: str, prompt: str) -> Dict[str, Any] | None:
        try:
            return self.llm.complete_json(f"{prompt}\n{ARRAY_RULE}", temperature=0.2, max_tokens=1200)
        except LLMUnavailable as e:
            logger.warning(f"{kind} falling back to computed analytics: {e}")
            return None

    def market_intelligence(self, product: Dict[str, Any]) -> Dict[str, Any]:
        result = market_intelligence_fallback(product)
        ai = self._ask(
            "Market intelligence",
            "Analyze the market for this artisan product:\n"
            f"{json.dumps(product, indent=2, default=str)}\n"
            "Return JSON with: market_size (string with ₹ value), growth_rate (string like \"15.2%\"), "
            "key_insights (4 strings), market_trends (3 strings), competitive_landscape (string), "
            "opportunities (3 strings), risk_factors (2 strings).",
        )
        if not ai:
            return result

        result.update(
            {
                "market_size": ai.get("market_size") or result["market_size"],
                "growth_rate": ai.get("growth_rate"),
                "key_insights": string_list(ai.get("key_insights"), result["key_insights"]),
                "market_trends": string_list(ai.get("market_trends"), result["growth_trends"]),
                "competitive_landscape": ai.get("competitive_landscape"),
                "opportunities": string_list(ai.get("opportunities"), result["opportunities"]),
                "risk_factors": string_list(ai.get("risk_factors"), result["risk_factors"]),
                "source": LLM_SOURCE,
                "timestamp": _now(),
                "isFallback": False,
            }
        )
        return result

    def pricing_trends(self, product: Dict[str, Any]) -> Dict[str, Any]:
        result = pricing_trends_fallback(product)
        ai = self._ask(
            "Pricing analytics",
            "Provide pricing strategy insights for this artisan product.\n"
            f"Product: {product.get('name') or 'Artisan Product'}\n"
            f"Category: {product.get('category') or 'Handicraft'}\n"
            f"Current Price: ₹{product.get('basePrice') or 1000}\n"
            "Return JSON with: optimal_price_range (object with numeric min, max, recommended), "
            "pricing_strategy (string), price_elasticity (string), competitor_analysis (string), "
            "revenue_impact (string), pricing_recommendations (array of strings).",
        )
        if not ai:
            return result

        price_range = ai.get("optimal_price_range")
        if isinstance(price_range, dict) and all(
            isinstance(price_range.get(k), (int, float)) for k in ("min", "max", "recommended")
        ):
            result["optimal_price_range"] = {k: price_range[k] for k in ("min", "max", "recommended")}

        result.update(
            {
                "pricing_strategy": ai.get("pricing_strategy"),
                "price_elasticity": ai.get("price_elasticity"),
                "competitor_analysis": ai.get("competitor_analysis"),
                "revenue_impact": ai.get("revenue_impact"),
                "pricing_recommendations": string_list(ai.get("pricing_recommendations"), []),
                "source": LLM_SOURCE,
                "timestamp": _now(),
                "isFallback": False,
            }
        )
        return result

    def customer_segments(self, product: Dict[str, Any]) -> Dict[str, Any]:
        result = customer_segments_fallback(product)
        ai = self._ask(
            "Customer segmentation",
            "Analyze customer segments for this artisan product:\n"
            f"{json.dumps(product, indent=2, default=str)}\n"
            "Return JSON with: primary_segment (object with name, size, characteristics as strings), "
            "secondary_segments (2 strings), buying_behavior (string), segment_insights (array of strings), "
            "targeting_strategy (string).",
        )
        if not ai:
            return result

        result.update(
            {
                "primary_segment": ai.get("primary_segment") if isinstance(ai.get("primary_segment"), dict) else None,
                "secondary_segments": string_list(ai.get("secondary_segments"), []),
                "buying_behavior": ai.get("buying_behavior"),
                "segment_insights": string_list(ai.get("segment_insights"), result["behavioral_insights"]),
                "targeting_strategy": ai.get("targeting_strategy"),
                "source": LLM_SOURCE,
                "timestamp": _now(),
                "isFallback": False,
            }
        )
        return result

    def demand_forecast(self, product: Dict[str, Any]) -> Dict[str, Any]:
        result = demand_forecast_fallback(product)
        ai = self._ask(
            "Demand forecast",
            "Forecast demand for this artisan product:\n"
            f"{json.dumps(product, indent=2, default=str)}\n"
            "Return JSON with: monthly_forecast (strings like \"Jan: 150 units\"), seasonal_trends (string), "
            "demand_drivers (array of strings), forecast_confidence (string like \"85%\"), "
            "business_impact (string).",
        )
        if not ai:
            return result

        result.update(
            {
                "monthly_forecast": string_list(ai.get("monthly_forecast"), []),
                "seasonal_trends": ai.get("seasonal_trends"),
                "demand_drivers": string_list(ai.get("demand_drivers"), result["demand_drivers"]),
                "forecast_confidence": ai.get("forecast_confidence"),
                "business_impact": ai.get("business_impact"),
                "source": LLM_SOURCE,
                "timestamp": _now(),
                "isFallback": False,
            }
        )
        return result

    def dashboard(self, product: Dict[str, Any]) -> Dict[str, Any]:
        market = self.market_intelligence(product)
        pricing = self.pricing_trends(product)
        segments = self.customer_segments(product)
        forecast = self.demand_forecast(product)

        for key in ("key_insights", "opportunities", "risk_factors"):
            if not isinstance(market.get(key), list):
                market[key] = []

        return {
            "success": True,
            "source": "SAP Analytics Cloud - Complete Suite",
            "timestamp": _now(),
            "product": product,
            "analytics": {
                "market_intelligence": market,
                "pricing_trends": pricing,
                "customer_segments": segments,
                "demand_forecast": forecast,
            },
            "summary": DASHBOARD_SUMMARY,
            "recommendations": DASHBOARD_RECOMMENDATIONS,
            "isFallback": any(a["isFallback"] for a in (market, pricing, segments, forecast)),
        }

    def run_sample(self) -> Dict[str, Any]:
        market = self.market_intelligence(SAMPLE_PRODUCT)
        pricing = self.pricing_trends(SAMPLE_PRODUCT)
        segments = self.customer_segments(SAMPLE_PRODUCT)
        forecast = self.demand_forecast(SAMPLE_PRODUCT)

        primary = segments.get("primary_segments") or []
        return {
            "success": True,
            "test_results": {
                "market_intelligence": {
                    "status": "Active",
                    "data_points": len(market),
                    "sample": (market.get("key_insights") or ["Market intelligence available"])[0],
                },
                "pricing_analytics": {
                    "status": "Active",
                    "price_range": pricing.get("optimal_price_range"),
                    "trend": pricing.get("price_trends"),
                },
                "customer_segmentation": {
                    "status": "Active",
                    "segments_count": len(primary) or 4,
                    "top_segment": primary[0]["name"] if primary else (segments.get("primary_segment") or {}).get("name"),
                },
                "demand_forecasting": {
                    "status": "Active",
                    "forecast": forecast.get("forecast_trend"),
                    "growth": forecast.get("predicted_growth"),
                },
            },
            "sap_analytics_cloud": {
                "integration_level": "Enterprise-grade",
                "api_coverage": "Market Intelligence, Pricing, Customer Analytics, Forecasting",
                "llm_configured": self.llm.is_configured(),
            },
            "timestamp": _now(),
        }

    @staticmethod
    def status() -> Dict[str, Any]:
        return {
            "success": True,
            "status": "operational",
            "services": {
                "market_intelligence": "active",
                "pricing_analytics": "active",
                "customer_segmentation": "active",
                "demand_forecasting": "active",
                "analytics_dashboard": "active",
            },
            "fallback": "Computed analytics when the LLM is unavailable",
            "timestamp": _now(),
        }
