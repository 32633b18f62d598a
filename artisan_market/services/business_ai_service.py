import json
import math
from datetime import datetime, timezone
from typing import Any, Dict, List

from artisan_market.domain.errors import LLMUnavailable
from artisan_market.services.llm_client import GroqClient
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)

CATEGORY_BASE_PRICES = {
    "jewelry": 3800,
    "textiles": 2600,
    "pottery": 1800,
    "woodwork": 3200,
    "metalwork": 4500,
    "paintings": 5800,
    "sculptures": 7200,
    "leather": 2400,
    "stonework": 3600,
}
DEFAULT_BASE_PRICE = 2800

# first matching keyword wins
MATERIAL_MULTIPLIERS = [
    (("gold", "silver"), 1.8),
    (("silk", "marble"), 1.4),
    (("teak", "rosewood"), 1.3),
]
REGION_MULTIPLIERS = [
    (("kashmir", "rajasthan"), 1.2),
    (("kerala", "karnataka"), 1.1),
]

DESCRIPTION_TEMPLATES = {
    "jewelry": "Exquisite {material} jewelry showcasing {region}'s timeless artisan traditions. Each piece reflects "
    "centuries of craftsmanship expertise, combining traditional techniques with contemporary appeal.",
    "textiles": "Masterfully crafted {material} textile from {region}, embodying generations of weaving excellence. "
    "This piece represents the pinnacle of handloom artistry and cultural heritage.",
    "pottery": "Hand-shaped ceramic masterpiece from {region}'s renowned pottery tradition. Crafted using "
    "time-honored techniques, this {material} creation showcases exceptional artisan skill.",
    "default": "Authentic handcrafted {category} from {region}, created with {material} using traditional artisan "
    "techniques passed down through generations.",
}

MARKET_INTELLIGENCE = {
    "marketSize": "₹2.3 billion (Indian handicrafts)",
    "growthRate": "15-20% annually",
    "keyTrends": [
        "Increasing demand for authentic products",
        "Growing export market",
        "Digital marketplace adoption",
        "Sustainable craftsmanship focus",
    ],
    "opportunities": [
        "Premium positioning for quality crafts",
        "International market expansion",
        "Custom/personalized products",
        "Corporate gifting segment",
    ],
    "challenges": [
        "Price competition from mass-produced items",
        "Seasonal demand fluctuations",
        "Quality standardization",
    ],
}

COPYWRITER_PROMPT = "You are an expert copywriter specializing in artisan and handcrafted products."


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _multiplier(text: str | None, table) -> float:
    value = (text or "").lower()
    for keywords, factor in table:
        if any(k in value for k in keywords):
            return factor
    return 1.0


def calculate_price(product: Dict[str, Any]) -> int:
    category = (product.get("category") or "jewelry").lower()
    price = CATEGORY_BASE_PRICES.get(category, DEFAULT_BASE_PRICE)
    price *= _multiplier(product.get("material"), MATERIAL_MULTIPLIERS)
    price *= _multiplier(product.get("region"), REGION_MULTIPLIERS)
    return round(price)


def market_position(price: float) -> str:
    if price > 5000:
        return "Premium"
    if price > 2500:
        return "Mid-range"
    return "Budget"


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.replace("₹", "").replace(",", "").strip())
        except ValueError:
            return None
    else:
        return None
    # NaN and Infinity parse as floats but are not prices
    return number if math.isfinite(number) else None


def string_list(value: Any, default: List[str]) -> List[str]:
    """LLM arrays sometimes come back as objects; flatten them to text."""
    if not isinstance(value, list) or not value:
        return list(default)
    out = []
    for item in value:
        if isinstance(item, dict):
            out.append(" - ".join(str(v) for v in item.values()))
        else:
            out.append(str(item))
    return out


def pricing_fallback(product: Dict[str, Any]) -> Dict[str, Any]:
    price = calculate_price(product)
    return {
        "suggestedPrice": price,
        "priceRange": {"min": round(price * 0.75), "max": round(price * 1.35)},
        "marketInsights": {
            "marketGrowth": 15.5,
            "seasonalTrend": "Festival season boost expected",
            "regionalDemand": "High in metropolitan areas",
            "exportPotential": "Strong international interest",
        },
        "competitorAnalysis": {
            "averagePrice": round(price * 1.1),
            "marketPosition": market_position(price),
            "differentiationFactors": ["Authentic craftsmanship", "Cultural heritage", "Sustainable materials"],
        },
        "demandForecast": {
            "nextMonth": 85,
            "quarterlyTrend": "Increasing",
            "yearlyGrowth": 21,
        },
        "pricingFactors": [
            "Material quality and authenticity",
            "Regional craftsmanship reputation",
            "Market demand trends",
            "Artisan skill level",
            "Cultural significance",
        ],
        "recommendations": [
            "Position as premium authentic product with heritage value",
            "Highlight unique craftsmanship and cultural story",
            "Consider seasonal pricing during festivals",
            "Bundle with related artisan products for higher value",
        ],
        "sapBusinessInsights": {"profitAnalysis": {"grossMargin": 55, "profitHealthScore": 82}},
        "sapService": "SAP Business Intelligence Analytics",
        "confidence": 85,
        "isFallback": True,
        "lastUpdated": _now(),
    }


def template_description(product: Dict[str, Any]) -> str:
    category = (product.get("category") or "default").lower()
    template = DESCRIPTION_TEMPLATES.get(category, DESCRIPTION_TEMPLATES["default"])
    base = template.format(
        material=product.get("material") or "traditional materials",
        region=product.get("region") or "India",
        category=product.get("category") or "handicraft",
    )
    return (
        f"{base} {MARKET_INTELLIGENCE['keyTrends'][0]} makes this piece particularly valuable "
        "for discerning collectors and enthusiasts of traditional art forms."
    )


class BusinessAIService:
    """
    Pricing and copy for listings.
    Every method answers: LLM output when it works, the computed version (isFallback) when it does not.
    """

    def __init__(self, llm: GroqClient):
        self.llm = llm

    def predict_price(self, product: Dict[str, Any]) -> Dict[str, Any]:
        result = pricing_fallback(product)
        prompt = (
            "Analyze this artisan product and provide an intelligent price prediction in Indian rupees.\n"
            f"Product: {product.get('name') or 'Artisan Product'}\n"
            f"Category: {product.get('category') or 'Handicraft'}\n"
            f"Region: {product.get('region') or 'India'}\n"
            f"Materials: {product.get('material') or 'Traditional materials'}\n"
            f"Weight: {product.get('weight') or 'Not specified'}\n"
            f"Reference price from category tables: {result['suggestedPrice']}\n\n"
            "Return JSON with: predicted_price (number), confidence_score (0-100), "
            "price_range (object with min/max numbers), ai_reasoning (string), "
            "pricingFactors (array of 4-5 strings), recommendations (array of 3-4 strings), "
            "market_factors (array of strings)."
        )
        try:
            ai = self.llm.complete_json(prompt)
        except LLMUnavailable as e:
            logger.warning(f"Price prediction falling back to computed pricing: {e}")
            return result

        price = _number(ai.get("predicted_price"))
        if not price or price <= 0:
            logger.warning("LLM price prediction had no usable predicted_price, using computed pricing")
            return result

        price = round(price)
        price_range = ai.get("price_range") if isinstance(ai.get("price_range"), dict) else {}
        low = _number(price_range.get("min")) or price * 0.75
        high = _number(price_range.get("max")) or price * 1.35

        result["suggestedPrice"] = price
        result["priceRange"] = {"min": round(low), "max": round(high)}
        result["competitorAnalysis"]["averagePrice"] = round(price * 1.1)
        result["competitorAnalysis"]["marketPosition"] = market_position(price)
        result["pricingFactors"] = string_list(ai.get("pricingFactors"), result["pricingFactors"])
        result["recommendations"] = string_list(ai.get("recommendations"), result["recommendations"])
        result["marketFactors"] = string_list(ai.get("market_factors"), [])
        result["aiReasoning"] = ai.get("ai_reasoning")
        result["confidence"] = int(_number(ai.get("confidence_score")) or result["confidence"])
        result["sapService"] = "SAP Business AI (Groq Intelligence)"
        result["isFallback"] = False
        return result

    def generate_description(self, product: Dict[str, Any]) -> Dict[str, Any]:
        prompt = (
            "Generate an engaging and detailed product description for a handcrafted artisan product "
            "with the following details:\n"
            f"Product Name: {product['name']}\n"
            f"Category: {product.get('category') or 'Handcraft'}\n"
            f"State/Region: {product.get('region') or 'India'}\n"
            f"Material: {product.get('material') or 'Traditional materials'}\n"
            f"Weight: {product.get('weight') or 'Not specified'}\n"
            f"Color: {product.get('color') or 'Natural colors'}\n"
            f"Additional Info: {product.get('additionalInfo') or 'No additional information'}\n\n"
            "Highlight the craftsmanship, the cultural heritage of the region and the materials. "
            "Use warm, inviting language, include care instructions if relevant and keep it between "
            "100-200 words."
        )
        try:
            text = self.llm.complete(
                [{"role": "system", "content": COPYWRITER_PROMPT}, {"role": "user", "content": prompt}],
                temperature=0.7,
                max_tokens=300,
            )
            return {
                "success": True,
                "description": text,
                "powered_by": "Groq Llama 3.1",
                "timestamp": _now(),
                "isFallback": False,
            }
        except LLMUnavailable as e:
            logger.warning(f"Description generation falling back to template: {e}")
            return {
                "success": True,
                "description": (
                    f"This beautiful handcrafted {product['name']} showcases the rich artisan tradition of "
                    f"{product.get('region') or 'India'}."
                ),
                "powered_by": "Template",
                "timestamp": _now(),
                "isFallback": True,
            }

    def generate_content(self, product: Dict[str, Any]) -> Dict[str, Any]:
        content = {
            "description": template_description(product),
            "marketingHeadlines": [
                "Authentic Artisan Craftsmanship",
                "Traditional Heritage Design",
                "Premium Quality Materials",
            ],
            "keyFeatures": [
                "Handcrafted Quality",
                "Traditional Techniques",
                "Cultural Heritage",
                "Unique Design",
                "Premium Materials",
            ],
            "seoKeywords": [
                "artisan", "handicraft", "traditional", "handmade", "cultural",
                "authentic", "premium", "heritage", "craftsmanship", "unique",
            ],
            "targetAudience": "Culture enthusiasts and quality-conscious buyers",
            "contentStrategy": "Focus on authenticity and traditional craftsmanship value",
            "sapAnalytics": {
                "marketIntelligence": MARKET_INTELLIGENCE,
                "pricingInsights": pricing_fallback(product),
            },
            "sapContentMetrics": {
                "sentimentScore": 87,
                "marketRelevance": 84,
                "businessIntelligence": 89,
                "competitiveAdvantage": 82,
            },
            "recommendations": [
                "Utilize SAP Business AI for enhanced content strategy",
                "Implement SAP Analytics for market optimization",
                "Leverage SAP Search for competitive insights",
            ],
            "sapServices": ["SAP Business AI (Computed)", "SAP Analytics (Computed)"],
            "sapVersion": "SAP Business Intelligence v3.0",
            "timestamp": _now(),
            "isFallback": True,
        }

        prompt = (
            "Create compelling marketing content for this artisan product.\n"
            f"Product Details:\n{json.dumps(product, indent=2, default=str)}\n\n"
            "Return JSON with: product_description (engaging 2-3 sentences), marketing_headlines (array of 3), "
            "key_features (array of 5), seo_keywords (array of 10), target_audience (string), "
            "content_strategy (string)."
        )
        try:
            ai = self.llm.complete_json(prompt, temperature=0.4, max_tokens=1200)
        except LLMUnavailable as e:
            logger.warning(f"Content generation falling back to templates: {e}")
            return content

        if not ai.get("product_description"):
            return content

        content.update(
            {
                "description": str(ai["product_description"]),
                "marketingHeadlines": string_list(ai.get("marketing_headlines"), content["marketingHeadlines"]),
                "keyFeatures": string_list(ai.get("key_features"), content["keyFeatures"]),
                "seoKeywords": string_list(ai.get("seo_keywords"), content["seoKeywords"]),
                "targetAudience": ai.get("target_audience") or content["targetAudience"],
                "contentStrategy": ai.get("content_strategy") or content["contentStrategy"],
                "sapServices": ["SAP Business AI (Groq Intelligence)"],
                "sapVersion": "SAP Business Intelligence v3.0 (Groq Enhanced)",
                "isFallback": False,
            }
        )
        return content

    def status(self) -> Dict[str, Any]:
        llm_ready = self.llm.is_configured()
        mode = "LLM" if llm_ready else "Computed fallback"
        return {
            "success": True,
            "services": {
                "pricing": llm_ready,
                "contentGeneration": llm_ready,
                "descriptions": llm_ready,
                "fallbackIntelligence": True,
            },
            "summary": {
                "pricing": mode,
                "contentGeneration": mode,
                "descriptions": mode,
            },
            "model": self.llm.model,
            "timestamp": _now(),
            "integration_level": "SAP Business AI Suite",
        }
