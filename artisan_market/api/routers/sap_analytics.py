# artisan_market/api/routers/sap_analytics.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from artisan_market.api.deps import get_llm_client, sap_rate_limit
from artisan_market.domain.schemas import ProductAnalysisIn
from artisan_market.services.analytics_cloud_service import AnalyticsCloudService
from artisan_market.services.business_ai_service import BusinessAIService
from artisan_market.services.llm_client import GroqClient
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["sap-analytics"])

limited = [Depends(sap_rate_limit)]


def _product(payload: ProductAnalysisIn) -> dict:
    product = payload.normalized()
    if not product["name"]:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Product name is required",
                "code": "VALIDATION_ERROR",
                "sapError": "INVALID_INPUT_DATA",
            },
        )
    return product


def _envelope(source: str, data: dict) -> dict:
    return {
        "success": True,
        "source": source,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# business AI

@router.post("/predict-price", dependencies=limited)
def predict_price(payload: ProductAnalysisIn, llm: GroqClient = Depends(get_llm_client)):
    product = _product(payload)
    logger.info(f"Price prediction requested for {product['name']}")
    return {"success": True, "data": BusinessAIService(llm).predict_price(product)}


@router.post("/generate-description", dependencies=limited)
def generate_description(payload: ProductAnalysisIn, llm: GroqClient = Depends(get_llm_client)):
    return BusinessAIService(llm).generate_description(_product(payload))


@router.post("/generate-sap-description", dependencies=limited)
def generate_sap_description(payload: ProductAnalysisIn, llm: GroqClient = Depends(get_llm_client)):
    return {"success": True, "data": BusinessAIService(llm).generate_content(_product(payload))}


@router.get("/test-sap-business-ai", dependencies=limited)
def test_business_ai(llm: GroqClient = Depends(get_llm_client)):
    return BusinessAIService(llm).status()


# analytics cloud

@router.post("/market-intelligence", dependencies=limited)
def market_intelligence(payload: ProductAnalysisIn, llm: GroqClient = Depends(get_llm_client)):
    data = AnalyticsCloudService(llm).market_intelligence(_product(payload))
    return _envelope("SAP Analytics Cloud - Market Intelligence", data)


@router.post("/pricing-analytics", dependencies=limited)
def pricing_analytics(payload: ProductAnalysisIn, llm: GroqClient = Depends(get_llm_client)):
    data = AnalyticsCloudService(llm).pricing_trends(_product(payload))
    return _envelope("SAP Analytics Cloud - Pricing Analytics", data)


@router.post("/customer-segments", dependencies=limited)
def customer_segments(payload: ProductAnalysisIn, llm: GroqClient = Depends(get_llm_client)):
    data = AnalyticsCloudService(llm).customer_segments(_product(payload))
    return _envelope("SAP Analytics Cloud - Customer Segmentation", data)


@router.post("/demand-forecast", dependencies=limited)
def demand_forecast(payload: ProductAnalysisIn, llm: GroqClient = Depends(get_llm_client)):
    data = AnalyticsCloudService(llm).demand_forecast(_product(payload))
    return _envelope("SAP Analytics Cloud - Demand Forecasting", data)


@router.post("/analytics-dashboard", dependencies=limited)
def analytics_dashboard(payload: ProductAnalysisIn, llm: GroqClient = Depends(get_llm_client)):
    return AnalyticsCloudService(llm).dashboard(_product(payload))


@router.get("/test-sac", dependencies=limited)
def test_sac(llm: GroqClient = Depends(get_llm_client)):
    return AnalyticsCloudService(llm).run_sample()


@router.get("/analytics-status")
def analytics_status():
    return AnalyticsCloudService.status()
