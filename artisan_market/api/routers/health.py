# artisan_market/api/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from artisan_market.api.deps import get_llm_client, get_media_service, get_payment_gateway
from artisan_market.services.llm_client import GroqClient
from artisan_market.services.media_service import MediaService
from artisan_market.services.payment_gateway import CashfreeClient
from artisan_market.utils.settings import APP_NAME, APP_VERSION, ENVIRONMENT

router = APIRouter(tags=["health"])


def _status(llm: GroqClient, media: MediaService, gateway: CashfreeClient):
    return {
        "status": "OK",
        "message": f"{APP_NAME} is running",
        "version": APP_VERSION,
        "environment": ENVIRONMENT,
        "services": {
            "cloudinary": "configured" if media.is_configured() else "not configured",
            "llm": "configured" if llm.is_configured() else "not configured",
            "paymentGateway": "configured" if gateway.is_configured() else "not configured",
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/")
def root(
    llm: GroqClient = Depends(get_llm_client),
    media: MediaService = Depends(get_media_service),
    gateway: CashfreeClient = Depends(get_payment_gateway),
):
    return _status(llm, media, gateway)


@router.get("/health")
def health(
    llm: GroqClient = Depends(get_llm_client),
    media: MediaService = Depends(get_media_service),
    gateway: CashfreeClient = Depends(get_payment_gateway),
):
    return _status(llm, media, gateway)
