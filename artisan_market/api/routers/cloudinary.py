# artisan_market/api/routers/cloudinary.py
from fastapi import APIRouter, Depends, HTTPException

from artisan_market.api.deps import get_media_service
from artisan_market.services.media_service import MediaService

router = APIRouter(prefix="/api/cloudinary", tags=["media"])


@router.get("/cloudinary-signature")
def upload_signature(media: MediaService = Depends(get_media_service)):
    """Signed params for a direct browser upload to the image host."""
    if not media.is_configured():
        raise HTTPException(
            status_code=503,
            detail={"error": "Image uploads are not configured", "code": "MEDIA_NOT_CONFIGURED"},
        )
    return media.upload_signature()
