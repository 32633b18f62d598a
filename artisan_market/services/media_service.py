import time
from typing import Any, Dict, Iterable

import cloudinary
import cloudinary.uploader
import cloudinary.utils

from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import (
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_CLOUD_NAME,
)

logger = get_logger(__name__)


class MediaService:
    """Signed direct uploads and cleanup on Cloudinary."""

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
    ):
        self.cloud_name = cloud_name or CLOUDINARY_CLOUD_NAME
        self.api_key = api_key or CLOUDINARY_API_KEY
        self.api_secret = api_secret or CLOUDINARY_API_SECRET
        cloudinary.config(
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )

    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def upload_signature(self, timestamp: int | None = None) -> Dict[str, Any]:
        ts = timestamp or int(time.time())
        signature = cloudinary.utils.api_sign_request({"timestamp": ts}, self.api_secret)
        return {
            "timestamp": ts,
            "signature": signature,
            "apiKey": self.api_key,
            "cloudName": self.cloud_name,
        }

    def destroy_images(self, public_ids: Iterable[str]) -> int:
        """Best effort: a failed delete is logged, the listing is removed anyway."""
        removed = 0
        for public_id in public_ids:
            if not public_id:
                continue
            try:
                result = cloudinary.uploader.destroy(public_id)
                if result.get("result") == "ok":
                    removed += 1
            except Exception as e:
                logger.warning(f"Failed to delete image {public_id}: {e}")
        return removed
