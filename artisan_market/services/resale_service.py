import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from artisan_market.data.models.resale import ResaleInterestModel, ResaleListingModel
from artisan_market.domain.errors import NotFoundError
from artisan_market.repos.resale_repo import ResaleRepo
from artisan_market.repos.user_repo import UserRepo
from artisan_market.services.media_service import MediaService
from artisan_market.utils.dates import as_utc, utcnow
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)

CONDITION_DETAILS = {
    "with-tag": {
        "title": "With Tag - Just Like New",
        "description": "Original tags intact, pristine condition, no wear signs",
        "priceMultiplier": 0.85,
    },
    "without-tag": {
        "title": "Without Tag - Good to Fair",
        "description": "Excellent condition, minimal wear, well maintained",
        "priceMultiplier": 0.65,
    },
    "lesser-quality": {
        "title": "Lesser Quality",
        "description": "Visible wear, some flaws, but still functional and beautiful",
        "priceMultiplier": 0.45,
    },
}


def resale_price(original_price: Decimal, condition: str) -> Decimal:
    multiplier = Decimal(str(CONDITION_DETAILS[condition]["priceMultiplier"]))
    return (Decimal(str(original_price)) * multiplier).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def discount_percentage(original_price: Decimal, current_price: Decimal) -> int:
    if not original_price:
        return 0
    ratio = (Decimal(str(original_price)) - Decimal(str(current_price))) / Decimal(str(original_price)) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def listing_tags(category: str, condition: str) -> List[str]:
    return [category.lower(), condition, "resale", "handcrafted"]


def normalize_images(images: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out = [
        {"url": i["url"], "publicId": i.get("public_id"), "isPrimary": bool(i.get("is_primary"))}
        for i in images
    ]
    # first image is primary unless one is flagged
    if out and not any(i["isPrimary"] for i in out):
        out[0]["isPrimary"] = True
    return out


class ResaleService:
    """Second-hand listings. Price follows the condition multiplier of the original price."""

    def __init__(self, db: Session, media: MediaService | None = None):
        self.repo = ResaleRepo(db)
        self.users = UserRepo(db)
        self.media = media

    def to_dict(self, listing: ResaleListingModel) -> Dict[str, Any]:
        listed_at = as_utc(listing.listed_at)
        return {
            "id": listing.id,
            "product_name": listing.product_name,
            "category": listing.category,
            "description": listing.description,
            "original_price": listing.original_price,
            "current_price": listing.current_price,
            "condition": listing.condition,
            "condition_details": listing.condition_details,
            "images": listing.images or [],
            "seller_id": listing.seller_id,
            "seller_name": listing.seller_name,
            "seller_contact": listing.seller_contact,
            "sap_analytics": listing.sap_analytics,
            "status": listing.status,
            "is_visible": listing.is_visible,
            "views": listing.views,
            "location": listing.location,
            "tags": listing.tags or [],
            "listed_at": listed_at,
            "updated_at": as_utc(listing.updated_at),
            "sold_at": as_utc(listing.sold_at),
            "discount_percentage": discount_percentage(listing.original_price, listing.current_price),
            "days_since_listed": math.ceil(abs((utcnow() - listed_at).total_seconds()) / 86400),
            "interested_buyers": [
                {"user_id": b.user_id, "message": b.message, "contacted_at": as_utc(b.contacted_at)}
                for b in listing.interested_buyers
            ],
        }

    def _get(self, listing_id: int) -> ResaleListingModel:
        listing = self.repo.get(listing_id)
        if not listing:
            raise NotFoundError("Resale listing not found")
        return listing

    def _get_owned(self, listing_id: int, user_id: int, action: str) -> ResaleListingModel:
        listing = self._get(listing_id)
        if listing.seller_id != user_id:
            raise PermissionError(f"Not authorized to {action} this listing")
        return listing

    #queries
    def search(
        self,
        category: str | None = None,
        condition: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        sort_by: str = "listedAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 12,
    ) -> Dict[str, Any]:
        page = max(1, page)
        limit = max(1, min(limit, 100))
        filters = {
            "category": None if category in (None, "", "all") else category,
            "condition": None if condition in (None, "", "all") else condition,
            "min_price": min_price,
            "max_price": max_price,
        }
        items, total = self.repo.search_active(filters, sort_by, sort_order, page, limit)
        return {
            "success": True,
            "data": [self.to_dict(i) for i in items],
            "pagination": {
                "current_page": page,
                "total_pages": math.ceil(total / limit),
                "total_items": total,
                "items_per_page": limit,
            },
        }

    def list_for_seller(self, user_id: int, status: str = "all") -> List[Dict[str, Any]]:
        listings = self.repo.list_by_seller(user_id, None if status == "all" else status)
        return [self.to_dict(i) for i in listings]

    def stats(self, user_id: int) -> Dict[str, int]:
        return self.repo.seller_stats(user_id)

    def view(self, listing_id: int, viewer_id: int | None = None) -> Dict[str, Any]:
        listing = self._get(listing_id)
        if viewer_id is None or viewer_id != listing.seller_id:
            self.repo.increment_views(listing_id)
            listing = self.repo.refresh(listing)
        return self.to_dict(listing)

    #commands
    def create(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        user = self.users.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        condition = data["condition"]
        sap_analytics = data.get("sap_analytics")
        if sap_analytics:
            sap_analytics = {**sap_analytics, "timestamp": utcnow().isoformat()}

        listing = self.repo.create(
            ResaleListingModel(
                product_name=data["product_name"],
                category=data["category"],
                description=data["description"],
                original_price=data["original_price"],
                current_price=resale_price(data["original_price"], condition),
                condition=condition,
                condition_details=CONDITION_DETAILS[condition],
                images=normalize_images(data.get("images") or []),
                seller_id=user.id,
                seller_name=user.full_name or user.user_name,
                seller_contact=data.get("seller_contact") or user.email,
                sap_analytics=sap_analytics,
                location=data.get("location") or {"state": "India", "city": "", "pincode": ""},
                tags=listing_tags(data["category"], condition),
                status="active",
            )
        )
        logger.info(f"Resale listing {listing.id} created by user {user_id} at {listing.current_price}")
        return self.to_dict(listing)

    def update(self, listing_id: int, user_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        listing = self._get_owned(listing_id, user_id, "update")

        if "images" in changes:
            changes["images"] = normalize_images(changes["images"] or [])
        for field, value in changes.items():
            setattr(listing, field, value)

        if "condition" in changes or "original_price" in changes:
            listing.current_price = resale_price(listing.original_price, listing.condition)
            listing.condition_details = CONDITION_DETAILS[listing.condition]
        if "condition" in changes or "category" in changes:
            listing.tags = listing_tags(listing.category, listing.condition)
        if changes.get("status") == "sold" and not listing.sold_at:
            listing.sold_at = utcnow()

        listing = self.repo.save(listing)
        return self.to_dict(listing)

    def delete(self, listing_id: int, user_id: int):
        listing = self._get_owned(listing_id, user_id, "delete")
        public_ids = [i.get("publicId") for i in (listing.images or [])]

        self.repo.delete(listing)
        if self.media and public_ids:
            removed = self.media.destroy_images(public_ids)
            logger.info(f"Removed {removed}/{len(public_ids)} images of resale listing {listing_id}")

    def mark_sold(self, listing_id: int, user_id: int) -> Dict[str, Any]:
        listing = self._get_owned(listing_id, user_id, "update")
        listing.status = "sold"
        listing.sold_at = utcnow()
        listing = self.repo.save(listing)
        logger.info(f"Resale listing {listing_id} marked sold by seller")
        return self.to_dict(listing)

    def express_interest(self, listing_id: int, user_id: int, message: str | None = None):
        listing = self._get(listing_id)
        if listing.seller_id == user_id:
            raise ValueError("Cannot express interest in your own listing")
        if self.repo.has_interest(listing_id, user_id):
            raise ValueError("You have already expressed interest in this listing")

        self.repo.add_interest(
            ResaleInterestModel(
                listing_id=listing_id,
                user_id=user_id,
                message=message or "Interested in this item",
                contacted_at=utcnow(),
            )
        )
        logger.info(f"User {user_id} interested in resale listing {listing_id}")
