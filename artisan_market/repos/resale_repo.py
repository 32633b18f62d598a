from typing import Any, Dict, List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from artisan_market.data.models.resale import ResaleInterestModel, ResaleListingModel

SORTABLE_FIELDS = {
    "listedAt": ResaleListingModel.listed_at,
    "currentPrice": ResaleListingModel.current_price,
    "originalPrice": ResaleListingModel.original_price,
    "views": ResaleListingModel.views,
    "productName": ResaleListingModel.product_name,
}


class ResaleRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, listing: ResaleListingModel) -> ResaleListingModel:
        self.db.add(listing)
        self.db.commit()
        self.db.refresh(listing)
        return listing

    def get(self, listing_id: int) -> ResaleListingModel | None:
        return self.db.execute(
            select(ResaleListingModel)
            .options(selectinload(ResaleListingModel.interested_buyers))
            .where(ResaleListingModel.id == listing_id)
        ).scalar_one_or_none()

    def search_active(
        self,
        filters: Dict[str, Any],
        sort_by: str,
        sort_order: str,
        page: int,
        limit: int,
    ) -> Tuple[List[ResaleListingModel], int]:
        conditions = [
            ResaleListingModel.status == "active",
            ResaleListingModel.is_visible.is_(True),
        ]
        if filters.get("category"):
            conditions.append(ResaleListingModel.category == filters["category"])
        if filters.get("condition"):
            conditions.append(ResaleListingModel.condition == filters["condition"])
        if filters.get("min_price") is not None:
            conditions.append(ResaleListingModel.current_price >= filters["min_price"])
        if filters.get("max_price") is not None:
            conditions.append(ResaleListingModel.current_price <= filters["max_price"])

        total = self.db.execute(
            select(func.count(ResaleListingModel.id)).where(*conditions)
        ).scalar_one()

        column = SORTABLE_FIELDS.get(sort_by, ResaleListingModel.listed_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()

        items = list(
            self.db.execute(
                select(ResaleListingModel)
                .options(selectinload(ResaleListingModel.interested_buyers))
                .where(*conditions)
                .order_by(ordering, ResaleListingModel.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars()
        )
        return items, total

    def list_by_seller(self, seller_id: int, status: str | None = None) -> List[ResaleListingModel]:
        stmt = (
            select(ResaleListingModel)
            .options(selectinload(ResaleListingModel.interested_buyers))
            .where(ResaleListingModel.seller_id == seller_id)
        )
        if status:
            stmt = stmt.where(ResaleListingModel.status == status)
        return list(self.db.execute(stmt.order_by(ResaleListingModel.listed_at.desc())).scalars())

    def seller_stats(self, seller_id: int) -> Dict[str, int]:
        listings = self.db.execute(
            select(
                func.count(ResaleListingModel.id),
                func.coalesce(func.sum(ResaleListingModel.views), 0),
            ).where(ResaleListingModel.seller_id == seller_id)
        ).one()
        by_status = dict(
            self.db.execute(
                select(ResaleListingModel.status, func.count(ResaleListingModel.id))
                .where(ResaleListingModel.seller_id == seller_id)
                .group_by(ResaleListingModel.status)
            ).all()
        )
        interest = self.db.execute(
            select(func.count(ResaleInterestModel.id))
            .join(ResaleListingModel, ResaleInterestModel.listing_id == ResaleListingModel.id)
            .where(ResaleListingModel.seller_id == seller_id)
        ).scalar_one()
        return {
            "total_listings": listings[0],
            "active_listings": by_status.get("active", 0),
            "sold_listings": by_status.get("sold", 0),
            "total_views": int(listings[1]),
            "total_interest": interest,
        }

    def increment_views(self, listing_id: int) -> int:
        result = self.db.execute(
            update(ResaleListingModel)
            .where(ResaleListingModel.id == listing_id)
            .values(views=ResaleListingModel.views + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def mark_sold(self, listing_id: int, sold_at) -> int:
        # no commit, used inside payment confirmation
        result = self.db.execute(
            update(ResaleListingModel)
            .where(ResaleListingModel.id == listing_id, ResaleListingModel.status != "sold")
            .values(status="sold", sold_at=sold_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def has_interest(self, listing_id: int, user_id: int) -> bool:
        return self.db.execute(
            select(ResaleInterestModel.id).where(
                ResaleInterestModel.listing_id == listing_id,
                ResaleInterestModel.user_id == user_id,
            )
        ).first() is not None

    def add_interest(self, interest: ResaleInterestModel):
        self.db.add(interest)
        self.db.commit()

    def save(self, listing: ResaleListingModel) -> ResaleListingModel:
        self.db.add(listing)
        self.db.commit()
        self.db.refresh(listing)
        return listing

    def delete(self, listing: ResaleListingModel):
        self.db.delete(listing)
        self.db.commit()

    def refresh(self, listing: ResaleListingModel) -> ResaleListingModel:
        self.db.refresh(listing)
        return listing

