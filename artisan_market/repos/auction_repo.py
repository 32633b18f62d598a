from decimal import Decimal
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from artisan_market.data.models.auction import AuctionModel
from artisan_market.data.models.bid import BidModel


class AuctionRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_auction(self, auction: AuctionModel) -> AuctionModel:
        self.db.add(auction)
        self.db.commit()
        self.db.refresh(auction)
        return auction

    def get_auction(self, auction_id: int) -> AuctionModel | None:
        return self.db.execute(
            select(AuctionModel)
            .options(selectinload(AuctionModel.bids))
            .where(AuctionModel.id == auction_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_auctions(self) -> List[AuctionModel]:
        return list(
            self.db.execute(
                select(AuctionModel)
                .options(selectinload(AuctionModel.bids))
                .order_by(AuctionModel.start_time.desc())
            ).scalars()
        )

    def delete_auction(self, auction: AuctionModel):
        self.db.delete(auction)
        self.db.commit()

    def get_highest_bid(self, auction_id: int) -> Decimal | None:
        return self.db.execute(
            select(func.max(BidModel.amount)).where(BidModel.auction_id == auction_id)
        ).scalar()

    def add_bid(self, bid: BidModel):
        self.db.add(bid)
        self.db.flush()

    def bump_version(self, auction_id: int, old_version: int) -> int:
        result = self.db.execute(
            update(AuctionModel)
            .where(AuctionModel.id == auction_id, AuctionModel.version == old_version)
            .values(version=old_version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
