from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from artisan_market.data.models.auction import AuctionModel
from artisan_market.data.models.bid import BidModel
from artisan_market.domain.errors import BidRejected, NotFoundError
from artisan_market.repos.auction_repo import AuctionRepo
from artisan_market.repos.user_repo import UserRepo
from artisan_market.services.lock_service import LockService
from artisan_market.utils.dates import as_utc, utcnow
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)


def auction_status(start_time: datetime, end_time: datetime, now: datetime) -> str:
    if now < start_time:
        return "not-started"
    if now >= end_time:
        return "ended"
    return "live"


class AuctionService:
    """
    Auctions with append-only bids.
    Bids on one auction are serialized by a redis lock, the append itself is guarded by the auction version.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.repo = AuctionRepo(db)
        self.users = UserRepo(db)
        self.lock_service = lock_service

    def _to_dict(self, auction: AuctionModel) -> Dict[str, Any]:
        start = as_utc(auction.start_time)
        end = start + timedelta(minutes=auction.duration)
        bids = [
            {
                "user_id": b.user_id,
                "user_name": b.user_name,
                "amount": b.amount,
                "time": as_utc(b.time),
            }
            for b in auction.bids
        ]
        return {
            "id": auction.id,
            "product_name": auction.product_name,
            "product_description": auction.product_description,
            "product_image_url": auction.product_image_url,
            "product_material": auction.product_material,
            "product_weight": auction.product_weight,
            "product_color": auction.product_color,
            "seller_id": auction.seller_id,
            "seller_name": auction.seller_name,
            "base_price": auction.base_price,
            "start_time": start,
            "duration": auction.duration,
            "end_time": end,
            "status": auction_status(start, end, utcnow()),
            "highest_bid": max((b.amount for b in auction.bids), default=None),
            "bids": bids,
            "created_at": as_utc(auction.created_at),
        }

    #query
    def get_auction(self, auction_id: int) -> Dict[str, Any]:
        auction = self.repo.get_auction(auction_id)
        if not auction:
            raise NotFoundError("Auction not found")
        return self._to_dict(auction)

    def list_auctions(self) -> List[Dict[str, Any]]:
        return [self._to_dict(a) for a in self.repo.list_auctions()]

    #commands
    def create_auction(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not self.users.get_user(data["seller_id"]):
            raise NotFoundError("Seller not found")

        data["start_time"] = as_utc(data["start_time"])
        created = self.repo.create_auction(AuctionModel(version=1, **data))
        logger.info(f"Created auction {created.id} ({created.product_name}) starting {created.start_time}")
        return self.get_auction(created.id)

    def delete_auction(self, auction_id: int):
        auction = self.repo.get_auction(auction_id)
        if not auction:
            raise NotFoundError("Auction not found")
        self.repo.delete_auction(auction)
        logger.info(f"Deleted auction {auction_id}")

    def place_bid(self, auction_id: int, user_id: int, user_name: str, amount: Decimal) -> Dict[str, Any]:
        """Accept a bid or raise BidRejected. Returns the updated auction."""
        owner = self.lock_service.new_owner_token()

        if not self.lock_service.acquire_auction_lock(auction_id, owner):
            raise BidRejected("Another bid is being processed, please retry")

        try:
            auction = self.repo.get_auction(auction_id)
            if not auction:
                raise BidRejected("Auction not found")

            if auction.seller_id == user_id:
                raise BidRejected("You cannot bid on your own auction.")

            now = utcnow()
            start = as_utc(auction.start_time)
            if now < start:
                raise BidRejected("Auction not started")
            if now >= start + timedelta(minutes=auction.duration):
                raise BidRejected("Auction ended")

            highest = self.repo.get_highest_bid(auction_id)
            floor = highest if highest is not None else auction.base_price
            if Decimal(str(amount)) <= Decimal(str(floor)):
                raise BidRejected("Bid too low")

            if not self.users.get_user(user_id):
                raise BidRejected("User not found")

            old_version = auction.version
            self.repo.add_bid(
                BidModel(auction_id=auction_id, user_id=user_id, user_name=user_name, amount=amount, time=now)
            )

            # UPDATE auctions SET version = v + 1 WHERE id = :id AND version = v
            rowcount = self.repo.bump_version(auction_id, old_version)
            if rowcount == 0:
                self.repo.rollback()
                raise BidRejected("Auction was updated by another bid, please retry")

            self.repo.commit()
            logger.info(f"Bid {amount} by user {user_id} accepted on auction {auction_id}, version {old_version + 1}")

        finally:
            self.lock_service.release_auction_lock(auction_id, owner)

        return self.get_auction(auction_id)
