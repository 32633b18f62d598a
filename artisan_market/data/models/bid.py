from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from artisan_market.data.database import Base


class BidModel(Base):
    __tablename__ = "bids"

    id = Column(Integer, primary_key=True)
    auction_id = Column(Integer, ForeignKey("auctions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    user_name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    time = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    auction = relationship("AuctionModel", back_populates="bids")
