from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from artisan_market.data.database import Base


class AuctionModel(Base):
    __tablename__ = "auctions"

    id = Column(Integer, primary_key=True)
    product_name = Column(String(200), nullable=False)
    product_description = Column(Text, nullable=True)
    product_image_url = Column(String, nullable=True)
    product_material = Column(String(100), nullable=True)
    product_weight = Column(String(50), nullable=True)
    product_color = Column(String(50), nullable=True)

    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_name = Column(String(200), nullable=False)

    base_price = Column(Numeric(12, 2), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes

    # bumped on every accepted bid
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    bids = relationship(
        "BidModel",
        back_populates="auction",
        cascade="all, delete-orphan",
        order_by="BidModel.id",
    )
