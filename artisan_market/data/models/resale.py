from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from artisan_market.data.database import Base

RESALE_CATEGORIES = (
    "Art", "Pottery", "Fashion", "Crafts", "Crochet", "Accessories",
    "Jewelry", "Textiles", "Woodwork", "Metalwork", "Paintings", "Sculptures",
)
RESALE_STATUSES = ("active", "sold", "inactive", "pending")


class ResaleListingModel(Base):
    __tablename__ = "resale_listings"
    __table_args__ = (
        Index("ix_resale_category_status", "category", "status"),
        Index("ix_resale_seller_status", "seller_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    product_name = Column(String(200), nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)

    original_price = Column(Numeric(12, 2), nullable=False)
    current_price = Column(Numeric(12, 2), nullable=False, index=True)

    condition = Column(String(20), nullable=False, index=True)
    condition_details = Column(JSON, nullable=True)

    images = Column(JSON, nullable=False, default=list)  # [{url, publicId, isPrimary}]

    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    seller_name = Column(String(200), nullable=True)
    seller_contact = Column(String(200), nullable=True)

    sap_analytics = Column(JSON, nullable=True)

    status = Column(String(20), nullable=False, default="active")
    is_visible = Column(Boolean, nullable=False, default=True)
    views = Column(Integer, nullable=False, default=0)

    location = Column(JSON, nullable=True)  # {state, city, pincode}
    tags = Column(JSON, nullable=False, default=list)

    listed_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    sold_at = Column(DateTime(timezone=True), nullable=True)

    interested_buyers = relationship(
        "ResaleInterestModel",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by="ResaleInterestModel.id",
    )


class ResaleInterestModel(Base):
    __tablename__ = "resale_interests"
    __table_args__ = (UniqueConstraint("listing_id", "user_id", name="uq_resale_interest_user"),)

    id = Column(Integer, primary_key=True)
    listing_id = Column(Integer, ForeignKey("resale_listings.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    message = Column(String(500), nullable=True)
    contacted_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    listing = relationship("ResaleListingModel", back_populates="interested_buyers")
