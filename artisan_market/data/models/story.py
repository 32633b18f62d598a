from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from artisan_market.data.database import Base

DEFAULT_STORY_AVATAR = "https://via.placeholder.com/150x150?text=User"


class StoryModel(Base):
    __tablename__ = "stories"
    __table_args__ = (Index("ix_stories_listing", "is_approved", "featured", "created_at"),)

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    role = Column(String(100), nullable=False)
    image = Column(String, nullable=False, default=DEFAULT_STORY_AVATAR)
    story_image = Column(String, nullable=True)
    story = Column(String(1000), nullable=False)
    rating = Column(Integer, nullable=False, default=5)

    is_approved = Column(Boolean, nullable=False, default=False)
    featured = Column(Boolean, nullable=False, default=False)

    location = Column(String(100), nullable=True)
    purchase_date = Column(DateTime(timezone=True), nullable=True)
    product_category = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
