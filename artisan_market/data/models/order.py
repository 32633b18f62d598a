from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)

from artisan_market.data.database import Base

ORDER_STATUSES = ("pending", "paid", "failed", "cancelled", "expired")
TERMINAL_STATUSES = ("paid", "failed", "cancelled", "expired")


class OrderModel(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'paid', 'failed', 'cancelled', 'expired')",
            name="ck_orders_status",
        ),
        CheckConstraint(
            "(NOT is_subscription AND subscription_type IS NULL) "
            "OR (is_subscription AND subscription_type IN ('monthly', 'yearly'))",
            name="ck_orders_subscription_type",
        ),
    )

    id = Column(Integer, primary_key=True)
    order_id = Column(String(64), nullable=False, unique=True, index=True)

    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # snapshots taken at order time
    product_details = Column(JSON, nullable=False, default=dict)
    customer_details = Column(JSON, nullable=False, default=dict)

    amount = Column(Numeric(12, 2), nullable=False)
    platform_fee = Column(Numeric(12, 2), nullable=False, default=0)

    is_subscription = Column(Boolean, nullable=False, default=False)
    subscription_type = Column(String(20), nullable=True)

    status = Column(String(20), nullable=False, default="pending")
    payment_details = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
