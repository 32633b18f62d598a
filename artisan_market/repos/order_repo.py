from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from artisan_market.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, pk: int) -> OrderModel | None:
        return self.db.get(OrderModel, pk)

    def get_by_order_id(self, order_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.order_id == order_id)
        ).scalar_one_or_none()

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order

    def list_paid_for_buyer(self, buyer_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.buyer_id == buyer_id, OrderModel.status == "paid")
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def list_paid_for_seller(self, seller_id: int, since: datetime | None = None) -> List[OrderModel]:
        stmt = select(OrderModel).where(
            OrderModel.seller_id == seller_id,
            OrderModel.status == "paid",
        )
        if since is not None:
            stmt = stmt.where(OrderModel.created_at >= since)
        return list(self.db.execute(stmt.order_by(OrderModel.created_at.asc())).scalars())

    def list_recent_for_seller(self, seller_id: int, limit: int = 5) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.seller_id == seller_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
                .limit(limit)
            ).scalars()
        )

    # status transitions
    # every transition is conditional on status = 'pending', so a terminal
    # state is never overwritten and concurrent verifiers race on one row

    def mark_paid_if_pending(self, order_id: str, payment_details: Dict[str, Any] | None) -> int:
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.order_id == order_id, OrderModel.status == "pending")
            .values(status="paid", payment_details=payment_details)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def transition_if_pending(self, order_id: str, status: str) -> int:
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.order_id == order_id, OrderModel.status == "pending")
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def expire_pending_before(self, cutoff: datetime) -> int:
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.status == "pending", OrderModel.created_at < cutoff)
            .values(status="expired")
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
