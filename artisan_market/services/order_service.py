from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from artisan_market.data.models.order import OrderModel
from artisan_market.domain.errors import NotFoundError
from artisan_market.repos.order_repo import OrderRepo
from artisan_market.repos.user_repo import UserRepo
from artisan_market.services.payment_service import generate_order_id
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    def __init__(self, db: Session):
        self.repo = OrderRepo(db)
        self.users = UserRepo(db)

    def create_order(self, data: Dict[str, Any]) -> OrderModel:
        """Store an order document as given, always pending."""
        if not self.users.get_user(data["buyer_id"]):
            raise NotFoundError("Buyer not found")

        seller_id = data.get("seller_id")
        if seller_id is not None and not self.users.get_user(seller_id):
            logger.warning(f"Dropping unknown seller {seller_id} from order")
            seller_id = None

        is_subscription = bool(data.get("is_subscription"))
        if is_subscription and not data.get("subscription_type"):
            raise ValueError("subscriptionType is required for subscription orders")

        order = self.repo.create_order(
            OrderModel(
                order_id=generate_order_id(),
                buyer_id=data["buyer_id"],
                seller_id=None if is_subscription else seller_id,
                product_details=data.get("product_details") or {},
                customer_details=data.get("customer_details") or {},
                amount=Decimal(str(data["amount"])),
                platform_fee=Decimal(str(data.get("platform_fee") or 0)),
                is_subscription=is_subscription,
                subscription_type=data.get("subscription_type") if is_subscription else None,
                status="pending",
            )
        )
        logger.info(f"Saved order {order.order_id} for buyer {order.buyer_id}")
        return order

    def paid_for_buyer(self, buyer_id: int) -> List[OrderModel]:
        return self.repo.list_paid_for_buyer(buyer_id)

    def get_order(self, pk: int) -> OrderModel:
        order = self.repo.get_order(pk)
        if not order:
            raise NotFoundError("Order not found")
        return order
