import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from artisan_market.data.models.order import ORDER_STATUSES, TERMINAL_STATUSES, OrderModel
from artisan_market.domain.errors import NotFoundError, PaymentGatewayError
from artisan_market.repos.order_repo import OrderRepo
from artisan_market.repos.resale_repo import ResaleRepo
from artisan_market.repos.user_repo import UserRepo
from artisan_market.services.notification_service import NotificationService
from artisan_market.services.payment_gateway import (
    CashfreeClient,
    build_order_payload,
    extract_payment_details,
)
from artisan_market.utils.dates import add_months, as_utc, utcnow
from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import (
    FRONTEND_URL,
    SELLER_COMMISSION_RATE,
    SELLER_COMMISSION_THRESHOLD,
    SUBSCRIPTION_PRICES,
)

logger = get_logger(__name__)

# gateway order_status -> local status, PAID is handled separately
GATEWAY_STATUS_MAP = {
    "ACTIVE": "pending",
    "EXPIRED": "expired",
    "TERMINATED": "cancelled",
    "TERMINATION_REQUESTED": "cancelled",
    "FAILED": "failed",
    "USER_DROPPED": "failed",
}

PLAN_NAMES = {
    "monthly": "Artisan Plan - Monthly",
    "yearly": "Artisan Plan - Yearly",
}


def generate_order_id() -> str:
    return f"ORDER_{uuid.uuid4().hex}"


def map_gateway_status(gateway_status: str) -> str | None:
    status = GATEWAY_STATUS_MAP.get(gateway_status)
    if status is None and gateway_status.lower() in ORDER_STATUSES:
        status = gateway_status.lower()
    return status


def subscription_snapshot(plan: str) -> Dict[str, Any]:
    return {
        "productId": f"artisan-subscription-{plan}",
        "productName": PLAN_NAMES[plan],
        "productPrice": SUBSCRIPTION_PRICES[plan],
        "productCategory": "Subscription",
    }


def seller_share(gross: Decimal) -> Decimal:
    """Seller's cut once commission applies, rounded half-up to whole rupees."""
    rate = Decimal("1") - Decimal(str(SELLER_COMMISSION_RATE))
    return (gross * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class PaymentService:
    """
    Order lifecycle against the payment gateway.

    - orders are created pending, the gateway is asked for a payment session
    - pending -> paid is one conditional UPDATE, side effects only run for the caller that won it
    - any other gateway status is copied onto a still-pending order
    """

    def __init__(self, db: Session, gateway: CashfreeClient):
        self.orders = OrderRepo(db)
        self.users = UserRepo(db)
        self.resales = ResaleRepo(db)
        self.gateway = gateway

    # create

    def create_order(self, data: Dict[str, Any]) -> Dict[str, Any]:
        is_subscription = bool(data.get("is_subscription"))
        plan = data.get("subscription_plan") if is_subscription else None
        amount = Decimal(str(data["amount"]))

        if is_subscription:
            if plan not in SUBSCRIPTION_PRICES:
                raise ValueError("subscriptionPlan must be monthly or yearly")
            expected = SUBSCRIPTION_PRICES[plan]
            if amount != Decimal(expected):
                raise ValueError(f"Invalid amount for {plan} plan. Expected: Rs {expected}")

        buyer = self.users.get_by_email(data["buyer_email"])
        if not buyer:
            raise NotFoundError("Buyer not found")

        seller_id = None if is_subscription else data.get("seller_id")
        if seller_id is not None and not self.users.get_user(seller_id):
            logger.warning(f"Unknown seller {seller_id} on new order, storing without seller")
            seller_id = None

        order_id = generate_order_id()
        product_details = subscription_snapshot(plan) if is_subscription else (data.get("product_details") or {})

        order = self.orders.create_order(
            OrderModel(
                order_id=order_id,
                buyer_id=buyer.id,
                seller_id=seller_id,
                product_details=product_details,
                customer_details={
                    "name": data["name"],
                    "email": buyer.email,
                    "mobile": str(data["mobile"]),
                    "address": data["address"],
                },
                amount=amount,
                platform_fee=Decimal(str(data.get("platform_fee") or 0)),
                is_subscription=is_subscription,
                subscription_type=plan,
                status="pending",
            )
        )
        logger.info(f"Created pending order {order.order_id} for buyer {buyer.id} amount {amount}")

        landing = "subscription-success" if is_subscription else "payment-success"
        payload = build_order_payload(
            order_id=order_id,
            amount=amount,
            customer_id=buyer.id,
            name=data["name"],
            email=buyer.email,
            mobile=data["mobile"],
            return_url=f"{FRONTEND_URL}/{landing}?order_id={order_id}",
        )

        try:
            session = self.gateway.create_order(payload)
        except PaymentGatewayError:
            self.orders.transition_if_pending(order_id, "failed")
            self.orders.commit()
            logger.warning(f"Order {order_id} marked failed, gateway did not create a session")
            raise

        return {
            "success": True,
            "message": "Subscription order created successfully" if is_subscription else "Order created successfully",
            "order_id": order_id,
            "payment_session_id": session.get("payment_session_id"),
            "payment_url": session.get("payment_link"),
        }

    # verify

    def verify(self, order_id: str | None, subscription_only: bool = False) -> Dict[str, Any]:
        if not order_id:
            raise ValueError("Order ID is required")

        order = self.orders.get_by_order_id(order_id)
        if not order or (subscription_only and not order.is_subscription):
            raise NotFoundError("Subscription order not found" if subscription_only else "Order not found")

        if order.status == "paid":
            logger.info(f"Order {order_id} already paid, returning stored result")
            return {
                "success": True,
                "message": "Already processed",
                "status": "paid",
                "gateway_status": "PAID",
                "order": order,
            }

        gateway_order = self.gateway.fetch_order(order_id)
        gateway_status = str(gateway_order.get("order_status") or "").upper()
        logger.info(f"Gateway reports {gateway_status} for order {order_id}")

        if gateway_status == "PAID":
            details = extract_payment_details(gateway_order, self.gateway.fetch_payments(order_id))
            applied = self._confirm_paid(order, details)
            order = self.orders.refresh(order)
            if not applied and order.status in TERMINAL_STATUSES and order.status != "paid":
                # money was taken against an order that already expired or failed
                logger.error(
                    f"Gateway reports PAID for order {order_id} which is {order.status}, needs manual reconciliation"
                )
                return {
                    "success": False,
                    "message": f"Payment received after order was {order.status}",
                    "code": "PAYMENT_AFTER_TERMINAL_STATE",
                    "status": order.status,
                    "gateway_status": gateway_status,
                    "order": order,
                }
            return {
                "success": True,
                "message": "Payment verified and successful" if applied else "Already processed",
                "status": order.status,
                "gateway_status": gateway_status,
                "order": order,
            }

        local_status = map_gateway_status(gateway_status)
        if local_status and local_status != "pending":
            if self.orders.transition_if_pending(order_id, local_status):
                logger.info(f"Order {order_id} pending -> {local_status}")
            self.orders.commit()
        order = self.orders.refresh(order)

        return {
            "success": False,
            "message": gateway_status or "Payment not yet successful",
            "status": order.status,
            "gateway_status": gateway_status or order.status.upper(),
            "order": order,
        }

    def _confirm_paid(self, order: OrderModel, payment_details: Dict[str, Any]) -> bool:
        """Returns True only for the call that moved the order to paid."""
        try:
            if self.orders.mark_paid_if_pending(order.order_id, payment_details) != 1:
                self.orders.rollback()
                logger.info(f"Order {order.order_id} was confirmed concurrently, skipping side effects")
                return False

            if order.is_subscription:
                self._activate_subscription(order)
            else:
                if order.seller_id:
                    self._credit_seller(order)
                self._mark_resale_sold(order)

            self.orders.commit()
        except Exception:
            self.orders.rollback()
            raise

        logger.info(f"Order {order.order_id} paid")
        email = (order.customer_details or {}).get("email")
        if email:
            NotificationService.send_payment_confirmation(email, order.order_id, float(order.amount))
        return True

    def _activate_subscription(self, order: OrderModel):
        buyer = self.users.get_user(order.buyer_id)
        plan = order.subscription_type
        now = utcnow()

        if buyer:
            # a renewal extends from the current end date
            current_end = as_utc(buyer.subscription_end_date)
            start = current_end if current_end and current_end > now else now
            buyer.has_artisan_subscription = True
            buyer.subscription_type = plan
            buyer.subscription_date = now
            buyer.subscription_end_date = add_months(start, 12 if plan == "yearly" else 1)
            logger.info(f"User {buyer.id} subscribed ({plan}) until {buyer.subscription_end_date}")

        bonus = Decimal(SUBSCRIPTION_PRICES[plan])
        credited = self.users.credit_admins(bonus)
        logger.info(f"Credited {credited} admins with {bonus} for {order.order_id}")

    def _credit_seller(self, order: OrderModel):
        price = (order.product_details or {}).get("productPrice")
        if price is not None:
            gross = Decimal(str(price))
        else:
            gross = Decimal(str(order.amount)) - Decimal(str(order.platform_fee or 0))

        net = seller_share(gross)
        self.users.credit_seller(order.seller_id, gross, net, Decimal(SELLER_COMMISSION_THRESHOLD))
        logger.info(f"Credited seller {order.seller_id} for {order.order_id}: gross {gross}, net after commission {net}")

    def _mark_resale_sold(self, order: OrderModel):
        details = order.product_details or {}
        if details.get("productType") != "resale":
            return
        try:
            listing_id = int(details.get("productId"))
        except (TypeError, ValueError):
            logger.warning(f"Order {order.order_id} has a resale product without a listing id")
            return
        if self.resales.mark_sold(listing_id, utcnow()):
            logger.info(f"Resale listing {listing_id} sold via {order.order_id}")

    # status

    def get_status(self, order_id: str | None) -> Dict[str, Any]:
        if not order_id:
            raise ValueError("Order ID is required")
        order = self.orders.get_by_order_id(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return {"success": True, "order_id": order.order_id, "status": order.status}
