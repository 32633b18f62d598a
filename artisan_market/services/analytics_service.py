from collections import Counter, defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from artisan_market.repos.order_repo import OrderRepo
from artisan_market.repos.shop_card_repo import ShopCardRepo
from artisan_market.utils.dates import add_months, as_utc, utcnow
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)

RANGES = ("weekly", "monthly", "yearly")


def range_start(range_name: str, now: datetime) -> datetime:
    if range_name == "weekly":
        return now - timedelta(days=7)
    if range_name == "yearly":
        return add_months(now, -12)
    return add_months(now, -1)


def trend_key(created_at: datetime, range_name: str) -> str:
    if range_name == "weekly":
        year, week, _ = created_at.isocalendar()
        return f"{year}-W{week:02d}"
    return f"{created_at.year}-{created_at.month:02d}"


class AnalyticsService:
    """Sales reporting over paid orders."""

    def __init__(self, db: Session):
        self.orders = OrderRepo(db)
        self.products = ShopCardRepo(db)

    def seller_analytics(self, seller_id: int, range_name: str = "monthly") -> Dict[str, Any]:
        if range_name not in RANGES:
            raise ValueError("range must be weekly, monthly or yearly")

        since = range_start(range_name, utcnow())
        orders = self.orders.list_paid_for_seller(seller_id, since)

        total_revenue = sum((o.amount for o in orders), Decimal("0"))
        total_orders = len(orders)

        units = Counter()
        category_revenue = defaultdict(Decimal)
        trend = defaultdict(lambda: {"sales": Decimal("0"), "orders": 0})

        for o in orders:
            details = o.product_details or {}
            if details.get("productId") is not None:
                units[str(details["productId"])] += 1
                category_revenue[details.get("productCategory") or "Uncategorized"] += o.amount

            key = trend_key(as_utc(o.created_at), range_name)
            trend[key]["sales"] += o.amount
            trend[key]["orders"] += 1

        best_sellers = []
        for product_id, sold in units.most_common(5):
            if not product_id.isdigit():
                continue
            product = self.products.get(int(product_id))
            if not product:
                continue
            best_sellers.append(
                {
                    "id": product.id,
                    "product_name": product.product_name,
                    "product_category": product.product_category,
                    "product_image_url": product.product_image_url,
                    "product_price": product.product_price,
                    "quantity_sold": sold,
                    "total_revenue": Decimal(sold) * Decimal(str(product.product_price)),
                }
            )

        recent = self.orders.list_recent_for_seller(seller_id, limit=5)
        logger.info(f"Seller {seller_id} analytics ({range_name}): {total_orders} paid orders")

        return {
            "total_revenue": total_revenue,
            "total_orders": total_orders,
            "total_items_sold": sum(1 for o in orders if o.product_details),
            "avg_order_value": total_revenue / total_orders if total_orders else Decimal("0"),
            "best_selling_products": best_sellers,
            "sales_trend": [
                {"date": key, "sales": value["sales"], "orders": value["orders"]}
                for key, value in sorted(trend.items())
            ],
            "revenue_by_category": [
                {"category": category, "revenue": revenue} for category, revenue in category_revenue.items()
            ],
            "recent_orders": [
                {
                    "order_id": o.order_id,
                    "customer_name": (o.customer_details or {}).get("name") or "Unknown",
                    "order_date": as_utc(o.created_at),
                    "status": o.status,
                    "amount": o.amount,
                }
                for o in recent
            ],
        }

    def buyer_analytics(self, buyer_id: int) -> Dict[str, Any]:
        orders = self.orders.list_paid_for_buyer(buyer_id)

        category_stats = defaultdict(lambda: {"total": Decimal("0"), "count": 0})
        monthly_trend = defaultdict(Decimal)
        for o in orders:
            category = (o.product_details or {}).get("productCategory") or "Unknown"
            category_stats[category]["total"] += o.amount
            category_stats[category]["count"] += 1
            monthly_trend[trend_key(as_utc(o.created_at), "monthly")] += o.amount

        return {
            "total_orders": len(orders),
            "total_spent": sum((o.amount for o in orders), Decimal("0")),
            "category_stats": dict(category_stats),
            "monthly_trend": dict(sorted(monthly_trend.items())),
        }
