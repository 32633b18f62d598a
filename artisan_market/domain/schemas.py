# artisan_market/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimal in, JSON number out
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

SubscriptionPlan = Literal["monthly", "yearly"]
OrderStatus = Literal["pending", "paid", "failed", "cancelled", "expired"]
ResaleCategory = Literal[
    "Art", "Pottery", "Fashion", "Crafts", "Crochet", "Accessories",
    "Jewelry", "Textiles", "Woodwork", "Metalwork", "Paintings", "Sculptures",
]
ResaleCondition = Literal["with-tag", "without-tag", "lesser-quality"]
ResaleStatus = Literal["active", "sold", "inactive", "pending"]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# users / auth

class UserCreate(CamelModel):
    user_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    full_name: str | None = Field(None, max_length=200)
    image_url: str | None = None
    is_artisan: bool = False


class UserOut(CamelModel):
    id: int
    user_name: str
    email: str
    full_name: str | None = None
    image_url: str | None = None
    is_admin: bool
    is_artisan: bool
    joining_date: datetime
    balance: Money
    total_earnings: Money
    has_artisan_subscription: bool
    subscription_date: datetime | None = None
    subscription_type: SubscriptionPlan | None = None
    subscription_end_date: datetime | None = None
    is_verified: bool
    auth_provider: str


class UserSavedOut(CamelModel):
    message: str
    user: UserOut


class ArtisanUpdate(CamelModel):
    is_artisan: bool


class SubscriptionUpdate(CamelModel):
    has_artisan_subscription: bool
    subscription_type: SubscriptionPlan | None = None
    subscription_date: datetime | None = None


class WalletOut(CamelModel):
    balance: Money
    user_name: str
    email: str


class RegisterIn(CamelModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    user_name: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str | None = Field(None, max_length=200)


class VerifyOtpIn(CamelModel):
    user_id: int = Field(..., gt=0)
    otp: str = Field(..., min_length=6, max_length=6)


class LoginIn(CamelModel):
    email: str
    password: str


class GoogleCodeIn(CamelModel):
    code: str = Field(..., min_length=1)


class RefreshTokenIn(CamelModel):
    refresh_token: str


class ForgotPasswordIn(CamelModel):
    email: str


class ResetPasswordIn(CamelModel):
    password: str = Field(..., min_length=8, max_length=128)


class AuthOut(CamelModel):
    status: str = "success"
    message: str | None = None
    token: str
    refresh_token: str | None = None
    user: UserOut


class RegisteredUser(CamelModel):
    user_id: int


class RegisterOut(CamelModel):
    status: str = "success"
    message: str
    data: RegisteredUser


class TokenOut(CamelModel):
    status: str = "success"
    token: str


class StatusMessageOut(CamelModel):
    status: str = "success"
    message: str


class LinkedUserOut(StatusMessageOut):
    user: UserOut


class MessageOut(CamelModel):
    message: str


# shop cards

class ShopCardCreate(CamelModel):
    product_name: str = Field(..., min_length=1, max_length=200)
    product_price: Decimal = Field(..., gt=0)
    product_state: str = Field(..., min_length=1)
    product_category: str = Field(..., min_length=1)
    product_seller_name: str = Field(..., min_length=1)
    seller_id: int | None = None
    product_image_url: str | None = None
    product_description: str | None = None
    product_material: str | None = None
    product_weight: str | None = None
    product_color: str | None = None
    is_cod_available: bool = False


class ShopCardUpdate(CamelModel):
    product_name: str | None = Field(None, min_length=1, max_length=200)
    product_price: Decimal | None = Field(None, gt=0)
    product_state: str | None = None
    product_category: str | None = None
    product_seller_name: str | None = None
    product_image_url: str | None = None
    product_description: str | None = None
    product_material: str | None = None
    product_weight: str | None = None
    product_color: str | None = None
    is_cod_available: bool | None = None


class SellerAssignIn(CamelModel):
    seller_id: int = Field(..., gt=0)


class ShopCardOut(CamelModel):
    id: int
    product_name: str
    product_price: Money
    product_state: str
    product_category: str
    product_seller_name: str
    seller_id: int | None = None
    product_image_url: str
    product_description: str | None = None
    product_material: str | None = None
    product_weight: str | None = None
    product_color: str | None = None
    is_cod_available: bool


class ProductsWithoutSellerOut(CamelModel):
    count: int
    products: List[ShopCardOut]


# auctions

class AuctionCreate(CamelModel):
    product_name: str = Field(..., min_length=1, max_length=200)
    product_description: str | None = None
    product_image_url: str | None = None
    product_material: str | None = None
    product_weight: str | None = None
    product_color: str | None = None
    seller_id: int = Field(..., gt=0)
    seller_name: str = Field(..., min_length=1)
    base_price: Decimal = Field(..., gt=0)
    start_time: datetime
    duration: int = Field(..., gt=0, description="Auction length in minutes")


class BidIn(CamelModel):
    user_id: int = Field(..., gt=0)
    user_name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)


class BidOut(CamelModel):
    user_id: int
    user_name: str
    amount: Money
    time: datetime


class AuctionOut(CamelModel):
    id: int
    product_name: str
    product_description: str | None = None
    product_image_url: str | None = None
    product_material: str | None = None
    product_weight: str | None = None
    product_color: str | None = None
    seller_id: int
    seller_name: str
    base_price: Money
    start_time: datetime
    duration: int
    end_time: datetime
    status: Literal["not-started", "live", "ended"]
    highest_bid: Money | None = None
    bids: List[BidOut]
    created_at: datetime


# cart

class CartAddIn(CamelModel):
    user_id: int = Field(..., gt=0)
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class CartUpdateIn(CamelModel):
    user_id: int = Field(..., gt=0)
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=0)


class CartRemoveIn(CamelModel):
    user_id: int = Field(..., gt=0)
    product_id: int = Field(..., gt=0)


class CartItemOut(CamelModel):
    product_id: int
    quantity: int
    product_name: str | None = None
    product_image_url: str | None = None
    product_price: Money
    product_category: str | None = None


class CartOut(CamelModel):
    user_id: int
    items: List[CartItemOut]
    total: Money


# payments / orders

class ProductDetailsIn(CamelModel):
    """Listing snapshot sent by checkout. Short keys (id, name, price...) are accepted too."""

    product_id: int | str | None = Field(None, validation_alias=AliasChoices("productId", "product_id", "id"))
    product_name: str | None = Field(None, validation_alias=AliasChoices("productName", "product_name", "name"))
    product_price: Money | None = Field(None, validation_alias=AliasChoices("productPrice", "product_price", "price"))
    product_category: str | None = Field(None, validation_alias=AliasChoices("productCategory", "product_category", "category"))
    product_image: str | None = Field(None, validation_alias=AliasChoices("productImage", "product_image", "image"))
    product_type: Literal["resale"] | None = None


class CreatePaymentOrderIn(CamelModel):
    name: str = Field(..., min_length=1)
    mobile: str = Field(..., min_length=10, max_length=15)
    amount: Decimal = Field(..., gt=0)
    address: str = Field(..., min_length=1)
    buyer_email: str = Field(..., pattern=EMAIL_PATTERN)
    seller_id: int | None = None
    product_details: ProductDetailsIn | None = None
    is_subscription: bool = False
    subscription_plan: SubscriptionPlan | None = None
    platform_fee: Decimal = Field(Decimal("0"), ge=0)


class SubscriptionOrderIn(CamelModel):
    name: str = Field(..., min_length=1)
    mobile: str = Field(..., min_length=10, max_length=15)
    amount: Decimal = Field(..., gt=0)
    address: str = Field(..., min_length=1)
    buyer_email: str = Field(..., pattern=EMAIL_PATTERN)
    subscription_plan: SubscriptionPlan


class CreatePaymentOrderOut(CamelModel):
    success: bool = True
    message: str
    order_id: str
    payment_session_id: str | None = None
    payment_url: str | None = None


class VerifyPaymentIn(CamelModel):
    order_id: str | None = None


class PaidOrderSummary(CamelModel):
    order_id: str
    status: OrderStatus
    amount: Money
    product_details: Dict[str, Any]


class VerifyPaymentOut(CamelModel):
    success: bool
    message: str
    code: str | None = None
    status: OrderStatus | None = None
    gateway_status: str | None = None
    order: PaidOrderSummary | None = None


class PaymentStatusOut(CamelModel):
    success: bool = True
    order_id: str
    status: OrderStatus


class OrderCreate(CamelModel):
    buyer_id: int = Field(..., gt=0)
    seller_id: int | None = None
    product_details: Dict[str, Any] = Field(default_factory=dict)
    customer_details: Dict[str, Any] = Field(default_factory=dict)
    amount: Decimal = Field(..., gt=0)
    platform_fee: Decimal = Field(Decimal("0"), ge=0)
    is_subscription: bool = False
    subscription_type: SubscriptionPlan | None = None


class OrderOut(CamelModel):
    id: int
    order_id: str
    buyer_id: int
    seller_id: int | None = None
    product_details: Dict[str, Any]
    customer_details: Dict[str, Any]
    amount: Money
    platform_fee: Money
    is_subscription: bool
    subscription_type: SubscriptionPlan | None = None
    status: OrderStatus
    payment_details: Dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class SubscriptionVerifyOut(CamelModel):
    success: bool
    message: str
    code: str | None = None
    order_status: str
    order: OrderOut


# resale

class ResaleImageIn(CamelModel):
    url: str = Field(..., min_length=1)
    public_id: str | None = None
    is_primary: bool = False


class LocationIn(CamelModel):
    state: str | None = None
    city: str | None = None
    pincode: str | None = None


class ResaleCreate(CamelModel):
    product_name: str = Field(..., min_length=1, max_length=200)
    category: ResaleCategory
    description: str = Field(..., min_length=1)
    original_price: Decimal = Field(..., gt=0)
    condition: ResaleCondition
    images: List[ResaleImageIn] = Field(default_factory=list)
    seller_contact: str | None = None
    location: LocationIn | None = None
    sap_analytics: Dict[str, Any] | None = None


class ResaleUpdate(CamelModel):
    product_name: str | None = Field(None, min_length=1, max_length=200)
    category: ResaleCategory | None = None
    description: str | None = None
    original_price: Decimal | None = Field(None, gt=0)
    condition: ResaleCondition | None = None
    images: List[ResaleImageIn] | None = None
    seller_contact: str | None = None
    location: LocationIn | None = None
    status: ResaleStatus | None = None
    is_visible: bool | None = None


class InterestIn(CamelModel):
    message: str | None = Field(None, max_length=500)


class InterestOut(CamelModel):
    user_id: int
    message: str | None = None
    contacted_at: datetime


class ResaleOut(CamelModel):
    id: int
    product_name: str
    category: str
    description: str
    original_price: Money
    current_price: Money
    condition: str
    condition_details: Dict[str, Any] | None = None
    images: List[Dict[str, Any]]
    seller_id: int
    seller_name: str | None = None
    seller_contact: str | None = None
    sap_analytics: Dict[str, Any] | None = None
    status: str
    is_visible: bool
    views: int
    location: Dict[str, Any] | None = None
    tags: List[str]
    listed_at: datetime
    updated_at: datetime
    sold_at: datetime | None = None
    discount_percentage: int
    days_since_listed: int
    interested_buyers: List[InterestOut] = Field(default_factory=list)


class ResaleEnvelope(CamelModel):
    success: bool = True
    message: str | None = None
    data: ResaleOut


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class ResaleListEnvelope(CamelModel):
    success: bool = True
    data: List[ResaleOut]
    pagination: Pagination | None = None


class ResaleStats(CamelModel):
    total_listings: int
    active_listings: int
    sold_listings: int
    total_views: int
    total_interest: int


class ResaleStatsEnvelope(CamelModel):
    success: bool = True
    data: ResaleStats


# stories

class StoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    role: str = Field(..., min_length=1, max_length=100)
    story: str = Field(..., min_length=1, max_length=1000)
    rating: int = Field(..., ge=1, le=5)
    image: str | None = None
    story_image: str | None = None
    location: str | None = Field(None, max_length=100)
    purchase_date: datetime | None = None
    product_category: str | None = None


class StoryOut(CamelModel):
    id: int
    name: str
    role: str
    image: str
    story_image: str | None = None
    story: str
    rating: int
    featured: bool
    location: str | None = None
    purchase_date: datetime | None = None
    product_category: str | None = None
    created_at: datetime


class StoryAdminOut(StoryOut):
    email: str
    is_approved: bool


class StoryApproveIn(CamelModel):
    featured: bool = False


class StoryPagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class StoryListOut(CamelModel):
    success: bool = True
    data: List[StoryOut]
    pagination: StoryPagination


class StoryEnvelope(CamelModel):
    success: bool = True
    message: str | None = None
    data: StoryOut


class StoryAdminListOut(CamelModel):
    success: bool = True
    data: List[StoryAdminOut]


class StoryAdminEnvelope(CamelModel):
    success: bool = True
    message: str | None = None
    data: StoryAdminOut


# analytics

class ProductAnalysisIn(CamelModel):
    """Product context for the business-AI endpoints.

    Accepts both the listing field names (productName, productCategory...)
    and the short ones (name, category...).
    """

    model_config = ConfigDict(extra="allow")

    product_name: str | None = None
    name: str | None = None
    product_category: str | None = None
    category: str | None = None
    product_material: str | None = None
    material: str | None = None
    product_state: str | None = None
    region: str | None = None
    product_weight: str | None = None
    weight: str | None = None
    product_color: str | None = None
    color: str | None = None
    additional_info: str | None = None
    listing_type: str | None = None
    base_price: Decimal | None = None

    def normalized(self) -> Dict[str, Any]:
        return {
            "name": self.product_name or self.name,
            "category": self.product_category or self.category,
            "material": self.product_material or self.material,
            "region": self.product_state or self.region,
            "weight": self.product_weight or self.weight,
            "color": self.product_color or self.color,
            "additionalInfo": self.additional_info or "",
            "listingType": self.listing_type or "regular",
            "basePrice": float(self.base_price) if self.base_price is not None else None,
        }


class BestSellerOut(CamelModel):
    id: int
    product_name: str
    product_category: str
    product_image_url: str | None = None
    product_price: Money
    quantity_sold: int
    total_revenue: Money


class SalesTrendPoint(CamelModel):
    date: str
    sales: Money
    orders: int


class CategoryRevenue(CamelModel):
    category: str
    revenue: Money


class RecentOrderOut(CamelModel):
    order_id: str
    customer_name: str
    order_date: datetime
    status: OrderStatus
    amount: Money


class SellerAnalyticsOut(CamelModel):
    total_revenue: Money
    total_orders: int
    total_items_sold: int
    avg_order_value: Money
    best_selling_products: List[BestSellerOut]
    sales_trend: List[SalesTrendPoint]
    revenue_by_category: List[CategoryRevenue]
    recent_orders: List[RecentOrderOut]


class CategoryStat(CamelModel):
    total: Money
    count: int


class BuyerAnalyticsOut(CamelModel):
    total_orders: int
    total_spent: Money
    category_stats: Dict[str, CategoryStat]
    monthly_trend: Dict[str, Money]
