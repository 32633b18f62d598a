#import all models so SQLAlchemy registers them in Base.metadata

from artisan_market.data.models.user import UserModel
from artisan_market.data.models.shop_card import ShopCardModel
from artisan_market.data.models.auction import AuctionModel
from artisan_market.data.models.bid import BidModel
from artisan_market.data.models.order import OrderModel
from artisan_market.data.models.cart import CartModel
from artisan_market.data.models.cart_item import CartItemModel
from artisan_market.data.models.resale import ResaleListingModel, ResaleInterestModel
from artisan_market.data.models.story import StoryModel

__all__ = [
    "UserModel",
    "ShopCardModel",
    "AuctionModel",
    "BidModel",
    "OrderModel",
    "CartModel",
    "CartItemModel",
    "ResaleListingModel",
    "ResaleInterestModel",
    "StoryModel",
]
