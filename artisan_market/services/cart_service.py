from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from artisan_market.data.models.cart import CartModel
from artisan_market.data.models.cart_item import CartItemModel
from artisan_market.domain.errors import ConflictError, NotFoundError
from artisan_market.repos.cart_repo import CartRepo
from artisan_market.repos.shop_card_repo import ShopCardRepo
from artisan_market.repos.user_repo import UserRepo
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    One cart per user.
    query (get) reads only, commands (add, update, remove, clear) bump the cart version
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ShopCardRepo(db)
        self.users = UserRepo(db)

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        items = self.repo.get_cart_items(cart.id) if cart else []
        total = sum((i.product_price * i.quantity for i in items), Decimal("0.00"))

        return {
            "user_id": user_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "product_name": i.product_name,
                    "product_image_url": i.product_image_url,
                    "product_price": i.product_price,
                    "product_category": i.product_category,
                }
                for i in items
            ],
            "total": total,
        }

    def _get_or_create_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        if not self.users.get_user(user_id):
            raise NotFoundError("User not found")

        created = self.repo.create_cart(CartModel(user_id=user_id, version=1))
        logger.info(f"Created cart {created.id} for user {user_id}")
        return created

    def _bump_version(self, cart: CartModel):
        # UPDATE carts SET version = v + 1 WHERE id = :id AND version = v
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"version": cart.version + 1},
        )
        if rowcount == 0:
            self.repo.rollback()
            raise ConflictError("Cart was modified by another request, please retry")
        self.repo.commit()

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        product = self.products.get(product_id)
        if not product:
            raise NotFoundError("Product not found")

        cart = self._get_or_create_cart(user_id)
        existing = self.repo.get_cart_item(cart.id, product_id)

        if existing:
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing.quantity} -> {existing.quantity + quantity}"
            )
            existing.quantity += quantity
            self.repo.add_cart_item(existing)
        else:
            logger.info(f"Adding product {product_id} to cart {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(
                    cart_id=cart.id,
                    product_id=product_id,
                    quantity=quantity,
                    product_name=product.product_name,
                    product_image_url=product.product_image_url,
                    product_price=product.product_price,
                    product_category=product.product_category,
                )
            )

        self._bump_version(cart)
        return self.get_cart(user_id)

    def update_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            return self.remove_item(user_id, product_id)

        cart = self.repo.get_cart_by_user(user_id)
        item = self.repo.get_cart_item(cart.id, product_id) if cart else None
        if not item:
            raise NotFoundError("Item not found in cart")

        item.quantity = quantity
        self.repo.add_cart_item(item)
        self._bump_version(cart)
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        logger.info(f"Removing product {product_id} from cart {cart.id}")
        self.repo.delete_cart_item(cart.id, product_id)
        self._bump_version(cart)
        return self.get_cart(user_id)

    def clear(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            removed = self.repo.clear_items(cart.id)
            self._bump_version(cart)
            logger.info(f"Cleared {removed} items from cart {cart.id}")
        return self.get_cart(user_id)
