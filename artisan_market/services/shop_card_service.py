from typing import Any, Dict, List

from sqlalchemy.orm import Session

from artisan_market.data.models.shop_card import DEFAULT_PRODUCT_IMAGE, ShopCardModel
from artisan_market.domain.errors import NotFoundError
from artisan_market.repos.shop_card_repo import ShopCardRepo
from artisan_market.repos.user_repo import UserRepo
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)


class ShopCardService:
    def __init__(self, db: Session):
        self.repo = ShopCardRepo(db)
        self.users = UserRepo(db)

    def _require_seller(self, seller_id: int | None):
        if seller_id is not None and not self.users.get_user(seller_id):
            raise NotFoundError("Seller not found")

    def create(self, data: Dict[str, Any]) -> ShopCardModel:
        self._require_seller(data.get("seller_id"))
        if not data.get("product_image_url"):
            data["product_image_url"] = DEFAULT_PRODUCT_IMAGE

        card = self.repo.create(ShopCardModel(**data))
        logger.info(f"Created shop card {card.id} ({card.product_name})")
        return card

    def get(self, card_id: int) -> ShopCardModel:
        card = self.repo.get(card_id)
        if not card:
            raise NotFoundError("Product not found")
        return card

    def list_all(self) -> List[ShopCardModel]:
        return self.repo.list_all()

    def list_by_category(self, category: str) -> List[ShopCardModel]:
        return self.repo.list_by_category(category)

    def list_by_state(self, state: str) -> List[ShopCardModel]:
        return self.repo.list_by_state(state)

    def list_by_seller(self, seller_id: int) -> List[ShopCardModel]:
        return self.repo.list_by_seller(seller_id)

    def without_seller(self) -> Dict[str, Any]:
        products = self.repo.list_without_seller()
        return {"count": len(products), "products": products}

    def update(self, card_id: int, changes: Dict[str, Any]) -> ShopCardModel:
        card = self.get(card_id)
        for field, value in changes.items():
            setattr(card, field, value)
        return self.repo.save(card)

    def assign_seller(self, card_id: int, seller_id: int) -> ShopCardModel:
        card = self.get(card_id)
        self._require_seller(seller_id)
        card.seller_id = seller_id
        logger.info(f"Shop card {card_id} assigned to seller {seller_id}")
        return self.repo.save(card)

    def delete(self, card_id: int):
        card = self.get(card_id)
        self.repo.delete(card)
        logger.info(f"Deleted shop card {card_id}")
