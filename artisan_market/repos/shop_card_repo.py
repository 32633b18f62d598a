from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from artisan_market.data.models.shop_card import ShopCardModel


class ShopCardRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, card: ShopCardModel) -> ShopCardModel:
        self.db.add(card)
        self.db.commit()
        self.db.refresh(card)
        return card

    def get(self, card_id: int) -> ShopCardModel | None:
        return self.db.get(ShopCardModel, card_id)

    def list_all(self) -> List[ShopCardModel]:
        return list(self.db.execute(select(ShopCardModel).order_by(ShopCardModel.id)).scalars())

    def list_by_category(self, category: str) -> List[ShopCardModel]:
        return list(
            self.db.execute(
                select(ShopCardModel)
                .where(func.lower(ShopCardModel.product_category) == category.lower())
                .order_by(ShopCardModel.id)
            ).scalars()
        )

    def list_by_state(self, state: str) -> List[ShopCardModel]:
        return list(
            self.db.execute(
                select(ShopCardModel)
                .where(func.lower(ShopCardModel.product_state) == state.lower())
                .order_by(ShopCardModel.id)
            ).scalars()
        )

    def list_by_seller(self, seller_id: int) -> List[ShopCardModel]:
        return list(
            self.db.execute(
                select(ShopCardModel)
                .where(ShopCardModel.seller_id == seller_id)
                .order_by(ShopCardModel.id)
            ).scalars()
        )

    def list_without_seller(self) -> List[ShopCardModel]:
        return list(
            self.db.execute(
                select(ShopCardModel)
                .where(ShopCardModel.seller_id.is_(None))
                .order_by(ShopCardModel.id)
            ).scalars()
        )

    def save(self, card: ShopCardModel) -> ShopCardModel:
        self.db.add(card)
        self.db.commit()
        self.db.refresh(card)
        return card

    def delete(self, card: ShopCardModel):
        self.db.delete(card)
        self.db.commit()
