from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from artisan_market.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="uq_cart_items_product"),)

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("shop_cards.id", ondelete="CASCADE"), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)

    # snapshot of the listing when added
    product_name = Column(String(200), nullable=True)
    product_image_url = Column(String, nullable=True)
    product_price = Column(Numeric(10, 2), nullable=False)
    product_category = Column(String(100), nullable=True)

    cart = relationship("CartModel", back_populates="items")
