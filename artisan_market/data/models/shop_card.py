from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text

from artisan_market.data.database import Base

DEFAULT_PRODUCT_IMAGE = "https://i.pinimg.com/originals/b5/d9/9a/b5d99a457840cabba912b05ea4cc7c77.jpg"


class ShopCardModel(Base):
    __tablename__ = "shop_cards"

    id = Column(Integer, primary_key=True)
    product_name = Column(String(200), nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    product_state = Column(String(100), nullable=False)
    product_category = Column(String(100), nullable=False, index=True)
    product_seller_name = Column(String(200), nullable=False)
    seller_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    product_image_url = Column(String, nullable=False, default=DEFAULT_PRODUCT_IMAGE)
    product_description = Column(Text, nullable=True)
    product_material = Column(String(100), nullable=True)
    product_weight = Column(String(50), nullable=True)
    product_color = Column(String(50), nullable=True)
    is_cod_available = Column(Boolean, nullable=False, default=False)
