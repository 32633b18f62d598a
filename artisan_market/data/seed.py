# artisan_market/data/seed.py
import os
import sys
from decimal import Decimal

from sqlalchemy import select

import artisan_market.data.models  # noqa: F401
from artisan_market.data.database import Base, SessionLocal, engine
from artisan_market.data.models.shop_card import ShopCardModel
from artisan_market.data.models.user import UserModel
from artisan_market.services.auth_service import hash_password
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@heartisans.app")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "change-me-admin")

DEMO_CARDS = [
    {
        "product_name": "Blue Pottery Vase",
        "product_price": Decimal("1800.00"),
        "product_state": "Rajasthan",
        "product_category": "Pottery",
        "product_material": "Quartz clay",
        "product_description": "Hand-painted Jaipur blue pottery vase.",
    },
    {
        "product_name": "Pashmina Shawl",
        "product_price": Decimal("6500.00"),
        "product_state": "Jammu and Kashmir",
        "product_category": "Textiles",
        "product_material": "Pashmina wool",
        "product_description": "Hand-woven shawl with sozni embroidery.",
    },
    {
        "product_name": "Dhokra Elephant",
        "product_price": Decimal("2400.00"),
        "product_state": "Chhattisgarh",
        "product_category": "Metalwork",
        "product_material": "Brass",
        "product_description": "Lost-wax cast brass figurine.",
    },
]


def seed():
    """Admin plus a few listings, only when the database is empty."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.execute(select(UserModel.id).limit(1)).first():
            logger.info("Database already has users, skipping seed")
            return

        admin = UserModel(
            user_name="admin",
            email=ADMIN_EMAIL,
            full_name="Heartisans Admin",
            password_hash=hash_password(ADMIN_PASSWORD),
            is_admin=True,
            is_verified=True,
            auth_provider="local",
        )
        db.add(admin)
        db.flush()

        for card in DEMO_CARDS:
            db.add(ShopCardModel(product_seller_name=admin.full_name, seller_id=admin.id, **card))
        db.commit()
        logger.info(f"Seeded admin {admin.email} and {len(DEMO_CARDS)} shop cards")
    finally:
        db.close()


def make_admin(email: str) -> bool:
    db = SessionLocal()
    try:
        user = db.execute(select(UserModel).where(UserModel.email == email.strip().lower())).scalar_one_or_none()
        if not user:
            logger.warning(f"No user with email {email}")
            return False
        user.is_admin = True
        db.commit()
        logger.info(f"User {user.id} ({email}) is now an admin")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) == 3 and sys.argv[1] == "make-admin":
        sys.exit(0 if make_admin(sys.argv[2]) else 1)
    seed()
