from typing import Any, Dict, List

from sqlalchemy.orm import Session

from artisan_market.data.models.user import UserModel
from artisan_market.domain.errors import NotFoundError
from artisan_market.repos.user_repo import UserRepo
from artisan_market.utils.dates import add_months, as_utc, utcnow
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """Profile lookups and admin-style profile updates."""

    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def _require(self, user: UserModel | None) -> UserModel:
        if not user:
            raise NotFoundError("User not found")
        return user

    def create_user(self, data: Dict[str, Any]) -> tuple[UserModel, bool]:
        """Returns (user, created). An existing email returns the stored user."""
        existing = self.repo.get_by_email(data["email"])
        if existing:
            return existing, False

        if self.repo.get_by_username(data["user_name"]):
            raise ValueError("Username already taken")

        user = self.repo.create_user(
            UserModel(
                user_name=data["user_name"],
                email=data["email"].strip().lower(),
                full_name=data.get("full_name"),
                image_url=data.get("image_url"),
                is_artisan=data.get("is_artisan", False),
            )
        )
        logger.info(f"Created user {user.id} ({user.user_name})")
        return user, True

    def list_users(self) -> List[UserModel]:
        return self.repo.list_users()

    def get_user(self, user_id: int) -> UserModel:
        return self._require(self.repo.get_user(user_id))

    def get_by_email(self, email: str) -> UserModel:
        return self._require(self.repo.get_by_email(email))

    def get_by_username(self, user_name: str) -> UserModel:
        return self._require(self.repo.get_by_username(user_name))

    def set_artisan(self, user_id: int, is_artisan: bool) -> UserModel:
        user = self.get_user(user_id)
        user.is_artisan = is_artisan
        logger.info(f"User {user_id} artisan flag -> {is_artisan}")
        return self.repo.save(user)

    def update_subscription(self, user_id: int, data: Dict[str, Any]) -> UserModel:
        user = self.get_user(user_id)
        user.has_artisan_subscription = data["has_artisan_subscription"]

        if user.has_artisan_subscription:
            plan = data.get("subscription_type") or user.subscription_type or "monthly"
            started = as_utc(data.get("subscription_date")) or utcnow()
            user.subscription_type = plan
            user.subscription_date = started
            user.subscription_end_date = add_months(started, 12 if plan == "yearly" else 1)
        else:
            user.subscription_end_date = None

        return self.repo.save(user)

    def delete_user(self, user_id: int):
        user = self.get_user(user_id)
        self.repo.delete_user(user)
        logger.info(f"Deleted user {user_id}")

    def wallet(self, user_id: int) -> Dict[str, Any]:
        user = self.get_user(user_id)
        return {
            "balance": user.balance,
            "user_name": user.user_name,
            "email": user.email,
        }
