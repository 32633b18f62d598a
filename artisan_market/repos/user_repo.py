from decimal import Decimal
from typing import List

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from artisan_market.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.strip().lower())
        ).scalar_one_or_none()

    def get_by_username(self, user_name: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.user_name == user_name)
        ).scalar_one_or_none()

    def get_by_google_id(self, google_id: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.google_id == google_id)
        ).scalar_one_or_none()

    def get_by_reset_token(self, token_hash: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.password_reset_token == token_hash)
        ).scalar_one_or_none()

    def list_users(self) -> List[UserModel]:
        return list(
            self.db.execute(
                select(UserModel).order_by(UserModel.joining_date.desc(), UserModel.id.desc())
            ).scalars()
        )

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def save(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user: UserModel):
        self.db.delete(user)
        self.db.commit()

    # wallet updates run inside the caller's transaction, no commit here

    def credit_seller(self, user_id: int, gross: Decimal, net: Decimal, threshold: Decimal) -> int:
        """Credit a sale in one statement.

        total_earnings grows by ``gross``. balance grows by ``gross`` while the
        seller is under ``threshold`` lifetime earnings and by ``net`` after.
        """
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(
                balance=UserModel.balance
                + case((UserModel.total_earnings >= threshold, net), else_=gross),
                total_earnings=UserModel.total_earnings + gross,
            )
        )
        return result.rowcount

    def credit_admins(self, amount: Decimal) -> int:
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.is_admin.is_(True))
            .values(balance=UserModel.balance + amount)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
