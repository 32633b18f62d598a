from artisan_market.data.models.shop_card import ShopCardModel
from artisan_market.data.models.user import UserModel
from artisan_market.data.seed import DEMO_CARDS, make_admin, seed


class TestSeed:
    def test_seeds_empty_database_once(self, db):
        seed()
        seed()

        db.expire_all()
        users = db.query(UserModel).all()
        assert len(users) == 1
        assert users[0].is_admin is True
        assert db.query(ShopCardModel).count() == len(DEMO_CARDS)

    def test_skips_when_users_exist(self, db, make_user):
        make_user()
        seed()
        assert db.query(ShopCardModel).count() == 0

    def test_make_admin(self, db, make_user):
        user = make_user(email="artisan@example.com")

        assert make_admin("Artisan@Example.com ") is True
        assert make_admin("missing@example.com") is False

        db.expire_all()
        assert db.get(UserModel, user.id).is_admin is True
