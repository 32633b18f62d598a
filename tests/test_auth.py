from datetime import timedelta

import jwt
import pytest

from artisan_market.data.models.user import UserModel
from artisan_market.services.auth_service import AuthService, check_password, hash_password, sha256_hex
from artisan_market.utils.dates import utcnow
from artisan_market.utils.settings import JWT_ALGORITHM, JWT_SECRET


def register(client, email="maya@example.com", user_name="maya", password="supersecret1"):
    return client.post(
        "/api/auth/register",
        json={"email": email, "userName": user_name, "password": password, "fullName": "Maya Devi"},
    )


def stored_user(db, email) -> UserModel:
    db.expire_all()
    return db.query(UserModel).filter(UserModel.email == email).one()


class TestPasswordHashing:
    def test_hash_and_check(self):
        hashed = hash_password("supersecret1")
        assert hashed != "supersecret1"
        assert check_password("supersecret1", hashed)
        assert not check_password("wrong-password", hashed)

    def test_missing_hash_never_matches(self):
        assert not check_password("anything", None)


class TestRegistration:
    def test_register_creates_unverified_user_with_otp(self, client, db):
        resp = register(client)
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "success"
        assert body["message"] == "OTP sent to email"

        user = stored_user(db, "maya@example.com")
        assert body["data"]["userId"] == user.id
        assert user.is_verified is False
        assert len(user.email_verification_otp) == 6
        assert user.password_hash != "supersecret1"

    def test_duplicate_email_rejected(self, client):
        register(client)
        resp = register(client, user_name="other")
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert "already exists" in resp.json()["error"]

    def test_short_password_is_validation_error(self, client):
        resp = register(client, password="short")
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"


class TestOtpVerification:
    def test_valid_otp_verifies_and_returns_tokens(self, client, db):
        user_id = register(client).json()["data"]["userId"]
        otp = stored_user(db, "maya@example.com").email_verification_otp

        resp = client.post("/api/auth/verify-otp", json={"userId": user_id, "otp": otp})
        assert resp.status_code == 200
        body = resp.json()
        assert body["token"]
        assert body["refreshToken"]
        assert body["user"]["isVerified"] is True

        claims = jwt.decode(body["token"], JWT_SECRET, algorithms=[JWT_ALGORITHM])
        assert claims["id"] == user_id
        assert claims["isAdmin"] is False

    def test_wrong_otp_rejected(self, client, db):
        user_id = register(client).json()["data"]["userId"]
        otp = stored_user(db, "maya@example.com").email_verification_otp
        wrong = "000000" if otp != "000000" else "111111"

        resp = client.post("/api/auth/verify-otp", json={"userId": user_id, "otp": wrong})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid or expired OTP"

    def test_expired_otp_rejected(self, client, db):
        user_id = register(client).json()["data"]["userId"]
        user = stored_user(db, "maya@example.com")
        user.email_verification_otp_expires = utcnow() - timedelta(minutes=1)
        db.commit()

        resp = client.post("/api/auth/verify-otp", json={"userId": user_id, "otp": user.email_verification_otp})
        assert resp.status_code == 400


class TestLogin:
    @pytest.fixture
    def verified_user(self, make_user):
        return make_user(email="lok@example.com", user_name="lok", password_hash=hash_password("supersecret1"))

    def test_login_success_resets_attempts(self, client, db, verified_user):
        verified_user.login_attempts = 2
        db.commit()

        resp = client.post("/api/auth/login", json={"email": "lok@example.com", "password": "supersecret1"})
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "lok@example.com"
        assert stored_user(db, "lok@example.com").login_attempts == 0

    def test_unknown_email_is_unauthorized(self, client):
        resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "x"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Incorrect email or password"

    def test_account_locks_after_max_attempts(self, client, db, verified_user):
        for _ in range(3):
            resp = client.post("/api/auth/login", json={"email": "lok@example.com", "password": "bad-password"})
            assert resp.status_code == 401

        user = stored_user(db, "lok@example.com")
        assert user.is_blocked is True

        resp = client.post("/api/auth/login", json={"email": "lok@example.com", "password": "supersecret1"})
        assert resp.status_code == 403
        assert resp.json()["code"] == "ACCOUNT_LOCKED"
        assert "Try again in" in resp.json()["error"]

    def test_expired_block_allows_login(self, client, db, verified_user):
        verified_user.is_blocked = True
        verified_user.login_attempts = 3
        verified_user.block_expires = utcnow() - timedelta(minutes=1)
        db.commit()

        resp = client.post("/api/auth/login", json={"email": "lok@example.com", "password": "supersecret1"})
        assert resp.status_code == 200

    def test_unverified_user_gets_new_otp(self, client, db, make_user):
        make_user(email="new@example.com", user_name="new", password_hash=hash_password("supersecret1"), is_verified=False)

        resp = client.post("/api/auth/login", json={"email": "new@example.com", "password": "supersecret1"})
        assert resp.status_code == 403
        body = resp.json()
        assert body["code"] == "EMAIL_NOT_VERIFIED"
        assert body["userId"] == stored_user(db, "new@example.com").id
        assert stored_user(db, "new@example.com").email_verification_otp is not None


class TestTokens:
    def test_refresh_token_issues_new_access_token(self, client, make_user):
        make_user(email="r@example.com", user_name="r", password_hash=hash_password("supersecret1"))
        login = client.post("/api/auth/login", json={"email": "r@example.com", "password": "supersecret1"}).json()

        resp = client.post("/api/auth/refresh-token", json={"refreshToken": login["refreshToken"]})
        assert resp.status_code == 200
        assert resp.json()["token"]

    def test_tampered_refresh_token_rejected(self, client):
        resp = client.post("/api/auth/refresh-token", json={"refreshToken": "not-a-jwt"})
        assert resp.status_code == 401

    def test_token_issued_before_password_change_rejected(self, db, make_user):
        user = make_user()
        svc = AuthService(db)
        token = svc.create_access_token(user)

        user.password_changed_at = utcnow() + timedelta(seconds=5)
        db.commit()

        with pytest.raises(PermissionError):
            svc.verify_access_token(token)


class TestPasswordReset:
    def test_forgot_then_reset(self, client, db, make_user):
        make_user(email="p@example.com", user_name="p", password_hash=hash_password("oldpassword1"))
        token = AuthService(db).forgot_password("p@example.com")
        assert stored_user(db, "p@example.com").password_reset_token == sha256_hex(token)

        resp = client.patch(f"/api/auth/reset-password/{token}", json={"password": "newpassword1"})
        assert resp.status_code == 200

        user = stored_user(db, "p@example.com")
        assert check_password("newpassword1", user.password_hash)
        assert user.password_reset_token is None
        assert user.password_changed_at is not None

    def test_forgot_password_unknown_email(self, client):
        resp = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
        assert resp.status_code == 404

    def test_reset_with_bad_token(self, client):
        resp = client.patch("/api/auth/reset-password/deadbeef", json={"password": "newpassword1"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Token is invalid or has expired"


class TestGoogle:
    def test_google_login_creates_user(self, client, db, google):
        google.fetch_profile.return_value = {
            "sub": "g-1",
            "email": "asha@gmail.com",
            "name": "Asha",
            "picture": None,
        }
        resp = client.post("/api/auth/google", json={"code": "auth-code"})
        assert resp.status_code == 200

        user = stored_user(db, "asha@gmail.com")
        assert user.auth_provider == "google"
        assert user.user_name.startswith("asha_")

    def test_google_login_refuses_local_account(self, client, google, make_user):
        make_user(email="asha@gmail.com", user_name="asha", auth_provider="local")
        google.fetch_profile.return_value = {"sub": "g-1", "email": "asha@gmail.com"}

        resp = client.post("/api/auth/google", json={"code": "auth-code"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Account exists with different login method"

    def test_link_google_requires_bearer(self, client):
        resp = client.post("/api/auth/link-google", json={"code": "auth-code"})
        assert resp.status_code == 401

    def test_link_google_sets_both(self, client, db, google, make_user):
        user = make_user(email="ravi@example.com", user_name="ravi")
        token = AuthService(db).create_access_token(user)
        google.fetch_profile.return_value = {"sub": "g-9", "email": "ravi@example.com"}

        resp = client.post(
            "/api/auth/link-google",
            json={"code": "auth-code"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 200
        assert stored_user(db, "ravi@example.com").auth_provider == "both"


class TestAuthRateLimit:
    def test_limit_exceeded_returns_429(self, client, rate_limiter):
        from artisan_market.services.rate_limiter import RateLimitResult

        rate_limiter.hit.return_value = RateLimitResult(False, 20, -1, 4102444800)
        resp = client.post("/api/auth/login", json={"email": "a@example.com", "password": "x"})
        assert resp.status_code == 429
        assert resp.json()["code"] == "AUTH_RATE_LIMIT"
        assert "Retry-After" in resp.headers
