import pytest

from artisan_market.data.models.story import DEFAULT_STORY_AVATAR
from artisan_market.services.auth_service import AuthService


def story_payload(**overrides):
    payload = {
        "name": "Meera",
        "email": "meera@example.com",
        "role": "Collector",
        "story": "The Madhubani print I bought now hangs in our hall.",
        "rating": 5,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def admin_headers(db, make_user):
    admin = make_user(is_admin=True)
    return {"Authorization": f"Bearer {AuthService(db).create_access_token(admin)}"}


class TestPublicStories:
    def test_submitted_story_is_hidden_until_approved(self, client):
        resp = client.post("/api/stories/", json=story_payload())
        assert resp.status_code == 201
        story = resp.json()["data"]
        assert story["image"] == DEFAULT_STORY_AVATAR
        assert "email" not in story

        assert client.get("/api/stories/").json()["data"] == []
        assert client.get(f"/api/stories/{story['id']}").status_code == 404

    def test_invalid_rating(self, client):
        resp = client.post("/api/stories/", json=story_payload(rating=6))
        assert resp.status_code == 400

    def test_story_length_limit(self, client):
        resp = client.post("/api/stories/", json=story_payload(story="x" * 1001))
        assert resp.status_code == 400


class TestStoryModeration:
    def test_admin_routes_need_a_token(self, client):
        assert client.get("/api/stories/admin/pending").status_code == 401

    def test_non_admin_is_forbidden(self, client, db, make_user):
        user = make_user()
        headers = {"Authorization": f"Bearer {AuthService(db).create_access_token(user)}"}
        resp = client.get("/api/stories/admin/pending", headers=headers)
        assert resp.status_code == 403
        assert resp.json()["code"] == "FORBIDDEN"

    def test_approve_publishes(self, client, admin_headers):
        story_id = client.post("/api/stories/", json=story_payload()).json()["data"]["id"]

        pending = client.get("/api/stories/admin/pending", headers=admin_headers).json()["data"]
        assert [s["id"] for s in pending] == [story_id]
        assert pending[0]["email"] == "meera@example.com"

        resp = client.put(f"/api/stories/admin/{story_id}/approve", json={"featured": True}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["isApproved"] is True

        body = client.get("/api/stories/", params={"featured": True}).json()
        assert [s["id"] for s in body["data"]] == [story_id]
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}
        assert client.get(f"/api/stories/{story_id}").json()["data"]["featured"] is True

    def test_reject_removes(self, client, admin_headers):
        story_id = client.post("/api/stories/", json=story_payload()).json()["data"]["id"]

        resp = client.delete(f"/api/stories/admin/{story_id}/reject", headers=admin_headers)
        assert resp.status_code == 200
        assert client.get("/api/stories/admin/pending", headers=admin_headers).json()["data"] == []

        resp = client.delete(f"/api/stories/admin/{story_id}/reject", headers=admin_headers)
        assert resp.status_code == 404
