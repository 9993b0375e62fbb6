"""
Tests for the skill swap HTTP routes with auth and storage faked out.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from app.features.skill_swap.services.store import MarketplaceStore
from app.main import create_app
from factories import FakeMarketplaceRepository


@pytest.fixture
def app(repository, auth_as):
    app = create_app(use_lifespan=False)
    store = MarketplaceStore(repository)
    asyncio.run(store.load())
    app.state.marketplace_store = store
    auth_as(app, "alice")
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


def _propose(client, to_user="bob", offered="Python", wanted="Guitar"):
    return client.post(
        "/swaps", json={"to_user_id": to_user, "skill_offered": offered, "skill_wanted": wanted}
    )


class TestProfiles:
    def test_get_me(self, client):
        response = client.get("/users/me")

        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"

    def test_public_profile_hides_email(self, client):
        response = client.get("/users/bob")

        assert response.status_code == 200
        assert "email" not in response.json()
        assert response.json()["skills_offered"] == ["Guitar", "Photoshop"]

    def test_private_profile_is_not_found(self, client):
        assert client.get("/users/carol").status_code == 404
        assert client.get("/users/ghost").status_code == 404

    def test_patch_me(self, client):
        response = client.patch("/users/me", json={"location": "Lisbon"})

        assert response.status_code == 200
        assert response.json()["location"] == "Lisbon"

    def test_patch_me_cannot_touch_rating(self, client):
        # unknown fields are ignored, so an empty edit is left
        response = client.patch("/users/me", json={"rating": 1.0})

        assert response.status_code == 422

    def test_patch_me_rejects_null_name(self, client):
        assert client.patch("/users/me", json={"name": None}).status_code == 422

    def test_feedback_reports_stored_rating(self, users, auth_as):
        users[1] = users[1].model_copy(update={"rating": 3.7})
        app = create_app(use_lifespan=False)
        store = MarketplaceStore(FakeMarketplaceRepository(users=users))
        asyncio.run(store.load())
        app.state.marketplace_store = store
        auth_as(app, "alice")

        response = TestClient(app).get("/users/bob/feedback")

        assert response.status_code == 200
        assert response.json()["rating"] == 3.7
        assert response.json()["feedback"] == []

    def test_hidden_users_feedback_is_not_found(self, app, client, auth_as):
        for hidden in ("carol", "dave", "root", "ghost"):
            assert client.get(f"/users/{hidden}/feedback").status_code == 404

        auth_as(app, "carol")
        assert client.get("/users/carol/feedback").status_code == 200

    def test_register_existing_user(self, client):
        response = client.post("/users", json={"name": "Alice", "email": "a2@example.com"})

        assert response.status_code == 422

    def test_register_new_user(self, app, client, auth_as):
        auth_as(app, "erin")

        response = client.post(
            "/users", json={"name": "Erin", "email": "erin@example.com", "skills_offered": ["Chess"]}
        )

        assert response.status_code == 201
        assert response.json()["rating"] == 5.0


class TestSearch:
    def test_search_excludes_caller_and_hidden_users(self, client):
        response = client.get("/users/search")

        assert response.status_code == 200
        assert [u["id"] for u in response.json()["users"]] == ["bob"]

    def test_search_with_filters(self, client):
        response = client.get("/users/search", params={"q": "guitar", "location": "berlin"})

        assert response.json()["count"] == 1

    def test_invalid_availability(self, client):
        assert client.get("/users/search", params={"availability": "Never"}).status_code == 422


class TestSwaps:
    def test_full_lifecycle(self, app, client, auth_as):
        created = _propose(client)
        assert created.status_code == 201
        swap_id = created.json()["id"]

        # requester cannot accept
        assert client.post(f"/swaps/{swap_id}/accept").status_code == 409

        auth_as(app, "bob")
        assert client.post(f"/swaps/{swap_id}/accept").json()["status"] == "accepted"

        completed = client.post(f"/swaps/{swap_id}/complete")
        assert completed.json()["status"] == "completed"
        assert client.post(f"/swaps/{swap_id}/complete").status_code == 409

        feedback = client.post(f"/swaps/{swap_id}/feedback", json={"rating": 4, "comment": "ok"})
        assert feedback.status_code == 201
        assert client.get("/users/alice/feedback").json()["rating"] == 4.0

        auth_as(app, "alice")
        mine = client.get("/swaps/mine").json()
        assert [r["id"] for r in mine["completed"]] == [swap_id]
        assert client.get("/users/me").json()["total_swaps"] == 1

    def test_unknown_action(self, client):
        swap_id = _propose(client).json()["id"]

        assert client.post(f"/swaps/{swap_id}/archive").status_code == 422

    def test_swap_with_unlisted_skill(self, client):
        assert _propose(client, offered="Knitting").status_code == 422

    def test_swap_with_unknown_user(self, client):
        assert _propose(client, to_user="ghost").status_code == 404

    def test_feedback_on_pending_swap(self, client):
        swap_id = _propose(client).json()["id"]

        response = client.post(f"/swaps/{swap_id}/feedback", json={"rating": 5})

        assert response.status_code == 422

    def test_storage_failure_is_503(self, client, repository):
        repository.fail_on.add("create_swap_request")

        response = _propose(client)

        assert response.status_code == 503
        assert "failed" not in response.json()["detail"]


class TestAdmin:
    def test_regular_user_is_forbidden(self, client):
        assert client.get("/admin/analytics").status_code == 403

    def test_analytics_and_activity(self, app, client, auth_as):
        auth_as(app, "root")

        analytics = client.get("/admin/analytics").json()
        assert analytics["total_users"] == 4

        activity = client.get("/admin/activity", params={"days": 3}).json()
        assert activity["days"] == 3
        assert len(activity["report"]) == 3

    def test_force_cancel(self, app, client, auth_as):
        swap_id = _propose(client).json()["id"]
        auth_as(app, "bob")
        client.post(f"/swaps/{swap_id}/accept")

        auth_as(app, "root")
        response = client.post(f"/admin/swaps/{swap_id}/cancel")

        assert response.json()["status"] == "cancelled"
        assert client.get("/admin/swaps", params={"status": "cancelled"}).json()["count"] == 1

    def test_ban_and_unban(self, app, client, auth_as):
        auth_as(app, "root")

        assert client.post("/admin/users/bob/ban").json()["is_active"] is False
        assert client.post("/admin/users/bob/unban").json()["is_active"] is True
        assert client.post("/admin/users/root/ban").status_code == 403

    def test_announcements(self, app, client, auth_as):
        auth_as(app, "root")
        created = client.post("/admin/messages", json={"title": "Hi", "content": "Welcome"})
        assert created.status_code == 201
        message_id = created.json()["id"]

        auth_as(app, "alice")
        assert [m["id"] for m in client.get("/messages").json()["messages"]] == [message_id]

        auth_as(app, "root")
        client.patch(f"/admin/messages/{message_id}", json={"is_active": False})
        auth_as(app, "alice")
        assert client.get("/messages").json()["messages"] == []

        auth_as(app, "root")
        assert client.delete(f"/admin/messages/{message_id}").status_code == 204
        assert client.get("/admin/messages").json()["messages"] == []

    def test_announcement_edit_rejects_nulls(self, app, client, auth_as):
        auth_as(app, "root")
        message_id = client.post("/admin/messages", json={"title": "Hi", "content": "Welcome"}).json()["id"]

        assert client.patch(f"/admin/messages/{message_id}", json={"title": None}).status_code == 422
        assert client.patch(f"/admin/messages/{message_id}", json={}).status_code == 422

        messages = client.get("/admin/messages").json()["messages"]
        assert [m["title"] for m in messages] == ["Hi"]


def test_store_not_loaded_is_503(auth_as):
    app = create_app(use_lifespan=False)
    auth_as(app, "alice")

    response = TestClient(app).get("/users/me")

    assert response.status_code == 503
