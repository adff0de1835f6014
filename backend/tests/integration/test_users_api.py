"""Integration tests for the admin-only user endpoints."""

from __future__ import annotations

from tests.factories.user import DEFAULT_PASSWORD, AdminFactory, UserFactory
from tests.helpers.http import API, json_headers


def _access_token(client, email: str) -> str:
    resp = client.post(
        f"{API}/auth/sign-in",
        json={"email": email, "password": DEFAULT_PASSWORD},
        headers=json_headers(),
    )
    assert resp.status_code == 200
    return resp.get_json()["data"]["access_token"]


class TestUsersAPI:
    def test_admin_lists_users(self, client, session):
        admin = AdminFactory(email="root@example.com")
        UserFactory(email="b@example.com")
        UserFactory(email="a@example.com")
        token = _access_token(client, admin.email)

        resp = client.get(f"{API}/users?sort=email&limit=2", headers=json_headers(token))

        assert resp.status_code == 200
        body = resp.get_json()
        assert [u["email"] for u in body["data"]] == ["a@example.com", "b@example.com"]
        assert body["meta"]["total"] == 3
        assert body["meta"]["limit"] == 2

    def test_admin_gets_one_user(self, client, session):
        admin = AdminFactory()
        user = UserFactory()
        token = _access_token(client, admin.email)

        resp = client.get(f"{API}/users/{user.id}", headers=json_headers(token))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["email"] == user.email

    def test_unknown_user_is_404(self, client, session):
        token = _access_token(client, AdminFactory().email)
        resp = client.get(f"{API}/users/does-not-exist", headers=json_headers(token))
        assert resp.status_code == 404

    def test_regular_user_is_forbidden(self, client, session):
        token = _access_token(client, UserFactory().email)
        resp = client.get(f"{API}/users", headers=json_headers(token))
        assert resp.status_code == 403
        assert resp.get_json()["code"] == "forbidden"

    def test_anonymous_is_unauthorized(self, client, session):
        resp = client.get(f"{API}/users")
        assert resp.status_code == 401

    def test_invalid_pagination_is_422(self, client, session):
        token = _access_token(client, AdminFactory().email)
        resp = client.get(f"{API}/users?limit=0", headers=json_headers(token))
        assert resp.status_code == 422


class TestUserManagementAPI:
    def test_admin_creates_user(self, client, session):
        token = _access_token(client, AdminFactory().email)

        resp = client.post(
            f"{API}/users",
            json={"name": "New", "email": "New@Example.com", "password": "secret-123"},
            headers=json_headers(token),
        )

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["email"] == "new@example.com"
        assert data["role"] == "user"
        assert data["confirmed"] is False
        assert "password" not in data

    def test_created_user_can_sign_in_once_confirmed(self, client, session):
        token = _access_token(client, AdminFactory().email)
        client.post(
            f"{API}/users",
            json={
                "name": "ready",
                "email": "ready@example.com",
                "password": DEFAULT_PASSWORD,
                "confirmed": True,
            },
            headers=json_headers(token),
        )
        assert _access_token(client, "ready@example.com")

    def test_create_duplicate_email_is_409(self, client, session):
        UserFactory(email="dup@example.com")
        token = _access_token(client, AdminFactory().email)

        resp = client.post(
            f"{API}/users",
            json={"name": "Dup", "email": "DUP@example.com", "password": "secret-123"},
            headers=json_headers(token),
        )

        assert resp.status_code == 409
        assert resp.get_json()["code"] == "conflict"

    def test_create_invalid_payload_is_422(self, client, session):
        token = _access_token(client, AdminFactory().email)
        resp = client.post(
            f"{API}/users",
            json={"name": "", "email": "nope", "password": "short"},
            headers=json_headers(token),
        )
        assert resp.status_code == 422
        errors = resp.get_json()["details"]["errors"]
        assert {"name", "email", "password"} <= set(errors)

    def test_regular_user_cannot_create(self, client, session):
        token = _access_token(client, UserFactory().email)
        resp = client.post(
            f"{API}/users",
            json={"name": "X", "email": "x@example.com", "password": "secret-123"},
            headers=json_headers(token),
        )
        assert resp.status_code == 403
        assert resp.get_json()["code"] == "forbidden"

    def test_admin_updates_name_and_role(self, client, session):
        token = _access_token(client, AdminFactory().email)
        user = UserFactory()

        resp = client.post(
            f"{API}/users/{user.id}",
            json={"name": "Renamed", "role": "admin"},
            headers=json_headers(token),
        )

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert (data["name"], data["role"]) == ("renamed", "admin")
        assert data["email"] == user.email

    def test_update_to_taken_email_is_409(self, client, session):
        token = _access_token(client, AdminFactory().email)
        UserFactory(email="taken@example.com")
        user = UserFactory()

        resp = client.post(
            f"{API}/users/{user.id}",
            json={"email": "taken@example.com"},
            headers=json_headers(token),
        )

        assert resp.status_code == 409

    def test_update_unknown_role_is_422(self, client, session):
        token = _access_token(client, AdminFactory().email)
        user = UserFactory()
        resp = client.post(
            f"{API}/users/{user.id}", json={"role": "root"}, headers=json_headers(token)
        )
        assert resp.status_code == 422

    def test_update_unknown_user_is_404(self, client, session):
        token = _access_token(client, AdminFactory().email)
        resp = client.post(
            f"{API}/users/does-not-exist", json={"name": "x"}, headers=json_headers(token)
        )
        assert resp.status_code == 404

    def test_regular_user_cannot_update_or_delete(self, client, session):
        user = UserFactory()
        token = _access_token(client, user.email)

        update = client.post(
            f"{API}/users/{user.id}", json={"role": "admin"}, headers=json_headers(token)
        )
        delete = client.delete(f"{API}/users/{user.id}", headers=json_headers(token))

        assert (update.status_code, delete.status_code) == (403, 403)

    def test_admin_deletes_user(self, client, session):
        token = _access_token(client, AdminFactory().email)
        user = UserFactory()

        resp = client.delete(f"{API}/users/{user.id}", headers=json_headers(token))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["id"] == user.id
        gone = client.get(f"{API}/users/{user.id}", headers=json_headers(token))
        assert gone.status_code == 404

    def test_delete_unknown_user_is_404(self, client, session):
        token = _access_token(client, AdminFactory().email)
        resp = client.delete(f"{API}/users/does-not-exist", headers=json_headers(token))
        assert resp.status_code == 404

    def test_deleted_user_token_is_refused(self, client, session):
        admin_token = _access_token(client, AdminFactory().email)
        user = UserFactory()
        user_token = _access_token(client, user.email)

        client.delete(f"{API}/users/{user.id}", headers=json_headers(admin_token))

        resp = client.get(f"{API}/auth/me", headers=json_headers(user_token))
        assert resp.status_code == 401
