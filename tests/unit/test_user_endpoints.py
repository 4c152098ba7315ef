"""Unit tests for admin account management endpoints."""

from uuid import uuid4

import pytest

from catering_admin.models.user import Role


@pytest.fixture
def admin(make_user):
    return make_user(username="admin", role=Role.ADMIN)


class TestListUsers:
    """Tests for GET /api/auth/users."""

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.SUB_ADMIN])
    def test_staff_admins_can_list(self, client, make_user, auth_header, role):
        caller = make_user(username="caller", role=role)
        make_user(username="other", role=Role.MANAGER)

        response = client.get("/api/auth/users", headers=auth_header(caller))

        assert response.status_code == 200
        usernames = {u["username"] for u in response.json()["data"]}
        assert usernames == {"caller", "other"}
        for account in response.json()["data"]:
            assert "passwordHash" not in account

    def test_manager_forbidden(self, client, make_user, auth_header):
        manager = make_user(role=Role.MANAGER)

        response = client.get("/api/auth/users", headers=auth_header(manager))

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "Role 'manager' is not authorized to access this route",
        }

    def test_requires_auth(self, client):
        assert client.get("/api/auth/users").status_code == 401

    def test_inactive_admin_rejected(self, client, make_user, auth_header):
        """A deactivated account is refused even with a live access token."""
        admin = make_user(role=Role.ADMIN, is_active=False)

        response = client.get("/api/auth/users", headers=auth_header(admin))

        assert response.status_code == 401
        assert response.json()["message"] == "Your account has been deactivated"


class TestGetUser:
    """Tests for GET /api/auth/users/{user_id}."""

    def test_get_user(self, client, admin, make_user, auth_header):
        target = make_user(username="target")

        response = client.get(f"/api/auth/users/{target.id}", headers=auth_header(admin))

        assert response.status_code == 200
        assert response.json()["data"]["adminUser"]["username"] == "target"

    def test_sub_admin_forbidden(self, client, make_user, auth_header):
        sub_admin = make_user(role=Role.SUB_ADMIN)

        response = client.get(
            f"/api/auth/users/{sub_admin.id}", headers=auth_header(sub_admin)
        )

        assert response.status_code == 403

    def test_not_found(self, client, admin, auth_header):
        response = client.get(f"/api/auth/users/{uuid4()}", headers=auth_header(admin))

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User not found"}

    def test_malformed_id(self, client, admin, auth_header):
        response = client.get("/api/auth/users/not-a-uuid", headers=auth_header(admin))
        assert response.status_code == 400


class TestUpdateUser:
    """Tests for PUT /api/auth/users/{user_id}."""

    def test_update_user(self, client, admin, make_user, auth_header, store):
        target = make_user(username="target")

        response = client.put(
            f"/api/auth/users/{target.id}",
            json={"name": "Renamed", "city": "Chennai"},
            headers=auth_header(admin),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "User updated successfully"
        assert data["data"]["adminUser"]["name"] == "Renamed"
        assert store.users[target.id].city == "Chennai"

    def test_deactivate_user(self, client, admin, make_user, auth_header, store):
        target = make_user(username="target", refresh_token="stored-token")

        response = client.put(
            f"/api/auth/users/{target.id}",
            json={"isActive": False},
            headers=auth_header(admin),
        )

        assert response.status_code == 200
        assert response.json()["data"]["adminUser"]["isActive"] is False
        assert store.users[target.id].refresh_token is None

    def test_deactivated_user_token_stops_working(self, client, admin, make_user, auth_header):
        target = make_user(username="target")
        target_headers = auth_header(target)
        assert client.get("/api/auth/me", headers=target_headers).status_code == 200

        client.put(
            f"/api/auth/users/{target.id}",
            json={"isActive": False},
            headers=auth_header(admin),
        )

        response = client.get("/api/auth/me", headers=target_headers)
        assert response.status_code == 401
        assert response.json()["message"] == "Your account has been deactivated"

    def test_duplicate_email(self, client, admin, make_user, auth_header):
        make_user(username="taken")
        target = make_user(username="target")

        response = client.put(
            f"/api/auth/users/{target.id}",
            json={"email": "taken@example.com"},
            headers=auth_header(admin),
        )

        assert response.status_code == 409

    def test_not_found(self, client, admin, auth_header):
        response = client.put(
            f"/api/auth/users/{uuid4()}",
            json={"name": "Ghost"},
            headers=auth_header(admin),
        )
        assert response.status_code == 404


class TestDeleteUser:
    """Tests for DELETE /api/auth/users/{user_id}."""

    def test_delete_user(self, client, admin, make_user, auth_header, store):
        target = make_user(username="target")

        response = client.delete(f"/api/auth/users/{target.id}", headers=auth_header(admin))

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "User deleted successfully"}
        assert target.id not in store.users

    def test_cannot_delete_self(self, client, admin, auth_header, store):
        response = client.delete(f"/api/auth/users/{admin.id}", headers=auth_header(admin))

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot delete your own account"
        assert admin.id in store.users

    def test_not_found(self, client, admin, auth_header):
        response = client.delete(f"/api/auth/users/{uuid4()}", headers=auth_header(admin))
        assert response.status_code == 404

    def test_manager_forbidden(self, client, make_user, auth_header, store):
        manager = make_user(username="manager", role=Role.MANAGER)
        target = make_user(username="target")

        response = client.delete(
            f"/api/auth/users/{target.id}", headers=auth_header(manager)
        )

        assert response.status_code == 403
        assert target.id in store.users


class TestUpdateRole:
    """Tests for PATCH /api/auth/update-role/{user_id}."""

    def test_update_role(self, client, admin, make_user, auth_header, store):
        target = make_user(username="target", role=Role.SUB_ADMIN)

        response = client.patch(
            f"/api/auth/update-role/{target.id}",
            json={"role": "manager"},
            headers=auth_header(admin),
        )

        assert response.status_code == 200
        assert response.json()["data"]["adminUser"]["role"] == "manager"
        assert store.users[target.id].role == Role.MANAGER

    def test_invalid_role(self, client, admin, make_user, auth_header):
        target = make_user(username="target")

        response = client.patch(
            f"/api/auth/update-role/{target.id}",
            json={"role": "superuser"},
            headers=auth_header(admin),
        )

        assert response.status_code == 400

    def test_not_found(self, client, admin, auth_header):
        response = client.patch(
            f"/api/auth/update-role/{uuid4()}",
            json={"role": "admin"},
            headers=auth_header(admin),
        )
        assert response.status_code == 404
