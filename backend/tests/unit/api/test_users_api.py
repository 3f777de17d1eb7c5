"""
Unit Tests for User Management API Endpoints
Tests for: scoping, role-elevation guard, ownership injection, conflicts
"""
import pytest
from httpx import AsyncClient

from parcinfo.models.user import UserRole

URL = "/api/v1/users"


class TestListUsers:
    @pytest.mark.asyncio
    async def test_super_admin_sees_everyone(self, client: AsyncClient, super_admin_headers, admin_user, other_admin):
        response = await client.get(URL, headers=super_admin_headers)

        assert response.status_code == 200
        ids = {u["id"] for u in response.json()}
        assert {admin_user.id, other_admin.id} <= ids

    @pytest.mark.asyncio
    async def test_super_admin_filter(self, client: AsyncClient, super_admin_headers, other_admin, other_establishment):
        response = await client.get(URL, headers=super_admin_headers, params={"establishmentId": other_establishment.id})

        assert [u["id"] for u in response.json()] == [other_admin.id]

    @pytest.mark.asyncio
    async def test_admin_sees_own_establishment(self, client: AsyncClient, admin_headers, admin_user, regular_user, other_admin):
        response = await client.get(URL, headers=admin_headers)

        ids = {u["id"] for u in response.json()}
        assert ids == {admin_user.id, regular_user.id}

    @pytest.mark.asyncio
    async def test_admin_other_filter_forbidden(self, client: AsyncClient, admin_headers, other_establishment):
        response = await client.get(URL, headers=admin_headers, params={"establishmentId": other_establishment.id})

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_user_role_forbidden(self, client: AsyncClient, user_headers):
        response = await client.get(URL, headers=user_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_password_hash_never_returned(self, client: AsyncClient, super_admin_headers):
        response = await client.get(URL, headers=super_admin_headers)

        for user in response.json():
            assert "hashedPassword" not in user
            assert "password" not in user


class TestGetUser:
    @pytest.mark.asyncio
    async def test_same_establishment(self, client: AsyncClient, admin_headers, regular_user):
        response = await client.get(f"{URL}/{regular_user.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["username"] == regular_user.username

    @pytest.mark.asyncio
    async def test_other_establishment_forbidden(self, client: AsyncClient, admin_headers, other_admin):
        response = await client.get(f"{URL}/{other_admin.id}", headers=admin_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing(self, client: AsyncClient, admin_headers):
        response = await client.get(f"{URL}/9999", headers=admin_headers)

        assert response.status_code == 404


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_super_admin_creates_super_admin(self, client: AsyncClient, super_admin_headers):
        response = await client.post(
            URL, headers=super_admin_headers,
            json={"username": "root2", "password": "secret12", "role": "super_admin"},
        )

        assert response.status_code == 201
        assert response.json()["role"] == "super_admin"
        assert response.json()["establishmentId"] is None

    @pytest.mark.asyncio
    async def test_admin_cannot_create_super_admin(self, client: AsyncClient, admin_headers, repository):
        response = await client.post(
            URL, headers=admin_headers,
            json={"username": "sneaky", "password": "secret12", "role": "super_admin"},
        )

        assert response.status_code == 403
        assert await repository.get_user_by_username("sneaky") is None

    @pytest.mark.asyncio
    async def test_admin_creation_forced_into_own_establishment(
        self, client: AsyncClient, admin_headers, admin_user, other_establishment
    ):
        response = await client.post(
            URL, headers=admin_headers,
            json={
                "username": "newhire",
                "password": "secret12",
                "role": "user",
                "establishmentId": other_establishment.id,
            },
        )

        assert response.status_code == 201
        assert response.json()["establishmentId"] == admin_user.establishment_id

    @pytest.mark.asyncio
    async def test_scoped_role_needs_establishment(self, client: AsyncClient, super_admin_headers):
        response = await client.post(
            URL, headers=super_admin_headers,
            json={"username": "floating", "password": "secret12", "role": "admin"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_establishment(self, client: AsyncClient, super_admin_headers):
        response = await client.post(
            URL, headers=super_admin_headers,
            json={"username": "lost", "password": "secret12", "role": "user", "establishmentId": 4242},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "UNKNOWN_ESTABLISHMENT"

    @pytest.mark.asyncio
    async def test_duplicate_username(self, client: AsyncClient, admin_headers, regular_user):
        response = await client.post(
            URL, headers=admin_headers,
            json={"username": regular_user.username, "password": "secret12"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "DUPLICATE_USERNAME"

    @pytest.mark.asyncio
    async def test_created_user_can_log_in(self, client: AsyncClient, admin_headers, login):
        await client.post(URL, headers=admin_headers, json={"username": "fresh", "password": "secret12"})

        headers = await login("fresh", "secret12")
        me = await client.get("/api/v1/auth/me", headers=headers)

        assert me.json()["role"] == "user"


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_admin_updates_own_establishment_user(self, client: AsyncClient, admin_headers, regular_user):
        response = await client.put(f"{URL}/{regular_user.id}", headers=admin_headers, json={"role": "admin"})

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    @pytest.mark.asyncio
    async def test_admin_cannot_promote_to_super_admin(self, client: AsyncClient, admin_headers, regular_user):
        response = await client.put(f"{URL}/{regular_user.id}", headers=admin_headers, json={"role": "super_admin"})

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_touch_other_establishment(self, client: AsyncClient, admin_headers, other_admin):
        response = await client.put(f"{URL}/{other_admin.id}", headers=admin_headers, json={"username": "hijacked"})

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_move_user_out(
        self, client: AsyncClient, admin_headers, regular_user, other_establishment
    ):
        response = await client.put(
            f"{URL}/{regular_user.id}", headers=admin_headers,
            json={"establishmentId": other_establishment.id},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_password_change_by_admin(self, client: AsyncClient, admin_headers, regular_user, login):
        response = await client.put(f"{URL}/{regular_user.id}", headers=admin_headers, json={"password": "reset-pass"})

        assert response.status_code == 200
        assert await login(regular_user.username, "reset-pass")

    @pytest.mark.asyncio
    async def test_explicit_null_rejected(self, client: AsyncClient, admin_headers, regular_user):
        response = await client.put(f"{URL}/{regular_user.id}", headers=admin_headers, json={"username": None})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing(self, client: AsyncClient, super_admin_headers):
        response = await client.put(f"{URL}/9999", headers=super_admin_headers, json={"role": "user"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_user_role_forbidden(self, client: AsyncClient, user_headers, regular_user):
        response = await client.put(f"{URL}/{regular_user.id}", headers=user_headers, json={"role": "admin"})

        assert response.status_code == 403


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, admin_headers, regular_user, repository):
        response = await client.delete(f"{URL}/{regular_user.id}", headers=admin_headers)

        assert response.status_code == 204
        assert await repository.get_user(regular_user.id) is None

    @pytest.mark.asyncio
    async def test_other_establishment_forbidden(self, client: AsyncClient, admin_headers, other_admin, repository):
        response = await client.delete(f"{URL}/{other_admin.id}", headers=admin_headers)

        assert response.status_code == 403
        assert await repository.get_user(other_admin.id) is not None

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_super_admin(self, client: AsyncClient, admin_headers, super_admin):
        response = await client.delete(f"{URL}/{super_admin.id}", headers=admin_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_deleted_user_session_stops_working(self, client: AsyncClient, super_admin_headers, user_headers, regular_user):
        await client.delete(f"{URL}/{regular_user.id}", headers=super_admin_headers)

        response = await client.get("/api/v1/auth/me", headers=user_headers)

        assert response.status_code == 401


class TestSuperAdminInsideEstablishment:
    """A super_admin that still carries an establishmentId stays out of an admin's reach"""

    @pytest.fixture
    async def promoted(self, client: AsyncClient, super_admin_headers, make_user, establishment):
        user = await make_user(UserRole.ADMIN, establishment.id, username="victim")
        response = await client.put(f"{URL}/{user.id}", headers=super_admin_headers, json={"role": "super_admin"})
        assert response.status_code == 200
        assert response.json()["establishmentId"] == establishment.id
        return user

    @pytest.mark.asyncio
    async def test_admin_cannot_read(self, client: AsyncClient, admin_headers, promoted):
        response = await client.get(f"{URL}/{promoted.id}", headers=admin_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_reset_password(self, client: AsyncClient, admin_headers, promoted, login):
        response = await client.put(f"{URL}/{promoted.id}", headers=admin_headers, json={"password": "pwned123"})

        assert response.status_code == 403
        headers = await login("victim")
        me = await client.get("/api/v1/auth/me", headers=headers)
        assert me.json()["role"] == "super_admin"

    @pytest.mark.asyncio
    async def test_admin_cannot_demote(self, client: AsyncClient, admin_headers, promoted, repository):
        response = await client.put(f"{URL}/{promoted.id}", headers=admin_headers, json={"role": "user"})

        assert response.status_code == 403
        assert (await repository.get_user(promoted.id)).role == UserRole.SUPER_ADMIN

    @pytest.mark.asyncio
    async def test_admin_cannot_delete(self, client: AsyncClient, admin_headers, promoted, repository):
        response = await client.delete(f"{URL}/{promoted.id}", headers=admin_headers)

        assert response.status_code == 403
        assert await repository.get_user(promoted.id) is not None

    @pytest.mark.asyncio
    async def test_super_admin_still_manages_it(self, client: AsyncClient, super_admin_headers, promoted):
        response = await client.put(f"{URL}/{promoted.id}", headers=super_admin_headers, json={"role": "admin"})

        assert response.status_code == 200
        assert response.json()["role"] == "admin"
