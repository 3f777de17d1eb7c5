"""
Unit Tests for Authentication API Endpoints
Tests for: login, logout, me, change-password, cookie handling
"""
import pytest
from httpx import AsyncClient

from parcinfo.core.config import settings

LOGIN_URL = "/api/v1/auth/login"
LOGOUT_URL = "/api/v1/auth/logout"
ME_URL = "/api/v1/auth/me"
CHANGE_PASSWORD_URL = "/api/v1/auth/change-password"


class TestLogin:
    """Test POST /auth/login"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, admin_user):
        response = await client.post(LOGIN_URL, json={"username": admin_user.username, "password": "password123"})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == admin_user.id
        assert data["username"] == admin_user.username
        assert data["role"] == "admin"
        assert data["establishmentId"] == admin_user.establishment_id
        assert "hashedPassword" not in data
        assert "password" not in data

    @pytest.mark.asyncio
    async def test_login_sets_http_only_cookie(self, client: AsyncClient, admin_user):
        response = await client.post(LOGIN_URL, json={"username": admin_user.username, "password": "password123"})

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
        assert "HttpOnly" in set_cookie
        assert f"Max-Age={settings.SESSION_TTL_SECONDS}" in set_cookie

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_are_identical(self, client: AsyncClient, admin_user):
        wrong_password = await client.post(LOGIN_URL, json={"username": admin_user.username, "password": "nope"})
        unknown_user = await client.post(LOGIN_URL, json={"username": "ghost", "password": "nope"})

        assert wrong_password.status_code == 401
        assert unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()
        assert wrong_password.json()["message"] == "Invalid username or password"
        assert "set-cookie" not in wrong_password.headers

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient):
        response = await client.post(LOGIN_URL, json={"username": "someone"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_relogin_replaces_session(self, client: AsyncClient, admin_user, session_store):
        credentials = {"username": admin_user.username, "password": "password123"}
        first = await client.post(LOGIN_URL, json=credentials)
        old_token = first.cookies[settings.SESSION_COOKIE_NAME]

        # the client still holds the first cookie
        second = await client.post(LOGIN_URL, json=credentials)
        new_token = second.cookies[settings.SESSION_COOKIE_NAME]

        assert new_token != old_token
        assert await session_store.get(old_token) is None
        assert await session_store.get(new_token) == admin_user.id


class TestMe:
    """Test GET /auth/me"""

    @pytest.mark.asyncio
    async def test_me_with_bearer(self, client: AsyncClient, admin_headers, admin_user):
        response = await client.get(ME_URL, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["username"] == admin_user.username

    @pytest.mark.asyncio
    async def test_me_with_cookie(self, client: AsyncClient, regular_user):
        await client.post(LOGIN_URL, json={"username": regular_user.username, "password": "password123"})

        response = await client.get(ME_URL)

        assert response.status_code == 200
        assert response.json()["role"] == "user"

    @pytest.mark.asyncio
    async def test_me_anonymous(self, client: AsyncClient):
        response = await client.get(ME_URL)

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_me_forged_token(self, client: AsyncClient):
        response = await client.get(ME_URL, headers={"Authorization": "Bearer forged"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_reflects_role_change(self, client: AsyncClient, admin_headers, admin_user, repository):
        from parcinfo.models.user import UserRole

        await repository.update_user(admin_user.id, {"role": UserRole.USER})
        response = await client.get(ME_URL, headers=admin_headers)

        assert response.json()["role"] == "user"


class TestLogout:
    """Test POST /auth/logout"""

    @pytest.mark.asyncio
    async def test_logout_invalidates_session(self, client: AsyncClient, admin_headers):
        response = await client.post(LOGOUT_URL, headers=admin_headers)

        assert response.status_code == 200
        assert (await client.get(ME_URL, headers=admin_headers)).status_code == 401

    @pytest.mark.asyncio
    async def test_double_logout(self, client: AsyncClient, admin_headers):
        first = await client.post(LOGOUT_URL, headers=admin_headers)
        second = await client.post(LOGOUT_URL, headers=admin_headers)

        assert first.status_code == 200
        assert second.status_code == 200

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client: AsyncClient, admin_user):
        await client.post(LOGIN_URL, json={"username": admin_user.username, "password": "password123"})

        response = await client.post(LOGOUT_URL)

        assert response.status_code == 200
        assert settings.SESSION_COOKIE_NAME in response.headers["set-cookie"]
        assert (await client.get(ME_URL)).status_code == 401


class TestChangePassword:
    """Test POST /auth/change-password"""

    @pytest.mark.asyncio
    async def test_change_password(self, client: AsyncClient, admin_headers, admin_user):
        response = await client.post(
            CHANGE_PASSWORD_URL,
            headers=admin_headers,
            json={"currentPassword": "password123", "newPassword": "brand-new-pass"},
        )

        assert response.status_code == 200
        old = await client.post(LOGIN_URL, json={"username": admin_user.username, "password": "password123"})
        new = await client.post(LOGIN_URL, json={"username": admin_user.username, "password": "brand-new-pass"})
        assert old.status_code == 401
        assert new.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, client: AsyncClient, admin_headers):
        response = await client.post(
            CHANGE_PASSWORD_URL,
            headers=admin_headers,
            json={"currentPassword": "not-mine", "newPassword": "brand-new-pass"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Incorrect current password"

    @pytest.mark.asyncio
    async def test_new_password_too_short(self, client: AsyncClient, admin_headers):
        response = await client.post(
            CHANGE_PASSWORD_URL,
            headers=admin_headers,
            json={"currentPassword": "password123", "newPassword": "123"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_session(self, client: AsyncClient):
        response = await client.post(
            CHANGE_PASSWORD_URL,
            json={"currentPassword": "password123", "newPassword": "brand-new-pass"},
        )

        assert response.status_code == 401
