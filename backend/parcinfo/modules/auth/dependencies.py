from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from parcinfo.core.config import settings
from parcinfo.core.exceptions import SessionRequiredError
from parcinfo.core.logging_config import set_user_id
from parcinfo.core.session_store import SessionStore, get_session_store
from parcinfo.db.repository import InventoryRepository, get_repository
from parcinfo.models.user import UserRole
from parcinfo.modules.auth.policy import require_role
from parcinfo.modules.auth.service import AuthService
from parcinfo.schemas.auth import Principal

# Scripted clients may send the session token as a bearer token instead of the cookie
security = HTTPBearer(auto_error=False)


def get_auth_service(
    repository: InventoryRepository = Depends(get_repository),
    store: SessionStore = Depends(get_session_store),
) -> AuthService:
    return AuthService(repository, store)


def get_optional_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Session token from the Authorization header, else from the cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


async def get_current_user(
    token: Optional[str] = Depends(get_optional_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Principal:
    """Get current authenticated user"""
    principal = await auth_service.resolve_principal(token)
    if principal is None:
        raise SessionRequiredError()
    set_user_id(str(principal.id))
    return principal


async def get_current_admin(
    current_user: Principal = Depends(get_current_user)
) -> Principal:
    """Get current admin or super_admin user"""
    return require_role(current_user, UserRole.ADMIN)


async def get_current_super_admin(
    current_user: Principal = Depends(get_current_user)
) -> Principal:
    """Get current super_admin user"""
    return require_role(current_user, UserRole.SUPER_ADMIN)
