"""
Authentication endpoints: login, logout, current principal, password change.

Sessions are opaque tokens kept server-side; the token travels in an
HttpOnly cookie (or as a bearer token for scripted clients).
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from parcinfo.core.config import settings
from parcinfo.core.rate_limiter import auth_rate_limit
from parcinfo.modules.auth.dependencies import (
    get_auth_service,
    get_current_user,
    get_optional_session_token,
)
from parcinfo.modules.auth.service import AuthService
from parcinfo.schemas.auth import ChangePasswordRequest, LoginRequest, Principal
from parcinfo.schemas.common import MessageResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        path="/",
    )


@router.post("/login", response_model=Principal)
@auth_rate_limit()
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    previous_token: Optional[str] = Depends(get_optional_session_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login with username and password (rate limited)"""
    principal, token = await auth_service.login(
        credentials.username,
        credentials.password,
        previous_token=previous_token,
    )
    set_session_cookie(response, token)
    return principal


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_optional_session_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Destroy the current session. Logging out twice is not an error."""
    await auth_service.logout(token)
    clear_session_cookie(response)
    return {"message": "Logged out"}


@router.get("/me", response_model=Principal)
async def me(current_user: Principal = Depends(get_current_user)):
    return current_user


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: Principal = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.change_password(current_user, payload.current_password, payload.new_password)
    return {"message": "Password updated"}
