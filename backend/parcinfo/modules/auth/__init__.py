# Authentication module

from parcinfo.modules.auth.dependencies import (
    get_auth_service,
    get_current_user,
    get_current_admin,
    get_current_super_admin,
    get_optional_session_token,
)
from parcinfo.modules.auth.service import AuthService

__all__ = [
    "AuthService",
    "get_auth_service",
    "get_current_user",
    "get_current_admin",
    "get_current_super_admin",
    "get_optional_session_token",
]
