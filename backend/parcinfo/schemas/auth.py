from pydantic import Field

from parcinfo.schemas.common import CamelModel
from parcinfo.schemas.user import NewPassword, UserResponse


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: NewPassword


class Principal(UserResponse):
    """Authenticated identity resolved from a session"""
