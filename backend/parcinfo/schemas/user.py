from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import StringConstraints, model_validator

from parcinfo.core.config import settings
from parcinfo.models.user import UserRole
from parcinfo.schemas.common import CamelModel, reject_explicit_nulls

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
NewPassword = Annotated[str, StringConstraints(min_length=settings.PASSWORD_MIN_LENGTH)]


class UserCreate(CamelModel):
    username: Username
    password: NewPassword
    role: UserRole = UserRole.USER
    establishment_id: Optional[int] = None


class UserUpdate(CamelModel):
    """Partial update; a supplied password is re-hashed"""
    username: Optional[Username] = None
    password: Optional[NewPassword] = None
    role: Optional[UserRole] = None
    establishment_id: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def check_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            reject_explicit_nulls(data, ("username", "password", "role"))
        return data


class UserResponse(CamelModel):
    """User as returned to clients; the password hash is never part of it"""
    id: int
    username: str
    role: UserRole
    establishment_id: Optional[int] = None
    created_at: datetime
