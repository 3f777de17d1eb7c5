"""
Users Management API

Admins manage the accounts of their own establishment; super admins manage
every account. Role and establishment rules come from modules.auth.policy.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from parcinfo.core.exceptions import AuthorizationError, UserNotFoundError
from parcinfo.core.security import get_password_hash
from parcinfo.db.repository import InventoryRepository, get_repository
from parcinfo.models.user import User
from parcinfo.modules.auth.dependencies import get_current_admin
from parcinfo.modules.auth.policy import (
    ensure_can_assign_role,
    ensure_can_manage_user,
    ensure_role_scope,
    is_super_admin,
    owned_establishment_id,
    scoped_establishment_id,
)
from parcinfo.schemas.auth import Principal
from parcinfo.schemas.user import UserCreate, UserResponse, UserUpdate

router = APIRouter(prefix="/users", tags=["Users"])


async def _get_scoped_user(
    user_id: int,
    principal: Principal,
    repository: InventoryRepository,
) -> User:
    """404 when the id does not resolve, 403 when it belongs elsewhere or outranks the caller"""
    user = await repository.get_user(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    ensure_can_manage_user(principal, user.role, user.establishment_id)
    return user


@router.get("", response_model=List[UserResponse])
async def list_users(
    establishment_id: Optional[int] = Query(None, alias="establishmentId"),
    current_user: Principal = Depends(get_current_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    scope = scoped_establishment_id(current_user, establishment_id)
    return await repository.list_users(scope)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: Principal = Depends(get_current_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    return await _get_scoped_user(user_id, current_user, repository)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    current_user: Principal = Depends(get_current_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    """Create an account; non-super-admins always create into their own establishment"""
    ensure_can_assign_role(current_user, payload.role)
    establishment_id = owned_establishment_id(current_user, payload.establishment_id)
    ensure_role_scope(payload.role, establishment_id)

    return await repository.create_user({
        "username": payload.username,
        "hashed_password": get_password_hash(payload.password),
        "role": payload.role,
        "establishment_id": establishment_id,
    })


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    current_user: Principal = Depends(get_current_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    user = await _get_scoped_user(user_id, current_user, repository)
    changes = payload.model_dump(exclude_unset=True)

    if "role" in changes:
        ensure_can_assign_role(current_user, changes["role"])
    if "establishment_id" in changes and not is_super_admin(current_user):
        if changes["establishment_id"] != current_user.establishment_id:
            raise AuthorizationError("Cannot move a user to another establishment")

    ensure_role_scope(
        changes.get("role", user.role),
        changes.get("establishment_id", user.establishment_id),
    )

    password = changes.pop("password", None)
    if password is not None:
        changes["hashed_password"] = get_password_hash(password)

    return await repository.update_user(user_id, changes)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    current_user: Principal = Depends(get_current_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    await _get_scoped_user(user_id, current_user, repository)
    await repository.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
