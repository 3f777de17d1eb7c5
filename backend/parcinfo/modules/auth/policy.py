"""
Authorization policy.

All role and establishment checks live here so that route handlers never
compare role strings themselves. Privilege order: user < admin < super_admin.
"""
from typing import Optional

from parcinfo.core.exceptions import AuthorizationError, ValidationError
from parcinfo.models.user import UserRole
from parcinfo.schemas.auth import Principal

ROLE_RANK = {
    UserRole.USER: 0,
    UserRole.ADMIN: 1,
    UserRole.SUPER_ADMIN: 2,
}


def has_role_at_least(role: UserRole, minimum: UserRole) -> bool:
    return ROLE_RANK[UserRole(role)] >= ROLE_RANK[minimum]


def require_role(principal: Principal, minimum: UserRole) -> Principal:
    """Raise AuthorizationError unless the principal ranks at least `minimum`"""
    if not has_role_at_least(principal.role, minimum):
        raise AuthorizationError()
    return principal


def is_super_admin(principal: Principal) -> bool:
    return principal.role == UserRole.SUPER_ADMIN


def _own_establishment(principal: Principal) -> int:
    if principal.establishment_id is None:
        # admin/user rows without an establishment cannot be scoped to anything
        raise AuthorizationError("Account is not attached to an establishment")
    return principal.establishment_id


def scoped_establishment_id(principal: Principal, requested: Optional[int]) -> Optional[int]:
    """Establishment filter for list/stats queries.

    super_admin gets what it asked for (None means every establishment).
    Everyone else is pinned to their own establishment; asking for another
    one is forbidden.
    """
    if is_super_admin(principal):
        return requested
    own = _own_establishment(principal)
    if requested is not None and requested != own:
        raise AuthorizationError()
    return own


def ensure_establishment_access(principal: Principal, establishment_id: Optional[int]) -> None:
    """Entity-level check for read/update/delete of a resolved User or PC"""
    if is_super_admin(principal):
        return
    if establishment_id is None or establishment_id != _own_establishment(principal):
        raise AuthorizationError()


def owned_establishment_id(principal: Principal, requested: Optional[int]) -> Optional[int]:
    """Establishment id to store on a created or moved entity.

    Non-super-admins always write into their own establishment, whatever
    the payload says.
    """
    if is_super_admin(principal):
        return requested
    return _own_establishment(principal)


def ensure_can_assign_role(principal: Principal, role: UserRole) -> None:
    """Only a super_admin may create or promote a super_admin"""
    if UserRole(role) == UserRole.SUPER_ADMIN and not is_super_admin(principal):
        raise AuthorizationError("Only a super admin can assign the super_admin role")


def ensure_can_manage_user(principal: Principal, role: UserRole, establishment_id: Optional[int]) -> None:
    """Read/update/delete check for a stored account.

    Accounts holding super_admin are out of reach for everyone below
    super_admin, whatever establishment they carry.
    """
    if UserRole(role) == UserRole.SUPER_ADMIN and not is_super_admin(principal):
        raise AuthorizationError("Only a super admin can manage a super_admin account")
    ensure_establishment_access(principal, establishment_id)


def ensure_role_scope(role: UserRole, establishment_id: Optional[int]) -> None:
    """admin and user accounts must belong to an establishment"""
    if UserRole(role) != UserRole.SUPER_ADMIN and establishment_id is None:
        raise ValidationError(
            f"An establishment is required for role '{UserRole(role).value}'",
            field="establishmentId",
        )
