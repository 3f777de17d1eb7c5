"""
Inventory repository.

Typed CRUD over establishments, users and PCs plus the per-establishment
stats aggregate. Every mutation is its own transaction: it is committed
before the method returns, or rolled back and surfaced as a typed error.
Optional ``establishment_id`` filters mean "all rows" when omitted; only
super_admin callers are allowed to omit them (see modules.auth.policy).
"""
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcinfo.core.database import get_db
from parcinfo.core.exceptions import (
    ConflictError,
    DuplicateUsernameError,
    EstablishmentInUseError,
    EstablishmentNotFoundError,
    PcNotFoundError,
    StorageError,
    UnknownEstablishmentError,
    UserNotFoundError,
)
from parcinfo.core.logging_config import logger
from parcinfo.models.establishment import Establishment
from parcinfo.models.pc import PC, SERVER_TYPES
from parcinfo.models.user import User
from parcinfo.schemas.stats import StatsResponse


class InventoryRepository:
    """Persistence contract used by the route handlers"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Transactions ====================

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[Repository] Integrity violation during {operation}: {e.orig}")
            raise ConflictError(f"Constraint violation during {operation}") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.log_error_with_context(e, context=operation)
            raise StorageError(operation) from e

    async def _fetch_all(self, stmt, operation: str) -> List[Any]:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context=operation)
            raise StorageError(operation) from e
        return list(result.scalars().all())

    async def _fetch_one(self, stmt, operation: str) -> Optional[Any]:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context=operation)
            raise StorageError(operation) from e
        return result.scalar_one_or_none()

    async def _scalar(self, stmt, operation: str) -> int:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context=operation)
            raise StorageError(operation) from e
        return int(result.scalar() or 0)

    @staticmethod
    def _apply(entity: Any, changes: Dict[str, Any]) -> None:
        for field, value in changes.items():
            setattr(entity, field, value)

    # ==================== Establishments ====================

    async def list_establishments(self) -> List[Establishment]:
        return await self._fetch_all(
            select(Establishment).order_by(Establishment.id),
            "list establishments",
        )

    async def get_establishment(self, establishment_id: int) -> Optional[Establishment]:
        return await self._fetch_one(
            select(Establishment).where(Establishment.id == establishment_id),
            "get establishment",
        )

    async def require_establishment(self, establishment_id: int) -> Establishment:
        """Referenced establishment for a user/PC payload; missing is a 400"""
        establishment = await self.get_establishment(establishment_id)
        if establishment is None:
            raise UnknownEstablishmentError(establishment_id)
        return establishment

    async def create_establishment(self, data: Dict[str, Any]) -> Establishment:
        establishment = Establishment(**data)
        self.db.add(establishment)
        await self._commit("create establishment")
        await self.db.refresh(establishment)
        logger.info(f"[Repository] Created establishment {establishment.id}")
        return establishment

    async def update_establishment(self, establishment_id: int, changes: Dict[str, Any]) -> Establishment:
        establishment = await self.get_establishment(establishment_id)
        if establishment is None:
            raise EstablishmentNotFoundError(establishment_id)
        self._apply(establishment, changes)
        await self._commit("update establishment")
        await self.db.refresh(establishment)
        return establishment

    async def delete_establishment(self, establishment_id: int) -> None:
        """Refuses while any user or PC still references the establishment"""
        establishment = await self.get_establishment(establishment_id)
        if establishment is None:
            raise EstablishmentNotFoundError(establishment_id)

        user_count = await self._scalar(
            select(func.count(User.id)).where(User.establishment_id == establishment_id),
            "count establishment users",
        )
        pc_count = await self._scalar(
            select(func.count(PC.id)).where(PC.establishment_id == establishment_id),
            "count establishment pcs",
        )
        if user_count or pc_count:
            raise EstablishmentInUseError(establishment_id, user_count, pc_count)

        await self.db.delete(establishment)
        try:
            await self._commit("delete establishment")
        except ConflictError as e:
            # A row was linked between the check and the delete
            raise EstablishmentInUseError(establishment_id, user_count, pc_count) from e
        logger.info(f"[Repository] Deleted establishment {establishment_id}")

    # ==================== Users ====================

    async def list_users(self, establishment_id: Optional[int] = None) -> List[User]:
        stmt = select(User).order_by(User.id)
        if establishment_id is not None:
            stmt = stmt.where(User.establishment_id == establishment_id)
        return await self._fetch_all(stmt, "list users")

    async def count_users(self) -> int:
        return await self._scalar(select(func.count(User.id)), "count users")

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self._fetch_one(select(User).where(User.id == user_id), "get user")

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Case-sensitive exact match"""
        return await self._fetch_one(
            select(User).where(User.username == username),
            "get user by username",
        )

    async def create_user(self, data: Dict[str, Any]) -> User:
        """`data` carries `hashed_password`, never a plaintext password"""
        username = data["username"]
        if await self.get_user_by_username(username) is not None:
            raise DuplicateUsernameError(username)
        if data.get("establishment_id") is not None:
            await self.require_establishment(data["establishment_id"])

        user = User(**data)
        self.db.add(user)
        try:
            await self._commit("create user")
        except ConflictError as e:
            raise DuplicateUsernameError(username) from e
        await self.db.refresh(user)
        logger.info(f"[Repository] Created user {user.id} ({user.role.value})")
        return user

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> User:
        user = await self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        new_username = changes.get("username")
        if new_username is not None and new_username != user.username:
            if await self.get_user_by_username(new_username) is not None:
                raise DuplicateUsernameError(new_username)
        if changes.get("establishment_id") is not None:
            await self.require_establishment(changes["establishment_id"])

        self._apply(user, changes)
        try:
            await self._commit("update user")
        except ConflictError as e:
            raise DuplicateUsernameError(new_username or user.username) from e
        await self.db.refresh(user)
        return user

    async def delete_user(self, user_id: int) -> None:
        user = await self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        await self.db.delete(user)
        await self._commit("delete user")
        logger.info(f"[Repository] Deleted user {user_id}")

    # ==================== PCs ====================

    async def list_pcs(self, establishment_id: Optional[int] = None) -> List[PC]:
        stmt = select(PC).order_by(PC.id)
        if establishment_id is not None:
            stmt = stmt.where(PC.establishment_id == establishment_id)
        return await self._fetch_all(stmt, "list pcs")

    async def get_pc(self, pc_id: int) -> Optional[PC]:
        return await self._fetch_one(select(PC).where(PC.id == pc_id), "get pc")

    async def create_pc(self, data: Dict[str, Any]) -> PC:
        await self.require_establishment(data["establishment_id"])
        pc = PC(**data)
        self.db.add(pc)
        await self._commit("create pc")
        await self.db.refresh(pc)
        logger.info(f"[Repository] Created PC {pc.id} in establishment {pc.establishment_id}")
        return pc

    async def update_pc(self, pc_id: int, changes: Dict[str, Any]) -> PC:
        pc = await self.get_pc(pc_id)
        if pc is None:
            raise PcNotFoundError(pc_id)
        if changes.get("establishment_id") is not None:
            await self.require_establishment(changes["establishment_id"])
        self._apply(pc, changes)
        await self._commit("update pc")
        await self.db.refresh(pc)
        return pc

    async def delete_pc(self, pc_id: int) -> None:
        pc = await self.get_pc(pc_id)
        if pc is None:
            raise PcNotFoundError(pc_id)
        await self.db.delete(pc)
        await self._commit("delete pc")
        logger.info(f"[Repository] Deleted PC {pc_id}")

    # ==================== Stats ====================

    async def get_stats(self, establishment_id: Optional[int] = None) -> List[StatsResponse]:
        """One grouped aggregate over establishments LEFT JOIN pcs"""

        def count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = (
            select(
                Establishment.id,
                Establishment.name,
                func.count(PC.id).label("total_pcs"),
                count_where(PC.has_antivirus.is_(True)).label("protected_pcs"),
                count_where(PC.has_windows_license.is_(True)).label("windows_licensed"),
                count_where(PC.has_office_license.is_(True)).label("office_licensed"),
                count_where(PC.type.in_(SERVER_TYPES)).label("server_count"),
                count_where(PC.is_ip_filtered.is_(True)).label("filtered_ip_count"),
            )
            .select_from(Establishment)
            .outerjoin(PC, PC.establishment_id == Establishment.id)
            .group_by(Establishment.id, Establishment.name)
            .order_by(Establishment.id)
        )
        if establishment_id is not None:
            stmt = stmt.where(Establishment.id == establishment_id)

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="stats")
            raise StorageError("stats") from e

        return [
            StatsResponse(
                establishment_id=row.id,
                establishment_name=row.name,
                total_pcs=int(row.total_pcs),
                protected_pcs=int(row.protected_pcs),
                windows_licensed=int(row.windows_licensed),
                office_licensed=int(row.office_licensed),
                server_count=int(row.server_count),
                filtered_ip_count=int(row.filtered_ip_count),
            )
            for row in result.all()
        ]


# Dependency
async def get_repository(db: AsyncSession = Depends(get_db)) -> InventoryRepository:
    return InventoryRepository(db)
