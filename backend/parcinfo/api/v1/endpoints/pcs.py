from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from parcinfo.core.exceptions import PcNotFoundError, ValidationError
from parcinfo.db.repository import InventoryRepository, get_repository
from parcinfo.models.pc import PC
from parcinfo.modules.auth.dependencies import get_current_admin, get_current_user
from parcinfo.modules.auth.policy import (
    ensure_establishment_access,
    is_super_admin,
    owned_establishment_id,
    scoped_establishment_id,
)
from parcinfo.schemas.auth import Principal
from parcinfo.schemas.pc import PcCreate, PcResponse, PcUpdate

router = APIRouter(prefix="/pcs", tags=["PCs"])


async def _get_scoped_pc(pc_id: int, principal: Principal, repository: InventoryRepository) -> PC:
    pc = await repository.get_pc(pc_id)
    if pc is None:
        raise PcNotFoundError(pc_id)
    ensure_establishment_access(principal, pc.establishment_id)
    return pc


@router.get("", response_model=List[PcResponse])
async def list_pcs(
    establishment_id: Optional[int] = Query(None, alias="establishmentId"),
    current_user: Principal = Depends(get_current_user),
    repository: InventoryRepository = Depends(get_repository),
):
    """PCs of the caller's establishment; super admins may omit the filter to see all"""
    scope = scoped_establishment_id(current_user, establishment_id)
    return await repository.list_pcs(scope)


@router.get("/{pc_id}", response_model=PcResponse)
async def get_pc(
    pc_id: int,
    current_user: Principal = Depends(get_current_user),
    repository: InventoryRepository = Depends(get_repository),
):
    return await _get_scoped_pc(pc_id, current_user, repository)


@router.post("", response_model=PcResponse, status_code=status.HTTP_201_CREATED)
async def create_pc(
    payload: PcCreate,
    current_user: Principal = Depends(get_current_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    data = payload.model_dump()
    # Whatever the body says, admins create PCs in their own establishment
    data["establishment_id"] = owned_establishment_id(current_user, payload.establishment_id)
    if data["establishment_id"] is None:
        raise ValidationError("establishmentId is required", field="establishmentId")
    return await repository.create_pc(data)


@router.put("/{pc_id}", response_model=PcResponse)
async def update_pc(
    pc_id: int,
    payload: PcUpdate,
    current_user: Principal = Depends(get_current_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    await _get_scoped_pc(pc_id, current_user, repository)
    changes = payload.model_dump(exclude_unset=True)
    if "establishment_id" in changes and not is_super_admin(current_user):
        changes["establishment_id"] = current_user.establishment_id
    return await repository.update_pc(pc_id, changes)


@router.delete("/{pc_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pc(
    pc_id: int,
    current_user: Principal = Depends(get_current_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    await _get_scoped_pc(pc_id, current_user, repository)
    await repository.delete_pc(pc_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
