from typing import List

from fastapi import APIRouter, Depends, Response, status

from parcinfo.core.exceptions import EstablishmentNotFoundError
from parcinfo.db.repository import InventoryRepository, get_repository
from parcinfo.modules.auth.dependencies import get_current_super_admin, get_current_user
from parcinfo.schemas.auth import Principal
from parcinfo.schemas.establishment import (
    EstablishmentCreate,
    EstablishmentResponse,
    EstablishmentUpdate,
)

router = APIRouter(prefix="/establishments", tags=["Establishments"])


@router.get("", response_model=List[EstablishmentResponse])
async def list_establishments(
    current_user: Principal = Depends(get_current_user),
    repository: InventoryRepository = Depends(get_repository),
):
    """All establishments, for any signed-in user"""
    return await repository.list_establishments()


@router.get("/{establishment_id}", response_model=EstablishmentResponse)
async def get_establishment(
    establishment_id: int,
    current_user: Principal = Depends(get_current_user),
    repository: InventoryRepository = Depends(get_repository),
):
    establishment = await repository.get_establishment(establishment_id)
    if establishment is None:
        raise EstablishmentNotFoundError(establishment_id)
    return establishment


@router.post("", response_model=EstablishmentResponse, status_code=status.HTTP_201_CREATED)
async def create_establishment(
    payload: EstablishmentCreate,
    current_user: Principal = Depends(get_current_super_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    return await repository.create_establishment(payload.model_dump())


@router.put("/{establishment_id}", response_model=EstablishmentResponse)
async def update_establishment(
    establishment_id: int,
    payload: EstablishmentUpdate,
    current_user: Principal = Depends(get_current_super_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    return await repository.update_establishment(establishment_id, payload.model_dump())


@router.delete("/{establishment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_establishment(
    establishment_id: int,
    current_user: Principal = Depends(get_current_super_admin),
    repository: InventoryRepository = Depends(get_repository),
):
    """Refused with 400 while users or PCs still belong to the establishment"""
    await repository.delete_establishment(establishment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
