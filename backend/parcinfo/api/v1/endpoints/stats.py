from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from parcinfo.db.repository import InventoryRepository, get_repository
from parcinfo.modules.auth.dependencies import get_current_user
from parcinfo.modules.auth.policy import scoped_establishment_id
from parcinfo.schemas.auth import Principal
from parcinfo.schemas.stats import StatsResponse

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", response_model=List[StatsResponse])
async def get_stats(
    establishment_id: Optional[int] = Query(None, alias="establishmentId"),
    current_user: Principal = Depends(get_current_user),
    repository: InventoryRepository = Depends(get_repository),
):
    """Per-establishment PC counts, computed on demand"""
    scope = scoped_establishment_id(current_user, establishment_id)
    return await repository.get_stats(scope)
