from datetime import datetime

from parcinfo.schemas.common import CamelModel, NonEmptyStr


class EstablishmentCreate(CamelModel):
    name: NonEmptyStr


class EstablishmentUpdate(CamelModel):
    name: NonEmptyStr


class EstablishmentResponse(CamelModel):
    id: int
    name: str
    created_at: datetime
