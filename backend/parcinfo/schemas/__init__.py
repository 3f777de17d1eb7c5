from parcinfo.schemas.common import CamelModel, MessageResponse
from parcinfo.schemas.auth import LoginRequest, ChangePasswordRequest, Principal
from parcinfo.schemas.establishment import EstablishmentCreate, EstablishmentUpdate, EstablishmentResponse
from parcinfo.schemas.user import UserCreate, UserUpdate, UserResponse
from parcinfo.schemas.pc import PcCreate, PcUpdate, PcResponse
from parcinfo.schemas.stats import StatsResponse

__all__ = [
    "CamelModel",
    "MessageResponse",
    # Auth
    "LoginRequest",
    "ChangePasswordRequest",
    "Principal",
    # Establishments
    "EstablishmentCreate",
    "EstablishmentUpdate",
    "EstablishmentResponse",
    # Users
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    # PCs
    "PcCreate",
    "PcUpdate",
    "PcResponse",
    # Stats
    "StatsResponse",
]
