# Re-export all models for convenient imports
from parcinfo.models.establishment import Establishment
from parcinfo.models.user import User, UserRole
from parcinfo.models.pc import PC, PcType, SERVER_TYPES

__all__ = [
    # Establishment
    "Establishment",
    # User
    "User",
    "UserRole",
    # PC
    "PC",
    "PcType",
    "SERVER_TYPES",
]
