"""
Database Seed Data Module

Demo establishments, accounts and computers.
Run with: python -m parcinfo.db.seed_data
"""
import asyncio
from typing import Dict

from parcinfo.core.database import AsyncSessionLocal, close_db, init_db
from parcinfo.core.logging_config import logger
from parcinfo.core.security import get_password_hash
from parcinfo.db.repository import InventoryRepository
from parcinfo.models.pc import PcType
from parcinfo.models.user import UserRole


# ==================== Sample Data Constants ====================

SAMPLE_ESTABLISHMENTS = ["Headquarters", "Branch Office"]

# (username, password, role, establishment name or None)
SAMPLE_USERS = [
    ("superadmin", "admin123", UserRole.SUPER_ADMIN, None),
    ("admin_hq", "admin123", UserRole.ADMIN, "Headquarters"),
    ("user_hq", "user123", UserRole.USER, "Headquarters"),
]

SAMPLE_PCS = [
    {
        "establishment": "Headquarters",
        "type": PcType.SERVER,
        "ip_address": "192.168.1.10",
        "is_ip_filtered": True,
        "mac_address": "AA:BB:CC:DD:EE:FF",
        "office_name": "Server Room",
        "users_info": "IT Admin",
        "installed_apps": "IIS, SQL Server",
        "has_windows": True,
        "has_windows_license": True,
        "has_antivirus": True,
        "antivirus_name": "Defender",
        "server_services": "Web, DB, File Share",
    },
    {
        "establishment": "Headquarters",
        "type": PcType.TERMINAL,
        "ip_address": "192.168.1.50",
        "office_name": "Reception",
        "users_info": "Receptionist",
        "has_windows": True,
        "has_windows_license": True,
        "has_office": True,
        "has_office_license": True,
    },
]


# ==================== Seed Function ====================

async def seed(repository: InventoryRepository) -> Dict[str, int]:
    """Load the demo fixture through the repository.

    Returns a mapping of establishment/username keys to generated ids.
    """
    ids: Dict[str, int] = {}

    for name in SAMPLE_ESTABLISHMENTS:
        establishment = await repository.create_establishment({"name": name})
        ids[name] = establishment.id

    for username, password, role, establishment_name in SAMPLE_USERS:
        user = await repository.create_user({
            "username": username,
            "hashed_password": get_password_hash(password),
            "role": role,
            "establishment_id": ids[establishment_name] if establishment_name else None,
        })
        ids[username] = user.id

    for pc_data in SAMPLE_PCS:
        data = dict(pc_data)
        data["establishment_id"] = ids[data.pop("establishment")]
        await repository.create_pc(data)

    logger.info(
        f"[Seed] Created {len(SAMPLE_ESTABLISHMENTS)} establishments, "
        f"{len(SAMPLE_USERS)} users, {len(SAMPLE_PCS)} PCs"
    )
    return ids


async def seed_if_empty() -> bool:
    """Seed a fresh store; does nothing once any user exists"""
    async with AsyncSessionLocal() as db:
        repository = InventoryRepository(db)
        if await repository.count_users() > 0:
            return False
        await seed(repository)
        return True


async def main():
    await init_db()
    try:
        if await seed_if_empty():
            print("Database seeding completed successfully!")
        else:
            print("Database already contains users, nothing to do.")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
