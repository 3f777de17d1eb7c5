"""
Database module for ParcInfo

Contains the inventory repository and seed data.
"""
from parcinfo.db.repository import InventoryRepository, get_repository
from parcinfo.db.seed_data import seed, seed_if_empty

__all__ = ["InventoryRepository", "get_repository", "seed", "seed_if_empty"]
