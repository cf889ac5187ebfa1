"""
Couche de persistance SQLModel.

Exports :
- Fonctions de base : create_db_engine, init_db
- Modeles : AssetCandidateModel, CacheEntryModel, AssetSlotModel,
  AppSettingModel, ScanStateModel
"""

from cinevault.infrastructure.persistence.database import (
    create_db_engine,
    init_db,
)
from cinevault.infrastructure.persistence.models import (
    AppSettingModel,
    AssetCandidateModel,
    AssetSlotModel,
    CacheEntryModel,
    ScanStateModel,
)

__all__ = [
    "create_db_engine",
    "init_db",
    "AppSettingModel",
    "AssetCandidateModel",
    "AssetSlotModel",
    "CacheEntryModel",
    "ScanStateModel",
]
