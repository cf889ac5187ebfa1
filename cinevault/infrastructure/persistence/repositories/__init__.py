"""
Implementations SQLModel des repositories.

Ce module contient les implementations concretes des interfaces repository
definies dans cinevault/core/ports/repositories.py, utilisant SQLModel pour
la persistance SQLite.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit une session SQLModel via injection de dependances
- Convertit entre entites de domaine (dataclass) et modeles DB (SQLModel)
"""

from cinevault.infrastructure.persistence.repositories.cache_entry_repository import (
    SQLModelCacheEntryRepository,
)
from cinevault.infrastructure.persistence.repositories.candidate_repository import (
    SQLModelAssetCandidateRepository,
)
from cinevault.infrastructure.persistence.repositories.scan_state_repository import (
    SQLModelScanStateRepository,
)
from cinevault.infrastructure.persistence.repositories.settings_repository import (
    SQLModelSettingsRepository,
)
from cinevault.infrastructure.persistence.repositories.slot_repository import (
    SQLModelAssetSlotRepository,
)

__all__ = [
    "SQLModelAssetCandidateRepository",
    "SQLModelAssetSlotRepository",
    "SQLModelCacheEntryRepository",
    "SQLModelScanStateRepository",
    "SQLModelSettingsRepository",
]
