"""
Entites metier du domaine des assets.

Exports:
- AssetCandidate: Candidat d'asset rattache a un slot
- CacheEntry: Fichier stocke dans le cache adresse par contenu
- AssetSlot: Verrou et version d'un slot (entite, type d'asset)
- SlotKey: Cle d'un slot
- Enums: EntityType, AssetOrigin, StorageTier, SelectionState, LockOwner, CacheKind
"""

from cinevault.core.entities.asset import (
    AssetCandidate,
    AssetOrigin,
    AssetSlot,
    CacheEntry,
    CacheKind,
    EntityType,
    LockOwner,
    SelectionState,
    ScanState,
    SlotKey,
    StorageTier,
)

__all__ = [
    "AssetCandidate",
    "AssetOrigin",
    "AssetSlot",
    "CacheEntry",
    "CacheKind",
    "EntityType",
    "LockOwner",
    "SelectionState",
    "ScanState",
    "SlotKey",
    "StorageTier",
]
