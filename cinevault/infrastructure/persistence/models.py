"""
Modeles SQLModel pour la base de donnees CineVault.

Ces modeles representent les tables de la base de donnees SQLite.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- asset_candidates: Candidats d'assets par slot (entite, type d'asset)
- cache_entries: Fichiers du cache adresse par contenu (un par hash)
- asset_slots: Verrou et version de chaque slot
- app_settings: Reglages cle/valeur (limites par type d'asset)
- scan_states: Empreinte du dernier scan de chaque entite

Les enums sont stockees par leur valeur texte.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Index, SQLModel


class AssetCandidateModel(SQLModel, table=True):
    """
    Modele representant un candidat d'asset.

    Un candidat par contenu distinct et par slot : la contrainte d'unicite
    sur (slot, content_hash) empeche les doublons lors des rescans.
    """

    __tablename__ = "asset_candidates"
    __table_args__ = (
        Index("ix_asset_candidates_slot", "entity_type", "entity_id", "asset_type"),
        UniqueConstraint(
            "entity_type", "entity_id", "asset_type", "content_hash",
            name="uq_asset_candidates_slot_hash",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    entity_type: str
    entity_id: int
    asset_type: str
    origin: str = Field(default="local")
    file_path: str | None = None
    file_name: str | None = None
    source_url: str | None = Field(default=None, index=True)
    provider: str | None = None
    content_hash: str | None = Field(default=None, index=True)
    cache_path: str | None = None
    width: int | None = None
    height: int | None = None
    format: str | None = None
    language: str | None = None
    perceptual_hash: str | None = None
    score: int = Field(default=0)
    state: str = Field(default="candidate", index=True)  # candidate, selected, blocked
    selection_order: int | None = None
    lock_owner: str = Field(default="none")  # none, user
    tier: str = Field(default="discovered")  # discovered, published
    discovered_at: datetime | None = Field(default_factory=datetime.utcnow)
    selected_at: datetime | None = None
    blocked_at: datetime | None = None
    version: int = Field(default=0)


class CacheEntryModel(SQLModel, table=True):
    """
    Modele representant un fichier du cache adresse par contenu.

    Le hash est unique : un seul fichier physique par contenu.
    """

    __tablename__ = "cache_entries"

    id: int | None = Field(default=None, primary_key=True)
    content_hash: str = Field(unique=True, index=True)
    kind: str  # images, video, text, audio, actors
    file_path: str
    extension: str
    format: str | None = None
    size_bytes: int = Field(default=0)
    created_at: datetime | None = Field(default_factory=datetime.utcnow)


class AssetSlotModel(SQLModel, table=True):
    """
    Modele representant un slot (entite, type d'asset).

    La colonne version sert de compare-and-swap pour toute modification de
    la selection du slot.
    """

    __tablename__ = "asset_slots"
    __table_args__ = (
        UniqueConstraint("entity_type", "entity_id", "asset_type", name="uq_asset_slots_key"),
    )

    id: int | None = Field(default=None, primary_key=True)
    entity_type: str
    entity_id: int
    asset_type: str
    locked: bool = Field(default=False)
    locked_at: datetime | None = None
    version: int = Field(default=0)


class AppSettingModel(SQLModel, table=True):
    """Modele cle/valeur pour les reglages modifiables a chaud."""

    __tablename__ = "app_settings"

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime | None = Field(default_factory=datetime.utcnow)


class ScanStateModel(SQLModel, table=True):
    """Modele representant l'empreinte du dernier scan d'une entite."""

    __tablename__ = "scan_states"
    __table_args__ = (
        UniqueConstraint("entity_type", "entity_id", name="uq_scan_states_entity"),
    )

    id: int | None = Field(default=None, primary_key=True)
    entity_type: str
    entity_id: int
    directory: str
    fingerprint: str
    scanned_at: datetime | None = Field(default_factory=datetime.utcnow)
