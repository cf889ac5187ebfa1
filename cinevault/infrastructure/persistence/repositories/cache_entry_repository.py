"""
Implementation SQLModel du repository CacheEntry.
"""

from pathlib import Path
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from cinevault.core.entities.asset import CacheEntry, CacheKind
from cinevault.core.ports.repositories import ICacheEntryRepository
from cinevault.infrastructure.persistence.models import CacheEntryModel


class SQLModelCacheEntryRepository(ICacheEntryRepository):
    """
    Repository SQLModel pour les entrees du cache adresse par contenu.

    Le hash est unique en base : register() ne cree jamais de doublon.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: CacheEntryModel) -> CacheEntry:
        """Convertit un modele DB en entite domaine."""
        return CacheEntry(
            id=model.id,
            content_hash=model.content_hash,
            kind=CacheKind(model.kind),
            file_path=Path(model.file_path),
            extension=model.extension,
            format=model.format,
            size_bytes=model.size_bytes,
            created_at=model.created_at,
        )

    def _to_model(self, entity: CacheEntry) -> CacheEntryModel:
        """Convertit une entite domaine en modele DB."""
        return CacheEntryModel(
            content_hash=entity.content_hash,
            kind=entity.kind.value,
            file_path=str(entity.file_path),
            extension=entity.extension,
            format=entity.format,
            size_bytes=entity.size_bytes,
            created_at=entity.created_at,
        )

    def get_by_id(self, entry_id: int) -> Optional[CacheEntry]:
        """Recupere une entree par son ID."""
        model = self._session.get(CacheEntryModel, entry_id)
        if model:
            return self._to_entity(model)
        return None

    def get_by_hash(self, content_hash: str) -> Optional[CacheEntry]:
        """Recupere une entree par son hash de contenu."""
        statement = select(CacheEntryModel).where(CacheEntryModel.content_hash == content_hash)
        model = self._session.exec(statement).first()
        if model:
            return self._to_entity(model)
        return None

    def register(self, entry: CacheEntry) -> tuple[CacheEntry, bool]:
        """Enregistre une entree si son hash est inconnu."""
        existing = self.get_by_hash(entry.content_hash)
        if existing:
            return existing, False

        model = self._to_model(entry)
        self._session.add(model)
        try:
            self._session.commit()
        except IntegrityError:
            # Meme contenu enregistre en parallele
            self._session.rollback()
            return self.get_by_hash(entry.content_hash), False
        self._session.refresh(model)
        return self._to_entity(model), True

    def count(self) -> int:
        """Nombre total d'entrees."""
        return self._session.exec(select(func.count()).select_from(CacheEntryModel)).one()
