"""
Implementation SQLModel du repository ScanState.
"""

from pathlib import Path
from typing import Optional

from sqlmodel import Session, select

from cinevault.core.entities.asset import EntityType, ScanState
from cinevault.core.ports.repositories import IScanStateRepository
from cinevault.infrastructure.persistence.models import ScanStateModel


class SQLModelScanStateRepository(IScanStateRepository):
    """Repository SQLModel pour les empreintes de scan."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _find(self, entity_type: EntityType, entity_id: int) -> Optional[ScanStateModel]:
        statement = select(ScanStateModel).where(
            ScanStateModel.entity_type == entity_type.value,
            ScanStateModel.entity_id == entity_id,
        )
        return self._session.exec(statement).first()

    def get(self, entity_type: EntityType, entity_id: int) -> Optional[ScanState]:
        """Recupere l'empreinte du dernier scan d'une entite."""
        model = self._find(entity_type, entity_id)
        if model is None:
            return None
        return ScanState(
            entity_type=EntityType(model.entity_type),
            entity_id=model.entity_id,
            directory=Path(model.directory),
            fingerprint=model.fingerprint,
            scanned_at=model.scanned_at,
        )

    def save(self, state: ScanState) -> ScanState:
        """Enregistre l'empreinte d'un scan (insertion ou mise a jour)."""
        model = self._find(state.entity_type, state.entity_id)
        if model is None:
            model = ScanStateModel(
                entity_type=state.entity_type.value,
                entity_id=state.entity_id,
                directory=str(state.directory),
                fingerprint=state.fingerprint,
                scanned_at=state.scanned_at,
            )
        else:
            model.directory = str(state.directory)
            model.fingerprint = state.fingerprint
            model.scanned_at = state.scanned_at
        self._session.add(model)
        self._session.commit()
        return state
