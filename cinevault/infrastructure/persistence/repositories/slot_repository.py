"""
Implementation SQLModel du repository AssetSlot.

Un slot est cree a la premiere lecture (deverrouille, version 0). Le
verrouillage incremente la version : une operation preparee avant le
verrouillage echoue a son compare-and-swap.
"""

from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from cinevault.core.entities.asset import AssetSlot, EntityType, SlotKey
from cinevault.core.ports.repositories import IAssetSlotRepository
from cinevault.infrastructure.persistence.models import AssetSlotModel


class SQLModelAssetSlotRepository(IAssetSlotRepository):
    """Repository SQLModel pour les slots (verrou + version)."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: AssetSlotModel) -> AssetSlot:
        """Convertit un modele DB en entite domaine."""
        return AssetSlot(
            key=SlotKey(EntityType(model.entity_type), model.entity_id, model.asset_type),
            locked=model.locked,
            locked_at=model.locked_at,
            version=model.version,
        )

    def _find(self, key: SlotKey):
        statement = (
            select(AssetSlotModel)
            .where(
                AssetSlotModel.entity_type == key.entity_type.value,
                AssetSlotModel.entity_id == key.entity_id,
                AssetSlotModel.asset_type == key.asset_type,
            )
            .execution_options(populate_existing=True)
        )
        return self._session.exec(statement).first()

    def _get_or_create(self, key: SlotKey) -> AssetSlotModel:
        model = self._find(key)
        if model:
            return model

        model = AssetSlotModel(
            entity_type=key.entity_type.value,
            entity_id=key.entity_id,
            asset_type=key.asset_type,
        )
        self._session.add(model)
        try:
            self._session.commit()
        except IntegrityError:
            # Cree en parallele par un autre appel
            self._session.rollback()
            return self._find(key)
        self._session.refresh(model)
        return model

    def get(self, key: SlotKey) -> AssetSlot:
        """Recupere le slot, le cree s'il n'existe pas."""
        return self._to_entity(self._get_or_create(key))

    def set_locked(self, key: SlotKey, locked: bool) -> AssetSlot:
        """Verrouille ou deverrouille un slot (incremente sa version)."""
        model = self._get_or_create(key)
        self._session.connection().execute(
            update(AssetSlotModel)
            .where(AssetSlotModel.id == model.id)
            .values(
                locked=locked,
                locked_at=datetime.utcnow() if locked else None,
                version=AssetSlotModel.version + 1,
            )
        )
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)
