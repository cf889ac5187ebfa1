"""
Implementation SQLModel du repository de reglages cle/valeur.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Session

from cinevault.core.ports.repositories import ISettingsRepository
from cinevault.infrastructure.persistence.models import AppSettingModel


class SQLModelSettingsRepository(ISettingsRepository):
    """Repository SQLModel pour la table app_settings."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, key: str) -> Optional[str]:
        """Recupere une valeur par sa cle."""
        model = self._session.get(AppSettingModel, key, populate_existing=True)
        return model.value if model else None

    def set(self, key: str, value: str) -> None:
        """Cree ou met a jour une valeur."""
        model = self._session.get(AppSettingModel, key)
        if model:
            model.value = value
            model.updated_at = datetime.utcnow()
        else:
            model = AppSettingModel(key=key, value=value)
        self._session.add(model)
        self._session.commit()

    def delete(self, key: str) -> bool:
        """Supprime une cle. Retourne True si supprimee."""
        model = self._session.get(AppSettingModel, key)
        if model:
            self._session.delete(model)
            self._session.commit()
            return True
        return False
