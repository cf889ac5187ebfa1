"""
Service de gestion des limites de selection par type d'asset.

La limite par defaut vient du registre ; l'utilisateur peut la surcharger
dans les bornes [min_allowed, max_allowed] du type. Les surcharges sont
persistees dans app_settings sous la cle asset_limit_{type}.
"""

from dataclasses import dataclass

from loguru import logger

from cinevault.core.exceptions import UnknownAssetTypeError
from cinevault.core.ports.repositories import ISettingsRepository
from cinevault.services.asset_specs import ASSET_LIMITS, DEFAULT_MAX_LIMIT, get_asset_limit
from cinevault.utils.constants import ASSET_LIMIT_KEY_PREFIX


@dataclass(frozen=True)
class AssetLimitView:
    """
    Limite d'un type d'asset telle qu'exposee a l'interface.

    Attributs :
        asset_type : Type d'asset
        display_name : Libelle
        current : Limite effective
        default_max : Limite par defaut
        min_allowed / max_allowed : Bornes configurables
        is_default : True si aucune surcharge n'est enregistree
    """

    asset_type: str
    display_name: str
    current: int
    default_max: int
    min_allowed: int
    max_allowed: int
    is_default: bool


class AssetLimitService:
    """Lecture et modification des limites de selection."""

    def __init__(self, settings_repo: ISettingsRepository) -> None:
        self._settings_repo = settings_repo

    @staticmethod
    def _key(asset_type: str) -> str:
        return f"{ASSET_LIMIT_KEY_PREFIX}{asset_type}"

    def get_limit(self, asset_type: str) -> int:
        """
        Limite effective d'un type d'asset.

        Un type inconnu du registre est limite a 1. Une surcharge illisible
        ou hors bornes est ignoree au profit de la valeur par defaut.
        """
        limit = get_asset_limit(asset_type)
        if limit is None:
            return DEFAULT_MAX_LIMIT

        raw = self._settings_repo.get(self._key(asset_type))
        if raw is None:
            return limit.default_max
        try:
            value = int(raw)
        except ValueError:
            logger.warning("Limite illisible ignoree", asset_type=asset_type, value=raw)
            return limit.default_max
        if not limit.accepts(value):
            logger.warning("Limite hors bornes ignoree", asset_type=asset_type, value=value)
            return limit.default_max
        return value

    def set_limit(self, asset_type: str, value: int) -> int:
        """
        Enregistre une limite pour un type.

        Raises :
            UnknownAssetTypeError : Type absent du registre
            ValueError : Valeur hors des bornes du type
        """
        limit = get_asset_limit(asset_type)
        if limit is None:
            raise UnknownAssetTypeError(asset_type)
        if not limit.accepts(value):
            raise ValueError(
                f"Limite {value} invalide pour {asset_type} "
                f"(bornes {limit.min_allowed}-{limit.max_allowed})"
            )
        self._settings_repo.set(self._key(asset_type), str(value))
        logger.info("Limite d'assets modifiee", asset_type=asset_type, limit=value)
        return value

    def reset_limit(self, asset_type: str) -> int:
        """Supprime la surcharge d'un type et retourne la limite par defaut."""
        limit = get_asset_limit(asset_type)
        if limit is None:
            raise UnknownAssetTypeError(asset_type)
        self._settings_repo.delete(self._key(asset_type))
        return limit.default_max

    def list_limits(self) -> list[AssetLimitView]:
        """Limites de tous les types connus, dans l'ordre du registre."""
        views = []
        for asset_type, limit in ASSET_LIMITS.items():
            current = self.get_limit(asset_type)
            views.append(
                AssetLimitView(
                    asset_type=asset_type,
                    display_name=limit.display_name,
                    current=current,
                    default_max=limit.default_max,
                    min_allowed=limit.min_allowed,
                    max_allowed=limit.max_allowed,
                    is_default=self._settings_repo.get(self._key(asset_type)) is None,
                )
            )
        return views
