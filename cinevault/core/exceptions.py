"""
Exceptions du domaine des assets.

Hierarchie :
- AssetError : base commune
  - Erreurs de protocole (rejet complet de l'appel, aucun changement d'etat) :
    AssetLimitExceededError, AssetTypeLockedError, InvalidAssetReferenceError,
    UnknownAssetTypeError, CandidateNotFoundError, ConcurrentModificationError
  - Erreurs par fichier (le candidat est ecarte, le reste continue) :
    CacheWriteError, AssetDownloadError
  - Erreurs d'infrastructure (propagees a l'appelant) :
    CacheUnavailableError
"""

from typing import Optional


class AssetError(Exception):
    """Erreur de base du moteur d'assets."""


class AssetLimitExceededError(AssetError):
    """
    Levee quand une selection depasse la limite configuree pour le type.

    Attributs :
        asset_type : Type d'asset concerne
        requested : Nombre d'assets demandes
        max_limit : Limite configuree
    """

    def __init__(self, asset_type: str, requested: int, max_limit: int) -> None:
        self.asset_type = asset_type
        self.requested = requested
        self.max_limit = max_limit
        super().__init__(
            f"Impossible de selectionner {requested} {asset_type}(s), maximum autorise : {max_limit}"
        )


class AssetTypeLockedError(AssetError):
    """Levee quand le slot (entite, type d'asset) est verrouille."""

    def __init__(self, entity_type: str, entity_id: int, asset_type: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.asset_type = asset_type
        super().__init__(
            f"Les assets '{asset_type}' de {entity_type} {entity_id} sont verrouilles"
        )


class InvalidAssetReferenceError(AssetError):
    """Levee quand la liste de references d'assets est mal formee."""


class UnknownAssetTypeError(AssetError):
    """Levee pour un type d'asset absent du registre."""

    def __init__(self, asset_type: str) -> None:
        self.asset_type = asset_type
        super().__init__(f"Type d'asset inconnu : {asset_type}")


class CandidateNotFoundError(AssetError):
    """Levee quand un candidat reference n'existe pas."""

    def __init__(self, candidate_id: int) -> None:
        self.candidate_id = candidate_id
        super().__init__(f"Candidat introuvable : {candidate_id}")


class ConcurrentModificationError(AssetError):
    """
    Levee quand une mise a jour concurrente a modifie le slot ou le candidat.

    Le compteur de version ne correspondait plus a celui lu avant l'ecriture.
    """


class CacheWriteError(AssetError):
    """Echec d'ecriture d'un fichier dans le cache (disque plein, permissions...)."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        super().__init__(message)


class CacheUnavailableError(AssetError):
    """La racine du cache est inaccessible : erreur fatale pour l'operation."""


class AssetDownloadError(AssetError):
    """Echec du telechargement d'un asset fournisseur."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Telechargement impossible ({url}) : {reason}")
