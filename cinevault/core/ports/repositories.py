"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) definissant les contrats pour la persistance des
candidats, des entrees de cache, des slots et de l'etat des scans.
Les implementations (adaptateurs) fournissent le stockage concret
(SQLite via SQLModel, en memoire pour les tests, etc.).
"""

from abc import ABC, abstractmethod
from typing import Optional

from cinevault.core.entities.asset import (
    AssetCandidate,
    AssetSlot,
    CacheEntry,
    EntityType,
    LockOwner,
    ScanState,
    SelectionState,
    SlotKey,
)


class IAssetCandidateRepository(ABC):
    """
    Interface de stockage des candidats d'assets.

    Les changements de selection passent obligatoirement par
    commit_selection() ou update_state(), qui verifient la version du slot
    (concurrence optimiste) dans une transaction unique.
    """

    @abstractmethod
    def get_by_id(self, candidate_id: int) -> Optional[AssetCandidate]:
        """Recupere un candidat par son ID."""
        ...

    @abstractmethod
    def find_by_hash(self, key: SlotKey, content_hash: str) -> Optional[AssetCandidate]:
        """Recupere le candidat d'un slot correspondant a un contenu."""
        ...

    @abstractmethod
    def find_by_source_url(self, key: SlotKey, source_url: str) -> Optional[AssetCandidate]:
        """Recupere le candidat d'un slot correspondant a une URL fournisseur."""
        ...

    @abstractmethod
    def find_by_perceptual_hash(
        self, key: SlotKey, perceptual_hash: str
    ) -> Optional[AssetCandidate]:
        """Recupere le candidat d'un slot portant un hash perceptuel."""
        ...

    @abstractmethod
    def list_for_slot(self, key: SlotKey, include_blocked: bool = False) -> list[AssetCandidate]:
        """
        Liste les candidats d'un slot.

        Ordre : selectionnes d'abord (par position), puis score decroissant,
        puis ordre d'insertion.
        """
        ...

    @abstractmethod
    def list_selected(self, key: SlotKey) -> list[AssetCandidate]:
        """Liste ordonnee des candidats selectionnes d'un slot."""
        ...

    @abstractmethod
    def list_asset_types(self, entity_type: EntityType, entity_id: int) -> list[str]:
        """Liste les types d'assets ayant au moins un candidat pour une entite."""
        ...

    @abstractmethod
    def save(self, candidate: AssetCandidate) -> AssetCandidate:
        """
        Sauvegarde les metadonnees d'un candidat (insertion ou mise a jour).

        L'etat de selection d'un candidat existant n'est jamais modifie ici.
        """
        ...

    @abstractmethod
    def add(self, candidate: AssetCandidate) -> tuple[AssetCandidate, bool]:
        """
        Insere un candidat, sauf si son slot porte deja le meme contenu.

        Sur deux insertions concurrentes du meme contenu, la seconde
        retourne la ligne creee par la premiere.

        Retourne :
            (candidat persiste, True s'il vient d'etre cree)
        """
        ...

    @abstractmethod
    def delete(self, candidate_id: int) -> bool:
        """Supprime un candidat par ID. Retourne True si supprime."""
        ...

    @abstractmethod
    def commit_selection(
        self,
        key: SlotKey,
        selected_ids: list[int],
        expected_version: int,
        lock_owner: LockOwner = LockOwner.NONE,
        enforce_lock: bool = True,
        lock: bool = False,
    ) -> int:
        """
        Remplace atomiquement la selection active d'un slot.

        Args :
            key : Slot concerne
            selected_ids : IDs des candidats a selectionner, dans l'ordre
            expected_version : Version du slot lue avant la preparation
            lock_owner : Proprietaire a appliquer aux candidats selectionnes
            enforce_lock : Refuser si le slot est verrouille
            lock : Verrouiller le slot dans la meme transaction

        Retourne :
            La nouvelle version du slot

        Raises :
            ConcurrentModificationError : Si la version du slot a change
            AssetTypeLockedError : Si le slot est verrouille
        """
        ...

    @abstractmethod
    def update_state(
        self,
        candidate_id: int,
        expected_version: int,
        state: SelectionState,
        expected_slot_version: int,
    ) -> AssetCandidate:
        """
        Change l'etat d'un candidat (blocage / deblocage).

        Verifie la version du candidat et celle de son slot dans la meme
        transaction. Un candidat bloque perd sa place dans la selection.

        Raises :
            ConcurrentModificationError : Si une des versions a change
            CandidateNotFoundError : Si le candidat n'existe pas
        """
        ...


class IAssetSlotRepository(ABC):
    """Interface de stockage des slots (verrou + version)."""

    @abstractmethod
    def get(self, key: SlotKey) -> AssetSlot:
        """Recupere le slot, le cree (deverrouille, version 0) s'il n'existe pas."""
        ...

    @abstractmethod
    def set_locked(self, key: SlotKey, locked: bool) -> AssetSlot:
        """Verrouille ou deverrouille un slot (incremente sa version)."""
        ...


class ICacheEntryRepository(ABC):
    """Interface de stockage des entrees du cache adresse par contenu."""

    @abstractmethod
    def get_by_id(self, entry_id: int) -> Optional[CacheEntry]:
        """Recupere une entree par son ID."""
        ...

    @abstractmethod
    def get_by_hash(self, content_hash: str) -> Optional[CacheEntry]:
        """Recupere une entree par son hash de contenu."""
        ...

    @abstractmethod
    def register(self, entry: CacheEntry) -> tuple[CacheEntry, bool]:
        """
        Enregistre une entree si son hash est inconnu.

        Retourne :
            (entree persistee, True si elle vient d'etre creee)
        """
        ...

    @abstractmethod
    def count(self) -> int:
        """Nombre total d'entrees."""
        ...


class ISettingsRepository(ABC):
    """Interface de stockage des reglages cle/valeur de l'application."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Recupere une valeur par sa cle."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Cree ou met a jour une valeur."""
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Supprime une cle. Retourne True si supprimee."""
        ...


class IScanStateRepository(ABC):
    """Interface de stockage des empreintes de scan par entite."""

    @abstractmethod
    def get(self, entity_type: EntityType, entity_id: int) -> Optional[ScanState]:
        """Recupere l'empreinte du dernier scan d'une entite."""
        ...

    @abstractmethod
    def save(self, state: ScanState) -> ScanState:
        """Enregistre l'empreinte d'un scan (insertion ou mise a jour)."""
        ...
