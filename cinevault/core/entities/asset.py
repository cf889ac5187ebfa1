"""
Entites du domaine des assets.

Un AssetCandidate represente une instance physique d'asset (fichier local
decouvert, image fournisseur telechargee ou fichier televerse), rattachee a un
slot (type d'entite, id d'entite, type d'asset). Le contenu physique est stocke
une seule fois dans le cache adresse par contenu (CacheEntry), quel que soit le
nombre de candidats qui le referencent.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class EntityType(Enum):
    """Type d'entite de la mediatheque portant des assets."""

    MOVIE = "movie"
    SERIES = "series"
    SEASON = "season"
    EPISODE = "episode"


class AssetOrigin(Enum):
    """Provenance d'un candidat."""

    LOCAL = "local"
    PROVIDER = "provider"
    USER = "user"


class StorageTier(Enum):
    """
    Niveau de stockage d'un candidat.

    DISCOVERED : present uniquement dans le cache (source de verite)
    PUBLISHED : ecrit dans le repertoire de la mediatheque par la publication
    """

    DISCOVERED = "discovered"
    PUBLISHED = "published"


class SelectionState(Enum):
    """Etat de selection d'un candidat dans son slot."""

    CANDIDATE = "candidate"
    SELECTED = "selected"
    BLOCKED = "blocked"


class LockOwner(Enum):
    """Proprietaire du verrou d'un candidat selectionne."""

    NONE = "none"
    USER = "user"


class CacheKind(Enum):
    """Sous-repertoire du cache selon la nature du fichier."""

    IMAGES = "images"
    VIDEO = "video"
    TEXT = "text"
    AUDIO = "audio"
    ACTORS = "actors"


@dataclass(frozen=True)
class SlotKey:
    """
    Cle d'un slot d'assets : (type d'entite, id d'entite, type d'asset).

    Toutes les operations de selection sont serialisees par slot.
    """

    entity_type: EntityType
    entity_id: int
    asset_type: str

    def __str__(self) -> str:
        return f"{self.entity_type.value}:{self.entity_id}:{self.asset_type}"


@dataclass
class AssetCandidate:
    """
    Candidat d'asset pour un slot.

    Attributs :
        entity_type / entity_id / asset_type : Slot de rattachement
        origin : Provenance (local, provider, user)
        file_path : Emplacement d'origine pour un candidat local
        file_name : Nom de fichier d'origine (ou derive de l'URL)
        source_url : URL fournisseur pour un candidat distant
        provider : Nom du fournisseur (tmdb, fanart, local...)
        content_hash : Hash SHA-256 du contenu (None tant que non cache)
        cache_path : Chemin du fichier dans le cache
        width / height : Dimensions (images et videos)
        format : Format de fichier (JPEG, PNG, mp4...)
        language : Code langue (sous-titres, images fournisseur)
        perceptual_hash : Hash perceptuel fourni par l'interface
        score : Score de classement persistant
        state : Etat de selection
        selection_order : Position dans la selection active
        lock_owner : NONE ou USER si choisi explicitement par l'utilisateur
        tier : DISCOVERED ou PUBLISHED
        version : Compteur de version pour la concurrence optimiste
    """

    entity_type: EntityType
    entity_id: int
    asset_type: str
    origin: AssetOrigin = AssetOrigin.LOCAL
    id: Optional[int] = None
    file_path: Optional[Path] = None
    file_name: Optional[str] = None
    source_url: Optional[str] = None
    provider: Optional[str] = None
    content_hash: Optional[str] = None
    cache_path: Optional[Path] = None
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    language: Optional[str] = None
    perceptual_hash: Optional[str] = None
    score: int = 0
    state: SelectionState = SelectionState.CANDIDATE
    selection_order: Optional[int] = None
    lock_owner: LockOwner = LockOwner.NONE
    tier: StorageTier = StorageTier.DISCOVERED
    discovered_at: Optional[datetime] = field(default_factory=datetime.utcnow)
    selected_at: Optional[datetime] = None
    blocked_at: Optional[datetime] = None
    version: int = 0

    @property
    def slot_key(self) -> SlotKey:
        """Cle du slot de rattachement."""
        return SlotKey(self.entity_type, self.entity_id, self.asset_type)

    @property
    def pixel_count(self) -> int:
        """Nombre de pixels (0 si dimensions inconnues)."""
        return (self.width or 0) * (self.height or 0)

    @property
    def is_selected(self) -> bool:
        return self.state == SelectionState.SELECTED

    @property
    def is_blocked(self) -> bool:
        return self.state == SelectionState.BLOCKED


@dataclass
class CacheEntry:
    """
    Fichier stocke dans le cache adresse par contenu.

    Un seul fichier physique par hash, quel que soit le nombre de
    candidats (et d'entites) qui le referencent.

    Attributs :
        content_hash : Hash SHA-256 hexadecimal du contenu
        kind : Sous-repertoire du cache (images, video, text, audio, actors)
        file_path : Chemin du fichier stocke
        extension : Extension du fichier stocke (sans le point)
        format : Format detecte (JPEG, PNG...) si connu
        size_bytes : Taille du contenu
    """

    content_hash: str
    kind: CacheKind
    file_path: Path
    extension: str
    id: Optional[int] = None
    format: Optional[str] = None
    size_bytes: int = 0
    created_at: Optional[datetime] = field(default_factory=datetime.utcnow)


@dataclass
class AssetSlot:
    """
    Etat persistant d'un slot : verrou et version.

    Attributs :
        key : Cle du slot
        locked : True si l'automatisation et le remplacement en masse sont interdits
        locked_at : Date du verrouillage
        version : Compteur incremente a chaque changement de selection
    """

    key: SlotKey
    locked: bool = False
    locked_at: Optional[datetime] = None
    version: int = 0


@dataclass
class ScanState:
    """
    Empreinte du dernier scan d'un repertoire d'entite.

    Permet de sauter un repertoire inchange lors d'un nouveau scan.
    """

    entity_type: EntityType
    entity_id: int
    directory: Path
    fingerprint: str
    scanned_at: Optional[datetime] = field(default_factory=datetime.utcnow)
