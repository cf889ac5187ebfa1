"""
Interface port pour le stockage adresse par contenu.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cinevault.core.entities.asset import CacheKind


@dataclass(frozen=True)
class StoredContent:
    """
    Resultat d'une mise en cache.

    Attributs :
        content_hash : Hash SHA-256 hexadecimal du contenu
        kind : Sous-repertoire du cache
        path : Chemin final du fichier dans le cache
        extension : Extension du fichier stocke (sans le point)
        size_bytes : Taille du contenu
        created : True si le fichier vient d'etre ecrit, False s'il existait
    """

    content_hash: str
    kind: CacheKind
    path: Path
    extension: str
    size_bytes: int
    created: bool


class IContentStore(ABC):
    """
    Interface du cache adresse par contenu.

    Un contenu identique produit toujours le meme chemin, quel que soit son nom
    d'origine, son entite ou la date de decouverte.
    """

    @abstractmethod
    def cache_file(self, source: Path, kind: CacheKind) -> StoredContent:
        """
        Copie un fichier dans le cache (no-op si le contenu y est deja).

        Raises :
            CacheWriteError : Si l'ecriture echoue
        """
        ...

    @abstractmethod
    def cache_bytes(self, data: bytes, kind: CacheKind, extension: str) -> StoredContent:
        """
        Ecrit des octets dans le cache (no-op si le contenu y est deja).

        Raises :
            CacheWriteError : Si l'ecriture echoue
        """
        ...

    @abstractmethod
    def find(self, content_hash: str, kind: CacheKind) -> Optional[Path]:
        """Retourne le chemin du fichier stocke pour un hash, s'il existe."""
        ...

    @abstractmethod
    def public_url(self, path: Path) -> str:
        """URL publique de service d'un fichier du cache."""
        ...
