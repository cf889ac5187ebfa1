"""
Interfaces ports pour la lecture des metadonnees techniques des assets.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from cinevault.core.value_objects import ImageInfo, VideoInfo


class IImageProbe(ABC):
    """
    Interface de decodage des metadonnees d'image.

    Les implementations levent une exception (OSError, ValueError) si le
    fichier n'est pas une image lisible : l'appelant decide de la politique
    (candidat ecarte lors d'un scan, avertissement lors d'un remplacement).
    """

    @abstractmethod
    def probe(self, path: Path) -> ImageInfo:
        """Lit les dimensions et le format d'une image sur disque."""
        ...

    @abstractmethod
    def probe_bytes(self, data: bytes) -> ImageInfo:
        """Lit les dimensions et le format d'une image en memoire."""
        ...


class IVideoProbe(ABC):
    """Interface de lecture des metadonnees d'une video annexe."""

    @abstractmethod
    def probe(self, path: Path) -> Optional[VideoInfo]:
        """
        Lit resolution et duree d'une video.

        Retourne :
            VideoInfo, ou None si l'extraction echoue
        """
        ...
