"""
Interfaces ports pour les acces reseau aux fournisseurs d'assets.

Les clients API des fournisseurs (TMDB, Fanart.tv...) sont externes a ce
moteur : ils fournissent des URLs d'images. Ce port couvre uniquement le
telechargement du contenu d'une URL fournisseur.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DownloadedAsset:
    """
    Contenu telecharge depuis un fournisseur.

    Attributs :
        url : URL d'origine
        content : Octets du fichier
        content_type : Type MIME annonce par le serveur
        extension : Extension deduite (sans le point), None si inconnue
    """

    url: str
    content: bytes
    content_type: Optional[str] = None
    extension: Optional[str] = None


class IAssetDownloader(ABC):
    """Interface de telechargement d'un asset fournisseur."""

    @abstractmethod
    async def download(self, url: str) -> DownloadedAsset:
        """
        Telecharge le contenu d'une URL.

        Raises :
            AssetDownloadError : Si le telechargement echoue definitivement
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Libere les connexions HTTP."""
        ...
