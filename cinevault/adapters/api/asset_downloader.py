"""
Telechargement des assets fournisseurs via httpx.

Le contenu est retourne en memoire puis confie au cache adresse par contenu
par le service de selection. Les erreurs definitives (HTTP 4xx/5xx, reseau
injoignable apres relances) sont converties en AssetDownloadError.
"""

from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import httpx
from loguru import logger

from cinevault.adapters.api.retry import RateLimitError, request_with_retry
from cinevault.core.exceptions import AssetDownloadError
from cinevault.core.ports.api_clients import DownloadedAsset, IAssetDownloader

# Types MIME des assets vers l'extension stockee dans le cache
CONTENT_TYPE_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "text/vtt": "vtt",
    "application/x-subrip": "srt",
    "audio/mpeg": "mp3",
    "audio/flac": "flac",
}


def guess_extension(url: str, content_type: Optional[str]) -> Optional[str]:
    """
    Deduit l'extension d'un asset telecharge.

    Priorite au type MIME annonce, puis au suffixe du chemin de l'URL.
    """
    if content_type:
        mime = content_type.split(";")[0].strip().lower()
        if mime in CONTENT_TYPE_EXTENSIONS:
            return CONTENT_TYPE_EXTENSIONS[mime]
    suffix = PurePosixPath(urlparse(url).path).suffix.lower().lstrip(".")
    if suffix == "jpeg":
        return "jpg"
    return suffix or None


def filename_from_url(url: str) -> str:
    """Nom de fichier derive du dernier segment du chemin de l'URL."""
    name = PurePosixPath(urlparse(url).path).name
    return name or "asset"


class HttpAssetDownloader(IAssetDownloader):
    """
    Telechargeur d'assets fournisseurs.

    Le client HTTP est cree a la premiere utilisation et reutilise
    (connexions persistantes) jusqu'a close().

    Example:
        downloader = HttpAssetDownloader(timeout=30.0, max_attempts=3)
        asset = await downloader.download("https://image.tmdb.org/t/p/original/abc.jpg")
        await downloader.close()
    """

    def __init__(self, timeout: float = 30.0, max_attempts: int = 3, max_wait: int = 30) -> None:
        """
        Initialise le telechargeur.

        Args:
            timeout: Timeout de chaque requete en secondes
            max_attempts: Nombre maximum de tentatives par URL
            max_wait: Delai maximum entre deux tentatives
        """
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._max_wait = max_wait
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le cree si necessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": "CineVault"},
            )
        return self._client

    async def download(self, url: str) -> DownloadedAsset:
        """
        Telecharge le contenu d'une URL fournisseur.

        Raises:
            AssetDownloadError: URL invalide, erreur HTTP, rate limiting ou
                                reseau injoignable apres relances
        """
        scheme = urlparse(url).scheme
        if scheme not in ("http", "https"):
            raise AssetDownloadError(url, f"schema non supporte : {scheme or 'aucun'}")

        client = self._get_client()
        try:
            response = await request_with_retry(
                client,
                "GET",
                url,
                max_attempts=self._max_attempts,
                max_wait=self._max_wait,
            )
        except RateLimitError as e:
            raise AssetDownloadError(url, "limite de requetes du fournisseur atteinte") from e
        except httpx.HTTPStatusError as e:
            raise AssetDownloadError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise AssetDownloadError(url, f"erreur reseau : {e}") from e

        content_type = response.headers.get("Content-Type")
        logger.debug(
            "Asset telecharge",
            url=url,
            size=len(response.content),
            content_type=content_type,
        )
        return DownloadedAsset(
            url=url,
            content=response.content,
            content_type=content_type,
            extension=guess_extension(url, content_type),
        )

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
