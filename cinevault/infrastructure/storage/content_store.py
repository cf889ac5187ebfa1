"""
Cache adresse par contenu sur le systeme de fichiers.

Organisation :
    {cache_root}/{kind}/{hash[0:2]}/{hash[2:4]}/{hash}.{ext}

Un contenu identique aboutit toujours au meme fichier, quel que soit son nom
d'origine, l'entite qui le reference ou la date de decouverte.

L'ecriture passe par un fichier temporaire dans le repertoire de destination,
synchronise sur disque puis renomme (os.replace) : un lecteur concurrent ne
voit jamais un fichier partiel. Deux ecritures concurrentes du meme hash
renomment des octets identiques sur la meme cible.
"""

import os
import uuid
from pathlib import Path
from typing import Optional

from loguru import logger

from cinevault.core.entities.asset import CacheKind
from cinevault.core.exceptions import CacheUnavailableError, CacheWriteError
from cinevault.core.ports.content_store import IContentStore, StoredContent
from cinevault.infrastructure.storage.hash_service import (
    compute_bytes_hash,
    compute_content_hash,
)
from cinevault.utils.constants import HASH_CHUNK_SIZE

# Extension utilisee quand le fichier source n'en a pas
DEFAULT_EXTENSION = "bin"


def normalize_extension(extension: Optional[str]) -> str:
    """Extension en minuscules, sans point ("JPG" -> "jpg", "" -> "bin")."""
    ext = (extension or "").lower().lstrip(".")
    return ext or DEFAULT_EXTENSION


class FileSystemContentStore(IContentStore):
    """
    Implementation du cache adresse par contenu sur disque local.

    Attributs :
        root : Racine du cache
        public_prefix : Prefixe des URLs publiques (defaut "/cache")
    """

    def __init__(self, cache_root: Path, public_prefix: str = "/cache") -> None:
        """
        Initialise le cache.

        Args :
            cache_root : Repertoire racine du cache (cree a la premiere ecriture)
            public_prefix : Prefixe sous lequel la racine est servie
        """
        self._root = Path(cache_root)
        self._public_prefix = "/" + public_prefix.strip("/")

    @property
    def root(self) -> Path:
        return self._root

    def shard_dir(self, content_hash: str, kind: CacheKind) -> Path:
        """Repertoire de stockage d'un hash : {kind}/{h[0:2]}/{h[2:4]}."""
        return self._root / kind.value / content_hash[0:2] / content_hash[2:4]

    def path_for(self, content_hash: str, kind: CacheKind, extension: str) -> Path:
        """Chemin final d'un contenu dans le cache."""
        ext = normalize_extension(extension)
        return self.shard_dir(content_hash, kind) / f"{content_hash}.{ext}"

    def find(self, content_hash: str, kind: CacheKind) -> Optional[Path]:
        """Retourne le fichier stocke pour un hash (quelle que soit l'extension)."""
        shard = self.shard_dir(content_hash, kind)
        if not shard.is_dir():
            return None
        matches = sorted(p for p in shard.glob(f"{content_hash}.*") if p.is_file())
        return matches[0] if matches else None

    def cache_file(self, source: Path, kind: CacheKind) -> StoredContent:
        """
        Copie un fichier dans le cache s'il n'y est pas deja.

        Le fichier source n'est jamais modifie ni deplace.

        Raises :
            OSError : Si le fichier source est illisible
            CacheUnavailableError : Si la racine du cache est inaccessible
            CacheWriteError : Si l'ecriture dans le cache echoue
        """
        content_hash = compute_content_hash(source)
        size = source.stat().st_size
        existing = self._existing(content_hash, kind, size)
        if existing is not None:
            return existing

        def _write(handle) -> None:
            with open(source, "rb") as src:
                for chunk in iter(lambda: src.read(HASH_CHUNK_SIZE), b""):
                    handle.write(chunk)

        return self._store(content_hash, kind, source.suffix, size, _write, str(source))

    def cache_bytes(self, data: bytes, kind: CacheKind, extension: str) -> StoredContent:
        """
        Ecrit un contenu en memoire dans le cache s'il n'y est pas deja.

        Raises :
            CacheUnavailableError : Si la racine du cache est inaccessible
            CacheWriteError : Si l'ecriture dans le cache echoue
        """
        content_hash = compute_bytes_hash(data)
        existing = self._existing(content_hash, kind, len(data))
        if existing is not None:
            return existing
        return self._store(
            content_hash, kind, extension, len(data), lambda handle: handle.write(data), None
        )

    def public_url(self, path: Path) -> str:
        """
        URL publique d'un fichier du cache.

        Raises :
            ValueError : Si le chemin n'est pas sous la racine du cache
        """
        relative = Path(path).relative_to(self._root)
        return f"{self._public_prefix}/{relative.as_posix()}"

    def _existing(self, content_hash: str, kind: CacheKind, size: int) -> Optional[StoredContent]:
        found = self.find(content_hash, kind)
        if found is None:
            return None
        logger.debug("Contenu deja en cache", hash=content_hash[:12], path=str(found))
        return StoredContent(
            content_hash=content_hash,
            kind=kind,
            path=found,
            extension=normalize_extension(found.suffix),
            size_bytes=size,
            created=False,
        )

    def _ensure_root(self) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheUnavailableError(f"Racine du cache inaccessible : {self._root} ({e})") from e
        if not os.access(self._root, os.W_OK):
            raise CacheUnavailableError(f"Racine du cache en lecture seule : {self._root}")

    def _store(
        self,
        content_hash: str,
        kind: CacheKind,
        extension: Optional[str],
        size: int,
        write,
        source: Optional[str],
    ) -> StoredContent:
        """Ecrit via un fichier temporaire puis renomme atomiquement."""
        self._ensure_root()
        destination = self.path_for(content_hash, kind, extension or "")
        temp = destination.with_name(f".tmp_{uuid.uuid4().hex}_{destination.name}")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(temp, "wb") as handle:
                write(handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp, destination)
        except OSError as e:
            # Nettoyer le fichier temporaire en cas d'erreur
            if temp.exists():
                temp.unlink()
            logger.error(
                "Echec d'ecriture dans le cache",
                hash=content_hash[:12],
                source=source,
                error=str(e),
            )
            raise CacheWriteError(f"Ecriture impossible dans le cache : {e}", source=source) from e

        logger.debug("Contenu ajoute au cache", hash=content_hash[:12], path=str(destination))
        return StoredContent(
            content_hash=content_hash,
            kind=kind,
            path=destination,
            extension=normalize_extension(extension),
            size_bytes=size,
            created=True,
        )
