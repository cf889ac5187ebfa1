"""
Service de decouverte des assets locaux d'un media.

Orchestre le flux complet pour un repertoire :
1. Listing et classement des fichiers (scan_directory)
2. Comparaison de l'empreinte du repertoire avec le dernier scan
3. Lecture des dimensions, validation et mise en cache, en parallele
4. Enregistrement des entrees de cache et des candidats (thread appelant)
5. Selection automatique du meilleur candidat par type

Un fichier illisible, invalide ou impossible a mettre en cache est ecarte et
rapporte ; seul un cache inaccessible interrompt la decouverte.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger

from cinevault.core.entities.asset import (
    AssetCandidate,
    AssetOrigin,
    CacheEntry,
    EntityType,
    ScanState,
    SlotKey,
)
from cinevault.core.exceptions import CacheWriteError
from cinevault.core.ports.content_store import IContentStore, StoredContent
from cinevault.core.ports.media_probe import IImageProbe, IVideoProbe
from cinevault.core.ports.repositories import (
    IAssetCandidateRepository,
    ICacheEntryRepository,
    IScanStateRepository,
)
from cinevault.infrastructure.storage.hash_service import compute_directory_fingerprint
from cinevault.services.asset_scanner import RawAssetFile, scan_directory
from cinevault.services.asset_scorer import score_candidate
from cinevault.services.asset_selection import AssetSelectionService
from cinevault.services.dimension_validator import validate_dimensions
from cinevault.utils.constants import SUBTITLE, THEME, TRAILER


@dataclass(frozen=True)
class RejectedFile:
    """Fichier ecarte pendant la decouverte, avec son motif."""

    file_name: str
    asset_type: str
    reason: str


@dataclass
class DiscoveryResult:
    """
    Bilan de la decouverte d'un repertoire.

    Attributs :
        images / trailers / subtitles / themes : Candidats enregistres
        skipped : Entrees illisibles et fichiers ecartes
        cache_entries_created : Nouveaux fichiers ajoutes au cache
        candidates_created : Nouveaux candidats (hors candidats deja connus)
        auto_selected : Types d'assets selectionnes automatiquement
        rejected : Detail des fichiers ecartes
        unchanged : True si le repertoire n'a pas change depuis le dernier scan
    """

    entity_type: EntityType
    entity_id: int
    directory: Path
    images: int = 0
    trailers: int = 0
    subtitles: int = 0
    themes: int = 0
    skipped: int = 0
    cache_entries_created: int = 0
    candidates_created: int = 0
    auto_selected: list[str] = field(default_factory=list)
    rejected: list[RejectedFile] = field(default_factory=list)
    unchanged: bool = False

    def count(self, raw: RawAssetFile) -> None:
        if raw.asset_type == TRAILER:
            self.trailers += 1
        elif raw.asset_type == SUBTITLE:
            self.subtitles += 1
        elif raw.asset_type == THEME:
            self.themes += 1
        else:
            self.images += 1

    def reject(self, raw: RawAssetFile, reason: str) -> None:
        self.skipped += 1
        self.rejected.append(RejectedFile(raw.file_name, raw.asset_type, reason))


@dataclass
class _PreparedFile:
    """Resultat du traitement d'un fichier dans un thread du pool."""

    raw: RawAssetFile
    stored: Optional[StoredContent] = None
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    error: Optional[str] = None


class AssetDiscoveryService:
    """
    Service de decouverte des assets d'un repertoire de media.

    Les lectures de fichiers (dimensions, hash, copie dans le cache) sont
    parallelisees sur scan_workers threads. Toutes les ecritures en base
    sont faites sur le thread appelant.
    """

    def __init__(
        self,
        candidate_repo: IAssetCandidateRepository,
        cache_repo: ICacheEntryRepository,
        scan_state_repo: IScanStateRepository,
        content_store: IContentStore,
        image_probe: IImageProbe,
        video_probe: IVideoProbe,
        selection_service: AssetSelectionService,
        scan_workers: int = 4,
    ) -> None:
        self._candidate_repo = candidate_repo
        self._cache_repo = cache_repo
        self._scan_state_repo = scan_state_repo
        self._content_store = content_store
        self._image_probe = image_probe
        self._video_probe = video_probe
        self._selection_service = selection_service
        self._scan_workers = max(1, scan_workers)

    def discover(
        self,
        entity_type: EntityType,
        entity_id: int,
        directory: Path,
        primary_video_filename: Optional[str] = None,
        force: bool = False,
    ) -> DiscoveryResult:
        """
        Decouvre et enregistre les assets locaux d'une entite.

        Args :
            entity_type : Type de l'entite (movie, series...)
            entity_id : Identifiant de l'entite
            directory : Repertoire du media
            primary_video_filename : Fichier video principal (exclu du scan)
            force : Rescanner meme si le repertoire n'a pas change

        Retourne :
            DiscoveryResult avec les compteurs par categorie

        Raises :
            FileNotFoundError / NotADirectoryError : repertoire absent
            CacheUnavailableError : racine du cache inaccessible
        """
        directory = Path(directory)
        result = DiscoveryResult(entity_type, entity_id, directory)

        scan = scan_directory(directory, primary_video_filename)
        result.skipped += scan.skipped
        fingerprint = compute_directory_fingerprint(scan.entries)

        previous = self._scan_state_repo.get(entity_type, entity_id)
        if (
            not force
            and previous is not None
            and previous.fingerprint == fingerprint
            and Path(previous.directory) == directory
        ):
            logger.info(
                "Repertoire inchange, decouverte ignoree",
                entity=f"{entity_type.value}:{entity_id}",
                directory=str(directory),
            )
            result.unchanged = True
            return result

        raw_files = [raw for asset_type in scan.asset_types for raw in scan.files_for(asset_type)]
        with ThreadPoolExecutor(max_workers=self._scan_workers) as executor:
            prepared = list(executor.map(self._prepare, raw_files))

        for item in prepared:
            if item.error is not None:
                result.reject(item.raw, item.error)
                continue
            self._record(entity_type, entity_id, item, result)

        for asset_type in scan.asset_types:
            key = SlotKey(entity_type, entity_id, asset_type)
            if self._selection_service.auto_select(key) is not None:
                result.auto_selected.append(asset_type)

        self._scan_state_repo.save(
            ScanState(
                entity_type=entity_type,
                entity_id=entity_id,
                directory=directory,
                fingerprint=fingerprint,
                scanned_at=datetime.utcnow(),
            )
        )

        logger.info(
            "Decouverte terminee",
            entity=f"{entity_type.value}:{entity_id}",
            images=result.images,
            trailers=result.trailers,
            subtitles=result.subtitles,
            themes=result.themes,
            skipped=result.skipped,
            cached=result.cache_entries_created,
        )
        return result

    def _prepare(self, raw: RawAssetFile) -> _PreparedFile:
        """
        Lit, valide et met en cache un fichier (execute dans le pool).

        CacheUnavailableError n'est pas interceptee : elle remonte par
        executor.map et interrompt la decouverte.
        """
        item = _PreparedFile(raw=raw)

        if raw.is_image and raw.spec is not None:
            try:
                info = self._image_probe.probe(raw.path)
            except (OSError, ValueError) as e:
                logger.warning("Image illisible ignoree", file=raw.file_name, error=str(e))
                item.error = f"Image illisible : {e}"
                return item
            item.width, item.height, item.format = info.width, info.height, info.format
            validation = validate_dimensions(info.width, info.height, raw.spec)
            if not validation.valid:
                logger.debug(
                    "Candidat rejete par la validation",
                    file=raw.file_name,
                    asset_type=raw.asset_type,
                    reason=validation.reason,
                    dimensions=f"{info.width}x{info.height}",
                )
                item.error = validation.reason
                return item
        elif raw.asset_type == TRAILER:
            video = self._video_probe.probe(raw.path)
            if video is not None:
                item.width, item.height, item.format = video.width, video.height, video.codec

        try:
            item.stored = self._content_store.cache_file(raw.path, raw.kind)
        except CacheWriteError as e:
            item.error = str(e)
        except OSError as e:
            logger.warning("Fichier illisible ignore", file=raw.file_name, error=str(e))
            item.error = f"Fichier illisible : {e}"
        return item

    def _record(
        self,
        entity_type: EntityType,
        entity_id: int,
        item: _PreparedFile,
        result: DiscoveryResult,
    ) -> None:
        """Enregistre l'entree de cache et le candidat d'un fichier prepare."""
        raw, stored = item.raw, item.stored
        entry, created = self._cache_repo.register(
            CacheEntry(
                content_hash=stored.content_hash,
                kind=stored.kind,
                file_path=stored.path,
                extension=stored.extension,
                format=item.format if raw.is_image else None,
                size_bytes=stored.size_bytes,
            )
        )
        if created:
            result.cache_entries_created += 1

        key = SlotKey(entity_type, entity_id, raw.asset_type)
        score = score_candidate(raw.file_name, item.width, item.height, raw.asset_type)
        candidate = self._candidate_repo.find_by_hash(key, entry.content_hash)
        if candidate is None:
            candidate, created = self._candidate_repo.add(
                AssetCandidate(
                    entity_type=entity_type,
                    entity_id=entity_id,
                    asset_type=raw.asset_type,
                    origin=AssetOrigin.LOCAL,
                    provider=AssetOrigin.LOCAL.value,
                    file_path=raw.path,
                    file_name=raw.file_name,
                    cache_path=entry.file_path,
                    content_hash=entry.content_hash,
                    width=item.width,
                    height=item.height,
                    format=item.format,
                    language=raw.language,
                    score=score,
                )
            )
            if created:
                result.candidates_created += 1
                result.count(raw)
                return

        # Metadonnees rafraichies a chaque scan, etat de selection conserve
        candidate.file_path = raw.path
        candidate.file_name = raw.file_name
        candidate.cache_path = entry.file_path
        candidate.width = item.width
        candidate.height = item.height
        candidate.format = item.format
        candidate.language = raw.language
        candidate.score = score
        self._candidate_repo.save(candidate)
        result.count(raw)
