"""
Service de publication des assets selectionnes dans la mediatheque.

Copie chaque asset selectionne d'une entite depuis le cache vers le
repertoire du media, avec le nommage attendu par les lecteurs :
    {base}-poster.jpg, {base}-fanart.jpg, {base}-fanart1.jpg, {base}.fr.srt

Le cache reste la source de verite : un candidat publie garde son
cache_path, son file_path pointe vers la copie et son tier passe a PUBLISHED.
La publication est idempotente : un fichier deja identique n'est pas recopie.
"""

import os
import shutil
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

from cinevault.core.entities.asset import (
    AssetCandidate,
    EntityType,
    SlotKey,
    StorageTier,
)
from cinevault.core.ports.repositories import IAssetCandidateRepository
from cinevault.infrastructure.storage.hash_service import compute_content_hash
from cinevault.utils.constants import PUBLISH_SUFFIXES, SUBTITLE


@dataclass(frozen=True)
class PublishedAsset:
    """Asset copie (ou deja present) dans le repertoire du media."""

    candidate_id: int
    asset_type: str
    path: Path
    copied: bool


@dataclass
class PublishResult:
    """
    Bilan de la publication d'une entite.

    Attributs :
        published : Assets presents dans la mediatheque apres l'operation
        errors : Motifs des assets non publies
    """

    entity_type: EntityType
    entity_id: int
    directory: Path
    published: list[PublishedAsset] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def copied(self) -> int:
        return sum(1 for asset in self.published if asset.copied)

    @property
    def success(self) -> bool:
        return not self.errors


def library_file_name(candidate: AssetCandidate, base_name: str) -> str:
    """
    Nom de fichier d'un asset publie.

    Exemples (base "Alien (1979)") :
        poster, position 0 -> "Alien (1979)-poster.jpg"
        fanart, position 2 -> "Alien (1979)-fanart2.jpg"
        discart -> "Alien (1979)-disc.png"
        sous-titre fr -> "Alien (1979).fr.srt"
    """
    source = candidate.cache_path or candidate.file_path
    ext = source.suffix.lower() if source else ""

    if candidate.asset_type == SUBTITLE:
        language = f".{candidate.language}" if candidate.language else ""
        return f"{base_name}{language}{ext}"

    suffix = PUBLISH_SUFFIXES.get(candidate.asset_type, f"-{candidate.asset_type}")
    if candidate.selection_order:
        suffix = f"{suffix}{candidate.selection_order}"
    return f"{base_name}{suffix}{ext}"


class AssetPublishingService:
    """
    Publication des selections d'une entite vers son repertoire.

    Chaque asset est traite independamment : un echec de copie est
    journalise et rapporte, les autres assets sont publies.
    """

    def __init__(self, candidate_repo: IAssetCandidateRepository) -> None:
        self._candidate_repo = candidate_repo

    def publish(
        self,
        entity_type: EntityType,
        entity_id: int,
        directory: Path,
        media_filename: Optional[str] = None,
    ) -> PublishResult:
        """
        Publie les assets selectionnes d'une entite.

        Args :
            entity_type : Type de l'entite
            entity_id : Identifiant de l'entite
            directory : Repertoire du media (destination)
            media_filename : Fichier video principal, dont le nom sans
                extension sert de base (defaut entity_{id})

        Raises :
            FileNotFoundError / NotADirectoryError : repertoire absent
        """
        directory = Path(directory)
        if not directory.exists():
            raise FileNotFoundError(f"Repertoire introuvable : {directory}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Pas un repertoire : {directory}")

        base_name = Path(media_filename).stem if media_filename else f"entity_{entity_id}"
        result = PublishResult(entity_type, entity_id, directory)

        for asset_type in self._candidate_repo.list_asset_types(entity_type, entity_id):
            key = SlotKey(entity_type, entity_id, asset_type)
            for candidate in self._candidate_repo.list_selected(key):
                try:
                    result.published.append(
                        self._publish_candidate(candidate, directory, base_name)
                    )
                except (OSError, ValueError) as e:
                    logger.error(
                        "Publication d'asset echouee",
                        candidate_id=candidate.id,
                        asset_type=asset_type,
                        error=str(e),
                    )
                    result.errors.append(f"{asset_type} {candidate.id} : {e}")

        logger.info(
            "Publication terminee",
            entity=f"{entity_type.value}:{entity_id}",
            directory=str(directory),
            published=len(result.published),
            copied=result.copied,
            errors=len(result.errors),
        )
        return result

    def _publish_candidate(
        self, candidate: AssetCandidate, directory: Path, base_name: str
    ) -> PublishedAsset:
        """
        Copie un candidat du cache vers la mediatheque.

        Raises :
            ValueError : Candidat sans contenu en cache
            OSError : Copie impossible
        """
        if not candidate.content_hash or candidate.cache_path is None:
            raise ValueError("aucun contenu en cache")
        source = Path(candidate.cache_path)
        if not source.is_file():
            raise ValueError(f"fichier absent du cache : {source}")

        destination = directory / library_file_name(candidate, base_name)
        copied = False
        if not (
            destination.is_file() and compute_content_hash(destination) == candidate.content_hash
        ):
            _copy_atomic(source, destination)
            copied = True
            logger.debug("Asset publie", asset_type=candidate.asset_type, path=str(destination))

        if candidate.tier != StorageTier.PUBLISHED or candidate.file_path != destination:
            candidate.tier = StorageTier.PUBLISHED
            candidate.file_path = destination
            self._candidate_repo.save(candidate)

        return PublishedAsset(candidate.id, candidate.asset_type, destination, copied)


def _copy_atomic(source: Path, destination: Path) -> None:
    """Copie via un fichier temporaire voisin puis os.replace."""
    temp = destination.with_name(f".tmp_{uuid.uuid4().hex}_{destination.name}")
    try:
        shutil.copyfile(source, temp)
        os.replace(temp, destination)
    except OSError:
        if temp.exists():
            temp.unlink()
        raise
