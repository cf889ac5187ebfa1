"""
Scan du repertoire d'un media pour y trouver les assets candidats.

Un seul listing non recursif par scan. Chaque fichier est classe :
- Images : mots-cles du registre des specifications + extension autorisee
- Bandes-annonces : mot-cle trailer/preview + extension video
- Sous-titres : extension de sous-titre, langue optionnelle (film.fr.srt)
- Themes : mot-cle theme + extension audio

Le fichier video principal, les fichiers caches et les sous-repertoires sont
ignores. Une entree illisible est journalisee puis sautee : le scan continue.
"""

import re
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

from cinevault.core.entities.asset import CacheKind
from cinevault.core.value_objects import AssetTypeSpec
from cinevault.services.asset_specs import extension_allowed, find_specs_by_filename
from cinevault.utils.constants import (
    SUBTITLE,
    SUBTITLE_EXTENSIONS,
    THEME,
    THEME_EXTENSIONS,
    THEME_KEYWORDS,
    TRAILER,
    TRAILER_EXTENSIONS,
    TRAILER_KEYWORDS,
)

# Code langue ISO 639-1 ou 639-2 (fr, eng) juste avant l'extension
_LANGUAGE_PATTERN = re.compile(r"\.([a-z]{2,3})\.[^.]+$")


@dataclass(frozen=True)
class RawAssetFile:
    """
    Fichier candidat trouve par le scan, avant toute validation.

    Attributs :
        path : Chemin complet du fichier
        file_name : Nom du fichier
        extension : Extension en minuscules (avec le point)
        asset_type : Type d'asset vise (poster, trailer, subtitle...)
        kind : Sous-repertoire du cache correspondant
        spec : Specification physique (images uniquement)
        language : Code langue (sous-titres uniquement)
        size_bytes : Taille du fichier
        mtime : Date de derniere modification (timestamp)
    """

    path: Path
    file_name: str
    extension: str
    asset_type: str
    kind: CacheKind
    spec: Optional[AssetTypeSpec] = None
    language: Optional[str] = None
    size_bytes: int = 0
    mtime: float = 0.0

    @property
    def is_image(self) -> bool:
        return self.kind == CacheKind.IMAGES


@dataclass
class DirectoryScan:
    """
    Resultat du scan d'un repertoire.

    Attributs :
        directory : Repertoire scanne
        assets : Fichiers candidats par type d'asset (un fichier peut
                 apparaitre sous plusieurs types d'images)
        entries : (nom, taille, mtime) de chaque fichier lu, pour l'empreinte
        skipped : Nombre d'entrees illisibles
    """

    directory: Path
    assets: dict[str, list[RawAssetFile]] = field(default_factory=lambda: defaultdict(list))
    entries: list[tuple[str, int, float]] = field(default_factory=list)
    skipped: int = 0

    def files_for(self, asset_type: str) -> list[RawAssetFile]:
        """Fichiers candidats d'un type (liste vide si aucun)."""
        return self.assets.get(asset_type, [])

    @property
    def asset_types(self) -> list[str]:
        return [asset_type for asset_type, files in self.assets.items() if files]


def parse_subtitle_language(filename: str) -> Optional[str]:
    """
    Extrait le code langue d'un nom de sous-titre.

    Seul le segment de 2 ou 3 lettres place juste avant l'extension compte.

    Exemples :
        "Film.fr.srt" -> "fr"
        "Film.eng.forced.srt" -> None
        "The.Big.Sleep.srt" -> None
        "Film.srt" -> None
    """
    match = _LANGUAGE_PATTERN.search(filename.lower())
    return match.group(1) if match else None


def _has_keyword(lower_name: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in lower_name for keyword in keywords)


def classify_file(
    path: Path, size_bytes: int = 0, mtime: float = 0.0
) -> list[RawAssetFile]:
    """
    Classe un fichier selon les regles d'images et de fichiers annexes.

    Retourne :
        Liste des candidats (vide si le fichier n'est pas un asset)
    """
    name = path.name
    lower = name.lower()
    ext = path.suffix.lower()
    found: list[RawAssetFile] = []

    for spec in find_specs_by_filename(name):
        if extension_allowed(spec, ext):
            found.append(
                RawAssetFile(
                    path=path,
                    file_name=name,
                    extension=ext,
                    asset_type=spec.type,
                    kind=CacheKind.IMAGES,
                    spec=spec,
                    size_bytes=size_bytes,
                    mtime=mtime,
                )
            )

    if ext in TRAILER_EXTENSIONS and _has_keyword(lower, TRAILER_KEYWORDS):
        found.append(
            RawAssetFile(path, name, ext, TRAILER, CacheKind.VIDEO,
                         size_bytes=size_bytes, mtime=mtime)
        )
    elif ext in SUBTITLE_EXTENSIONS:
        found.append(
            RawAssetFile(path, name, ext, SUBTITLE, CacheKind.TEXT,
                         language=parse_subtitle_language(name),
                         size_bytes=size_bytes, mtime=mtime)
        )
    elif ext in THEME_EXTENSIONS and _has_keyword(lower, THEME_KEYWORDS):
        found.append(
            RawAssetFile(path, name, ext, THEME, CacheKind.AUDIO,
                         size_bytes=size_bytes, mtime=mtime)
        )

    return found


def scan_directory(directory: Path, primary_video_filename: Optional[str] = None) -> DirectoryScan:
    """
    Liste un repertoire de media et classe ses fichiers par type d'asset.

    Args :
        directory : Repertoire du media
        primary_video_filename : Nom du fichier video principal (exclu)

    Retourne :
        DirectoryScan avec les candidats bruts par type

    Raises :
        FileNotFoundError / NotADirectoryError / PermissionError : si le
        repertoire lui-meme ne peut pas etre liste
    """
    result = DirectoryScan(directory=directory)

    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        name = entry.name
        if name.startswith("."):
            continue
        try:
            if not entry.is_file():
                continue
            stat = entry.stat()
        except OSError as e:
            logger.warning("Entree illisible ignoree", file=str(entry), error=str(e))
            result.skipped += 1
            continue

        # L'empreinte couvre tout le listing, video principale comprise
        result.entries.append((name, stat.st_size, stat.st_mtime))
        if primary_video_filename and name == primary_video_filename:
            continue
        for raw in classify_file(entry, stat.st_size, stat.st_mtime):
            result.assets[raw.asset_type].append(raw)

    logger.debug(
        "Repertoire scanne",
        directory=str(directory),
        files=len(result.entries),
        asset_types=result.asset_types,
    )
    return result
