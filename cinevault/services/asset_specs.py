"""
Registre des specifications d'assets (conventions Kodi).

Table statique des regles par type d'asset image : mots-cles de nom de
fichier, extensions autorisees, ratio cible avec tolerance, dimensions
minimales et recommandees. Contient aussi la table des limites de selection
par type (images et fichiers annexes).

Toutes les fonctions de ce module sont pures : le registre est immuable et
partage entre threads.
"""

from pathlib import PurePath
from typing import Optional

from cinevault.core.entities.asset import CacheKind
from cinevault.core.value_objects import (
    AspectRatio,
    AssetTypeLimit,
    AssetTypeSpec,
    Dimensions,
)
from cinevault.utils.constants import SUBTITLE, THEME, TRAILER

_PHOTO_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})
_TRANSPARENT_EXTENSIONS = frozenset({".png"})

KODI_STANDARD_EXTENSIONS = (".jpg", ".png")


ASSET_SPECS: dict[str, AssetTypeSpec] = {
    "poster": AssetTypeSpec(
        type="poster",
        keywords=("poster",),
        extensions=_PHOTO_EXTENSIONS,
        aspect_ratio=AspectRatio(target=2 / 3, tolerance=0.1),
        min_dimensions=Dimensions(500, 750),
        recommended_dimensions=Dimensions(1000, 1500),
        description="Affiche verticale du film",
    ),
    "fanart": AssetTypeSpec(
        type="fanart",
        keywords=("fanart", "backdrop"),
        extensions=_PHOTO_EXTENSIONS,
        aspect_ratio=AspectRatio(target=16 / 9, tolerance=0.05),
        min_dimensions=Dimensions(1280, 720),
        recommended_dimensions=Dimensions(1920, 1080),
        description="Image de fond 16:9",
    ),
    "banner": AssetTypeSpec(
        type="banner",
        keywords=("banner",),
        extensions=_PHOTO_EXTENSIONS,
        aspect_ratio=AspectRatio(target=758 / 140, tolerance=0.15),
        min_dimensions=Dimensions(500, 92),
        recommended_dimensions=Dimensions(758, 140),
        description="Banniere horizontale",
    ),
    "clearlogo": AssetTypeSpec(
        type="clearlogo",
        keywords=("clearlogo", "logo"),
        extensions=_TRANSPARENT_EXTENSIONS,
        aspect_ratio=AspectRatio(target=800 / 310, tolerance=0.3),
        min_dimensions=Dimensions(400, 155),
        recommended_dimensions=Dimensions(800, 310),
        description="Logo du titre sur fond transparent",
    ),
    "clearart": AssetTypeSpec(
        type="clearart",
        keywords=("clearart",),
        extensions=_TRANSPARENT_EXTENSIONS,
        aspect_ratio=AspectRatio(target=1000 / 562, tolerance=0.3),
        min_dimensions=Dimensions(500, 281),
        recommended_dimensions=Dimensions(1000, 562),
        description="Illustration detouree sur fond transparent",
    ),
    "discart": AssetTypeSpec(
        type="discart",
        keywords=("discart", "disc"),
        extensions=_TRANSPARENT_EXTENSIONS,
        aspect_ratio=AspectRatio(target=1.0, tolerance=0.05),
        min_dimensions=Dimensions(500, 500),
        recommended_dimensions=Dimensions(1000, 1000),
        description="Image circulaire du disque",
    ),
    "keyart": AssetTypeSpec(
        type="keyart",
        keywords=("keyart",),
        extensions=_PHOTO_EXTENSIONS,
        aspect_ratio=AspectRatio(target=2 / 3, tolerance=0.1),
        min_dimensions=Dimensions(500, 750),
        recommended_dimensions=Dimensions(1000, 1500),
        description="Affiche sans texte",
    ),
    "landscape": AssetTypeSpec(
        type="landscape",
        keywords=("landscape", "thumb"),
        extensions=_PHOTO_EXTENSIONS,
        aspect_ratio=AspectRatio(target=16 / 9, tolerance=0.1),
        min_dimensions=Dimensions(800, 450),
        recommended_dimensions=Dimensions(1000, 562),
        description="Vignette paysage avec titre",
    ),
}


ASSET_LIMITS: dict[str, AssetTypeLimit] = {
    "poster": AssetTypeLimit("Poster", 3, 0, 10, "Affiche principale"),
    "fanart": AssetTypeLimit("Fanart", 4, 0, 10, "Fonds d'ecran, souvent en diaporama"),
    "banner": AssetTypeLimit("Banner", 1, 0, 3, "Banniere des vues en liste"),
    "clearlogo": AssetTypeLimit("Clear Logo", 1, 0, 3, "Logo superpose a l'image de fond"),
    "clearart": AssetTypeLimit("Clear Art", 1, 0, 3, "Illustration detouree"),
    "landscape": AssetTypeLimit("Landscape", 1, 0, 3, "Vignette 16:9"),
    "keyart": AssetTypeLimit("Key Art", 1, 0, 3, "Affiche sans texte"),
    "discart": AssetTypeLimit("Disc Art", 1, 0, 5, "Une image par disque"),
    TRAILER: AssetTypeLimit("Trailer", 1, 0, 3, "Bande-annonce locale"),
    SUBTITLE: AssetTypeLimit("Subtitle", 10, 0, 20, "Sous-titres externes"),
    THEME: AssetTypeLimit("Theme", 1, 0, 1, "Theme musical"),
}

# Limite appliquee a un type absent de la table
DEFAULT_MAX_LIMIT = 1


def get_asset_spec(asset_type: str) -> Optional[AssetTypeSpec]:
    """Retourne la specification d'un type d'asset image, ou None."""
    return ASSET_SPECS.get(asset_type)


def get_asset_limit(asset_type: str) -> Optional[AssetTypeLimit]:
    """Retourne les bornes de selection d'un type d'asset, ou None."""
    return ASSET_LIMITS.get(asset_type)


def is_known_asset_type(asset_type: str) -> bool:
    """Verifie qu'un type d'asset est gere (image ou fichier annexe)."""
    return asset_type in ASSET_LIMITS


def find_specs_by_filename(filename: str) -> list[AssetTypeSpec]:
    """
    Trouve les specifications dont un mot-cle apparait dans le nom de fichier.

    La recherche est une sous-chaine insensible a la casse sur le nom complet.
    Un fichier peut correspondre a plusieurs specifications (ex: "disc"
    apparait dans "discart") : chacune est retournee, dans l'ordre du registre.

    Args :
        filename : Nom du fichier (sans repertoire)

    Retourne :
        Liste des specifications correspondantes (vide si aucune)
    """
    lower = filename.lower()
    return [
        spec
        for spec in ASSET_SPECS.values()
        if any(keyword in lower for keyword in spec.keywords)
    ]


def extension_allowed(spec: AssetTypeSpec, extension: str) -> bool:
    """
    Verifie qu'une extension est autorisee pour une specification.

    Args :
        spec : Specification du type d'asset
        extension : Extension avec ou sans point, casse indifferente
    """
    ext = extension.lower()
    if not ext.startswith("."):
        ext = f".{ext}"
    return ext in spec.extensions


def kodi_standard_names(asset_type: str) -> set[str]:
    """
    Noms de fichiers standards Kodi pour un type (ex: poster.jpg, poster.png).

    Seules les variantes .jpg et .png comptent comme nom standard.
    """
    return {f"{asset_type}{ext}" for ext in KODI_STANDARD_EXTENSIONS}


def is_kodi_standard_name(filename: str, asset_type: str) -> bool:
    """Verifie qu'un nom de fichier est le nom standard Kodi du type."""
    return PurePath(filename).name.lower() in kodi_standard_names(asset_type)


_SIDECAR_KINDS: dict[str, CacheKind] = {
    TRAILER: CacheKind.VIDEO,
    SUBTITLE: CacheKind.TEXT,
    THEME: CacheKind.AUDIO,
}


def cache_kind_for(asset_type: str) -> CacheKind:
    """Sous-repertoire du cache d'un type d'asset (images par defaut)."""
    return _SIDECAR_KINDS.get(asset_type, CacheKind.IMAGES)
