"""
Service de scoring et de classement des candidats d'assets.

Score deterministe en trois composantes additives (maximum 85) :
- Nom (50/30/0) : nom standard Kodi exact > mot-cle du type > autre
- Résolution (25/20/15/10) : par paliers de pixels
- Format (10/8/0) : JPEG > PNG > autre

Le score est calcule une seule fois a la decouverte puis persiste sur le
candidat ; la selection le reutilise sans recalcul.
"""

from pathlib import PurePath
from typing import Iterable, Optional, Sequence

from cinevault.core.entities.asset import AssetCandidate
from cinevault.services.asset_specs import is_kodi_standard_name


# ====================
# Composante nom
# ====================

SCORE_EXACT_NAME = 50
SCORE_KEYWORD_NAME = 30


# ====================
# Paliers de résolution (pixels strictement superieurs au seuil)
# ====================

RESOLUTION_TIERS: tuple[tuple[int, int], ...] = (
    (4_000_000, 25),
    (2_000_000, 20),
    (1_000_000, 15),
)
SCORE_RESOLUTION_FLOOR = 10


# ====================
# Composante format
# ====================

FORMAT_SCORES: dict[str, int] = {
    ".jpg": 10,
    ".jpeg": 10,
    ".png": 8,
}


def score_name(filename: str, asset_type: str) -> int:
    """Score du nom de fichier : 50 si nom standard, 30 si contient le type."""
    if is_kodi_standard_name(filename, asset_type):
        return SCORE_EXACT_NAME
    if asset_type.lower() in PurePath(filename).name.lower():
        return SCORE_KEYWORD_NAME
    return 0


def score_resolution(width: Optional[int], height: Optional[int]) -> int:
    """Score de résolution par paliers de nombre de pixels."""
    pixels = (width or 0) * (height or 0)
    for threshold, points in RESOLUTION_TIERS:
        if pixels > threshold:
            return points
    return SCORE_RESOLUTION_FLOOR


def score_format(filename: str) -> int:
    """Score du format deduit de l'extension."""
    return FORMAT_SCORES.get(PurePath(filename).suffix.lower(), 0)


def score_candidate(
    filename: str,
    width: Optional[int],
    height: Optional[int],
    asset_type: str,
) -> int:
    """
    Calcule le score de classement d'un candidat.

    Exemples :
        poster.jpg 1000x1500 -> 50 + 15 + 10 = 75
        movie-poster-hd.jpg 1000x1500 -> 30 + 15 + 10 = 55

    Args :
        filename : Nom du fichier (ou nom derive de l'URL)
        width : Largeur en pixels
        height : Hauteur en pixels
        asset_type : Type d'asset vise

    Retourne :
        Score entier entre 10 et 85
    """
    return (
        score_name(filename, asset_type)
        + score_resolution(width, height)
        + score_format(filename)
    )


def rank(candidates: Iterable[AssetCandidate]) -> list[AssetCandidate]:
    """
    Trie des candidats par score decroissant.

    Le tri est stable : a score egal, l'ordre d'entree est conserve.
    """
    return sorted(candidates, key=lambda c: -c.score)


def pick_best(candidates: Sequence[AssetCandidate]) -> Optional[AssetCandidate]:
    """
    Choix automatique du meilleur candidat d'un type.

    Regles, dans l'ordre :
    1. Les candidats bloques sont ignores
    2. Un candidat au nom standard Kodi (poster.jpg, fanart.png...) gagne
    3. Sinon, le plus grand nombre de pixels gagne
    4. Egalite departagee par ordre alphabetique du nom de fichier

    Retourne :
        Le candidat choisi, ou None si aucun n'est eligible
    """
    eligible = [c for c in candidates if not c.is_blocked]
    if not eligible:
        return None

    def _name(candidate: AssetCandidate) -> str:
        return (candidate.file_name or "").lower()

    standard = [
        c for c in eligible
        if c.file_name and is_kodi_standard_name(c.file_name, c.asset_type)
    ]
    if standard:
        return sorted(standard, key=_name)[0]

    return sorted(eligible, key=lambda c: (-c.pixel_count, _name(c)))[0]
