"""
Objets valeur pour les metadonnees techniques lues sur les fichiers d'assets.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ImageInfo:
    """
    Metadonnees d'une image decodee.

    Attributs :
        width : Largeur en pixels
        height : Hauteur en pixels
        format : Format detecte par le decodeur (JPEG, PNG, WEBP...)
        has_alpha : True si l'image porte un canal de transparence
    """

    width: int
    height: int
    format: Optional[str] = None
    has_alpha: bool = False


@dataclass(frozen=True)
class VideoInfo:
    """
    Metadonnees d'une video annexe (bande-annonce).

    Attributs :
        width : Largeur de la premiere piste video
        height : Hauteur de la premiere piste video
        duration_seconds : Duree en secondes
        codec : Format de la piste video
    """

    width: Optional[int] = None
    height: Optional[int] = None
    duration_seconds: Optional[int] = None
    codec: Optional[str] = None
