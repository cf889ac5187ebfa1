"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- Dimensions : Dimensions d'une image (largeur x hauteur)
- AspectRatio : Ratio cible avec tolerance
- AssetTypeSpec : Specification physique d'un type d'asset
- AssetTypeLimit : Bornes de selection d'un type d'asset
- ValidationResult : Resultat de validation d'un candidat
- ImageInfo : Metadonnees d'une image decodee
- VideoInfo : Metadonnees d'une video annexe
"""

from cinevault.core.value_objects.asset_spec import (
    AspectRatio,
    AssetTypeLimit,
    AssetTypeSpec,
    Dimensions,
    ValidationResult,
)
from cinevault.core.value_objects.media_probe import ImageInfo, VideoInfo

__all__ = [
    "AspectRatio",
    "AssetTypeLimit",
    "AssetTypeSpec",
    "Dimensions",
    "ValidationResult",
    "ImageInfo",
    "VideoInfo",
]
