"""
Utilitaires et constantes pour CineVault.
"""

from cinevault.utils.constants import (
    IMAGE_EXTENSIONS,
    SIDECAR_ASSET_TYPES,
    SUBTITLE_EXTENSIONS,
    THEME_EXTENSIONS,
    TRAILER_EXTENSIONS,
)

__all__ = [
    "IMAGE_EXTENSIONS",
    "SIDECAR_ASSET_TYPES",
    "SUBTITLE_EXTENSIONS",
    "THEME_EXTENSIONS",
    "TRAILER_EXTENSIONS",
]
