"""
Implementation de la lecture des metadonnees d'image avec Pillow.

Seul l'en-tete est decode (Image.open est paresseux) : la lecture reste
rapide meme sur de grandes images.
"""

from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from cinevault.core.ports.media_probe import IImageProbe
from cinevault.core.value_objects import ImageInfo

# Modes Pillow portant un canal alpha
_ALPHA_MODES = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})


class PillowImageProbe(IImageProbe):
    """
    Lecteur de dimensions et de format d'image base sur Pillow.

    Leve ValueError pour un fichier qui n'est pas une image reconnue ou dont
    la taille depasse la limite de Pillow (Image.MAX_IMAGE_PIXELS), et
    OSError pour un fichier illisible.
    """

    def probe(self, path: Path) -> ImageInfo:
        """Lit les metadonnees d'une image sur disque."""
        try:
            with Image.open(path) as img:
                return self._to_info(img)
        except UnidentifiedImageError as e:
            raise ValueError(f"Image non reconnue : {path.name}") from e
        except Image.DecompressionBombError as e:
            raise ValueError(f"Image trop grande : {path.name} ({e})") from e

    def probe_bytes(self, data: bytes) -> ImageInfo:
        """Lit les metadonnees d'une image en memoire."""
        try:
            with Image.open(BytesIO(data)) as img:
                return self._to_info(img)
        except UnidentifiedImageError as e:
            raise ValueError("Contenu non reconnu comme image") from e
        except Image.DecompressionBombError as e:
            raise ValueError(f"Image trop grande ({e})") from e

    @staticmethod
    def _to_info(img: Image.Image) -> ImageInfo:
        width, height = img.size
        has_alpha = img.mode in _ALPHA_MODES or (
            img.mode == "P" and "transparency" in img.info
        )
        return ImageInfo(
            width=width,
            height=height,
            format=img.format,
            has_alpha=has_alpha,
        )
