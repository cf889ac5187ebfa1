"""Adaptateurs de lecture des metadonnees techniques (Pillow, pymediainfo)."""

from cinevault.adapters.probing.image_probe import PillowImageProbe
from cinevault.adapters.probing.video_probe import MediaInfoVideoProbe

__all__ = ["PillowImageProbe", "MediaInfoVideoProbe"]
