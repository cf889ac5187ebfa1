"""
Implementation de la lecture des metadonnees video avec pymediainfo.

Utilisee pour les bandes-annonces locales : resolution de la premiere piste
video et duree. Un echec d'extraction n'est jamais bloquant.
"""

from pathlib import Path
from typing import Optional

from loguru import logger
from pymediainfo import MediaInfo as PyMediaInfo

from cinevault.core.ports.media_probe import IVideoProbe
from cinevault.core.value_objects import VideoInfo


class MediaInfoVideoProbe(IVideoProbe):
    """Extracteur de resolution et duree utilisant pymediainfo."""

    def probe(self, path: Path) -> Optional[VideoInfo]:
        """
        Extrait les metadonnees d'une video.

        Retourne :
            VideoInfo, ou None si le fichier est absent ou illisible
        """
        if not path.exists():
            return None

        try:
            media_info = PyMediaInfo.parse(str(path))
        except Exception as e:
            logger.debug("Extraction mediainfo impossible", file=path.name, error=str(e))
            return None

        video_tracks = [t for t in media_info.tracks if t.track_type == "Video"]
        general_tracks = [t for t in media_info.tracks if t.track_type == "General"]

        width = height = None
        codec = None
        if video_tracks:
            track = video_tracks[0]
            if track.width is not None and track.height is not None:
                width, height = int(track.width), int(track.height)
            codec = track.format

        return VideoInfo(
            width=width,
            height=height,
            duration_seconds=self._extract_duration(general_tracks),
            codec=codec,
        )

    @staticmethod
    def _extract_duration(general_tracks: list) -> Optional[int]:
        """Duree en secondes (pymediainfo la fournit en millisecondes)."""
        if not general_tracks or general_tracks[0].duration is None:
            return None
        return int(float(general_tracks[0].duration) / 1000)
