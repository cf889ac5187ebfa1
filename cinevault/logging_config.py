"""
Configuration du logging de l'application via loguru.

Fournit un logging structuré avec :
- Sortie console : colorée, niveau ajustable par -v / -q
- Sortie fichier : sérialisée en JSON, avec rotation, pour l'analyse historique

Le contexte est passe en arguments nommes et se retrouve dans "extra" :
    logger.info("Decouverte terminee", entity="movie:12", images=3)
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

_VERBOSITY_LEVELS = ("INFO", "DEBUG", "TRACE")


def level_for_verbosity(verbose: int, quiet: bool, default: str = "INFO") -> str:
    """
    Niveau console correspondant aux options de la CLI.

    Exemples :
        level_for_verbosity(0, False) -> "INFO"
        level_for_verbosity(1, False) -> "DEBUG"
        level_for_verbosity(0, True) -> "ERROR"
    """
    if quiet:
        return "ERROR"
    if verbose <= 0:
        return default
    return _VERBOSITY_LEVELS[min(verbose, len(_VERBOSITY_LEVELS) - 1)]


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = Path("logs/cinevault.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau minimum pour la sortie console (DEBUG, INFO, WARNING, ERROR)
        log_file : Fichier de log JSON (None pour desactiver la sortie fichier)
        rotation_size : Taille maximale du fichier avant rotation (ex: "10 MB")
        retention_count : Nombre de fichiers rotatifs à conserver
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level> <dim>{extra}</dim>"
        ),
        colorize=True,
    )

    if log_file is None:
        return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,  # Ecritures depuis les threads du scan
    )

    logger.debug("Logging configuré", log_file=str(log_file), rotation=rotation_size)
