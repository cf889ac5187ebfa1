"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe
CINEVAULT_, et peut optionnellement être fournie via un fichier .env.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fichier .env a la racine du projet (parent de cinevault/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe CINEVAULT_.
    Exemple : CINEVAULT_CACHE_DIR=/srv/cinevault/cache

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="CINEVAULT_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Cache adresse par contenu
    cache_dir: Path = Field(default=Path("data/cache"))
    public_cache_prefix: str = Field(default="/cache")

    # Base de données
    database_url: str = Field(default="sqlite:///data/cinevault.db")

    # Decouverte et selection
    scan_workers: int = Field(default=4, ge=1, le=32)
    selection_max_retries: int = Field(default=3, ge=1, le=10)

    # Telechargement des assets fournisseurs
    download_timeout: float = Field(default=30.0, gt=0)
    download_max_attempts: int = Field(default=3, ge=1)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/cinevault.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @field_validator("public_cache_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """Prefixe public sous la forme /xxx (sans slash final)."""
        return "/" + v.strip("/")
