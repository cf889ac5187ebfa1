"""
Fixtures pytest partagees pour les tests CineVault.

Ce module contient les fonctions et fixtures communes utilisees dans les tests:
- Generation d'images de test avec Pillow
- Base SQLite en memoire et session SQLModel
- Cache adresse par contenu dans un repertoire temporaire
- Settings de test avec chemins temporaires
"""

from io import BytesIO
from pathlib import Path
from typing import Iterator

import pytest
from PIL import Image
from sqlalchemy import Engine
from sqlmodel import Session

from cinevault.config import Settings
from cinevault.infrastructure.persistence.database import create_db_engine, init_db
from cinevault.infrastructure.storage import FileSystemContentStore


def image_bytes(
    width: int,
    height: int,
    fmt: str = "JPEG",
    color: tuple = (200, 30, 30),
) -> bytes:
    """
    Genere une image unie en memoire.

    Deux appels avec les memes arguments produisent les memes octets.
    Le format PNG avec une couleur a 4 composantes produit une image RGBA.
    """
    mode = "RGBA" if len(color) == 4 else "RGB"
    buffer = BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def write_image(
    directory: Path,
    name: str,
    width: int,
    height: int,
    color: tuple = (200, 30, 30),
) -> Path:
    """Ecrit une image dont le format est deduit de l'extension du nom."""
    fmt = "PNG" if name.lower().endswith(".png") else "JPEG"
    path = directory / name
    path.write_bytes(image_bytes(width, height, fmt, color))
    return path


@pytest.fixture
def engine() -> Engine:
    """Engine SQLite en memoire avec toutes les tables creees."""
    db_engine = create_db_engine("sqlite://")
    init_db(db_engine)
    return db_engine


@pytest.fixture
def file_engine(tmp_path: Path) -> Engine:
    """Engine SQLite fichier : une connexion par session, comme en production."""
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'db' / 'cinevault.db'}")
    init_db(db_engine)
    return db_engine


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    """Session SQLModel unique partagee par les repositories d'un test."""
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def content_store(cache_root: Path) -> FileSystemContentStore:
    return FileSystemContentStore(cache_root)


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    """Repertoire de media vide."""
    directory = tmp_path / "Alien (1979)"
    directory.mkdir()
    return directory


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings isoles dans le repertoire temporaire du test."""
    return Settings(
        _env_file=None,
        cache_dir=tmp_path / "cache",
        database_url=f"sqlite:///{tmp_path / 'db' / 'cinevault.db'}",
        log_file=tmp_path / "logs" / "cinevault.log",
        scan_workers=2,
    )


@pytest.fixture
def make_image():
    """Fabrique d'images sur disque : make_image(directory, name, width, height)."""
    return write_image


@pytest.fixture
def make_image_bytes():
    """Fabrique d'images en memoire : make_image_bytes(width, height, fmt)."""
    return image_bytes
