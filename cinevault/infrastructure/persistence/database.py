"""
Configuration de la base de donnees SQLite pour CineVault.

Ce module fournit :
- Creation d'engine SQLite configure pour le multi-thread
- Fonction d'initialisation des tables

La base de donnees est configuree via CINEVAULT_DATABASE_URL
(defaut: sqlite:///data/cinevault.db).
"""

from pathlib import Path

from sqlalchemy import Engine
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import SQLModel, create_engine


def create_db_engine(database_url: str) -> Engine:
    """
    Cree un engine SQLAlchemy pour l'URL donnee.

    Cree le repertoire parent pour une base SQLite fichier. Une base en
    memoire partage une connexion unique entre threads (StaticPool) afin que
    toutes les sessions voient les memes tables. Une base fichier ouvre une
    connexion par session (NullPool).
    """
    if database_url.startswith("sqlite:///") and not database_url.startswith("sqlite:///:memory:"):
        db_path = Path(database_url.replace("sqlite:///", ""))
        db_path.parent.mkdir(exist_ok=True, parents=True)

    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["poolclass"] = NullPool

    return create_engine(database_url, echo=False, **kwargs)


def init_db(engine: Engine) -> Engine:
    """
    Initialise la base de donnees en creant toutes les tables.

    Importe les modeles pour enregistrer leurs metadonnees dans
    SQLModel.metadata, puis cree les tables manquantes.

    Retourne :
        L'engine initialise
    """
    # Import des modeles pour enregistrer leurs metadonnees
    # L'import est fait ici pour eviter les imports circulaires
    from cinevault.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    return engine
