"""
Application FastAPI de CineVault.

Initialise l'application web avec le Container DI, traduit les erreurs du
domaine en statuts HTTP, sert le cache sous son prefixe public et monte les
routes JSON.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from .. import __version__
from ..container import Container
from ..core.exceptions import (
    AssetError,
    AssetLimitExceededError,
    AssetTypeLockedError,
    CacheUnavailableError,
    CacheWriteError,
    CandidateNotFoundError,
    ConcurrentModificationError,
    InvalidAssetReferenceError,
    UnknownAssetTypeError,
)
from .routes.assets import router as assets_router
from .routes.discovery import router as discovery_router
from .routes.publishing import router as publishing_router

# Statut HTTP par type d'erreur du domaine (premier type correspondant)
_ERROR_STATUS: tuple[tuple[type[Exception], int], ...] = (
    (InvalidAssetReferenceError, 400),
    (UnknownAssetTypeError, 404),
    (CandidateNotFoundError, 404),
    (AssetLimitExceededError, 409),
    (ConcurrentModificationError, 409),
    (AssetTypeLockedError, 423),
    (CacheWriteError, 503),
    (CacheUnavailableError, 503),
)


def status_for(error: Exception) -> int:
    """Statut HTTP d'une erreur du domaine (500 si non repertoriee)."""
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


async def _asset_error_handler(request: Request, exc: AssetError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("Erreur d'infrastructure", path=request.url.path, error=str(exc))
    else:
        logger.info("Requete rejetee", path=request.url.path, status=status, error=str(exc))
    return JSONResponse(
        status_code=status,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


async def _value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "ValueError", "detail": str(exc)},
    )


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Construit l'application.

    Args :
        container : Container DI a utiliser (un nouveau par defaut)
    """
    container = container or Container()
    settings = container.config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialise la base au démarrage et ferme le client HTTP à l'arrêt."""
        container.database.init()
        settings.cache_dir.mkdir(parents=True, exist_ok=True)
        app.state.container = container
        logger.info("Démarrage de CineVault", version=__version__)
        yield
        await container.asset_downloader().close()

    app = FastAPI(title="CineVault", version=__version__, lifespan=lifespan)
    app.state.container = container

    app.add_exception_handler(AssetError, _asset_error_handler)
    app.add_exception_handler(ValueError, _value_error_handler)

    # Cache servi en lecture seule sous son prefixe public
    app.mount(
        settings.public_cache_prefix,
        StaticFiles(directory=settings.cache_dir, check_dir=False),
        name="cache",
    )

    app.include_router(assets_router)
    app.include_router(discovery_router)
    app.include_router(publishing_router)
    return app


app = create_app()
