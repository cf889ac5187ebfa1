"""
Route de publication des assets selectionnes vers la mediatheque.

La copie des fichiers est executee hors de la boucle d'evenements.
"""

import asyncio
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException

from ...container import Container
from ...core.entities.asset import EntityType
from ..deps import get_container
from ..schemas import PublishedAssetOut, PublishRequest, PublishResponse

router = APIRouter(prefix="/api")


@router.post("/{entity_type}/{entity_id}/publish", response_model=PublishResponse)
async def publish_assets(
    entity_type: EntityType,
    entity_id: int,
    body: PublishRequest,
    container: Container = Depends(get_container),
) -> PublishResponse:
    """Copie les assets selectionnes d'une entite dans son repertoire."""
    directory = Path(body.directory_path).expanduser()
    if not directory.is_dir():
        raise HTTPException(status_code=400, detail=f"Repertoire introuvable : {directory}")

    publishing = container.publishing_service()
    result = await asyncio.to_thread(
        publishing.publish, entity_type, entity_id, directory, body.media_filename
    )
    return PublishResponse(
        published=[
            PublishedAssetOut(
                candidate_id=asset.candidate_id,
                asset_type=asset.asset_type,
                path=str(asset.path),
                copied=asset.copied,
            )
            for asset in result.published
        ],
        copied=result.copied,
        errors=result.errors,
        success=result.success,
    )
