"""
Route de declenchement de la decouverte des assets locaux.

La decouverte lit et hashe des fichiers : elle est executee hors de la
boucle d'evenements (asyncio.to_thread).
"""

import asyncio
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException

from ...container import Container
from ..deps import get_container
from ..schemas import DiscoveryRequest, DiscoveryResponse, RejectedFileOut

router = APIRouter(prefix="/api")


@router.post("/discovery", response_model=DiscoveryResponse)
async def run_discovery(
    body: DiscoveryRequest,
    container: Container = Depends(get_container),
) -> DiscoveryResponse:
    """Decouvre les assets d'un repertoire de media et retourne les compteurs."""
    directory = Path(body.directory_path).expanduser()
    if not directory.is_dir():
        raise HTTPException(status_code=400, detail=f"Repertoire introuvable : {directory}")

    discovery = container.discovery_service()
    result = await asyncio.to_thread(
        discovery.discover,
        body.entity_type,
        body.entity_id,
        directory,
        body.primary_video_filename,
        body.force,
    )
    return DiscoveryResponse(
        images=result.images,
        trailers=result.trailers,
        subtitles=result.subtitles,
        themes=result.themes,
        skipped=result.skipped,
        cache_entries_created=result.cache_entries_created,
        candidates_created=result.candidates_created,
        auto_selected=result.auto_selected,
        rejected=[
            RejectedFileOut(file_name=r.file_name, asset_type=r.asset_type, reason=r.reason)
            for r in result.rejected
        ],
        unchanged=result.unchanged,
    )
