"""
Routes JSON des assets d'un slot.

- Liste des candidats, remplacement de la selection, reinitialisation
- Verrou du slot
- Selection, blocage, deblocage et suppression d'un candidat
- Televersement d'un fichier (uploadRef)
- Limites de selection par type

Les erreurs du domaine sont traduites en statuts HTTP par les handlers
enregistres dans app.py.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile

from ...container import Container
from ...core.entities.asset import EntityType, SlotKey
from ...services.asset_selection import AssetReference
from ..deps import candidate_out, get_container, public_url
from ..schemas import (
    AssetLimitOut,
    AssetLimitUpdate,
    CandidateOut,
    IssueOut,
    LockRequest,
    ReplaceRequest,
    ReplaceResponse,
    ResetResponse,
    SlotCandidatesOut,
    SlotOut,
    StateChangeRequest,
    UploadResponse,
)

router = APIRouter(prefix="/api")


def _slot_out(container: Container, key: SlotKey) -> SlotOut:
    slot = container.selection_service().get_slot(key)
    return SlotOut(
        entity_type=key.entity_type.value,
        entity_id=key.entity_id,
        asset_type=key.asset_type,
        locked=slot.locked,
        version=slot.version,
        max_limit=container.limit_service().get_limit(key.asset_type),
    )


@router.get("/{entity_type}/{entity_id}/assets/{asset_type}", response_model=SlotCandidatesOut)
def list_candidates(
    entity_type: EntityType,
    entity_id: int,
    asset_type: str,
    include_blocked: bool = False,
    container: Container = Depends(get_container),
) -> SlotCandidatesOut:
    """Candidats d'un slot : selectionnes d'abord, puis score decroissant."""
    key = SlotKey(entity_type, entity_id, asset_type)
    store = container.content_store()
    candidates = container.selection_service().list_candidates(
        key, include_blocked=include_blocked
    )
    return SlotCandidatesOut(
        slot=_slot_out(container, key),
        candidates=[candidate_out(c, store) for c in candidates],
    )


@router.put("/{entity_type}/{entity_id}/assets/{asset_type}", response_model=ReplaceResponse)
async def replace_assets(
    entity_type: EntityType,
    entity_id: int,
    asset_type: str,
    body: ReplaceRequest,
    container: Container = Depends(get_container),
) -> ReplaceResponse:
    """Remplace la selection d'un slot par la liste ordonnee de references."""
    key = SlotKey(entity_type, entity_id, asset_type)
    references = [
        AssetReference(
            cache_id=item.cache_id,
            url=item.url,
            upload_ref=item.upload_ref,
            provider=item.provider,
            width=item.width,
            height=item.height,
            perceptual_hash=item.perceptual_hash,
            language=item.language,
        )
        for item in body.assets
    ]
    result = await container.selection_service().replace_assets(
        key, references, lock_after=body.lock
    )
    store = container.content_store()
    return ReplaceResponse(
        applied=[candidate_out(c, store) for c in result.applied],
        warnings=[IssueOut(index=i.index, reference=i.reference, message=i.message) for i in result.warnings],
        errors=[IssueOut(index=i.index, reference=i.reference, message=i.message) for i in result.errors],
        locked=result.locked,
    )


@router.post("/{entity_type}/{entity_id}/assets/{asset_type}/reset", response_model=ResetResponse)
def reset_selection(
    entity_type: EntityType,
    entity_id: int,
    asset_type: str,
    container: Container = Depends(get_container),
) -> ResetResponse:
    """Deselectionne tous les candidats d'un slot."""
    key = SlotKey(entity_type, entity_id, asset_type)
    return ResetResponse(deselected=container.selection_service().reset_selection(key))


@router.get("/{entity_type}/{entity_id}/assets/{asset_type}/lock", response_model=SlotOut)
def get_lock(
    entity_type: EntityType,
    entity_id: int,
    asset_type: str,
    container: Container = Depends(get_container),
) -> SlotOut:
    return _slot_out(container, SlotKey(entity_type, entity_id, asset_type))


@router.put("/{entity_type}/{entity_id}/assets/{asset_type}/lock", response_model=SlotOut)
def set_lock(
    entity_type: EntityType,
    entity_id: int,
    asset_type: str,
    body: LockRequest,
    container: Container = Depends(get_container),
) -> SlotOut:
    """Verrouille ou deverrouille un slot."""
    key = SlotKey(entity_type, entity_id, asset_type)
    container.selection_service().set_lock(key, body.locked)
    return _slot_out(container, key)


@router.post("/candidates/{candidate_id}/select", response_model=CandidateOut)
def select_candidate(
    candidate_id: int, container: Container = Depends(get_container)
) -> CandidateOut:
    candidate = container.selection_service().select_candidate(candidate_id)
    return candidate_out(candidate, container.content_store())


@router.post("/candidates/{candidate_id}/block", response_model=CandidateOut)
def block_candidate(
    candidate_id: int,
    body: Optional[StateChangeRequest] = None,
    container: Container = Depends(get_container),
) -> CandidateOut:
    version = body.version if body else None
    candidate = container.selection_service().block_candidate(candidate_id, version)
    return candidate_out(candidate, container.content_store())


@router.post("/candidates/{candidate_id}/unblock", response_model=CandidateOut)
def unblock_candidate(
    candidate_id: int,
    body: Optional[StateChangeRequest] = None,
    container: Container = Depends(get_container),
) -> CandidateOut:
    version = body.version if body else None
    candidate = container.selection_service().unblock_candidate(candidate_id, version)
    return candidate_out(candidate, container.content_store())


@router.delete("/candidates/{candidate_id}", status_code=204)
def delete_candidate(
    candidate_id: int, container: Container = Depends(get_container)
) -> Response:
    container.selection_service().delete_candidate(candidate_id)
    return Response(status_code=204)


@router.post("/uploads", response_model=UploadResponse, status_code=201)
async def upload_asset(
    file: UploadFile = File(...),
    container: Container = Depends(get_container),
) -> UploadResponse:
    """Met un fichier en cache et retourne son uploadRef (hash du contenu)."""
    data = await file.read()
    entry = await asyncio.to_thread(
        container.selection_service().store_upload, data, file.filename
    )
    return UploadResponse(
        upload_ref=entry.content_hash,
        cache_id=entry.id,
        url=public_url(container.content_store(), entry.file_path),
        size_bytes=entry.size_bytes,
        format=entry.format,
    )


@router.get("/asset-limits", response_model=list[AssetLimitOut])
def list_limits(container: Container = Depends(get_container)) -> list[AssetLimitOut]:
    return [
        AssetLimitOut(
            asset_type=view.asset_type,
            display_name=view.display_name,
            current=view.current,
            default_max=view.default_max,
            min_allowed=view.min_allowed,
            max_allowed=view.max_allowed,
            is_default=view.is_default,
        )
        for view in container.limit_service().list_limits()
    ]


@router.put("/asset-limits/{asset_type}", response_model=list[AssetLimitOut])
def set_limit(
    asset_type: str,
    body: AssetLimitUpdate,
    container: Container = Depends(get_container),
) -> list[AssetLimitOut]:
    """Modifie la limite d'un type et retourne toutes les limites."""
    container.limit_service().set_limit(asset_type, body.limit)
    return list_limits(container)


@router.delete("/asset-limits/{asset_type}", response_model=list[AssetLimitOut])
def reset_limit(
    asset_type: str, container: Container = Depends(get_container)
) -> list[AssetLimitOut]:
    container.limit_service().reset_limit(asset_type)
    return list_limits(container)
