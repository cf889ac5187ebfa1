"""
Dépendances partagées de l'application web.

Fournit l'acces au container DI et le rendu des entites en schemas JSON.
"""

from typing import Optional

from fastapi import Request
from loguru import logger

from ..container import Container
from ..core.entities.asset import AssetCandidate
from ..core.ports.content_store import IContentStore
from .schemas import CandidateOut


def get_container(request: Request) -> Container:
    """Container DI cree au demarrage de l'application."""
    return request.app.state.container


def public_url(store: IContentStore, path) -> Optional[str]:
    """URL publique d'un fichier du cache (None hors du cache)."""
    if path is None:
        return None
    try:
        return store.public_url(path)
    except ValueError:
        logger.debug("Fichier hors du cache", path=str(path))
        return None


def candidate_out(candidate: AssetCandidate, store: IContentStore) -> CandidateOut:
    """Convertit un candidat du domaine en schema de reponse."""
    return CandidateOut(
        id=candidate.id,
        entity_type=candidate.entity_type.value,
        entity_id=candidate.entity_id,
        asset_type=candidate.asset_type,
        origin=candidate.origin.value,
        file_name=candidate.file_name,
        provider=candidate.provider,
        source_url=candidate.source_url,
        content_hash=candidate.content_hash,
        url=public_url(store, candidate.cache_path),
        width=candidate.width,
        height=candidate.height,
        format=candidate.format,
        language=candidate.language,
        score=candidate.score,
        state=candidate.state.value,
        selection_order=candidate.selection_order,
        lock_owner=candidate.lock_owner.value,
        tier=candidate.tier.value,
        version=candidate.version,
    )
