"""
Schemas Pydantic des requetes et reponses de l'API.

Les champs sont exposes en camelCase (cacheId, uploadRef...) ; les deux
formes sont acceptees en entree.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from cinevault.core.entities.asset import EntityType


class ApiModel(BaseModel):
    """Base commune : alias camelCase, noms Python acceptes en entree."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AssetReferenceIn(ApiModel):
    """Reference d'un asset dans une demande de remplacement."""

    cache_id: Optional[int] = None
    url: Optional[str] = None
    upload_ref: Optional[str] = None
    provider: Optional[str] = None
    width: Optional[int] = Field(default=None, ge=0)
    height: Optional[int] = Field(default=None, ge=0)
    perceptual_hash: Optional[str] = None
    language: Optional[str] = None


class ReplaceRequest(ApiModel):
    assets: list[AssetReferenceIn]
    lock: bool = False


class CandidateOut(ApiModel):
    id: int
    entity_type: str
    entity_id: int
    asset_type: str
    origin: str
    file_name: Optional[str] = None
    provider: Optional[str] = None
    source_url: Optional[str] = None
    content_hash: Optional[str] = None
    url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    language: Optional[str] = None
    score: int
    state: str
    selection_order: Optional[int] = None
    lock_owner: str
    tier: str = "discovered"
    version: int


class IssueOut(ApiModel):
    index: int
    reference: str
    message: str


class ReplaceResponse(ApiModel):
    applied: list[CandidateOut]
    warnings: list[IssueOut]
    errors: list[IssueOut]
    locked: bool


class SlotOut(ApiModel):
    entity_type: str
    entity_id: int
    asset_type: str
    locked: bool
    version: int
    max_limit: int


class SlotCandidatesOut(ApiModel):
    slot: SlotOut
    candidates: list[CandidateOut]


class LockRequest(ApiModel):
    locked: bool


class StateChangeRequest(ApiModel):
    """Version connue du candidat (optionnelle) pour detecter un conflit."""

    version: Optional[int] = None


class ResetResponse(ApiModel):
    deselected: int


class UploadResponse(ApiModel):
    upload_ref: str
    cache_id: int
    url: Optional[str] = None
    size_bytes: int
    format: Optional[str] = None


class AssetLimitOut(ApiModel):
    asset_type: str
    display_name: str
    current: int
    default_max: int
    min_allowed: int
    max_allowed: int
    is_default: bool


class AssetLimitUpdate(ApiModel):
    limit: int


class DiscoveryRequest(ApiModel):
    entity_type: EntityType
    entity_id: int
    directory_path: str
    primary_video_filename: Optional[str] = None
    force: bool = False

    @model_validator(mode="after")
    def _check_directory(self) -> "DiscoveryRequest":
        if not self.directory_path.strip():
            raise ValueError("directoryPath ne peut pas etre vide")
        return self


class RejectedFileOut(ApiModel):
    file_name: str
    asset_type: str
    reason: str


class DiscoveryResponse(ApiModel):
    images: int
    trailers: int
    subtitles: int
    themes: int
    skipped: int
    cache_entries_created: int
    candidates_created: int
    auto_selected: list[str]
    rejected: list[RejectedFileOut]
    unchanged: bool


class PublishRequest(ApiModel):
    directory_path: str
    media_filename: Optional[str] = None

    @model_validator(mode="after")
    def _check_directory(self) -> "PublishRequest":
        if not self.directory_path.strip():
            raise ValueError("directoryPath ne peut pas etre vide")
        return self


class PublishedAssetOut(ApiModel):
    candidate_id: int
    asset_type: str
    path: str
    copied: bool


class PublishResponse(ApiModel):
    published: list[PublishedAssetOut]
    copied: int
    errors: list[str]
    success: bool
