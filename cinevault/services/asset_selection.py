"""
Service de selection et de remplacement des assets d'un slot.

Un slot est le triplet (type d'entite, id d'entite, type d'asset). Ce service
porte toutes les regles qui modifient la selection active d'un slot :

- Choix automatique du meilleur candidat apres une decouverte locale
- Remplacement explicite de la selection par une liste de references
  (entree de cache, URL fournisseur, fichier televerse)
- Operations unitaires : selection, blocage, deblocage, reinitialisation,
  suppression d'un candidat, verrouillage du slot

Regles communes :
- Un slot verrouille refuse toute modification de sa selection
- La selection ne depasse jamais la limite configuree du type
- Un candidat bloque ne revient jamais dans la selection sans deblocage
- Chaque changement est une transaction protegee par la version du slot ;
  un conflit est relance jusqu'a max_retries fois
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from loguru import logger

from cinevault.adapters.api.asset_downloader import filename_from_url
from cinevault.core.entities.asset import (
    AssetCandidate,
    AssetOrigin,
    AssetSlot,
    CacheEntry,
    CacheKind,
    LockOwner,
    SelectionState,
    SlotKey,
)
from cinevault.core.exceptions import (
    AssetDownloadError,
    AssetLimitExceededError,
    AssetTypeLockedError,
    CacheWriteError,
    CandidateNotFoundError,
    ConcurrentModificationError,
    InvalidAssetReferenceError,
    UnknownAssetTypeError,
)
from cinevault.core.ports.api_clients import IAssetDownloader
from cinevault.core.ports.content_store import IContentStore
from cinevault.core.ports.media_probe import IImageProbe
from cinevault.core.ports.repositories import (
    IAssetCandidateRepository,
    IAssetSlotRepository,
    ICacheEntryRepository,
)
from cinevault.services.asset_limits import AssetLimitService
from cinevault.services.asset_scorer import pick_best, score_candidate
from cinevault.services.asset_specs import (
    cache_kind_for,
    extension_allowed,
    get_asset_spec,
    is_known_asset_type,
)
from cinevault.services.dimension_validator import validate_dimensions

T = TypeVar("T")

# Format Pillow -> extension stockee
_FORMAT_EXTENSIONS = {"JPEG": "jpg", "PNG": "png", "WEBP": "webp", "GIF": "gif"}


@dataclass(frozen=True)
class AssetReference:
    """
    Reference d'un asset dans une demande de remplacement.

    Exactement une source parmi cache_id, url, upload_ref et upload_bytes.

    Attributs :
        cache_id : ID d'une entree existante du cache
        url : URL d'une image fournisseur
        upload_ref : Hash retourne par le televersement d'un fichier
        upload_bytes : Contenu brut (usage interne, CLI)
        upload_name : Nom d'origine du fichier televerse
        provider : Nom du fournisseur (tmdb, fanart...)
        width / height : Dimensions annoncees par le fournisseur (informatif)
        perceptual_hash : Hash perceptuel calcule par l'interface
        language : Code langue de l'image
    """

    cache_id: Optional[int] = None
    url: Optional[str] = None
    upload_ref: Optional[str] = None
    upload_bytes: Optional[bytes] = None
    upload_name: Optional[str] = None
    provider: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    perceptual_hash: Optional[str] = None
    language: Optional[str] = None

    @property
    def source_count(self) -> int:
        """Nombre de sources renseignees (1 pour une reference valide)."""
        return sum(
            value is not None
            for value in (self.cache_id, self.url, self.upload_ref, self.upload_bytes)
        )

    def describe(self) -> str:
        if self.cache_id is not None:
            return f"cache:{self.cache_id}"
        if self.url is not None:
            return self.url
        if self.upload_ref is not None:
            return f"upload:{self.upload_ref[:12]}"
        return self.upload_name or "upload"


@dataclass(frozen=True)
class ReplaceIssue:
    """
    Probleme rencontre sur une reference lors d'un remplacement.

    Attributs :
        index : Position de la reference dans la demande
        reference : Description lisible de la reference
        message : Motif
    """

    index: int
    reference: str
    message: str


@dataclass
class ReplaceResult:
    """
    Resultat d'un remplacement de selection.

    Attributs :
        applied : Candidats selectionnes apres l'operation, dans l'ordre
        warnings : References ecartees (validation, bloque, doublon)
        errors : References ecartees sur echec (telechargement, cache)
        locked : True si le slot a ete verrouille apres l'operation
    """

    applied: list[AssetCandidate] = field(default_factory=list)
    warnings: list[ReplaceIssue] = field(default_factory=list)
    errors: list[ReplaceIssue] = field(default_factory=list)
    locked: bool = False


class _Skip(Exception):
    """Reference ecartee : severity vaut "warning" ou "error"."""

    def __init__(self, severity: str, message: str) -> None:
        self.severity = severity
        super().__init__(message)


class AssetSelectionService:
    """
    Service orchestrant la selection des assets d'un slot.

    Coordonne :
    - Les repositories de candidats, de slots et d'entrees de cache
    - Le cache adresse par contenu et la lecture des images
    - Le telechargeur d'assets fournisseurs
    - Le service des limites par type
    """

    def __init__(
        self,
        candidate_repo: IAssetCandidateRepository,
        slot_repo: IAssetSlotRepository,
        cache_repo: ICacheEntryRepository,
        content_store: IContentStore,
        image_probe: IImageProbe,
        downloader: IAssetDownloader,
        limit_service: AssetLimitService,
        max_retries: int = 3,
    ) -> None:
        """
        Initialise le service de selection.

        Args :
            candidate_repo : Persistance des candidats
            slot_repo : Persistance des verrous et versions de slot
            cache_repo : Persistance des entrees du cache
            content_store : Cache adresse par contenu
            image_probe : Lecture des dimensions d'image
            downloader : Telechargement des URLs fournisseurs
            limit_service : Limites de selection par type
            max_retries : Tentatives sur conflit de version
        """
        self._candidate_repo = candidate_repo
        self._slot_repo = slot_repo
        self._cache_repo = cache_repo
        self._content_store = content_store
        self._image_probe = image_probe
        self._downloader = downloader
        self._limit_service = limit_service
        self._max_retries = max(1, max_retries)

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    def get_slot(self, key: SlotKey) -> AssetSlot:
        """Etat du slot (verrou, version)."""
        self._require_known_type(key.asset_type)
        return self._slot_repo.get(key)

    def list_candidates(self, key: SlotKey, include_blocked: bool = False) -> list[AssetCandidate]:
        """Candidats d'un slot : selectionnes, puis score decroissant."""
        self._require_known_type(key.asset_type)
        return self._candidate_repo.list_for_slot(key, include_blocked=include_blocked)

    def list_selected(self, key: SlotKey) -> list[AssetCandidate]:
        """Selection active d'un slot, dans l'ordre."""
        return self._candidate_repo.list_selected(key)

    # ------------------------------------------------------------------
    # Selection automatique
    # ------------------------------------------------------------------

    def auto_select(self, key: SlotKey) -> Optional[AssetCandidate]:
        """
        Selectionne le meilleur candidat d'un slot sans selection.

        Ne fait rien si le slot est verrouille, s'il a deja une selection ou
        si la limite du type vaut 0.

        Retourne :
            Le candidat selectionne, ou None
        """
        if self._limit_service.get_limit(key.asset_type) < 1:
            return None

        def _attempt() -> Optional[AssetCandidate]:
            slot = self._slot_repo.get(key)
            if slot.locked:
                logger.debug("Selection automatique ignoree (slot verrouille)", slot=str(key))
                return None
            if self._candidate_repo.list_selected(key):
                return None
            best = pick_best(self._candidate_repo.list_for_slot(key))
            if best is None:
                return None
            self._candidate_repo.commit_selection(
                key, [best.id], slot.version, LockOwner.NONE, enforce_lock=True
            )
            return best

        try:
            best = self._with_retries(key, _attempt)
        except AssetTypeLockedError:
            # Verrouille entre la lecture et l'ecriture
            return None

        if best is not None:
            logger.info(
                "Meilleur candidat selectionne automatiquement",
                slot=str(key),
                file=best.file_name,
                score=best.score,
            )
        return best

    # ------------------------------------------------------------------
    # Remplacement explicite
    # ------------------------------------------------------------------

    async def replace_assets(
        self,
        key: SlotKey,
        references: list[AssetReference],
        lock_after: bool = False,
    ) -> ReplaceResult:
        """
        Remplace la selection d'un slot par une liste ordonnee de references.

        Les controles bloquants (type, forme des references, limite, verrou)
        sont faits avant toute ecriture. Chaque reference est ensuite
        materialisee (cache + validation) ; les echecs sont ecartes et
        rapportes, le reste est applique atomiquement.

        Une liste vide vide la selection. Si aucune reference non vide n'a
        pu etre materialisee, la selection est laissee intacte.

        Args :
            key : Slot concerne
            references : References dans l'ordre de selection souhaite
            lock_after : Verrouiller le slot apres l'operation

        Raises :
            UnknownAssetTypeError : Type d'asset inconnu
            InvalidAssetReferenceError : Reference sans source ou a sources multiples
            AssetLimitExceededError : Plus de references que la limite du type
            AssetTypeLockedError : Slot verrouille
            ConcurrentModificationError : Conflits persistants apres relances
        """
        self._require_known_type(key.asset_type)
        for index, reference in enumerate(references):
            if reference.source_count != 1:
                raise InvalidAssetReferenceError(
                    f"Reference {index} : une seule source parmi cacheId, url ou "
                    f"uploadRef est attendue ({reference.source_count} fournie(s))"
                )

        max_limit = await asyncio.to_thread(self._limit_service.get_limit, key.asset_type)
        if len(references) > max_limit:
            raise AssetLimitExceededError(key.asset_type, len(references), max_limit)

        slot = await asyncio.to_thread(self._slot_repo.get, key)
        if slot.locked:
            raise AssetTypeLockedError(key.entity_type.value, key.entity_id, key.asset_type)

        result = ReplaceResult()
        selected_ids: list[int] = []
        for index, reference in enumerate(references):
            try:
                candidate = await self._materialize(key, reference)
            except _Skip as skip:
                issue = ReplaceIssue(index, reference.describe(), str(skip))
                if skip.severity == "error":
                    result.errors.append(issue)
                else:
                    result.warnings.append(issue)
                continue

            if candidate.id in selected_ids:
                result.warnings.append(
                    ReplaceIssue(index, reference.describe(), "Doublon ignore")
                )
                continue
            selected_ids.append(candidate.id)

        if references and not selected_ids:
            logger.warning(
                "Aucune reference utilisable, selection inchangee",
                slot=str(key),
                errors=len(result.errors),
                warnings=len(result.warnings),
            )
            result.applied = await asyncio.to_thread(self._candidate_repo.list_selected, key)
            return result

        def _attempt() -> None:
            slot = self._slot_repo.get(key)
            if slot.locked:
                raise AssetTypeLockedError(key.entity_type.value, key.entity_id, key.asset_type)
            self._candidate_repo.commit_selection(
                key,
                selected_ids,
                slot.version,
                LockOwner.USER,
                enforce_lock=True,
                lock=lock_after,
            )

        await asyncio.to_thread(self._with_retries, key, _attempt)
        result.locked = lock_after

        result.applied = await asyncio.to_thread(self._candidate_repo.list_selected, key)
        logger.info(
            "Selection remplacee",
            slot=str(key),
            applied=len(result.applied),
            warnings=len(result.warnings),
            errors=len(result.errors),
            locked=result.locked,
        )
        return result

    def store_upload(
        self,
        data: bytes,
        filename: Optional[str] = None,
        kind: CacheKind = CacheKind.IMAGES,
    ) -> CacheEntry:
        """
        Met en cache un fichier televerse et enregistre son entree.

        Le hash retourne dans l'entree sert de uploadRef pour un remplacement.

        Raises :
            InvalidAssetReferenceError : Contenu vide ou image illisible
            CacheWriteError : Echec d'ecriture dans le cache
        """
        if not data:
            raise InvalidAssetReferenceError("Fichier televerse vide")

        extension = None
        image_format = None
        if kind == CacheKind.IMAGES:
            try:
                info = self._image_probe.probe_bytes(data)
            except (OSError, ValueError) as e:
                raise InvalidAssetReferenceError(f"Image televersee illisible : {e}") from e
            image_format = info.format
            extension = _FORMAT_EXTENSIONS.get(info.format or "")
        if extension is None and filename and "." in filename:
            extension = filename.rsplit(".", 1)[1]

        stored = self._content_store.cache_bytes(data, kind, extension or "")
        entry, _ = self._cache_repo.register(
            CacheEntry(
                content_hash=stored.content_hash,
                kind=kind,
                file_path=stored.path,
                extension=stored.extension,
                format=image_format,
                size_bytes=stored.size_bytes,
            )
        )
        logger.info("Fichier televerse mis en cache", hash=entry.content_hash[:12], name=filename)
        return entry

    # ------------------------------------------------------------------
    # Operations unitaires
    # ------------------------------------------------------------------

    def select_candidate(self, candidate_id: int) -> AssetCandidate:
        """
        Selectionne explicitement un candidat.

        Pour un type a limite 1, le candidat remplace la selection en place.
        Pour un type galerie, il est ajoute en fin de selection.

        Raises :
            CandidateNotFoundError : Candidat inconnu
            InvalidAssetReferenceError : Candidat bloque
            AssetTypeLockedError : Slot verrouille
            AssetLimitExceededError : Galerie deja pleine
        """
        candidate = self._get_candidate(candidate_id)
        if candidate.is_blocked:
            raise InvalidAssetReferenceError(
                f"Le candidat {candidate_id} est bloque : debloquez-le avant de le selectionner"
            )
        key = candidate.slot_key
        max_limit = self._limit_service.get_limit(key.asset_type)

        def _attempt() -> None:
            slot = self._slot_repo.get(key)
            if slot.locked:
                raise AssetTypeLockedError(key.entity_type.value, key.entity_id, key.asset_type)
            current = [c.id for c in self._candidate_repo.list_selected(key)]
            if candidate_id in current:
                return
            if max_limit <= 1:
                wanted = [candidate_id]
            else:
                wanted = current + [candidate_id]
            if len(wanted) > max_limit:
                raise AssetLimitExceededError(key.asset_type, len(wanted), max_limit)
            self._candidate_repo.commit_selection(
                key, wanted, slot.version, LockOwner.USER, enforce_lock=True
            )

        self._with_retries(key, _attempt)
        logger.info("Candidat selectionne", candidate_id=candidate_id, slot=str(key))
        return self._get_candidate(candidate_id)

    def block_candidate(
        self, candidate_id: int, expected_version: Optional[int] = None
    ) -> AssetCandidate:
        """
        Bloque un candidat : il quitte la selection et n'y revient plus.

        Args :
            candidate_id : Candidat a bloquer
            expected_version : Version connue du client ; un ecart leve
                               ConcurrentModificationError sans relance

        Raises :
            AssetTypeLockedError : Le candidat est selectionne dans un slot verrouille
        """
        return self._change_state(candidate_id, SelectionState.BLOCKED, expected_version)

    def unblock_candidate(
        self, candidate_id: int, expected_version: Optional[int] = None
    ) -> AssetCandidate:
        """Rend un candidat bloque a nouveau eligible (etat candidate)."""
        return self._change_state(candidate_id, SelectionState.CANDIDATE, expected_version)

    def reset_selection(self, key: SlotKey) -> int:
        """
        Deselectionne tous les candidats d'un slot.

        Retourne :
            Le nombre de candidats deselectionnes

        Raises :
            AssetTypeLockedError : Slot verrouille
        """
        self._require_known_type(key.asset_type)

        def _attempt() -> int:
            slot = self._slot_repo.get(key)
            if slot.locked:
                raise AssetTypeLockedError(key.entity_type.value, key.entity_id, key.asset_type)
            count = len(self._candidate_repo.list_selected(key))
            if count:
                self._candidate_repo.commit_selection(key, [], slot.version, enforce_lock=True)
            return count

        count = self._with_retries(key, _attempt)
        logger.info("Selection reinitialisee", slot=str(key), deselected=count)
        return count

    def delete_candidate(self, candidate_id: int) -> None:
        """
        Supprime un candidat. L'entree de cache associee est conservee.

        Raises :
            CandidateNotFoundError : Candidat inconnu
            AssetTypeLockedError : Candidat selectionne dans un slot verrouille
        """
        candidate = self._get_candidate(candidate_id)
        key = candidate.slot_key

        if candidate.is_selected:
            def _attempt() -> None:
                slot = self._slot_repo.get(key)
                if slot.locked:
                    raise AssetTypeLockedError(
                        key.entity_type.value, key.entity_id, key.asset_type
                    )
                remaining = [
                    c.id for c in self._candidate_repo.list_selected(key) if c.id != candidate_id
                ]
                self._candidate_repo.commit_selection(
                    key, remaining, slot.version, enforce_lock=True
                )

            self._with_retries(key, _attempt)

        self._candidate_repo.delete(candidate_id)
        logger.info("Candidat supprime", candidate_id=candidate_id, slot=str(key))

    def set_lock(self, key: SlotKey, locked: bool) -> AssetSlot:
        """Verrouille ou deverrouille un slot."""
        self._require_known_type(key.asset_type)
        slot = self._slot_repo.set_locked(key, locked)
        logger.info("Verrou de slot modifie", slot=str(key), locked=locked)
        return slot

    # ------------------------------------------------------------------
    # Interne
    # ------------------------------------------------------------------

    @staticmethod
    def _require_known_type(asset_type: str) -> None:
        if not is_known_asset_type(asset_type):
            raise UnknownAssetTypeError(asset_type)

    def _get_candidate(self, candidate_id: int) -> AssetCandidate:
        candidate = self._candidate_repo.get_by_id(candidate_id)
        if candidate is None:
            raise CandidateNotFoundError(candidate_id)
        return candidate

    def _with_retries(self, key: SlotKey, attempt: Callable[[], T]) -> T:
        """Execute attempt(), relance sur conflit de version."""
        for number in range(1, self._max_retries + 1):
            try:
                return attempt()
            except ConcurrentModificationError:
                if number == self._max_retries:
                    logger.warning(
                        "Conflit de version persistant", slot=str(key), attempts=number
                    )
                    raise
                logger.debug("Conflit de version, nouvelle tentative", slot=str(key), attempt=number)
        raise ConcurrentModificationError(f"Slot {key} : aucune tentative effectuee")

    def _change_state(
        self,
        candidate_id: int,
        state: SelectionState,
        expected_version: Optional[int],
    ) -> AssetCandidate:
        attempts = 1 if expected_version is not None else self._max_retries
        for number in range(1, attempts + 1):
            candidate = self._get_candidate(candidate_id)
            if candidate.state == state:
                return candidate
            if state == SelectionState.CANDIDATE and not candidate.is_blocked:
                return candidate
            key = candidate.slot_key
            slot = self._slot_repo.get(key)
            if slot.locked and candidate.is_selected:
                raise AssetTypeLockedError(key.entity_type.value, key.entity_id, key.asset_type)
            version = expected_version if expected_version is not None else candidate.version
            try:
                updated = self._candidate_repo.update_state(
                    candidate_id, version, state, slot.version
                )
            except ConcurrentModificationError:
                if number == attempts:
                    raise
                continue
            logger.info(
                "Etat du candidat modifie",
                candidate_id=candidate_id,
                state=state.value,
                slot=str(key),
            )
            return updated
        raise ConcurrentModificationError(f"Candidat {candidate_id} : aucune tentative effectuee")

    async def _materialize(self, key: SlotKey, reference: AssetReference) -> AssetCandidate:
        """
        Transforme une reference en candidat persistant du slot.

        Raises :
            _Skip : Reference ecartee (avertissement ou erreur)
        """
        kind = cache_kind_for(key.asset_type)

        # Meme image deja proposee par un autre fournisseur (hash perceptuel)
        if reference.perceptual_hash:
            existing = await asyncio.to_thread(
                self._candidate_repo.find_by_perceptual_hash, key, reference.perceptual_hash
            )
            if existing is not None and existing.content_hash:
                return self._check_eligible(existing)

        if reference.url is not None:
            existing = await asyncio.to_thread(
                self._candidate_repo.find_by_source_url, key, reference.url
            )
            if existing is not None and existing.content_hash:
                return self._check_eligible(existing)
            entry = await self._download_entry(reference.url, kind)
            origin = AssetOrigin.PROVIDER
            file_name = filename_from_url(reference.url)
        elif reference.upload_bytes is not None:
            try:
                entry = await asyncio.to_thread(
                    self.store_upload, reference.upload_bytes, reference.upload_name, kind
                )
            except InvalidAssetReferenceError as e:
                raise _Skip("warning", str(e)) from e
            except CacheWriteError as e:
                raise _Skip("error", str(e)) from e
            origin = AssetOrigin.USER
            file_name = reference.upload_name
        else:
            if reference.cache_id is not None:
                entry = await asyncio.to_thread(self._cache_repo.get_by_id, reference.cache_id)
                origin = AssetOrigin.PROVIDER
            else:
                entry = await asyncio.to_thread(self._cache_repo.get_by_hash, reference.upload_ref)
                origin = AssetOrigin.USER
            if entry is None:
                raise _Skip("error", "Entree de cache introuvable")
            file_name = reference.upload_name

        if entry.kind != kind:
            raise _Skip(
                "warning",
                f"Contenu de type {entry.kind.value} incompatible avec {key.asset_type}",
            )

        existing = await asyncio.to_thread(
            self._candidate_repo.find_by_hash, key, entry.content_hash
        )
        if existing is not None:
            return self._check_eligible(existing)

        candidate = await self._create_candidate(key, entry, origin, reference, file_name)
        # Le meme contenu a pu etre ajoute au slot par un appel concurrent
        return self._check_eligible(candidate)

    @staticmethod
    def _check_eligible(candidate: AssetCandidate) -> AssetCandidate:
        if candidate.is_blocked:
            raise _Skip("warning", f"Candidat {candidate.id} bloque, ignore")
        return candidate

    async def _download_entry(self, url: str, kind: CacheKind) -> CacheEntry:
        try:
            downloaded = await self._downloader.download(url)
        except AssetDownloadError as e:
            logger.warning("Telechargement d'asset echoue", url=url, reason=e.reason)
            raise _Skip("error", str(e)) from e
        try:
            stored = await asyncio.to_thread(
                self._content_store.cache_bytes,
                downloaded.content,
                kind,
                downloaded.extension or "",
            )
        except CacheWriteError as e:
            raise _Skip("error", str(e)) from e
        entry, _ = await asyncio.to_thread(
            self._cache_repo.register,
            CacheEntry(
                content_hash=stored.content_hash,
                kind=kind,
                file_path=stored.path,
                extension=stored.extension,
                size_bytes=stored.size_bytes,
            ),
        )
        return entry

    async def _create_candidate(
        self,
        key: SlotKey,
        entry: CacheEntry,
        origin: AssetOrigin,
        reference: AssetReference,
        file_name: Optional[str],
    ) -> AssetCandidate:
        """Valide le contenu d'une entree puis cree le candidat du slot."""
        width = height = None
        image_format = entry.format
        file_name = file_name or f"{entry.content_hash}.{entry.extension}"

        spec = get_asset_spec(key.asset_type)
        if spec is not None:
            if not extension_allowed(spec, entry.extension):
                raise _Skip(
                    "warning",
                    f"Extension .{entry.extension} non autorisee pour {key.asset_type}",
                )
            try:
                info = await asyncio.to_thread(self._image_probe.probe, entry.file_path)
            except (OSError, ValueError) as e:
                raise _Skip("warning", f"Image illisible : {e}") from e
            width, height, image_format = info.width, info.height, info.format
            validation = validate_dimensions(width, height, spec)
            if not validation.valid:
                raise _Skip("warning", validation.reason or "Dimensions invalides")

        candidate = AssetCandidate(
            entity_type=key.entity_type,
            entity_id=key.entity_id,
            asset_type=key.asset_type,
            origin=origin,
            file_name=file_name,
            source_url=reference.url,
            provider=reference.provider or origin.value,
            content_hash=entry.content_hash,
            cache_path=entry.file_path,
            width=width,
            height=height,
            format=image_format,
            language=reference.language,
            perceptual_hash=reference.perceptual_hash,
            score=score_candidate(file_name, width, height, key.asset_type),
        )
        saved, _ = await asyncio.to_thread(self._candidate_repo.add, candidate)
        return saved
