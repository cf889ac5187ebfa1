"""
Implementation SQLModel du repository AssetCandidate.

Implemente IAssetCandidateRepository pour la persistance des candidats dans
la base de donnees SQLite via SQLModel.

Concurrence optimiste : chaque changement de selection commence par un
UPDATE conditionnel de la version du slot (compare-and-swap). Si aucune
ligne n'est modifiee, un autre appel a change le slot entre la lecture et
l'ecriture : la transaction est annulee et l'appelant relance.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from cinevault.core.entities.asset import (
    AssetCandidate,
    AssetOrigin,
    EntityType,
    LockOwner,
    SelectionState,
    SlotKey,
    StorageTier,
)
from cinevault.core.exceptions import (
    AssetTypeLockedError,
    CandidateNotFoundError,
    ConcurrentModificationError,
)
from cinevault.core.ports.repositories import IAssetCandidateRepository
from cinevault.infrastructure.persistence.models import AssetCandidateModel, AssetSlotModel

# Champs de metadonnees recopies par save() sur un candidat existant
_METADATA_FIELDS = (
    "file_path",
    "file_name",
    "source_url",
    "provider",
    "content_hash",
    "cache_path",
    "width",
    "height",
    "format",
    "language",
    "perceptual_hash",
    "score",
    "tier",
)


def _slot_filter(model, key: SlotKey) -> tuple:
    return (
        model.entity_type == key.entity_type.value,
        model.entity_id == key.entity_id,
        model.asset_type == key.asset_type,
    )


class SQLModelAssetCandidateRepository(IAssetCandidateRepository):
    """
    Repository SQLModel pour les candidats d'assets.

    Implemente IAssetCandidateRepository avec conversion bidirectionnelle
    entre l'entite AssetCandidate (domaine) et AssetCandidateModel (persistance).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: AssetCandidateModel) -> AssetCandidate:
        """Convertit un modele DB en entite domaine."""
        return AssetCandidate(
            id=model.id,
            entity_type=EntityType(model.entity_type),
            entity_id=model.entity_id,
            asset_type=model.asset_type,
            origin=AssetOrigin(model.origin),
            file_path=Path(model.file_path) if model.file_path else None,
            file_name=model.file_name,
            source_url=model.source_url,
            provider=model.provider,
            content_hash=model.content_hash,
            cache_path=Path(model.cache_path) if model.cache_path else None,
            width=model.width,
            height=model.height,
            format=model.format,
            language=model.language,
            perceptual_hash=model.perceptual_hash,
            score=model.score,
            state=SelectionState(model.state),
            selection_order=model.selection_order,
            lock_owner=LockOwner(model.lock_owner),
            tier=StorageTier(model.tier),
            discovered_at=model.discovered_at,
            selected_at=model.selected_at,
            blocked_at=model.blocked_at,
            version=model.version,
        )

    def _to_model(self, entity: AssetCandidate) -> AssetCandidateModel:
        """Convertit une entite domaine en modele DB."""
        model = AssetCandidateModel(
            entity_type=entity.entity_type.value,
            entity_id=entity.entity_id,
            asset_type=entity.asset_type,
            origin=entity.origin.value,
            state=entity.state.value,
            selection_order=entity.selection_order,
            lock_owner=entity.lock_owner.value,
            discovered_at=entity.discovered_at,
            selected_at=entity.selected_at,
            blocked_at=entity.blocked_at,
            version=entity.version,
        )
        self._copy_metadata(entity, model)
        if entity.id:
            model.id = entity.id
        return model

    @staticmethod
    def _copy_metadata(entity: AssetCandidate, model: AssetCandidateModel) -> None:
        for name in _METADATA_FIELDS:
            value = getattr(entity, name)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, StorageTier):
                value = value.value
            setattr(model, name, value)

    def get_by_id(self, candidate_id: int) -> Optional[AssetCandidate]:
        """Recupere un candidat par son ID."""
        model = self._session.get(AssetCandidateModel, candidate_id, populate_existing=True)
        if model:
            return self._to_entity(model)
        return None

    def find_by_hash(self, key: SlotKey, content_hash: str) -> Optional[AssetCandidate]:
        """Recupere le candidat d'un slot correspondant a un contenu."""
        statement = select(AssetCandidateModel).where(
            *_slot_filter(AssetCandidateModel, key),
            AssetCandidateModel.content_hash == content_hash,
        )
        model = self._session.exec(statement).first()
        if model:
            return self._to_entity(model)
        return None

    def find_by_source_url(self, key: SlotKey, source_url: str) -> Optional[AssetCandidate]:
        """Recupere le candidat d'un slot correspondant a une URL fournisseur."""
        statement = select(AssetCandidateModel).where(
            *_slot_filter(AssetCandidateModel, key),
            AssetCandidateModel.source_url == source_url,
        )
        model = self._session.exec(statement).first()
        if model:
            return self._to_entity(model)
        return None

    def find_by_perceptual_hash(
        self, key: SlotKey, perceptual_hash: str
    ) -> Optional[AssetCandidate]:
        """Recupere le candidat d'un slot portant un hash perceptuel."""
        statement = select(AssetCandidateModel).where(
            *_slot_filter(AssetCandidateModel, key),
            AssetCandidateModel.perceptual_hash == perceptual_hash,
        )
        model = self._session.exec(statement).first()
        if model:
            return self._to_entity(model)
        return None

    def list_for_slot(self, key: SlotKey, include_blocked: bool = False) -> list[AssetCandidate]:
        """Liste les candidats d'un slot (selectionnes, puis score, puis insertion)."""
        statement = select(AssetCandidateModel).where(*_slot_filter(AssetCandidateModel, key))
        if not include_blocked:
            statement = statement.where(
                AssetCandidateModel.state != SelectionState.BLOCKED.value
            )
        models = self._session.exec(
            statement.execution_options(populate_existing=True)
        ).all()
        models = sorted(
            models,
            key=lambda m: (
                0 if m.state == SelectionState.SELECTED.value else 1,
                m.selection_order if m.selection_order is not None else 0,
                -m.score,
                m.id,
            ),
        )
        return [self._to_entity(m) for m in models]

    def list_selected(self, key: SlotKey) -> list[AssetCandidate]:
        """Liste ordonnee des candidats selectionnes d'un slot."""
        statement = (
            select(AssetCandidateModel)
            .where(
                *_slot_filter(AssetCandidateModel, key),
                AssetCandidateModel.state == SelectionState.SELECTED.value,
            )
            .order_by(AssetCandidateModel.selection_order, AssetCandidateModel.id)
            .execution_options(populate_existing=True)
        )
        return [self._to_entity(m) for m in self._session.exec(statement).all()]

    def list_asset_types(self, entity_type: EntityType, entity_id: int) -> list[str]:
        """Liste les types d'assets ayant au moins un candidat pour une entite."""
        statement = (
            select(AssetCandidateModel.asset_type)
            .where(
                AssetCandidateModel.entity_type == entity_type.value,
                AssetCandidateModel.entity_id == entity_id,
            )
            .distinct()
            .order_by(AssetCandidateModel.asset_type)
        )
        return list(self._session.exec(statement).all())

    def save(self, candidate: AssetCandidate) -> AssetCandidate:
        """Sauvegarde les metadonnees d'un candidat (insertion ou mise a jour)."""
        existing = None
        if candidate.id:
            existing = self._session.get(AssetCandidateModel, candidate.id)

        if existing:
            # Mise a jour : l'etat de selection n'est jamais touche ici
            self._copy_metadata(candidate, existing)
            self._session.add(existing)
            self._session.commit()
            self._session.refresh(existing)
            return self._to_entity(existing)

        saved, _ = self.add(candidate)
        return saved

    def add(self, candidate: AssetCandidate) -> tuple[AssetCandidate, bool]:
        """Insere un candidat, ou retourne celui du slot ayant deja ce contenu."""
        if candidate.content_hash:
            existing = self.find_by_hash(candidate.slot_key, candidate.content_hash)
            if existing:
                return existing, False

        model = self._to_model(candidate)
        self._session.add(model)
        try:
            self._session.commit()
        except IntegrityError:
            # Meme contenu ajoute au slot en parallele
            self._session.rollback()
            existing = None
            if candidate.content_hash:
                existing = self.find_by_hash(candidate.slot_key, candidate.content_hash)
            if existing is None:
                raise
            return existing, False
        self._session.refresh(model)
        return self._to_entity(model), True

    def delete(self, candidate_id: int) -> bool:
        """Supprime un candidat par ID. Retourne True si supprime."""
        model = self._session.get(AssetCandidateModel, candidate_id)
        if model:
            self._session.delete(model)
            self._session.commit()
            return True
        return False

    def commit_selection(
        self,
        key: SlotKey,
        selected_ids: list[int],
        expected_version: int,
        lock_owner: LockOwner = LockOwner.NONE,
        enforce_lock: bool = True,
        lock: bool = False,
    ) -> int:
        """Remplace atomiquement la selection active d'un slot."""
        now = datetime.utcnow()
        try:
            self._bump_slot_version(key, expected_version, enforce_lock, lock=lock)

            statement = select(AssetCandidateModel).where(
                *_slot_filter(AssetCandidateModel, key)
            ).execution_options(populate_existing=True)
            models = {m.id: m for m in self._session.exec(statement).all()}

            missing = [cid for cid in selected_ids if cid not in models]
            if missing:
                raise CandidateNotFoundError(missing[0])

            wanted = {cid: order for order, cid in enumerate(selected_ids)}
            for model in models.values():
                if model.id in wanted:
                    if model.state == SelectionState.BLOCKED.value:
                        raise ConcurrentModificationError(
                            f"Candidat {model.id} bloque pendant la selection"
                        )
                    if model.state != SelectionState.SELECTED.value:
                        model.selected_at = now
                    model.state = SelectionState.SELECTED.value
                    model.selection_order = wanted[model.id]
                    if lock_owner == LockOwner.USER:
                        model.lock_owner = LockOwner.USER.value
                    model.version += 1
                    self._session.add(model)
                elif model.state == SelectionState.SELECTED.value:
                    model.state = SelectionState.CANDIDATE.value
                    model.selection_order = None
                    model.selected_at = None
                    model.lock_owner = LockOwner.NONE.value
                    model.version += 1
                    self._session.add(model)

            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        return expected_version + 1

    def update_state(
        self,
        candidate_id: int,
        expected_version: int,
        state: SelectionState,
        expected_slot_version: int,
    ) -> AssetCandidate:
        """Change l'etat d'un candidat (blocage / deblocage)."""
        model = self._session.get(AssetCandidateModel, candidate_id, populate_existing=True)
        if model is None:
            raise CandidateNotFoundError(candidate_id)
        key = SlotKey(EntityType(model.entity_type), model.entity_id, model.asset_type)
        now = datetime.utcnow()

        try:
            self._bump_slot_version(key, expected_slot_version, enforce_lock=False)

            result = self._session.connection().execute(
                update(AssetCandidateModel)
                .where(
                    AssetCandidateModel.id == candidate_id,
                    AssetCandidateModel.version == expected_version,
                )
                .values(version=AssetCandidateModel.version + 1)
            )
            if result.rowcount != 1:
                raise ConcurrentModificationError(
                    f"Le candidat {candidate_id} a ete modifie entre-temps"
                )

            self._session.refresh(model)
            was_selected = model.state == SelectionState.SELECTED.value
            model.state = state.value
            if state == SelectionState.BLOCKED:
                model.blocked_at = now
                model.selected_at = None
                model.selection_order = None
                model.lock_owner = LockOwner.NONE.value
            else:
                model.blocked_at = None
            self._session.add(model)

            if was_selected and state != SelectionState.SELECTED:
                self._renumber_selection(key)

            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        self._session.refresh(model)
        return self._to_entity(model)

    def _bump_slot_version(
        self, key: SlotKey, expected_version: int, enforce_lock: bool, lock: bool = False
    ) -> None:
        """
        Incremente la version du slot si elle vaut encore expected_version.

        Avec lock=True, le slot est verrouille par le meme UPDATE.

        Raises :
            AssetTypeLockedError : Si enforce_lock et le slot est verrouille
            ConcurrentModificationError : Si la version a change
        """
        values = {"version": AssetSlotModel.version + 1}
        if lock:
            values.update(locked=True, locked_at=datetime.utcnow())
        statement = (
            update(AssetSlotModel)
            .where(
                *_slot_filter(AssetSlotModel, key),
                AssetSlotModel.version == expected_version,
            )
            .values(**values)
        )
        if enforce_lock:
            statement = statement.where(AssetSlotModel.locked == False)  # noqa: E712

        result = self._session.connection().execute(statement)
        if result.rowcount == 1:
            return

        slot = self._session.exec(
            select(AssetSlotModel)
            .where(*_slot_filter(AssetSlotModel, key))
            .execution_options(populate_existing=True)
        ).first()
        if enforce_lock and slot is not None and slot.locked:
            raise AssetTypeLockedError(key.entity_type.value, key.entity_id, key.asset_type)
        raise ConcurrentModificationError(
            f"Le slot {key} a ete modifie entre-temps (version attendue {expected_version})"
        )

    def _renumber_selection(self, key: SlotKey) -> None:
        """Recompacte les positions des candidats encore selectionnes."""
        self._session.flush()
        statement = (
            select(AssetCandidateModel)
            .where(
                *_slot_filter(AssetCandidateModel, key),
                AssetCandidateModel.state == SelectionState.SELECTED.value,
            )
            .order_by(AssetCandidateModel.selection_order, AssetCandidateModel.id)
        )
        for order, model in enumerate(self._session.exec(statement).all()):
            model.selection_order = order
            self._session.add(model)
