"""
Tests pour les modeles SQLModel de persistance.

Verifie les valeurs par defaut et les contraintes d'unicite.
"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from cinevault.infrastructure.persistence.models import (
    AssetCandidateModel,
    AssetSlotModel,
    CacheEntryModel,
)


class TestAssetCandidateModel:
    """Tests pour AssetCandidateModel."""

    def test_defaults(self):
        model = AssetCandidateModel(entity_type="movie", entity_id=1, asset_type="poster")
        assert model.state == "candidate"
        assert model.lock_owner == "none"
        assert model.tier == "discovered"
        assert model.origin == "local"
        assert model.version == 0
        assert model.discovered_at is not None

    def test_one_candidate_per_content_and_slot(self, session: Session):
        """Le meme contenu ne peut apparaitre qu'une fois par slot."""
        for _ in range(2):
            session.add(
                AssetCandidateModel(
                    entity_type="movie", entity_id=1, asset_type="poster", content_hash="a" * 64
                )
            )
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_same_content_in_other_slot(self, session: Session):
        session.add(
            AssetCandidateModel(
                entity_type="movie", entity_id=1, asset_type="poster", content_hash="a" * 64
            )
        )
        session.add(
            AssetCandidateModel(
                entity_type="movie", entity_id=2, asset_type="poster", content_hash="a" * 64
            )
        )
        session.commit()


class TestUniqueKeys:
    """Tests pour les cles uniques du cache et des slots."""

    def test_cache_hash_unique(self, session: Session):
        for _ in range(2):
            session.add(
                CacheEntryModel(
                    content_hash="b" * 64, kind="images", file_path="/c/x.jpg", extension="jpg"
                )
            )
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_slot_key_unique(self, session: Session):
        for _ in range(2):
            session.add(AssetSlotModel(entity_type="movie", entity_id=1, asset_type="poster"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()
