"""
Tests unitaires pour AssetPublishingService.

Ces tests verifient:
- Le nommage des fichiers publies (suffixes, position, langue)
- La copie des assets selectionnes depuis le cache
- Le passage des candidats publies au tier PUBLISHED
- L'idempotence d'une seconde publication
- Le rapport des assets impossibles a publier
"""

from pathlib import Path

import pytest
from sqlmodel import Session

from cinevault.core.entities.asset import (
    AssetCandidate,
    CacheKind,
    EntityType,
    SlotKey,
    StorageTier,
)
from cinevault.infrastructure.persistence.repositories import (
    SQLModelAssetCandidateRepository,
    SQLModelAssetSlotRepository,
)
from cinevault.infrastructure.storage import FileSystemContentStore
from cinevault.services.asset_publishing import AssetPublishingService, library_file_name

POSTER = SlotKey(EntityType.MOVIE, 12, "poster")
FANART = SlotKey(EntityType.MOVIE, 12, "fanart")
SUBTITLE = SlotKey(EntityType.MOVIE, 12, "subtitle")


@pytest.fixture
def candidate_repo(session: Session) -> SQLModelAssetCandidateRepository:
    return SQLModelAssetCandidateRepository(session)


@pytest.fixture
def publishing(candidate_repo) -> AssetPublishingService:
    return AssetPublishingService(candidate_repo)


@pytest.fixture
def library_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "bibliotheque" / "Alien (1979)"
    directory.mkdir(parents=True)
    return directory


def _selected(
    session, candidate_repo, content_store, key, payloads, kind=CacheKind.IMAGES, ext="jpg", **extra
):
    """Met des contenus en cache, cree les candidats et les selectionne dans l'ordre."""
    ids = []
    for data in payloads:
        stored = content_store.cache_bytes(data, kind, ext)
        saved = candidate_repo.save(
            AssetCandidate(
                entity_type=key.entity_type,
                entity_id=key.entity_id,
                asset_type=key.asset_type,
                content_hash=stored.content_hash,
                cache_path=stored.path,
                file_name=f"{stored.content_hash[:8]}.{ext}",
                **extra,
            )
        )
        ids.append(saved.id)
    version = SQLModelAssetSlotRepository(session).get(key).version
    candidate_repo.commit_selection(key, ids, version)
    return candidate_repo.list_selected(key)


class TestLibraryFileName:
    """Tests du nommage des fichiers publies."""

    @pytest.mark.parametrize(
        "asset_type,order,cache_name,expected",
        [
            ("poster", 0, "ab.jpg", "Alien (1979)-poster.jpg"),
            ("fanart", 2, "ab.jpg", "Alien (1979)-fanart2.jpg"),
            ("discart", 0, "ab.png", "Alien (1979)-disc.png"),
            ("trailer", 0, "ab.mp4", "Alien (1979)-trailer.mp4"),
            ("keyart", 0, "ab.JPG", "Alien (1979)-keyart.jpg"),
        ],
    )
    def test_suffixes(self, asset_type, order, cache_name, expected) -> None:
        candidate = AssetCandidate(
            entity_type=EntityType.MOVIE,
            entity_id=12,
            asset_type=asset_type,
            cache_path=Path("/cache/images/ab/cd") / cache_name,
            selection_order=order,
        )
        assert library_file_name(candidate, "Alien (1979)") == expected

    def test_subtitle_language(self) -> None:
        candidate = AssetCandidate(
            entity_type=EntityType.MOVIE,
            entity_id=12,
            asset_type="subtitle",
            cache_path=Path("/cache/text/ab/cd/abcd.srt"),
            language="fr",
        )
        assert library_file_name(candidate, "Alien (1979)") == "Alien (1979).fr.srt"


class TestPublish:
    """Tests de la publication d'une entite."""

    def test_copies_selected_assets(
        self, session, candidate_repo, content_store, publishing, library_dir, make_image_bytes
    ) -> None:
        poster = _selected(session, candidate_repo, content_store, POSTER, [make_image_bytes(1000, 1500)])
        _selected(
            session,
            candidate_repo,
            content_store,
            FANART,
            [
                make_image_bytes(1920, 1080, "JPEG", (30, 30, 30)),
                make_image_bytes(1920, 1080, "JPEG", (90, 10, 10)),
            ],
        )

        result = publishing.publish(EntityType.MOVIE, 12, library_dir, "Alien (1979).mkv")

        assert result.success
        assert result.copied == 3
        names = sorted(p.name for p in library_dir.iterdir())
        assert names == [
            "Alien (1979)-fanart.jpg",
            "Alien (1979)-fanart1.jpg",
            "Alien (1979)-poster.jpg",
        ]
        assert (library_dir / "Alien (1979)-poster.jpg").read_bytes() == poster[0].cache_path.read_bytes()

    def test_candidates_marked_published(
        self, session, candidate_repo, content_store, publishing, library_dir, make_image_bytes
    ) -> None:
        _selected(session, candidate_repo, content_store, POSTER, [make_image_bytes(1000, 1500)])

        publishing.publish(EntityType.MOVIE, 12, library_dir, "Alien (1979).mkv")

        published = candidate_repo.list_selected(POSTER)[0]
        assert published.tier == StorageTier.PUBLISHED
        assert published.file_path == library_dir / "Alien (1979)-poster.jpg"
        assert published.cache_path.is_file()

    def test_unselected_candidates_ignored(
        self, candidate_repo, content_store, publishing, library_dir, make_image_bytes
    ) -> None:
        stored = content_store.cache_bytes(make_image_bytes(1000, 1500), CacheKind.IMAGES, "jpg")
        candidate_repo.save(
            AssetCandidate(
                entity_type=EntityType.MOVIE,
                entity_id=12,
                asset_type="poster",
                content_hash=stored.content_hash,
                cache_path=stored.path,
            )
        )

        result = publishing.publish(EntityType.MOVIE, 12, library_dir)

        assert result.published == []
        assert list(library_dir.iterdir()) == []
        assert candidate_repo.list_for_slot(POSTER)[0].tier == StorageTier.DISCOVERED

    def test_second_publish_copies_nothing(
        self, session, candidate_repo, content_store, publishing, library_dir, make_image_bytes
    ) -> None:
        _selected(session, candidate_repo, content_store, POSTER, [make_image_bytes(1000, 1500)])
        publishing.publish(EntityType.MOVIE, 12, library_dir, "Alien (1979).mkv")

        result = publishing.publish(EntityType.MOVIE, 12, library_dir, "Alien (1979).mkv")

        assert result.success
        assert len(result.published) == 1
        assert result.copied == 0

    def test_default_base_name_and_subtitle(
        self, session, candidate_repo, content_store, publishing, library_dir
    ) -> None:
        _selected(
            session,
            candidate_repo,
            content_store,
            SUBTITLE,
            [b"1\n00:00:01,000 --> 00:00:02,000\nBonjour\n"],
            kind=CacheKind.TEXT,
            ext="srt",
            language="fr",
        )

        publishing.publish(EntityType.MOVIE, 12, library_dir)

        assert (library_dir / "entity_12.fr.srt").is_file()

    def test_missing_cache_file_reported(
        self, session, candidate_repo, content_store, publishing, library_dir, make_image_bytes
    ) -> None:
        poster = _selected(session, candidate_repo, content_store, POSTER, [make_image_bytes(1000, 1500)])
        fanart = _selected(
            session, candidate_repo, content_store, FANART, [make_image_bytes(1920, 1080)]
        )
        poster[0].cache_path.unlink()

        result = publishing.publish(EntityType.MOVIE, 12, library_dir, "Alien.mkv")

        assert not result.success
        assert len(result.errors) == 1
        assert result.errors[0].startswith(f"poster {poster[0].id}")
        assert [a.candidate_id for a in result.published] == [fanart[0].id]
        assert candidate_repo.get_by_id(poster[0].id).tier == StorageTier.DISCOVERED

    def test_missing_directory(self, publishing, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            publishing.publish(EntityType.MOVIE, 12, tmp_path / "absent")
