"""
Tests unitaires pour AssetDiscoveryService.

Ces tests verifient:
- Le classement et le comptage par categorie
- Le rejet des fichiers invalides sans interrompre la decouverte
- La selection automatique du meilleur candidat par type
- L'idempotence d'un rescan (aucune entree ni candidat en double)
- Le saut d'un repertoire inchange
- L'arret sur cache inaccessible
- La reprise des candidats inseres par une decouverte concurrente

La lecture video (pymediainfo) est mockee.
"""

from collections import Counter
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image
from sqlmodel import Session

from cinevault.adapters.probing import PillowImageProbe
from cinevault.core.entities.asset import CacheKind, EntityType, SelectionState, SlotKey
from cinevault.core.exceptions import CacheUnavailableError, CacheWriteError
from cinevault.core.ports.api_clients import IAssetDownloader
from cinevault.core.ports.media_probe import IVideoProbe
from cinevault.core.value_objects import VideoInfo
from cinevault.infrastructure.persistence.repositories import (
    SQLModelAssetCandidateRepository,
    SQLModelAssetSlotRepository,
    SQLModelCacheEntryRepository,
    SQLModelScanStateRepository,
    SQLModelSettingsRepository,
)
from cinevault.infrastructure.storage import FileSystemContentStore
from cinevault.services.asset_discovery import AssetDiscoveryService
from cinevault.services.asset_limits import AssetLimitService
from cinevault.services.asset_selection import AssetSelectionService


def _build(session: Session, content_store: FileSystemContentStore):
    candidate_repo = SQLModelAssetCandidateRepository(session)
    cache_repo = SQLModelCacheEntryRepository(session)
    image_probe = PillowImageProbe()
    video_probe = MagicMock(spec=IVideoProbe)
    video_probe.probe.return_value = VideoInfo(width=1920, height=1080, duration_seconds=150, codec="AVC")
    selection = AssetSelectionService(
        candidate_repo=candidate_repo,
        slot_repo=SQLModelAssetSlotRepository(session),
        cache_repo=cache_repo,
        content_store=content_store,
        image_probe=image_probe,
        downloader=MagicMock(spec=IAssetDownloader),
        limit_service=AssetLimitService(SQLModelSettingsRepository(session)),
    )
    discovery = AssetDiscoveryService(
        candidate_repo=candidate_repo,
        cache_repo=cache_repo,
        scan_state_repo=SQLModelScanStateRepository(session),
        content_store=content_store,
        image_probe=image_probe,
        video_probe=video_probe,
        selection_service=selection,
        scan_workers=2,
    )
    return discovery, selection


@pytest.fixture
def services(session: Session, content_store: FileSystemContentStore):
    return _build(session, content_store)


@pytest.fixture
def populated_dir(media_dir: Path, make_image) -> Path:
    """Repertoire de film avec images valides, invalides et fichiers annexes."""
    make_image(media_dir, "poster.jpg", 1000, 1500)
    make_image(media_dir, "movie-poster-alt.png", 800, 1200, color=(10, 120, 200))
    make_image(media_dir, "fanart.jpg", 1920, 1080, color=(30, 30, 30))
    make_image(media_dir, "banner.jpg", 100, 20)
    (media_dir / "poster-broken.jpg").write_text("pas une image")
    (media_dir / "Alien.mkv").write_bytes(b"main-movie")
    (media_dir / "Alien-trailer.mp4").write_bytes(b"trailer-bytes")
    (media_dir / "Alien.fr.srt").write_text("1\n00:00:01,000 --> 00:00:02,000\nBonjour\n")
    (media_dir / "theme.mp3").write_bytes(b"theme-bytes")
    (media_dir / "notes.txt").write_text("notes")
    return media_dir


def _discover(discovery, directory, force=False):
    return discovery.discover(EntityType.MOVIE, 12, directory, "Alien.mkv", force=force)


class TestDiscover:
    """Tests de la decouverte complete."""

    def test_counts(self, services, populated_dir) -> None:
        discovery, _ = services
        result = _discover(discovery, populated_dir)

        assert result.images == 3
        assert result.trailers == 1
        assert result.subtitles == 1
        assert result.themes == 1
        assert result.skipped == 2
        assert result.cache_entries_created == 6
        assert result.candidates_created == 6
        assert not result.unchanged

    def test_rejected_files_reported(self, services, populated_dir) -> None:
        discovery, _ = services
        result = _discover(discovery, populated_dir)

        reasons = {r.file_name: r.reason for r in result.rejected}
        assert set(reasons) == {"banner.jpg", "poster-broken.jpg"}
        assert reasons["banner.jpg"].startswith("Trop petit")

    def test_scores_and_auto_selection(self, services, populated_dir) -> None:
        discovery, selection = services
        result = _discover(discovery, populated_dir)

        assert set(result.auto_selected) == {"poster", "fanart", "trailer", "subtitle", "theme"}
        candidates = {
            c.file_name: c for c in selection.list_candidates(SlotKey(EntityType.MOVIE, 12, "poster"))
        }
        assert candidates["poster.jpg"].score == 75
        assert candidates["movie-poster-alt.png"].score == 48
        assert candidates["poster.jpg"].state == SelectionState.SELECTED
        assert candidates["movie-poster-alt.png"].state == SelectionState.CANDIDATE

    def test_sidecar_metadata(self, services, populated_dir) -> None:
        discovery, selection = services
        _discover(discovery, populated_dir)

        trailer = selection.list_candidates(SlotKey(EntityType.MOVIE, 12, "trailer"))[0]
        subtitle = selection.list_candidates(SlotKey(EntityType.MOVIE, 12, "subtitle"))[0]
        assert (trailer.width, trailer.height, trailer.format) == (1920, 1080, "AVC")
        assert trailer.cache_path.parts[-4] == "video"
        assert subtitle.language == "fr"
        assert subtitle.cache_path.suffix == ".srt"

    def test_source_files_untouched(self, services, populated_dir) -> None:
        discovery, _ = services
        before = sorted(p.name for p in populated_dir.iterdir())
        _discover(discovery, populated_dir)
        assert sorted(p.name for p in populated_dir.iterdir()) == before

    def test_empty_directory(self, services, media_dir) -> None:
        discovery, _ = services
        result = _discover(discovery, media_dir)
        assert result.images == 0
        assert result.auto_selected == []

    def test_missing_directory(self, services, tmp_path) -> None:
        discovery, _ = services
        with pytest.raises(FileNotFoundError):
            _discover(discovery, tmp_path / "absent")


class TestRescan:
    """Tests de l'idempotence et du saut des repertoires inchanges."""

    def test_unchanged_directory_skipped(self, services, populated_dir) -> None:
        discovery, _ = services
        _discover(discovery, populated_dir)

        result = _discover(discovery, populated_dir)

        assert result.unchanged
        assert result.images == 0

    def test_forced_rescan_is_idempotent(self, services, populated_dir) -> None:
        discovery, _ = services
        _discover(discovery, populated_dir)

        result = _discover(discovery, populated_dir, force=True)

        assert not result.unchanged
        assert result.images == 3
        assert result.cache_entries_created == 0
        assert result.candidates_created == 0
        assert result.auto_selected == []

    def test_rescan_keeps_user_choice(self, services, populated_dir) -> None:
        discovery, selection = services
        _discover(discovery, populated_dir)
        key = SlotKey(EntityType.MOVIE, 12, "poster")
        alt = next(c for c in selection.list_candidates(key) if c.file_name == "movie-poster-alt.png")
        selection.reset_selection(key)
        selection.select_candidate(alt.id)

        _discover(discovery, populated_dir, force=True)

        assert [c.id for c in selection.list_selected(key)] == [alt.id]

    def test_new_file_triggers_rescan(self, services, populated_dir, make_image) -> None:
        discovery, _ = services
        _discover(discovery, populated_dir)
        make_image(populated_dir, "keyart.jpg", 1000, 1500, color=(0, 200, 0))

        result = _discover(discovery, populated_dir)

        assert not result.unchanged
        assert result.candidates_created == 1
        assert "keyart" in result.auto_selected


class TestConcurrentScans:
    """Deux decouvertes du meme repertoire sur des sessions distinctes."""

    def test_candidates_inserted_by_other_scan_reused(
        self, file_engine, content_store, populated_dir, monkeypatch
    ) -> None:
        with Session(file_engine) as session_a, Session(file_engine) as session_b:
            discovery_a, selection_a = _build(session_a, content_store)
            discovery_b, _ = _build(session_b, content_store)
            repo_a = discovery_a._candidate_repo
            original = repo_a.find_by_hash
            reads = Counter()

            def stale_find(key, content_hash):
                # Les deux premieres lectures de A precedent les insertions de B
                reads[(key, content_hash)] += 1
                if reads[(key, content_hash)] <= 2:
                    return None
                return original(key, content_hash)

            monkeypatch.setattr(repo_a, "find_by_hash", stale_find)

            first = _discover(discovery_b, populated_dir)
            second = _discover(discovery_a, populated_dir, force=True)

            assert first.candidates_created == 6
            assert second.candidates_created == 0
            assert second.images == first.images
            assert len(selection_a.list_candidates(SlotKey(EntityType.MOVIE, 12, "poster"))) == 2


class TestCacheFailures:
    """Tests des erreurs du cache."""

    def test_unavailable_cache_aborts(self, session, tmp_path, populated_dir) -> None:
        blocker = tmp_path / "blocked-cache"
        blocker.write_text("not a directory")
        discovery, _ = _build(session, FileSystemContentStore(blocker))

        with pytest.raises(CacheUnavailableError):
            _discover(discovery, populated_dir)

    def test_write_failure_skips_only_that_file(self, session, cache_root, populated_dir) -> None:
        """Un echec d'ecriture ecarte le fichier concerne, les autres sont enregistres."""

        class FailingStore(FileSystemContentStore):
            def cache_file(self, source: Path, kind: CacheKind):
                if source.name == "fanart.jpg":
                    raise CacheWriteError("Disque plein", source=str(source))
                return super().cache_file(source, kind)

        discovery, selection = _build(session, FailingStore(cache_root))

        result = _discover(discovery, populated_dir)

        reasons = {r.file_name: r.reason for r in result.rejected}
        assert reasons["fanart.jpg"] == "Disque plein"
        assert result.images == 2
        assert result.cache_entries_created == 5
        assert selection.list_candidates(SlotKey(EntityType.MOVIE, 12, "fanart")) == []
        assert "poster" in result.auto_selected


class TestImageLimits:
    """Tests des images refusees par Pillow."""

    def test_oversized_image_rejected_scan_continues(
        self, services, media_dir, make_image, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Une image au-dela de la limite de pixels est ecartee sans perdre les autres."""
        make_image(media_dir, "poster.jpg", 1000, 1500)
        make_image(media_dir, "fanart.jpg", 1920, 1080, color=(30, 30, 30))
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1_000_000)

        discovery, selection = services
        result = _discover(discovery, media_dir)

        reasons = {r.file_name: r.reason for r in result.rejected}
        assert set(reasons) == {"fanart.jpg"}
        assert "trop grande" in reasons["fanart.jpg"]
        assert result.images == 1
        assert [c.file_name for c in selection.list_selected(SlotKey(EntityType.MOVIE, 12, "poster"))] == [
            "poster.jpg"
        ]
