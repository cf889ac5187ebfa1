"""
Tests unitaires pour le cache adresse par contenu.

Ces tests verifient:
- L'organisation {kind}/{h[0:2]}/{h[2:4]}/{h}.{ext}
- La deduplication : un contenu identique donne la meme entree
- L'ecriture atomique (aucun fichier temporaire residuel)
- La conversion des erreurs d'ecriture et de racine inaccessible
"""

import os
from pathlib import Path

import pytest

from cinevault.core.entities.asset import CacheKind
from cinevault.core.exceptions import CacheUnavailableError, CacheWriteError
from cinevault.infrastructure.storage import FileSystemContentStore
from cinevault.infrastructure.storage.content_store import normalize_extension
from cinevault.infrastructure.storage.hash_service import compute_bytes_hash


class TestNormalizeExtension:
    def test_normalize(self) -> None:
        assert normalize_extension(".JPG") == "jpg"
        assert normalize_extension("png") == "png"
        assert normalize_extension("") == "bin"
        assert normalize_extension(None) == "bin"


class TestCacheFile:
    """Tests pour la mise en cache d'un fichier."""

    def test_sharded_path(self, tmp_path: Path, content_store: FileSystemContentStore) -> None:
        source = tmp_path / "poster.JPG"
        source.write_bytes(b"poster-bytes")
        digest = compute_bytes_hash(b"poster-bytes")

        stored = content_store.cache_file(source, CacheKind.IMAGES)

        expected = content_store.root / "images" / digest[0:2] / digest[2:4] / f"{digest}.jpg"
        assert stored.path == expected
        assert stored.content_hash == digest
        assert stored.extension == "jpg"
        assert stored.size_bytes == len(b"poster-bytes")
        assert stored.created
        assert expected.read_bytes() == b"poster-bytes"

    def test_source_untouched(self, tmp_path: Path, content_store: FileSystemContentStore) -> None:
        source = tmp_path / "fanart.jpg"
        source.write_bytes(b"fanart")
        content_store.cache_file(source, CacheKind.IMAGES)
        assert source.read_bytes() == b"fanart"

    def test_identical_content_deduplicated(
        self, tmp_path: Path, content_store: FileSystemContentStore
    ) -> None:
        """Deux fichiers de meme contenu : meme hash, meme chemin, une seule copie."""
        first = tmp_path / "poster.jpg"
        second = tmp_path / "movie-poster.png"
        first.write_bytes(b"same")
        second.write_bytes(b"same")

        stored_first = content_store.cache_file(first, CacheKind.IMAGES)
        stored_second = content_store.cache_file(second, CacheKind.IMAGES)

        assert stored_second.path == stored_first.path
        assert stored_second.content_hash == stored_first.content_hash
        assert not stored_second.created
        assert len(list(stored_first.path.parent.iterdir())) == 1

    def test_no_temporary_file_left(
        self, tmp_path: Path, content_store: FileSystemContentStore
    ) -> None:
        source = tmp_path / "trailer.mp4"
        source.write_bytes(b"video" * 1000)
        stored = content_store.cache_file(source, CacheKind.VIDEO)
        names = [p.name for p in stored.path.parent.iterdir()]
        assert names == [stored.path.name]
        assert stored.path.parts[-4] == "video"

    def test_missing_source_raises_oserror(
        self, tmp_path: Path, content_store: FileSystemContentStore
    ) -> None:
        with pytest.raises(OSError):
            content_store.cache_file(tmp_path / "absent.jpg", CacheKind.IMAGES)


class TestCacheBytes:
    """Tests pour la mise en cache d'un contenu en memoire."""

    def test_cache_bytes(self, content_store: FileSystemContentStore) -> None:
        stored = content_store.cache_bytes(b"upload", CacheKind.IMAGES, ".PNG")
        assert stored.path.name == f"{compute_bytes_hash(b'upload')}.png"
        assert stored.path.read_bytes() == b"upload"

    def test_existing_file_reused_whatever_extension(
        self, content_store: FileSystemContentStore
    ) -> None:
        first = content_store.cache_bytes(b"data", CacheKind.IMAGES, "jpg")
        second = content_store.cache_bytes(b"data", CacheKind.IMAGES, "png")
        assert second.path == first.path
        assert second.extension == "jpg"

    def test_find(self, content_store: FileSystemContentStore) -> None:
        stored = content_store.cache_bytes(b"data", CacheKind.TEXT, "srt")
        assert content_store.find(stored.content_hash, CacheKind.TEXT) == stored.path
        assert content_store.find(stored.content_hash, CacheKind.IMAGES) is None

    def test_write_failure_raises_cache_write_error(
        self, content_store: FileSystemContentStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Une erreur disque devient CacheWriteError, sans fichier residuel."""
        def failing_replace(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(os, "replace", failing_replace)

        with pytest.raises(CacheWriteError):
            content_store.cache_bytes(b"data", CacheKind.IMAGES, "jpg")

        shard = content_store.shard_dir(compute_bytes_hash(b"data"), CacheKind.IMAGES)
        assert list(shard.iterdir()) == []

    def test_unusable_root_raises(self, tmp_path: Path) -> None:
        """Racine bloquee par un fichier : cache indisponible."""
        blocker = tmp_path / "cache"
        blocker.write_text("not a directory")
        store = FileSystemContentStore(blocker)

        with pytest.raises(CacheUnavailableError):
            store.cache_bytes(b"data", CacheKind.IMAGES, "jpg")


class TestPublicUrl:
    """Tests pour les URLs publiques."""

    def test_public_url(self, content_store: FileSystemContentStore) -> None:
        stored = content_store.cache_bytes(b"data", CacheKind.IMAGES, "jpg")
        h = stored.content_hash
        assert content_store.public_url(stored.path) == f"/cache/images/{h[0:2]}/{h[2:4]}/{h}.jpg"

    def test_custom_prefix(self, cache_root: Path) -> None:
        store = FileSystemContentStore(cache_root, public_prefix="media/cache/")
        stored = store.cache_bytes(b"data", CacheKind.AUDIO, "mp3")
        assert store.public_url(stored.path).startswith("/media/cache/audio/")

    def test_path_outside_cache(self, tmp_path: Path, content_store: FileSystemContentStore) -> None:
        with pytest.raises(ValueError):
            content_store.public_url(tmp_path / "elsewhere.jpg")
