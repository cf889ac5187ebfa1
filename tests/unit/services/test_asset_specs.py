"""
Tests unitaires pour le registre des specifications d'assets.

Ces tests verifient:
- La correspondance insensible a la casse des mots-cles
- Le filtrage des extensions (types transparents en .png uniquement)
- Les noms standards Kodi
- La table des limites et le sous-repertoire de cache par type
"""

import pytest

from cinevault.core.entities.asset import CacheKind
from cinevault.services.asset_specs import (
    ASSET_LIMITS,
    ASSET_SPECS,
    cache_kind_for,
    extension_allowed,
    find_specs_by_filename,
    get_asset_limit,
    get_asset_spec,
    is_known_asset_type,
    is_kodi_standard_name,
)


class TestRegistry:
    """Tests pour le contenu du registre."""

    def test_all_image_types_present(self) -> None:
        """Les huit types d'images Kodi sont declares."""
        assert set(ASSET_SPECS) == {
            "poster", "fanart", "banner", "clearlogo",
            "clearart", "discart", "keyart", "landscape",
        }

    def test_poster_spec_values(self) -> None:
        """Le poster vise un ratio 2:3 a 10% et un minimum 500x750."""
        spec = get_asset_spec("poster")
        assert spec is not None
        assert spec.aspect_ratio.target == pytest.approx(2 / 3)
        assert spec.aspect_ratio.tolerance == 0.1
        assert (spec.min_dimensions.width, spec.min_dimensions.height) == (500, 750)

    def test_unknown_type_returns_none(self) -> None:
        assert get_asset_spec("thumbnail") is None
        assert get_asset_limit("thumbnail") is None

    def test_limits_cover_images_and_sidecars(self) -> None:
        """Chaque type d'image et chaque type annexe a une limite."""
        for asset_type in ASSET_SPECS:
            assert asset_type in ASSET_LIMITS
        for asset_type in ("trailer", "subtitle", "theme"):
            assert is_known_asset_type(asset_type)

    def test_limit_defaults(self) -> None:
        assert get_asset_limit("poster").default_max == 3
        assert get_asset_limit("fanart").default_max == 4
        assert get_asset_limit("clearlogo").default_max == 1


class TestFindSpecsByFilename:
    """Tests pour la recherche par mots-cles."""

    def test_matches_case_insensitive(self) -> None:
        types = [spec.type for spec in find_specs_by_filename("Movie-POSTER.JPG")]
        assert types == ["poster"]

    def test_backdrop_maps_to_fanart(self) -> None:
        types = [spec.type for spec in find_specs_by_filename("backdrop-01.jpg")]
        assert types == ["fanart"]

    def test_thumb_maps_to_landscape(self) -> None:
        types = [spec.type for spec in find_specs_by_filename("thumb.jpg")]
        assert types == ["landscape"]

    def test_several_specs_can_match(self) -> None:
        """Un nom de fichier peut correspondre a plusieurs types."""
        types = [spec.type for spec in find_specs_by_filename("clearlogo.png")]
        assert types == ["clearlogo"]
        types = [spec.type for spec in find_specs_by_filename("poster-fanart.jpg")]
        assert types == ["poster", "fanart"]

    def test_no_match(self) -> None:
        assert find_specs_by_filename("Alien.1979.mkv") == []


class TestExtensionAllowed:
    """Tests pour le filtrage des extensions."""

    @pytest.mark.parametrize("extension", [".jpg", "jpg", ".JPEG", ".png"])
    def test_photo_types_accept_jpeg_and_png(self, extension: str) -> None:
        assert extension_allowed(get_asset_spec("poster"), extension)

    def test_transparent_types_reject_jpeg(self) -> None:
        assert not extension_allowed(get_asset_spec("clearlogo"), ".jpg")
        assert extension_allowed(get_asset_spec("clearlogo"), ".png")

    def test_webp_rejected(self) -> None:
        assert not extension_allowed(get_asset_spec("fanart"), ".webp")


class TestKodiStandardName:
    """Tests pour les noms standards Kodi."""

    def test_standard_names(self) -> None:
        assert is_kodi_standard_name("poster.jpg", "poster")
        assert is_kodi_standard_name("Fanart.PNG", "fanart")

    def test_jpeg_extension_is_not_standard(self) -> None:
        assert not is_kodi_standard_name("poster.jpeg", "poster")

    def test_prefixed_name_is_not_standard(self) -> None:
        assert not is_kodi_standard_name("movie-poster.jpg", "poster")


class TestCacheKind:
    """Tests pour le sous-repertoire de cache par type."""

    def test_images_by_default(self) -> None:
        assert cache_kind_for("poster") == CacheKind.IMAGES

    def test_sidecars(self) -> None:
        assert cache_kind_for("trailer") == CacheKind.VIDEO
        assert cache_kind_for("subtitle") == CacheKind.TEXT
        assert cache_kind_for("theme") == CacheKind.AUDIO
