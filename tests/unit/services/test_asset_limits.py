"""
Tests unitaires pour AssetLimitService.

Ces tests verifient:
- Les limites par defaut du registre
- La surcharge dans les bornes du type et son rejet hors bornes
- Le retour a la valeur par defaut
"""

import pytest
from sqlmodel import Session

from cinevault.core.exceptions import UnknownAssetTypeError
from cinevault.infrastructure.persistence.repositories import SQLModelSettingsRepository
from cinevault.services.asset_limits import AssetLimitService


@pytest.fixture
def settings_repo(session: Session) -> SQLModelSettingsRepository:
    return SQLModelSettingsRepository(session)


@pytest.fixture
def service(settings_repo) -> AssetLimitService:
    return AssetLimitService(settings_repo)


class TestGetLimit:
    """Tests de lecture des limites."""

    @pytest.mark.parametrize(
        "asset_type,expected",
        [("poster", 3), ("fanart", 4), ("banner", 1), ("subtitle", 10), ("theme", 1)],
    )
    def test_defaults(self, service, asset_type, expected) -> None:
        assert service.get_limit(asset_type) == expected

    def test_unknown_type_limited_to_one(self, service) -> None:
        assert service.get_limit("characterart") == 1

    def test_unreadable_override_ignored(self, service, settings_repo) -> None:
        settings_repo.set("asset_limit_poster", "beaucoup")
        assert service.get_limit("poster") == 3

    def test_out_of_bounds_override_ignored(self, service, settings_repo) -> None:
        settings_repo.set("asset_limit_banner", "9")
        assert service.get_limit("banner") == 1


class TestSetLimit:
    """Tests de modification des limites."""

    def test_override(self, service) -> None:
        assert service.set_limit("fanart", 8) == 8
        assert service.get_limit("fanart") == 8

    def test_zero_allowed(self, service) -> None:
        service.set_limit("poster", 0)
        assert service.get_limit("poster") == 0

    def test_out_of_bounds_rejected(self, service) -> None:
        with pytest.raises(ValueError):
            service.set_limit("fanart", 11)
        assert service.get_limit("fanart") == 4

    def test_unknown_type_rejected(self, service) -> None:
        with pytest.raises(UnknownAssetTypeError):
            service.set_limit("characterart", 2)

    def test_reset(self, service) -> None:
        service.set_limit("fanart", 8)
        assert service.reset_limit("fanart") == 4
        assert service.get_limit("fanart") == 4

    def test_list_limits(self, service) -> None:
        service.set_limit("fanart", 2)
        views = {view.asset_type: view for view in service.list_limits()}

        assert list(views)[0] == "poster"
        assert views["fanart"].current == 2
        assert not views["fanart"].is_default
        assert views["poster"].is_default
        assert views["poster"].display_name == "Poster"
        assert views["subtitle"].max_allowed == 20
