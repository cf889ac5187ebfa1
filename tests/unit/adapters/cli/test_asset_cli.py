"""
Tests des commandes CLI via CliRunner.

Tests couvrant:
- discover : decouverte d'un repertoire puis repertoire inchange
- publish : copie des selections dans le repertoire du media
- candidates / select / block / unblock : operations sur les candidats
- lock / unlock : verrou d'un slot
- limits / set-limit : limites par type
- version / info : informations generales

Le container est reel : la base et le cache sont rediriges vers le
repertoire temporaire par les variables d'environnement CINEVAULT_*.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from cinevault import __version__
from cinevault.core.exceptions import CandidateNotFoundError
from cinevault.logging_config import level_for_verbosity
from cinevault.main import app

runner = CliRunner()


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirige base, cache et logs vers le repertoire temporaire."""
    monkeypatch.setenv("CINEVAULT_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("CINEVAULT_DATABASE_URL", f"sqlite:///{tmp_path / 'db' / 'cinevault.db'}")
    monkeypatch.setenv("CINEVAULT_LOG_FILE", str(tmp_path / "logs" / "cinevault.log"))
    return tmp_path


@pytest.fixture
def movie_dir(media_dir: Path, make_image) -> Path:
    make_image(media_dir, "poster.jpg", 1000, 1500)
    make_image(media_dir, "movie-poster-alt.png", 800, 1200, color=(10, 120, 200))
    (media_dir / "Alien.mkv").write_bytes(b"main-movie")
    return media_dir


def _invoke(*args: str):
    return runner.invoke(app, ["-q", *args])


class TestLevelForVerbosity:
    """Tests du niveau de log selon -v / -q."""

    @pytest.mark.parametrize(
        "verbose,quiet,expected",
        [(0, False, "INFO"), (1, False, "DEBUG"), (2, False, "TRACE"), (5, False, "TRACE"), (2, True, "ERROR")],
    )
    def test_levels(self, verbose, quiet, expected) -> None:
        assert level_for_verbosity(verbose, quiet) == expected

    def test_default_from_settings(self) -> None:
        assert level_for_verbosity(0, False, "WARNING") == "WARNING"


class TestGeneralCommands:
    """Tests de version, info et aide."""

    def test_version(self, cli_env) -> None:
        result = _invoke("version")
        assert result.exit_code == 0
        assert f"CineVault v{__version__}" in result.output

    def test_info(self, cli_env) -> None:
        result = _invoke("info")
        assert result.exit_code == 0
        assert str(cli_env / "cache") in result.output

    def test_help_lists_commands(self, cli_env) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("discover", "candidates", "set-limit", "serve"):
            assert command in result.output


class TestDiscoverCommand:
    """Tests de la commande discover."""

    def test_discover_then_unchanged(self, cli_env, movie_dir: Path) -> None:
        result = _invoke("discover", "movie", "12", str(movie_dir), "--video", "Alien.mkv")
        assert result.exit_code == 0, result.output
        assert "2 image(s)" in result.output
        assert "poster" in result.output

        again = _invoke("discover", "movie", "12", str(movie_dir))
        assert again.exit_code == 0
        assert "inchange" in again.output

    def test_missing_directory(self, cli_env, tmp_path: Path) -> None:
        result = _invoke("discover", "movie", "12", str(tmp_path / "absent"))
        assert result.exit_code != 0


class TestPublishCommand:
    """Tests de la commande publish."""

    def test_publish_after_discover(self, cli_env, movie_dir: Path) -> None:
        _invoke("discover", "movie", "12", str(movie_dir), "--video", "Alien.mkv")

        result = _invoke("publish", "movie", "12", str(movie_dir), "--video", "Alien.mkv")

        assert result.exit_code == 0, result.output
        assert "1 asset(s) publie(s)" in result.output
        assert (movie_dir / "Alien-poster.jpg").is_file()

    def test_nothing_selected(self, cli_env, media_dir: Path) -> None:
        result = _invoke("publish", "movie", "12", str(media_dir))
        assert result.exit_code == 0
        assert "Aucun asset" in result.output


class TestCandidateCommands:
    """Tests des commandes sur les candidats et les slots."""

    def test_candidates_listed(self, cli_env, movie_dir: Path) -> None:
        _invoke("discover", "movie", "12", str(movie_dir))
        result = _invoke("candidates", "movie", "12", "poster")
        assert result.exit_code == 0
        assert "poster.jpg" in result.output
        assert "selected" in result.output

    def test_no_candidates(self, cli_env) -> None:
        result = _invoke("candidates", "movie", "12", "poster")
        assert result.exit_code == 0
        assert "Aucun candidat" in result.output

    def test_unknown_asset_type(self, cli_env) -> None:
        result = _invoke("candidates", "movie", "12", "characterart")
        assert result.exit_code == 1
        assert "inconnu" in result.output

    def test_block_then_unblock(self, cli_env, movie_dir: Path) -> None:
        _invoke("discover", "movie", "12", str(movie_dir))

        blocked = _invoke("block", "1")
        assert blocked.exit_code == 0
        assert "blocked" in blocked.output

        unblocked = _invoke("unblock", "1")
        assert "candidate" in unblocked.output

    def test_lock_prevents_select(self, cli_env, movie_dir: Path) -> None:
        _invoke("discover", "movie", "12", str(movie_dir))
        assert "verrouille" in _invoke("lock", "movie", "12", "poster").output

        result = _invoke("select", "2")
        assert result.exit_code == 1
        assert "verrouill" in result.output

        _invoke("unlock", "movie", "12", "poster")
        assert _invoke("select", "2").exit_code == 0

    def test_select_unknown_candidate_mocked(self, cli_env) -> None:
        """Erreur du domaine : message en rouge et code de sortie 1."""
        with patch("cinevault.adapters.cli.helpers.Container") as mock_cls:
            container = MagicMock()
            mock_cls.return_value = container
            container.selection_service.return_value.select_candidate.side_effect = (
                CandidateNotFoundError(42)
            )
            result = runner.invoke(app, ["select", "42"])

        assert result.exit_code == 1
        assert "Candidat introuvable : 42" in result.output
        container.database.init.assert_called_once()


class TestLimitCommands:
    """Tests des commandes de limites."""

    def test_limits_table(self, cli_env) -> None:
        result = _invoke("limits")
        assert result.exit_code == 0
        assert "poster" in result.output
        assert "subtitle" in result.output

    def test_set_and_reset(self, cli_env) -> None:
        assert "Limite fanart : 6" in _invoke("set-limit", "fanart", "6").output
        assert "Limite fanart : 4" in _invoke("set-limit", "fanart", "--reset").output

    def test_out_of_bounds(self, cli_env) -> None:
        result = _invoke("set-limit", "fanart", "99")
        assert result.exit_code == 1
