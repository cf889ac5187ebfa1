"""
Point d'entrée CLI de CineVault.

Configure le logging selon la verbosite demandee et monte les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import (
    block,
    candidates,
    discover,
    limits,
    lock,
    publish,
    select,
    set_limit,
    unblock,
    unlock,
)
from .config import Settings
from .logging_config import configure_logging, level_for_verbosity

app = typer.Typer(
    name="cinevault",
    help="Decouverte, validation et cache des assets de mediatheque",
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """CineVault - Assets de mediatheque (affiches, fonds, bandes-annonces...)."""
    settings = Settings()
    configure_logging(
        log_level=level_for_verbosity(verbose, quiet, settings.log_level),
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )


app.command()(discover)
app.command()(publish)
app.command()(candidates)
app.command()(select)
app.command()(block)
app.command()(unblock)
app.command()(lock)
app.command()(unlock)
app.command()(limits)
app.command(name="set-limit")(set_limit)


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = Settings()
    logger.debug("Configuration CineVault")
    typer.echo(f"Cache : {config.cache_dir}")
    typer.echo(f"Prefixe public : {config.public_cache_prefix}")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Threads de scan : {config.scan_workers}")
    typer.echo(f"Tentatives sur conflit : {config.selection_max_retries}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"CineVault v{__version__}")


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Adresse d'écoute")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port d'écoute")] = 8000,
    reload: Annotated[bool, typer.Option(help="Rechargement automatique")] = False,
) -> None:
    """Lance le serveur web CineVault."""
    import uvicorn

    typer.echo(f"Démarrage du serveur sur {host}:{port}")
    uvicorn.run("cinevault.web.app:app", host=host, port=port, reload=reload)


def main() -> None:
    """Point d'entrée de l'application."""
    app()


if __name__ == "__main__":
    main()
