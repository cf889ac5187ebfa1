"""
Commande CLI de decouverte des assets locaux (discover).
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from cinevault.adapters.cli.helpers import console, fail, with_container
from cinevault.core.entities.asset import EntityType
from cinevault.core.exceptions import CacheUnavailableError


def discover(
    entity_type: Annotated[EntityType, typer.Argument(help="Type d'entite")],
    entity_id: Annotated[int, typer.Argument(help="Identifiant de l'entite")],
    directory: Annotated[
        Path,
        typer.Argument(help="Repertoire du media", exists=True, file_okay=False),
    ],
    video: Annotated[
        Optional[str],
        typer.Option("--video", help="Nom du fichier video principal (ignore)"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Rescanner meme si le repertoire n'a pas change"),
    ] = False,
) -> None:
    """
    Decouvre les assets locaux d'un media et les ajoute au cache.

    Exemples:
      cinevault discover movie 12 "/films/Alien (1979)"
      cinevault discover movie 12 "/films/Alien (1979)" --video Alien.mkv --force
    """
    _discover(entity_type, entity_id, directory, video, force)


@with_container()
def _discover(container, entity_type, entity_id, directory, video, force) -> None:
    discovery = container.discovery_service()
    try:
        result = discovery.discover(entity_type, entity_id, directory, video, force=force)
    except (CacheUnavailableError, OSError) as e:
        fail(str(e))

    if result.unchanged:
        console.print("[yellow]Repertoire inchange depuis le dernier scan[/yellow] (--force pour rescanner)")
        return

    console.print(
        f"[bold]{entity_type.value} {entity_id}[/bold] : "
        f"{result.images} image(s), {result.trailers} bande(s)-annonce(s), "
        f"{result.subtitles} sous-titre(s), {result.themes} theme(s)"
    )
    console.print(
        f"Nouveaux : {result.candidates_created} candidat(s), "
        f"{result.cache_entries_created} fichier(s) en cache"
    )
    if result.auto_selected:
        console.print(f"[green]Selection automatique :[/green] {', '.join(result.auto_selected)}")
    if result.skipped:
        console.print(f"[yellow]{result.skipped} fichier(s) ecarte(s)[/yellow]")
        for rejected in result.rejected:
            console.print(f"  [dim]{rejected.asset_type}[/dim] {rejected.file_name} : {rejected.reason}")
