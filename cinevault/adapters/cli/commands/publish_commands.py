"""
Commande CLI de publication des assets selectionnes (publish).
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from cinevault.adapters.cli.helpers import console, fail, with_container
from cinevault.core.entities.asset import EntityType


def publish(
    entity_type: Annotated[EntityType, typer.Argument(help="Type d'entite")],
    entity_id: Annotated[int, typer.Argument(help="Identifiant de l'entite")],
    directory: Annotated[
        Path,
        typer.Argument(help="Repertoire du media", exists=True, file_okay=False),
    ],
    video: Annotated[
        Optional[str],
        typer.Option("--video", help="Fichier video principal (base des noms publies)"),
    ] = None,
) -> None:
    """
    Copie les assets selectionnes du cache vers le repertoire du media.

    Exemples:
      cinevault publish movie 12 "/films/Alien (1979)" --video "Alien (1979).mkv"
    """
    _publish(entity_type, entity_id, directory, video)


@with_container()
def _publish(container, entity_type, entity_id, directory, video) -> None:
    publishing = container.publishing_service()
    try:
        result = publishing.publish(entity_type, entity_id, directory, video)
    except OSError as e:
        fail(str(e))

    if not result.published and not result.errors:
        console.print("[yellow]Aucun asset selectionne a publier[/yellow]")
        return

    for asset in result.published:
        status = "[green]copie[/green]" if asset.copied else "[dim]a jour[/dim]"
        console.print(f"  {asset.asset_type:<12} {asset.path.name} {status}")
    console.print(
        f"[bold]{entity_type.value} {entity_id}[/bold] : "
        f"{len(result.published)} asset(s) publie(s), {result.copied} copie(s)"
    )
    if result.errors:
        for error in result.errors:
            console.print(f"  [red]{error}[/red]")
        raise typer.Exit(1)
