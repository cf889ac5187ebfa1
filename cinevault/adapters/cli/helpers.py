"""
Utilitaires partages pour les commandes CLI de CineVault.

Ce module fournit :
- console : instance Rich Console partagee
- with_container : decorateur injectant un container initialise
- candidates_table / limits_table : rendu Rich des candidats et des limites
- fail : affichage d'une erreur et sortie en code 1
"""

from functools import wraps
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from cinevault.container import Container
from cinevault.core.entities.asset import AssetCandidate, SlotKey
from cinevault.services.asset_limits import AssetLimitView

console = Console()

_STATE_STYLES = {
    "selected": "[bold green]selected[/bold green]",
    "candidate": "candidate",
    "blocked": "[red]blocked[/red]",
}


def with_container(requires_db: bool = True):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Args :
        requires_db : Si True (defaut), initialise la base de donnees.

    Usage :
        @with_container()
        def _my_command(container, ...):
            config = container.config()
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            container = Container()
            if requires_db:
                container.database.init()
            return func(container, *args, **kwargs)
        return wrapper
    return decorator


def fail(message: str) -> NoReturn:
    """Affiche une erreur en rouge et termine la commande en echec."""
    console.print(f"[red]Erreur :[/red] {message}")
    raise typer.Exit(1)


def candidates_table(key: SlotKey, candidates: list[AssetCandidate], locked: bool) -> Table:
    """Tableau des candidats d'un slot, dans l'ordre d'affichage."""
    title = f"{key}" + (" [yellow](verrouille)[/yellow]" if locked else "")
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Etat")
    table.add_column("Pos.", justify="right")
    table.add_column("Fichier")
    table.add_column("Dimensions", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("Origine", style="dim")

    for candidate in candidates:
        dims = (
            f"{candidate.width}x{candidate.height}"
            if candidate.width and candidate.height
            else "-"
        )
        table.add_row(
            str(candidate.id),
            _STATE_STYLES.get(candidate.state.value, candidate.state.value),
            "" if candidate.selection_order is None else str(candidate.selection_order + 1),
            candidate.file_name or "-",
            dims,
            str(candidate.score),
            candidate.provider or candidate.origin.value,
        )
    return table


def limits_table(limits: list[AssetLimitView]) -> Table:
    """Tableau des limites de selection par type d'asset."""
    table = Table(title="Limites de selection", show_header=True, header_style="bold cyan")
    table.add_column("Type")
    table.add_column("Libelle", style="dim")
    table.add_column("Limite", justify="right")
    table.add_column("Defaut", justify="right")
    table.add_column("Bornes", justify="center")

    for view in limits:
        current = str(view.current) if view.is_default else f"[bold]{view.current}[/bold]"
        table.add_row(
            view.asset_type,
            view.display_name,
            current,
            str(view.default_max),
            f"{view.min_allowed}-{view.max_allowed}",
        )
    return table
