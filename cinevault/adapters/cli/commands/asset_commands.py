"""
Commandes CLI de gestion des assets d'un slot et des limites par type
(candidates, select, block, unblock, lock, unlock, limits, set-limit).
"""

from typing import Annotated

import typer

from cinevault.adapters.cli.helpers import (
    candidates_table,
    console,
    fail,
    limits_table,
    with_container,
)
from cinevault.core.entities.asset import EntityType, SlotKey
from cinevault.core.exceptions import AssetError


EntityTypeArg = Annotated[EntityType, typer.Argument(help="Type d'entite")]
EntityIdArg = Annotated[int, typer.Argument(help="Identifiant de l'entite")]
AssetTypeArg = Annotated[str, typer.Argument(help="Type d'asset (poster, fanart...)")]
CandidateIdArg = Annotated[int, typer.Argument(help="Identifiant du candidat")]


def candidates(
    entity_type: EntityTypeArg,
    entity_id: EntityIdArg,
    asset_type: AssetTypeArg,
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Inclure les candidats bloques")
    ] = False,
) -> None:
    """Liste les candidats d'un slot (selectionnes d'abord, puis par score)."""
    _candidates(SlotKey(entity_type, entity_id, asset_type), show_all)


@with_container()
def _candidates(container, key: SlotKey, show_all: bool) -> None:
    selection = container.selection_service()
    try:
        slot = selection.get_slot(key)
        items = selection.list_candidates(key, include_blocked=show_all)
    except AssetError as e:
        fail(str(e))

    if not items:
        console.print(f"[yellow]Aucun candidat pour {key}.[/yellow]")
        return
    console.print(candidates_table(key, items, slot.locked))


def select(candidate_id: CandidateIdArg) -> None:
    """Selectionne un candidat (remplace ou complete la selection)."""
    _change(candidate_id, "select")


def block(candidate_id: CandidateIdArg) -> None:
    """Bloque un candidat : il quitte la selection et n'y revient plus."""
    _change(candidate_id, "block")


def unblock(candidate_id: CandidateIdArg) -> None:
    """Rend un candidat bloque a nouveau eligible."""
    _change(candidate_id, "unblock")


@with_container()
def _change(container, candidate_id: int, action: str) -> None:
    selection = container.selection_service()
    operations = {
        "select": selection.select_candidate,
        "block": selection.block_candidate,
        "unblock": selection.unblock_candidate,
    }
    try:
        candidate = operations[action](candidate_id)
    except AssetError as e:
        fail(str(e))
    console.print(
        f"[green]{candidate.file_name or candidate.id}[/green] : {candidate.state.value}"
    )


def lock(entity_type: EntityTypeArg, entity_id: EntityIdArg, asset_type: AssetTypeArg) -> None:
    """Verrouille un slot : plus de selection automatique ni de remplacement."""
    _set_lock(SlotKey(entity_type, entity_id, asset_type), True)


def unlock(entity_type: EntityTypeArg, entity_id: EntityIdArg, asset_type: AssetTypeArg) -> None:
    """Deverrouille un slot."""
    _set_lock(SlotKey(entity_type, entity_id, asset_type), False)


@with_container()
def _set_lock(container, key: SlotKey, locked: bool) -> None:
    try:
        container.selection_service().set_lock(key, locked)
    except AssetError as e:
        fail(str(e))
    state = "[yellow]verrouille[/yellow]" if locked else "[green]deverrouille[/green]"
    console.print(f"{key} {state}")


def limits() -> None:
    """Affiche les limites de selection par type d'asset."""
    _limits()


@with_container()
def _limits(container) -> None:
    console.print(limits_table(container.limit_service().list_limits()))


def set_limit(
    asset_type: AssetTypeArg,
    value: Annotated[int, typer.Argument(help="Nombre maximum d'assets selectionnes")] = 1,
    reset: Annotated[
        bool, typer.Option("--reset", help="Revenir a la limite par defaut")
    ] = False,
) -> None:
    """
    Modifie la limite de selection d'un type d'asset.

    Exemples:
      cinevault set-limit fanart 6
      cinevault set-limit fanart --reset
    """
    _set_limit(asset_type, value, reset)


@with_container()
def _set_limit(container, asset_type: str, value: int, reset: bool) -> None:
    service = container.limit_service()
    try:
        current = service.reset_limit(asset_type) if reset else service.set_limit(asset_type, value)
    except (AssetError, ValueError) as e:
        fail(str(e))
    console.print(f"Limite [bold]{asset_type}[/bold] : {current}")
