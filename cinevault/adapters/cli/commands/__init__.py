"""Sous-package CLI commands - re-exporte les commandes publiques."""

from cinevault.adapters.cli.commands.asset_commands import (
    block,
    candidates,
    limits,
    lock,
    select,
    set_limit,
    unblock,
    unlock,
)
from cinevault.adapters.cli.commands.discovery_commands import discover
from cinevault.adapters.cli.commands.publish_commands import publish

__all__ = [
    "block",
    "candidates",
    "discover",
    "limits",
    "lock",
    "publish",
    "select",
    "set_limit",
    "unblock",
    "unlock",
]
