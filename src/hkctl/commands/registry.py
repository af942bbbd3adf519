"""Name to handler mapping consulted by the dispatcher."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple, Type

from ..config import ClientConfig
from . import CommandHandler
from .listing import (
    AccessoriesCommand,
    ActionSetsCommand,
    HomesCommand,
    RoomsCommand,
    ServiceGroupsCommand,
    ServicesCommand,
    TriggersCommand,
    ZonesCommand,
)
from .room import RoomCommand

HANDLER_TYPES: Tuple[Type[CommandHandler], ...] = (
    # Enumerate stuff
    HomesCommand,
    RoomsCommand,
    ZonesCommand,
    AccessoriesCommand,
    ServicesCommand,
    ServiceGroupsCommand,
    ActionSetsCommand,
    TriggersCommand,
    # Organize a home
    RoomCommand,
)


def build_registry(config: ClientConfig) -> Mapping[str, CommandHandler]:
    """Instantiate every handler once; the result is read-only."""

    registry = {}
    for handler_type in HANDLER_TYPES:
        if handler_type.name in registry:
            raise ValueError(f"Duplicate command registration: {handler_type.name}")
        registry[handler_type.name] = handler_type(config)
    return MappingProxyType(registry)
