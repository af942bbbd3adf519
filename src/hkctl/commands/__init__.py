"""Command handlers for the hkctl CLI.

Each command the grammar declares has exactly one handler here:
- listing: read-only enumeration of homes, rooms, zones, accessories,
  services, service groups, action sets and triggers
- room: adding and removing rooms and room membership
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import ClientConfig
    from ..connection import HomeKitClient
    from ..invocation import ParsedInvocation


class CommandHandler(ABC):
    """Base class for command handlers."""

    name: str = ""

    def __init__(self, config: ClientConfig):
        self.config = config

    @property
    def output(self) -> str:
        return self.config.output

    @abstractmethod
    async def execute(self, invocation: ParsedInvocation, client: HomeKitClient) -> None:
        """Perform the command's remote call and print its result.

        Raises :class:`~hkctl.errors.RemoteError` when the service answers
        with an error status; any other exception is a local failure.
        """


__all__ = ["CommandHandler"]
