"""Read-only listing commands."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Dict, List, Optional

from ..connection import HomeKitClient
from ..filters import Filter
from ..invocation import ParsedInvocation
from ..logging import get_logger
from ..output import print_records
from . import CommandHandler

logger = get_logger("hkctl.commands")


class ListingCommand(CommandHandler):
    """Fetch one collection with the command's filter and print it."""

    title: str = ""

    async def execute(self, invocation: ParsedInvocation, client: HomeKitClient) -> None:
        criteria = Filter.from_arguments(invocation.command_arguments)
        logger.debug(
            "Listing %s",
            self.title.lower(),
            extra={"home": invocation.home, "filter": criteria.to_payload()},
        )
        records = await self.fetch(client, invocation.home, criteria)
        print_records(self.title, records, self.output)

    @abstractmethod
    async def fetch(
        self, client: HomeKitClient, home: Optional[str], criteria: Filter
    ) -> List[Dict[str, Any]]:
        """Return the records matching ``criteria``."""


class HomesCommand(ListingCommand):
    name = "homes"
    title = "Homes"

    async def fetch(self, client, home, criteria):
        return await client.list_homes()


class RoomsCommand(ListingCommand):
    name = "rooms"
    title = "Rooms"

    async def fetch(self, client, home, criteria):
        return await client.list_rooms(home, criteria)


class ZonesCommand(ListingCommand):
    name = "zones"
    title = "Zones"

    async def fetch(self, client, home, criteria):
        return await client.list_zones(home, criteria)


class AccessoriesCommand(ListingCommand):
    name = "accessories"
    title = "Accessories"

    async def fetch(self, client, home, criteria):
        return await client.list_accessories(home, criteria)


class ServicesCommand(ListingCommand):
    name = "services"
    title = "Services"

    async def fetch(self, client, home, criteria):
        return await client.list_services(home, criteria)


class ServiceGroupsCommand(ListingCommand):
    name = "servicegroups"
    title = "Service groups"

    async def fetch(self, client, home, criteria):
        return await client.list_service_groups(home, criteria)


class ActionSetsCommand(ListingCommand):
    name = "actionsets"
    title = "Action sets"

    async def fetch(self, client, home, criteria):
        return await client.list_action_sets(home, criteria)


class TriggersCommand(ListingCommand):
    """Triggers, narrowed to a fire-time window when --after/--before is given."""

    name = "triggers"
    title = "Triggers"

    async def fetch(self, client, home, criteria):
        if criteria.has_window:
            return await client.list_triggers_in_window(home, criteria)
        return await client.list_triggers(home, criteria)
