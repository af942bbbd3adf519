"""Room organisation commands."""

from __future__ import annotations

from ..connection import HomeKitClient
from ..filters import OperationRequest, RoomOperation
from ..invocation import ParsedInvocation
from ..logging import get_logger
from ..output import print_output
from . import CommandHandler

logger = get_logger("hkctl.commands")


class RoomCommand(CommandHandler):
    """Add or remove a room, or move accessories in or out of one."""

    name = "room"

    async def execute(self, invocation: ParsedInvocation, client: HomeKitClient) -> None:
        request = OperationRequest.from_arguments(invocation.command_arguments)
        logger.info(
            "Updating room",
            extra={
                "operation": request.operation.value,
                "room": request.target,
                "accessories": list(request.accessories),
            },
        )
        reply = await client.update_room(invocation.home, request)
        if self.output == "table":
            print(_describe(request))
        else:
            print_output(reply, self.output)


def _describe(request: OperationRequest) -> str:
    if request.targets_room:
        verb = "Added" if request.operation is RoomOperation.ADD else "Removed"
        return f"{verb} room '{request.target}'"
    names = ", ".join(request.accessories)
    if request.operation is RoomOperation.ADD:
        return f"Added {names} to room '{request.target}'"
    return f"Removed {names} from room '{request.target}'"
