"""Filter and operation value types built from parsed command arguments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


class EnabledFilter(Enum):
    """Closed set accepted by ``triggers --enabled``."""

    EITHER = "either"
    TRUE = "true"
    FALSE = "false"


class RoomOperation(Enum):
    """Closed set accepted by the ``room`` command's operation argument."""

    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class Filter:
    """Optional matching criteria narrowing a listing request.

    Patterns are passed through uninterpreted; the service decides whether
    they match exactly, by substring or by UUID. Absent fields match all.
    """

    name: Optional[str] = None
    room: Optional[str] = None
    zone: Optional[str] = None
    types: Tuple[str, ...] = ()
    enabled: EnabledFilter = EnabledFilter.EITHER
    after: Optional[datetime] = None
    before: Optional[datetime] = None

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "Filter":
        """Build a filter from whichever filter options a command declares."""

        enabled = arguments.get("enabled")
        return cls(
            name=arguments.get("name"),
            room=arguments.get("room"),
            zone=arguments.get("zone"),
            types=tuple(arguments.get("type") or ()),
            enabled=EnabledFilter(enabled) if enabled is not None else EnabledFilter.EITHER,
            after=arguments.get("after"),
            before=arguments.get("before"),
        )

    @property
    def has_window(self) -> bool:
        return self.after is not None or self.before is not None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the wire shape, omitting absent criteria."""

        payload: Dict[str, Any] = {}
        if self.name is not None:
            payload["name"] = self.name
        if self.room is not None:
            payload["room"] = self.room
        if self.zone is not None:
            payload["zone"] = self.zone
        if self.types:
            payload["types"] = list(self.types)
        if self.enabled is not EnabledFilter.EITHER:
            payload["enabled"] = self.enabled is EnabledFilter.TRUE
        if self.after is not None:
            payload["after"] = self.after.isoformat()
        if self.before is not None:
            payload["before"] = self.before.isoformat()
        return payload


@dataclass(frozen=True)
class OperationRequest:
    """A room mutation.

    With no accessories the operation applies to the room itself, otherwise
    to the listed accessories' membership in that room.
    """

    operation: RoomOperation
    target: str
    accessories: Tuple[str, ...] = ()

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "OperationRequest":
        accessories: Sequence[str] = arguments.get("accessories") or ()
        return cls(
            operation=RoomOperation(arguments["operation"]),
            target=arguments["name"],
            accessories=tuple(accessories),
        )

    @property
    def targets_room(self) -> bool:
        return not self.accessories
