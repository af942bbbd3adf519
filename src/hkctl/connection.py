"""Client connection to the HomeKit automation service."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import httpx

from .errors import HkctlError, RemoteError, ServiceConnectionError
from .filters import Filter, OperationRequest, RoomOperation
from .logging import get_logger

SERVICE_PATH = "/hkservice.HomeKitService"


class HomeKitClient:
    """Handle on a single connection to the automation service.

    One RPC per coroutine. Requests and responses are JSON objects; a non-2xx
    response carries a ``{"code", "message"}`` status raised as
    :class:`RemoteError`.
    """

    def __init__(self, http: httpx.AsyncClient, endpoint: str) -> None:
        self._http = http
        self.endpoint = endpoint
        self._logger = get_logger("hkctl.connection")

    @classmethod
    async def create(
        cls,
        host: str,
        port: int,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "HomeKitClient":
        """Connect to ``host:port`` and complete the transport handshake."""

        endpoint = f"{host}:{port}"
        try:
            base_url = httpx.URL(scheme="http", host=host, port=port, path="/")
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise ServiceConnectionError(endpoint, str(exc)) from exc

        # No pooling beyond the single keep-alive connection, no timeout.
        http = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=None,
            limits=httpx.Limits(max_connections=1, max_keepalive_connections=1),
        )
        client = cls(http, endpoint)
        try:
            await client._handshake()
        except BaseException:
            await http.aclose()
            raise
        return client

    async def _handshake(self) -> None:
        # Any HTTP response means the connection is up; the status is irrelevant.
        try:
            response = await self._http.head("/")
        except httpx.TransportError as exc:
            raise ServiceConnectionError(self.endpoint, str(exc) or type(exc).__name__) from exc
        self._logger.info(
            "Connected to automation service",
            extra={"endpoint": self.endpoint, "handshake_status": response.status_code},
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "HomeKitClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def call(self, method: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Invoke ``method`` on the service and return its decoded reply."""

        self._logger.debug("RPC request", extra={"rpc": method, "payload": dict(payload)})
        response = await self._http.post(f"{SERVICE_PATH}/{method}", json=dict(payload))
        return _handle_response(method, response)

    async def list_homes(self) -> List[Dict[str, Any]]:
        data = await self.call("GetHomes", {})
        return _records("GetHomes", data, "homes")

    async def list_rooms(self, home: Optional[str], criteria: Filter) -> List[Dict[str, Any]]:
        data = await self.call("GetRooms", _scoped(home, filter=criteria.to_payload()))
        return _records("GetRooms", data, "rooms")

    async def list_zones(self, home: Optional[str], criteria: Filter) -> List[Dict[str, Any]]:
        data = await self.call("GetZones", _scoped(home, filter=criteria.to_payload()))
        return _records("GetZones", data, "zones")

    async def list_accessories(self, home: Optional[str], criteria: Filter) -> List[Dict[str, Any]]:
        data = await self.call("GetAccessories", _scoped(home, filter=criteria.to_payload()))
        return _records("GetAccessories", data, "accessories")

    async def list_services(self, home: Optional[str], criteria: Filter) -> List[Dict[str, Any]]:
        data = await self.call("GetServices", _scoped(home, filter=criteria.to_payload()))
        return _records("GetServices", data, "services")

    async def list_service_groups(self, home: Optional[str], criteria: Filter) -> List[Dict[str, Any]]:
        data = await self.call("GetServiceGroups", _scoped(home, filter=criteria.to_payload()))
        return _records("GetServiceGroups", data, "service_groups")

    async def list_action_sets(self, home: Optional[str], criteria: Filter) -> List[Dict[str, Any]]:
        data = await self.call("GetActionSets", _scoped(home, filter=criteria.to_payload()))
        return _records("GetActionSets", data, "action_sets")

    async def list_triggers(self, home: Optional[str], criteria: Filter) -> List[Dict[str, Any]]:
        data = await self.call("GetTriggers", _scoped(home, filter=criteria.to_payload()))
        return _records("GetTriggers", data, "triggers")

    async def list_triggers_in_window(self, home: Optional[str], criteria: Filter) -> List[Dict[str, Any]]:
        if not criteria.has_window:
            raise ValueError("A trigger window needs an 'after' or 'before' bound")
        data = await self.call("GetTriggersInWindow", _scoped(home, filter=criteria.to_payload()))
        return _records("GetTriggersInWindow", data, "triggers")

    async def update_room(self, home: Optional[str], request: OperationRequest) -> Dict[str, Any]:
        """Apply a room mutation and return the service's reply."""

        verb = "Add" if request.operation is RoomOperation.ADD else "Remove"
        if request.targets_room:
            return await self.call(f"{verb}Room", _scoped(home, name=request.target))
        suffix = "ToRoom" if request.operation is RoomOperation.ADD else "FromRoom"
        return await self.call(
            f"{verb}Accessories{suffix}",
            _scoped(home, room=request.target, accessories=list(request.accessories)),
        )


def _scoped(home: Optional[str], **fields: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = dict(fields)
    if home is not None:
        payload["home"] = home
    return payload


def _handle_response(method: str, response: httpx.Response) -> Dict[str, Any]:
    if response.is_success:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise HkctlError(f"{method} returned a reply that is not valid JSON") from exc
        if not isinstance(data, dict):
            raise HkctlError(f"{method} returned a non-object reply")
        return data
    code = "Unknown"
    message = response.text
    try:
        detail = response.json()
    except ValueError:
        detail = None
    if isinstance(detail, dict):
        code = str(detail.get("code") or code)
        message = str(detail.get("message") or message)
    raise RemoteError(code, message, response.status_code)


def _records(method: str, data: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    records = data.get(key) or []
    if not isinstance(records, list) or not all(isinstance(record, dict) for record in records):
        raise HkctlError(f"{method} returned malformed records")
    return records
