import json

import httpx
import pytest

from conftest import FakeService, remote_status
from hkctl.cli import run


@pytest.mark.asyncio
async def test_rooms_scenario(service: FakeService, capsys) -> None:
    service.replies["GetRooms"] = {"rooms": [{"name": "Kitchen", "uuid": "r-1"}]}

    status = await run(["--output", "json", "rooms", "--name", "Kitchen"], transport=service.transport())

    assert status == 0
    assert [request.method for request in service.requests] == ["HEAD", "POST"]
    assert all(request.url.host == "127.0.0.1" for request in service.requests)
    assert all(request.url.port == 55123 for request in service.requests)
    assert service.rpc_requests[0].url.path.endswith("/GetRooms")
    assert service.payload() == {"filter": {"name": "Kitchen"}}
    assert json.loads(capsys.readouterr().out) == [{"name": "Kitchen", "uuid": "r-1"}]


@pytest.mark.asyncio
async def test_port_option_is_used(service: FakeService) -> None:
    status = await run(["-p", "6001", "homes"], transport=service.transport())
    assert status == 0
    assert {request.url.port for request in service.requests} == {6001}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "argv",
    [
        ["--port", "http", "homes"],
        ["triggers", "--enabled", "sometimes"],
        ["room", "move", "Garage"],
        ["lights"],
    ],
)
async def test_usage_errors_never_connect(service: FakeService, capsys, argv) -> None:
    status = await run(argv, transport=service.transport())
    assert status == 2
    assert service.requests == []
    err = capsys.readouterr().err
    assert "usage:" in err
    assert "hkctl: error:" in err


@pytest.mark.asyncio
async def test_no_command_prints_usage_without_connecting(service: FakeService, capsys) -> None:
    status = await run([], transport=service.transport())
    assert status == 0
    assert service.requests == []
    assert "usage: hkctl" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_connection_failure_exits_non_zero(capsys) -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    status = await run(["homes"], transport=httpx.MockTransport(_refuse))
    assert status == 1
    err = capsys.readouterr().err
    assert "Unable to connect to 127.0.0.1:55123" in err
    assert "Error returned by server" not in err


@pytest.mark.asyncio
async def test_remote_status_is_reported(service: FakeService, capsys) -> None:
    service.replies["RemoveRoom"] = remote_status("NotFound", "No room named Garage")
    status = await run(["room", "remove", "Garage"], transport=service.transport())
    assert status == 1
    err = capsys.readouterr().err
    assert "Error returned by server: status: NotFound" in err
    assert "No room named Garage" in err


@pytest.mark.asyncio
async def test_room_add_scenario(service: FakeService, capsys) -> None:
    status = await run(["--home", "Cabin", "room", "add", "Garage"], transport=service.transport())
    assert status == 0
    assert service.rpc_requests[0].url.path.endswith("/AddRoom")
    assert service.payload() == {"name": "Garage", "home": "Cabin"}
    assert "Added room 'Garage'" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_room_remove_accessories_scenario(service: FakeService, capsys) -> None:
    status = await run(
        ["room", "remove", "Garage", "Sensor1", "Sensor2"], transport=service.transport()
    )
    assert status == 0
    assert service.rpc_requests[0].url.path.endswith("/RemoveAccessoriesFromRoom")
    assert service.payload() == {"room": "Garage", "accessories": ["Sensor1", "Sensor2"]}
    assert "Removed Sensor1, Sensor2 from room 'Garage'" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_triggers_window_and_table_output(service: FakeService, capsys) -> None:
    service.replies["GetTriggersInWindow"] = {
        "triggers": [{"name": "Sunrise", "enabled": True, "uuid": "t-1"}]
    }
    status = await run(
        ["triggers", "--after", "2024-05-01T06:00", "--enabled", "true"],
        transport=service.transport(),
    )
    assert status == 0
    assert service.payload() == {"filter": {"enabled": True, "after": "2024-05-01T06:00:00"}}
    out = capsys.readouterr().out
    assert "Sunrise" in out
    assert "Triggers (1)" in out


@pytest.mark.asyncio
async def test_host_and_output_from_environment(service: FakeService, capsys) -> None:
    service.replies["GetServices"] = {"services": [{"name": "Lamp", "type": "lightbulb"}]}
    status = await run(
        ["services", "-t", "lightbulb"],
        transport=service.transport(),
        environ={"HKCTL_HOST": "10.0.0.5", "HKCTL_OUTPUT": "yaml"},
    )
    assert status == 0
    assert {request.url.host for request in service.requests} == {"10.0.0.5"}
    assert {request.url.port for request in service.requests} == {55123}
    assert service.payload() == {"filter": {"types": ["lightbulb"]}}
    assert "name: Lamp" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_bad_environment_value_fails_before_connecting(service: FakeService, capsys) -> None:
    status = await run(["homes"], transport=service.transport(), environ={"HKCTL_OUTPUT": "xml"})
    assert status == 1
    assert service.requests == []
    assert "output must be one of" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_bracketed_name_in_table_output(service: FakeService, capsys) -> None:
    service.replies["GetAccessories"] = {"accessories": [{"name": "Lamp [/]", "uuid": "a-1"}]}
    status = await run(["accessories"], transport=service.transport())
    assert status == 0
    assert "Lamp [/]" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_malformed_records_exit_non_zero(service: FakeService, capsys) -> None:
    service.replies["GetRooms"] = {"rooms": ["Kitchen"]}
    status = await run(["rooms"], transport=service.transport())
    assert status == 1
    err = capsys.readouterr().err
    assert "Error: GetRooms returned malformed records" in err
    assert "Error returned by server" not in err
