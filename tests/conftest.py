import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch) -> None:
    """Keep the user's config file and HKCTL_* variables out of the tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for key in ("HKCTL_CONFIG", "HKCTL_HOST", "HKCTL_OUTPUT", "HKCTL_LOG_FORMAT"):
        monkeypatch.delenv(key, raising=False)


class FakeService:
    """Records requests and answers RPCs from a method -> reply table."""

    def __init__(self, replies: Optional[Dict[str, Any]] = None) -> None:
        self.replies: Dict[str, Any] = dict(replies or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "HEAD":
            return httpx.Response(404)
        method = request.url.path.rsplit("/", 1)[-1]
        reply = self.replies.get(method, {})
        if isinstance(reply, httpx.Response):
            return reply
        if callable(reply):
            return reply(request)
        return httpx.Response(200, json=reply)

    @property
    def rpc_requests(self) -> List[httpx.Request]:
        return [request for request in self.requests if request.method == "POST"]

    def payload(self, index: int = 0) -> Dict[str, Any]:
        return json.loads(self.rpc_requests[index].content.decode())

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def service() -> FakeService:
    return FakeService()


def remote_status(code: str, message: str, status: int = 404) -> httpx.Response:
    return httpx.Response(status, json={"code": code, "message": message})
