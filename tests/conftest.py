"""Shared fixtures for the relay test-suite."""

from __future__ import annotations

import pathlib
import sys
from typing import Any

import pytest
from starlette.websockets import WebSocketState

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.infrastructure.notifications import ClientConnection  # noqa: E402


class FakeWebSocket:
    """Minimal stand-in for ``fastapi.WebSocket`` recording what was sent."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict[str, Any]] = []
        self.close_code: int | None = None
        self.client_state = WebSocketState.CONNECTED

    async def send_json(self, message: dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("simulated transport error")
        self.sent.append(message)

    async def close(self, code: int = 1000) -> None:
        self.close_code = code
        self.client_state = WebSocketState.DISCONNECTED

    def notifications(self) -> list[Any]:
        return [m["message"] for m in self.sent if m.get("type") == "notification"]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_connection():
    """Return a factory building ``ClientConnection`` objects over fake sockets."""

    def _factory(*, fail: bool = False) -> tuple[ClientConnection, FakeWebSocket]:
        websocket = FakeWebSocket(fail=fail)
        return ClientConnection(websocket), websocket

    return _factory
