"""Wrapper around a client websocket used by the relay."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class ClientConnection:
    """A live websocket with a stable identity and a send result.

    Connections hash by object identity, so two clients registered with the
    same attributes remain distinct registry keys.
    """

    def __init__(self, websocket: WebSocket, *, connection_id: str | None = None) -> None:
        self.id = connection_id or uuid.uuid4().hex
        self._websocket = websocket
        self._closed = False

    def __repr__(self) -> str:
        return f"ClientConnection(id={self.id!r}, closed={self._closed})"

    @property
    def closed(self) -> bool:
        return self._closed or self._websocket.client_state == WebSocketState.DISCONNECTED

    async def send_json(self, message: dict[str, Any]) -> bool:
        """Send ``message`` and return ``True`` only if the transport accepted it."""

        if self.closed:
            logger.debug("Skipping send to closed connection %s", self.id)
            return False
        try:
            await self._websocket.send_json(message)
        except Exception as exc:
            logger.warning("Websocket send to %s failed: %s", self.id, exc)
            self._closed = True
            return False
        return True

    async def close(self, code: int = 1000) -> None:
        """Close the underlying websocket; calling it twice is harmless."""

        if self._closed:
            return
        self._closed = True
        try:
            await self._websocket.close(code=code)
        except Exception as exc:  # pragma: no cover - transport already gone
            logger.debug("Closing connection %s raised %s", self.id, exc)

    def mark_closed(self) -> None:
        """Record that the peer went away without going through :meth:`close`."""

        self._closed = True


__all__ = ["ClientConnection"]
