"""Websocket handler decoding relay messages from connected clients."""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from app.application.use_cases.notifications import (
    WildcardBroadcastRejected,
    broadcast_notification,
    register_client,
)
from app.infrastructure.notifications import (
    ClientConnection,
    PendingQueuePersistenceError,
    build_error,
    build_status,
)
from app.infrastructure.notifications.publisher import (
    STATUS_BROADCAST_SENT,
    STATUS_PONG,
    STATUS_REGISTERED,
)
from app.interfaces.api.dependencies import RelayContext, get_relay
from app.interfaces.api.schemas import BroadcastRequest, RegisterRequest

router = APIRouter(tags=["relay"])
logger = logging.getLogger(__name__)

Reply = dict[str, Any] | None
MessageHandler = Callable[[dict[str, Any], ClientConnection, RelayContext], Awaitable[Reply]]


async def _handle_register(
    data: dict[str, Any], connection: ClientConnection, relay: RelayContext
) -> Reply:
    identity = RegisterRequest.model_validate(data).user.to_identity()
    try:
        await register_client(
            connection, identity, registry=relay.registry, queue=relay.queue
        )
    except PendingQueuePersistenceError:
        logger.exception("Queue replay for connection %s did not persist", connection.id)
    return build_status(STATUS_REGISTERED)


async def _handle_broadcast(
    data: dict[str, Any], connection: ClientConnection, relay: RelayContext
) -> Reply:
    request = BroadcastRequest.model_validate(data)
    await broadcast_notification(
        request.to_filter(),
        request.message,
        registry=relay.registry,
        queue=relay.queue,
        allow_wildcard=relay.settings.allow_wildcard_broadcast,
    )
    return build_status(STATUS_BROADCAST_SENT)


async def _handle_ping(
    data: dict[str, Any], connection: ClientConnection, relay: RelayContext
) -> Reply:
    return build_status(STATUS_PONG)


async def _handle_pong(
    data: dict[str, Any], connection: ClientConnection, relay: RelayContext
) -> Reply:
    return None


_HANDLERS: dict[str, MessageHandler] = {
    "register": _handle_register,
    "broadcast": _handle_broadcast,
    "ping": _handle_ping,
    "pong": _handle_pong,
}


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "message"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


async def handle_message(raw: str, connection: ClientConnection, relay: RelayContext) -> Reply:
    """Decode one inbound frame and return the reply to send, if any."""

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Invalid JSON from connection %s", connection.id)
        return build_error("Invalid JSON")

    if not isinstance(data, dict):
        return build_error("Message must be a JSON object")

    message_type = data.get("type")
    handler = _HANDLERS.get(message_type) if isinstance(message_type, str) else None
    if handler is None:
        logger.debug("Unrecognized message type %r from %s", message_type, connection.id)
        return build_error(f"Unrecognized message type: {message_type}")

    try:
        return await handler(data, connection, relay)
    except ValidationError as exc:
        return build_error(f"Invalid {message_type} message: {_describe_validation_error(exc)}")
    except WildcardBroadcastRejected as exc:
        return build_error(str(exc))
    except PendingQueuePersistenceError:
        logger.exception("Message from connection %s could not be persisted", connection.id)
        return build_error("Notification could not be persisted")


def _frame_text(frame: dict[str, Any]) -> str:
    text = frame.get("text")
    if text is not None:
        return text
    data = frame.get("bytes") or b""
    return data.decode("utf-8", errors="replace")


@router.websocket("/")
@router.websocket("/ws")
async def relay_websocket(
    websocket: WebSocket, relay: RelayContext = Depends(get_relay)
) -> None:
    """Websocket endpoint through which clients register, broadcast and ping."""

    await websocket.accept()
    connection = ClientConnection(websocket)
    relay.monitor.track(connection)
    logger.info("Client connected: %s", connection.id)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            relay.monitor.acknowledge(connection)
            reply = await handle_message(_frame_text(frame), connection, relay)
            if reply is not None:
                await connection.send_json(reply)
    except WebSocketDisconnect:
        logger.info("Client disconnected: %s", connection.id)
    finally:
        connection.mark_closed()
        relay.registry.unregister(connection)
        relay.monitor.forget(connection)


__all__ = ["handle_message", "router"]
