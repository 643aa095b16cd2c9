"""Tests for the heartbeat driven liveness monitor."""

from __future__ import annotations

import anyio
import pytest

from app.application.use_cases.notifications import broadcast_notification
from app.domain.entities import Identity, NotificationFilter
from app.infrastructure.notifications import (
    ConnectionRegistry,
    LivenessMonitor,
    LivenessState,
    PendingNotificationQueue,
)
from app.infrastructure.storage import JsonFilePendingNotificationStore

pytestmark = pytest.mark.anyio

U1 = Identity(user_id="u1")


async def test_tick_probes_alive_connections(make_connection):
    registry = ConnectionRegistry()
    monitor = LivenessMonitor(registry, interval=30)
    connection, websocket = make_connection()
    registry.register(connection, U1)
    monitor.track(connection)

    evicted = await monitor.tick()

    assert evicted == []
    assert websocket.sent == [{"type": "heartbeat"}]
    assert monitor.state_of(connection) is LivenessState.PENDING


async def test_acknowledged_connection_survives_next_tick(make_connection):
    registry = ConnectionRegistry()
    monitor = LivenessMonitor(registry)
    connection, websocket = make_connection()
    registry.register(connection, U1)
    monitor.track(connection)

    await monitor.tick()
    monitor.acknowledge(connection)
    evicted = await monitor.tick()

    assert evicted == []
    assert connection in registry
    assert websocket.close_code is None
    assert len(websocket.sent) == 2


async def test_unresponsive_connection_is_evicted(make_connection):
    registry = ConnectionRegistry()
    monitor = LivenessMonitor(registry)
    connection, websocket = make_connection()
    registry.register(connection, U1)
    monitor.track(connection)

    await monitor.tick()
    evicted = await monitor.tick()

    assert evicted == [connection]
    assert connection not in registry
    assert monitor.state_of(connection) is None
    assert websocket.close_code == 1001
    assert connection.closed


async def test_failed_probe_leads_to_eviction(make_connection):
    registry = ConnectionRegistry()
    monitor = LivenessMonitor(registry)
    connection, _ = make_connection(fail=True)
    registry.register(connection, U1)
    monitor.track(connection)

    await monitor.tick()
    evicted = await monitor.tick()

    assert evicted == [connection]
    assert connection not in registry


async def test_broadcast_during_eviction_does_not_reach_evicted_client(
    make_connection, tmp_path
):
    registry = ConnectionRegistry()
    monitor = LivenessMonitor(registry)
    queue = PendingNotificationQueue(JsonFilePendingNotificationStore(tmp_path / "q.json"))
    await queue.open()
    connection, websocket = make_connection()
    registry.register(connection, U1)
    monitor.track(connection)
    await monitor.tick()

    closing = anyio.Event()
    release = anyio.Event()
    original_close = websocket.close

    async def slow_close(code: int = 1000) -> None:
        closing.set()
        await release.wait()
        await original_close(code)

    websocket.close = slow_close

    async with anyio.create_task_group() as tg:
        tg.start_soon(monitor.tick)
        await closing.wait()
        result = await broadcast_notification(
            NotificationFilter(user_id="u1"), "late", registry=registry, queue=queue
        )
        release.set()

    assert websocket.notifications() == []
    assert result.queued_id is not None
    assert len(queue) == 1


async def test_untracked_connection_acknowledge_is_ignored(make_connection):
    monitor = LivenessMonitor(ConnectionRegistry())
    connection, _ = make_connection()

    monitor.acknowledge(connection)

    assert monitor.state_of(connection) is None


async def test_connection_with_failed_transport_is_dropped_on_next_tick(
    make_connection, tmp_path
):
    registry = ConnectionRegistry()
    monitor = LivenessMonitor(registry)
    queue = PendingNotificationQueue(JsonFilePendingNotificationStore(tmp_path / "q.json"))
    await queue.open()
    connection, websocket = make_connection(fail=True)
    registry.register(connection, U1)
    monitor.track(connection)

    await broadcast_notification(
        NotificationFilter(user_id="u1"), "lost", registry=registry, queue=queue
    )
    assert connection not in registry
    assert monitor.state_of(connection) is LivenessState.ALIVE

    evicted = await monitor.tick()

    assert evicted == [connection]
    assert monitor.state_of(connection) is None
    assert websocket.sent == []
