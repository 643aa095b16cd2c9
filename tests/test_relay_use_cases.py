"""Tests for the registration and broadcast protocols."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import (
    WildcardBroadcastRejected,
    broadcast_notification,
    register_client,
)
from app.domain.entities import Identity, NotificationFilter
from app.infrastructure.notifications import (
    ConnectionRegistry,
    PendingNotificationQueue,
    PendingQueuePersistenceError,
)
from app.infrastructure.storage import JsonFilePendingNotificationStore

pytestmark = pytest.mark.anyio

U1 = Identity(domain="d1", platform="web", user_id="u1", first_name="Ana", role="admin")


@pytest.fixture
async def queue(tmp_path):
    pending_queue = PendingNotificationQueue(
        JsonFilePendingNotificationStore(tmp_path / "pending.json")
    )
    await pending_queue.open()
    return pending_queue


@pytest.fixture
def registry():
    return ConnectionRegistry()


async def test_live_match_is_delivered_without_queueing(registry, queue, make_connection):
    connection, websocket = make_connection()
    registry.register(connection, U1)

    result = await broadcast_notification(
        NotificationFilter(user_id="u1"), "hello", registry=registry, queue=queue
    )

    assert websocket.sent == [{"type": "notification", "message": "hello", "from": "server"}]
    assert result.matched_any and result.all_delivered
    assert result.queued_id is None
    assert len(queue) == 0


async def test_broadcast_without_match_is_queued(registry, queue, make_connection):
    connection, websocket = make_connection()
    registry.register(connection, U1)

    result = await broadcast_notification(
        NotificationFilter(user_id="u2"), "offline", registry=registry, queue=queue
    )

    assert websocket.sent == []
    assert not result.matched_any
    assert [entry.id for entry in await queue.pending()] == [result.queued_id]


async def test_failed_deliveries_queue_the_broadcast_once(registry, queue, make_connection):
    healthy, healthy_socket = make_connection()
    broken, _ = make_connection(fail=True)
    also_broken, _ = make_connection(fail=True)
    for connection in (healthy, broken, also_broken):
        registry.register(connection, U1)

    result = await broadcast_notification(
        NotificationFilter(role="admin"), "alert", registry=registry, queue=queue
    )

    assert result.attempted == 3
    assert result.delivered == 1
    assert healthy_socket.notifications() == ["alert"]
    pending = await queue.pending()
    assert len(pending) == 1
    assert pending[0].message == "alert"


async def test_wildcard_broadcast_reaches_everyone(registry, queue, make_connection):
    first, first_socket = make_connection()
    anonymous, anonymous_socket = make_connection()
    registry.register(first, U1)
    registry.register(anonymous, Identity(domain="d1"))

    await broadcast_notification(NotificationFilter(), "all", registry=registry, queue=queue)

    assert first_socket.notifications() == ["all"]
    assert anonymous_socket.notifications() == ["all"]


async def test_wildcard_broadcast_can_be_rejected(registry, queue):
    with pytest.raises(WildcardBroadcastRejected):
        await broadcast_notification(
            NotificationFilter(), "all", registry=registry, queue=queue, allow_wildcard=False
        )
    assert len(queue) == 0


async def test_anonymous_client_skips_filtered_broadcasts(registry, queue, make_connection):
    anonymous, anonymous_socket = make_connection()
    registry.register(anonymous, Identity(domain="d1"))

    result = await broadcast_notification(
        NotificationFilter(domain="d1"), "scoped", registry=registry, queue=queue
    )

    assert anonymous_socket.sent == []
    assert result.queued_id is not None


async def test_registration_replays_queue(registry, queue, make_connection):
    await queue.enqueue(NotificationFilter(user_id="u1"), "offline")
    await queue.enqueue(NotificationFilter(user_id="u2"), "not yours")
    connection, websocket = make_connection()

    result = await register_client(connection, U1, registry=registry, queue=queue)

    assert registry.get(connection) == U1
    assert result.delivered == 1
    assert websocket.notifications() == ["offline"]
    assert [entry.message for entry in await queue.pending()] == ["not yours"]


async def test_registration_requeues_failed_replay(registry, queue, make_connection):
    queued_id = await queue.enqueue(NotificationFilter(user_id="u1"), "offline")
    connection, _ = make_connection(fail=True)

    result = await register_client(connection, U1, registry=registry, queue=queue)

    assert result.requeued == 1
    (entry,) = await queue.pending()
    assert entry.id == queued_id
    assert entry.attempts == 1


async def test_anonymous_registration_leaves_queue_alone(registry, queue, make_connection):
    await queue.enqueue(NotificationFilter(), "for a real user")
    connection, websocket = make_connection()

    result = await register_client(
        connection, Identity(domain="d1"), registry=registry, queue=queue
    )

    assert result.delivered == 0
    assert websocket.sent == []
    assert connection in registry
    assert len(queue) == 1


async def test_failed_connection_leaves_registry_after_broadcast(
    registry, queue, make_connection
):
    healthy, healthy_socket = make_connection()
    broken, _ = make_connection(fail=True)
    registry.register(healthy, U1)
    registry.register(broken, U1)

    await broadcast_notification(
        NotificationFilter(user_id="u1"), "a", registry=registry, queue=queue
    )

    assert broken not in registry
    assert healthy in registry
    assert len(queue) == 1

    result = await broadcast_notification(
        NotificationFilter(user_id="u1"), "b", registry=registry, queue=queue
    )

    assert result.attempted == 1
    assert result.queued_id is None
    assert len(queue) == 1
    assert healthy_socket.notifications() == ["a", "b"]


async def test_failed_replay_unregisters_connection(registry, queue, make_connection):
    await queue.enqueue(NotificationFilter(user_id="u1"), "offline")
    connection, _ = make_connection(fail=True)

    await register_client(connection, U1, registry=registry, queue=queue)

    assert connection not in registry


class _LimitedSaveStore:
    """In-memory store that refuses writes once ``allowed_saves`` is used up."""

    def __init__(self, allowed_saves: int) -> None:
        self.allowed_saves = allowed_saves
        self.save_calls = 0
        self.entries = []

    def load(self):
        return list(self.entries)

    def save(self, notifications):
        self.save_calls += 1
        if self.save_calls > self.allowed_saves:
            raise OSError("disk full")
        self.entries = list(notifications)


async def test_requeue_failure_is_raised_after_every_entry_is_attempted(
    registry, make_connection
):
    # Two enqueues and one take succeed, both requeues fail.
    store = _LimitedSaveStore(allowed_saves=3)
    pending_queue = PendingNotificationQueue(store)
    await pending_queue.open()
    await pending_queue.enqueue(NotificationFilter(user_id="u1"), "first")
    await pending_queue.enqueue(NotificationFilter(user_id="u1"), "second")
    connection, _ = make_connection(fail=True)

    with pytest.raises(PendingQueuePersistenceError):
        await register_client(connection, U1, registry=registry, queue=pending_queue)

    assert store.save_calls == 5
    assert connection not in registry
