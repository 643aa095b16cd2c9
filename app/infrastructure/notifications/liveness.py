"""Heartbeat driver that evicts connections which stopped answering."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from .connection import ClientConnection
from .publisher import build_heartbeat
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL = 30.0
EVICTION_CLOSE_CODE = 1001


class LivenessState(str, Enum):
    ALIVE = "alive"
    PENDING = "pending"


class LivenessMonitor:
    """Probe every tracked connection once per tick.

    A connection starts ``ALIVE``. A tick probes it and moves it to
    ``PENDING``; any frame received from the client moves it back to
    ``ALIVE``. A connection still ``PENDING`` at the next tick, or one whose
    transport already failed, is removed from the registry and then closed.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        interval: float = DEFAULT_HEARTBEAT_INTERVAL,
    ) -> None:
        self._registry = registry
        self.interval = interval
        self._states: dict[ClientConnection, LivenessState] = {}

    def track(self, connection: ClientConnection) -> None:
        self._states[connection] = LivenessState.ALIVE

    def forget(self, connection: ClientConnection) -> None:
        self._states.pop(connection, None)

    def acknowledge(self, connection: ClientConnection) -> None:
        """Record that ``connection`` answered since the last probe."""

        if connection in self._states:
            self._states[connection] = LivenessState.ALIVE

    def state_of(self, connection: ClientConnection) -> LivenessState | None:
        return self._states.get(connection)

    async def tick(self) -> list[ClientConnection]:
        """Run one heartbeat cycle and return the connections evicted by it."""

        evicted: list[ClientConnection] = []
        probes: list[ClientConnection] = []
        for connection, state in list(self._states.items()):
            if connection.closed or state is LivenessState.PENDING:
                self._registry.unregister(connection)
                self._states.pop(connection, None)
                evicted.append(connection)
            else:
                self._states[connection] = LivenessState.PENDING
                probes.append(connection)

        for connection in evicted:
            logger.info("Evicting unresponsive connection %s", connection.id)
            await connection.close(code=EVICTION_CLOSE_CODE)

        heartbeat = build_heartbeat()
        for connection in probes:
            # A failed probe is left PENDING and evicted on the next tick.
            await connection.send_json(dict(heartbeat))
        return evicted

    async def run(self) -> None:
        """Tick forever every ``interval`` seconds until cancelled."""

        logger.info("Liveness monitor started with a %.1fs interval", self.interval)
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.tick()
            except Exception:
                logger.exception("Liveness tick failed")


__all__ = ["LivenessMonitor", "LivenessState", "DEFAULT_HEARTBEAT_INTERVAL"]
