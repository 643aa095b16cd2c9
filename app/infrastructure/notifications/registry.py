"""Registry of live relay connections and the identity each registered with."""

from __future__ import annotations

import logging
from typing import Iterator

from app.domain.entities import Identity

from .connection import ClientConnection

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Map open connections to their :class:`Identity`.

    Every method runs without awaiting, so each call is atomic on the event
    loop. Callers only see copies of the mapping.
    """

    def __init__(self) -> None:
        self._identities: dict[ClientConnection, Identity] = {}

    def __len__(self) -> int:
        return len(self._identities)

    def __contains__(self, connection: object) -> bool:
        return connection in self._identities

    def register(self, connection: ClientConnection, identity: Identity) -> None:
        """Associate ``connection`` with ``identity``, replacing any earlier one."""

        previous = self._identities.get(connection)
        self._identities[connection] = identity
        if identity.is_anonymous:
            logger.info("Connection %s registered anonymously", connection.id)
        elif previous is not None:
            logger.info(
                "Connection %s re-registered as user %s", connection.id, identity.user_id
            )
        else:
            logger.info("Connection %s registered as user %s", connection.id, identity.user_id)

    def unregister(self, connection: ClientConnection) -> None:
        """Remove ``connection``; unknown connections are ignored."""

        if self._identities.pop(connection, None) is not None:
            logger.info("Connection %s unregistered", connection.id)

    def get(self, connection: ClientConnection) -> Identity | None:
        return self._identities.get(connection)

    def snapshot(self) -> Iterator[tuple[ClientConnection, Identity]]:
        """Iterate over the registrations present when this method was called."""

        return iter(list(self._identities.items()))


__all__ = ["ConnectionRegistry"]
