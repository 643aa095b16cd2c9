"""Recipient filters and the matching rule applied to identities."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .identity import Identity


@dataclass(frozen=True)
class NotificationFilter:
    """Partial :class:`Identity` selecting the recipients of a broadcast.

    ``None`` and the empty string both mean the attribute is unspecified.
    """

    domain: str | None = None
    platform: str | None = None
    user_id: str | None = None
    role: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "NotificationFilter":
        """Build a filter from ``data`` ignoring unknown keys."""

        data = data or {}
        values: dict[str, str | None] = {}
        for attribute in fields(cls):
            value = data.get(attribute.name)
            values[attribute.name] = str(value) if value not in (None, "") else None
        return cls(**values)

    def constraints(self) -> dict[str, str]:
        """Return only the attributes that carry a concrete value."""

        return {
            attribute.name: getattr(self, attribute.name)
            for attribute in fields(self)
            if getattr(self, attribute.name)
        }

    @property
    def is_wildcard(self) -> bool:
        """Return ``True`` when no attribute is specified."""

        return not self.constraints()

    def to_dict(self) -> dict[str, str | None]:
        return {attribute.name: getattr(self, attribute.name) for attribute in fields(self)}


def matches(notification_filter: NotificationFilter, identity: Identity) -> bool:
    """Return ``True`` when every specified filter attribute equals ``identity``'s.

    Comparison is exact: no case folding and no partial matches.
    """

    for name, expected in notification_filter.constraints().items():
        if getattr(identity, name) != expected:
            return False
    return True


__all__ = ["NotificationFilter", "matches"]
