"""Domain entity describing who a relay connection belongs to."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Attributes a client registers under.

    ``first_name`` is display-only and never takes part in filter matching.
    """

    domain: str = ""
    platform: str = ""
    user_id: str = ""
    first_name: str = ""
    role: str = ""

    @property
    def is_anonymous(self) -> bool:
        """Return ``True`` when the client registered without a ``user_id``."""

        return not self.user_id


__all__ = ["Identity"]
