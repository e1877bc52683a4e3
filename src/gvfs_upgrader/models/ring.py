"""Upgrade ring (release channel) enum."""

from enum import Enum
from typing import Optional


class RingType(str, Enum):
    """Release channel a local install is subscribed to.

    INVALID means no usable ring is configured; NONE means the user opted
    out of upgrades. Only SLOW and FAST are named channels an upgrade can
    run against.
    """

    INVALID = "Invalid"
    NONE = "None"
    SLOW = "Slow"
    FAST = "Fast"

    @classmethod
    def parse(cls, value: Optional[str]) -> "RingType":
        """Parse a ring name case-insensitively, unknown values are INVALID."""
        if not value:
            return cls.INVALID

        for ring in cls:
            if ring is not cls.INVALID and ring.value.lower() == value.strip().lower():
                return ring
        return cls.INVALID

    @property
    def is_named_channel(self) -> bool:
        return self in (RingType.SLOW, RingType.FAST)

    def __str__(self) -> str:
        return self.value
