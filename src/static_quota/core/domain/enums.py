from __future__ import annotations

from enum import Enum
from typing import Optional


class QuotaType(Enum):
    PRODUCE = "PRODUCE"
    FETCH = "FETCH"
    REQUEST = "REQUEST"

    @classmethod
    def from_str(cls, value: str) -> Optional["QuotaType"]:
        """Parse a quota type label (case-insensitive). Returns None when unknown."""
        s = value.strip().upper()
        if not s:
            return None
        try:
            return cls(s)
        except ValueError:
            return None


class CallbackState(Enum):
    UNCONFIGURED = "UNCONFIGURED"
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"


class UsageBackend(str, Enum):
    WALK = "walk"
    DU = "du"
