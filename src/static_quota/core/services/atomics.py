from __future__ import annotations

from threading import Lock

from ..domain.enums import QuotaType


class UsageCell:
    """Single-writer cell holding the latest storage usage in bytes.

    `get()` is a plain attribute read and never takes the lock, so the quota
    decision path cannot block behind the sampler. The lock only serializes
    read-modify-write from writers.
    """

    def __init__(self, initial: int = 0) -> None:
        self._value = int(initial)
        self._lock = Lock()

    def get(self) -> int:
        return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = int(value)

    def get_and_set(self, value: int) -> int:
        with self._lock:
            previous = self._value
            self._value = int(value)
            return previous


class ResetFlag:
    """Boolean that is observed as True exactly once per `set()`."""

    def __init__(self) -> None:
        self._value = False
        self._lock = Lock()

    def set(self) -> None:
        with self._lock:
            self._value = True

    def peek(self) -> bool:
        return self._value

    def consume(self) -> bool:
        with self._lock:
            value = self._value
            self._value = False
            return value


class ResetFlags:
    """One ResetFlag per quota type.

    A usage change sets every flag; each quota type consumes only its own, so
    the broker's per-type quota managers each observe the change once.
    """

    def __init__(self) -> None:
        self._flags: dict[QuotaType, ResetFlag] = {qt: ResetFlag() for qt in QuotaType}

    def set_all(self) -> None:
        for flag in self._flags.values():
            flag.set()

    def peek(self, quota_type: QuotaType) -> bool:
        return self._flags[quota_type].peek()

    def consume(self, quota_type: QuotaType) -> bool:
        return self._flags[quota_type].consume()
