from __future__ import annotations

import sys
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .enums import QuotaType

UNBOUNDED_RATE: float = sys.float_info.max
UNBOUNDED_BYTES: int = 2**63 - 1
# Lowest rate handed to the broker once storage is full; zero is not a valid quota bound.
THROTTLED_LIMIT: float = 1.0


@dataclass(frozen=True)
class QuotaBound:
    bound: float = UNBOUNDED_RATE

    @staticmethod
    def upper_bound(value: float) -> "QuotaBound":
        return QuotaBound(bound=float(value))

    @staticmethod
    def unbounded() -> "QuotaBound":
        return QuotaBound()


@dataclass(frozen=True)
class StorageThresholds:
    soft: int = UNBOUNDED_BYTES
    hard: int = UNBOUNDED_BYTES

    @property
    def is_bounded(self) -> bool:
        return self.soft > 0 and self.hard > 0


@dataclass(frozen=True)
class QuotaPolicy:
    """Everything the decision path reads, replaced as one object on reconfiguration."""

    bounds: Mapping[QuotaType, QuotaBound] = field(default_factory=dict)
    thresholds: StorageThresholds = field(default_factory=StorageThresholds)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bounds", MappingProxyType(dict(self.bounds)))

    def bound_for(self, quota_type: QuotaType) -> float:
        return self.bounds.get(quota_type, QuotaBound.unbounded()).bound

    @staticmethod
    def unbounded() -> "QuotaPolicy":
        return QuotaPolicy()


@dataclass(frozen=True)
class SamplingPlan:
    interval_seconds: int = 0
    directories: tuple[str, ...] = ()
    thresholds: StorageThresholds = field(default_factory=StorageThresholds)

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0 and self.thresholds.is_bounded and len(self.directories) > 0
