from __future__ import annotations

import logging

from ..domain.enums import QuotaType
from ..domain.models import THROTTLED_LIMIT, UNBOUNDED_RATE, QuotaPolicy
from .atomics import ResetFlags, UsageCell

logger = logging.getLogger(__name__)


class QuotaDecider:
    """Computes the limit to enforce for a quota type from the latest storage usage.

    Only PRODUCE is storage-aware. Between the soft and hard thresholds the
    configured produce bound is scaled down linearly; at or beyond the hard
    threshold producers are limited to THROTTLED_LIMIT.
    """

    def __init__(self, usage: UsageCell, reset_flags: ResetFlags, policy: QuotaPolicy | None = None) -> None:
        self._usage = usage
        self._reset_flags = reset_flags
        self._policy = policy or QuotaPolicy.unbounded()

    @property
    def policy(self) -> QuotaPolicy:
        return self._policy

    @property
    def used(self) -> int:
        return self._usage.get()

    def install(self, policy: QuotaPolicy) -> None:
        # Single reference swap: readers see either the old or the new policy.
        self._policy = policy

    def limit(self, quota_type: QuotaType) -> float:
        try:
            return self._decide(self._policy, quota_type, self._usage.get())
        except Exception as e:
            logger.warning(f"Quota decision failed for {quota_type}, falling back to unbounded: {e}")
            return UNBOUNDED_RATE

    def consume_reset_flag(self, quota_type: QuotaType) -> bool:
        return self._reset_flags.consume(quota_type)

    @staticmethod
    def _decide(policy: QuotaPolicy, quota_type: QuotaType, used: int) -> float:
        base = policy.bound_for(quota_type)
        if quota_type is not QuotaType.PRODUCE:
            return base

        soft = policy.thresholds.soft
        hard = policy.thresholds.hard
        # Hard threshold first so soft >= hard never reaches the division below.
        if used >= hard:
            logger.debug(f"Limiting producer rate because disk is full. Used: {used}. Limit: {hard}")
            return THROTTLED_LIMIT
        if used > soft:
            limit = base * (1.0 - (used - soft) / (hard - soft))
            logger.debug(f"Throttling producer rate because disk is beyond soft limit. Used: {used}. Quota: {limit}")
            return limit
        return base
