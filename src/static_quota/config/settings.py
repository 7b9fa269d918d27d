from __future__ import annotations

from typing import Any, Mapping

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.domain.enums import QuotaType, UsageBackend
from ..core.domain.models import (
    UNBOUNDED_BYTES,
    UNBOUNDED_RATE,
    QuotaBound,
    QuotaPolicy,
    SamplingPlan,
    StorageThresholds,
)
from ..shared.utils import split_log_dirs
from .properties import PROPERTY_FIELDS


class QuotaSettings(BaseSettings):
    """Static quota configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the STATIC_QUOTA_ prefix.
    For example:
        - STATIC_QUOTA_PRODUCE_QUOTA=1048576
        - STATIC_QUOTA_STORAGE_SOFT=80000000000
        - STATIC_QUOTA_STORAGE_CHECK_INTERVAL=30
        - STATIC_QUOTA_LOG_DIRS=/var/lib/kafka/data-0,/var/lib/kafka/data-1

    The broker hands over its property map instead; use `from_properties`:
        settings = QuotaSettings.from_properties({"client.quota.callback.static.produce": "1024"})
    """

    # Broker property maps carry the whole broker config, so unknown keys are ignored.
    # Enum values are stored as plain strings so the container can select on them.
    model_config = SettingsConfigDict(
        env_prefix="STATIC_QUOTA_",
        case_sensitive=False,
        extra="ignore",
        use_enum_values=True,
    )

    produce_quota: float = Field(
        default=UNBOUNDED_RATE,
        description="Produce bandwidth rate quota (in bytes)",
    )

    fetch_quota: float = Field(
        default=UNBOUNDED_RATE,
        description="Consume bandwidth rate quota (in bytes)",
    )

    request_quota: float = Field(
        default=UNBOUNDED_RATE,
        description="Request processing time quota (in seconds)",
    )

    storage_soft: int = Field(
        default=UNBOUNDED_BYTES,
        description="Storage usage (in bytes) above which producers are throttled linearly",
    )

    storage_hard: int = Field(
        default=UNBOUNDED_BYTES,
        description="Storage usage (in bytes) at which producers are fully throttled",
    )

    storage_check_interval: int = Field(
        default=0,
        description="Interval between storage check runs in seconds (default of 0 means disabled)",
    )

    log_dirs: str = Field(
        default="/tmp/kafka-logs",
        description="Comma-separated broker log directories to measure",
    )

    usage_backend: UsageBackend = Field(
        default=UsageBackend.WALK.value,
        description="How storage usage is measured: 'walk' sums file sizes, 'du' shells out to du -s -B1",
    )

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "QuotaSettings":
        """Build settings from a broker property map. Explicit properties win over env vars."""
        values: dict[str, Any] = {}
        for key, value in properties.items():
            field_name = PROPERTY_FIELDS.get(key)
            if field_name is not None and value is not None:
                values[field_name] = value
        return cls(**values)

    @property
    def directories(self) -> tuple[str, ...]:
        return split_log_dirs(self.log_dirs)

    @property
    def thresholds(self) -> StorageThresholds:
        return StorageThresholds(soft=self.storage_soft, hard=self.storage_hard)

    def quota_policy(self) -> QuotaPolicy:
        return QuotaPolicy(
            bounds={
                QuotaType.PRODUCE: QuotaBound.upper_bound(self.produce_quota),
                QuotaType.FETCH: QuotaBound.upper_bound(self.fetch_quota),
                QuotaType.REQUEST: QuotaBound.upper_bound(self.request_quota),
            },
            thresholds=self.thresholds,
        )

    def sampling_plan(self) -> SamplingPlan:
        return SamplingPlan(
            interval_seconds=self.storage_check_interval,
            directories=self.directories,
            thresholds=self.thresholds,
        )
