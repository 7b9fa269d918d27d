from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from ..domain.enums import QuotaType


class ClientQuotaCallbackPort(Protocol):
    """Surface the broker calls into. Mirrors the broker's client quota callback hooks."""

    def configure(self, properties: Mapping[str, Any]) -> None:
        """(Re)initialize limits and restart the storage sampler."""

    def metric_tags(self, quota_type: QuotaType, principal: Optional[str], client_id: Optional[str]) -> dict[str, str]:
        """Return the metric tags the broker groups quota sensors by."""
        ...

    def limit(self, quota_type: QuotaType, metric_tags: Optional[Mapping[str, str]] = None) -> float:
        """Return the limit to enforce for quota_type. Must not block."""
        ...

    def update_quota(self, quota_type: QuotaType, entity: Any, new_value: float) -> None:
        """Called when a user/client quota changes."""

    def remove_quota(self, quota_type: QuotaType, entity: Any) -> None:
        """Called when a user/client quota is removed."""

    def reset_required(self, quota_type: QuotaType) -> bool:
        """Return True once after the published storage usage has changed."""
        ...

    def update_cluster_metadata(self, cluster: Any) -> bool:
        """Return True if quotas changed because of the new cluster metadata."""
        ...

    def close(self) -> None:
        """Stop background work and release resources."""
