from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Mapping, Optional

from .container import Container
from ..config.settings import QuotaSettings
from ..core.domain.enums import CallbackState, QuotaType
from ..core.domain.errors import CallbackStateError
from ..core.domain.models import UNBOUNDED_RATE
from ..core.ports.quota_callback_port import ClientQuotaCallbackPort
from ..core.services.usage_sampler import UsageSampler

logger = logging.getLogger(__name__)


class StaticQuotaCallback(ClientQuotaCallbackPort):
    """Broker quota callback with static per-type limits and storage-aware produce throttling.

    Lifecycle: UNCONFIGURED -> RUNNING -> STOPPED. `configure()` is valid while
    UNCONFIGURED or RUNNING (a running callback is stopped and restarted with the
    new settings). `close()` moves to STOPPED from any state. `metric_tags`,
    `update_quota`, `remove_quota` and `update_cluster_metadata` read no
    lifecycle state and answer the same in every state.

    Example:
        callback = StaticQuotaCallback()
        callback.configure({
            "client.quota.callback.static.produce": "1048576",
            "client.quota.callback.static.storage.soft": "800000000",
            "client.quota.callback.static.storage.hard": "1000000000",
            "client.quota.callback.static.storage.check-interval": "30",
            "log.dirs": "/var/lib/kafka/data",
        })
        callback.limit(QuotaType.PRODUCE)
        callback.close()

        # Using context manager
        with StaticQuotaCallback() as callback:
            callback.configure(props)
    """

    def __init__(self, *, stop_timeout: Optional[float] = None) -> None:
        """Create an unconfigured callback.

        Args:
            stop_timeout: Seconds to wait for the sampler thread on close/reconfigure.
                         None waits indefinitely.
        """
        self._container = Container()
        self._decider = self._container.decider()
        self._sampler: Optional[UsageSampler] = None
        self._settings: Optional[QuotaSettings] = None
        self._state = CallbackState.UNCONFIGURED
        self._stop_timeout = stop_timeout
        self._lifecycle_lock = RLock()

    @property
    def state(self) -> CallbackState:
        return self._state

    @property
    def settings(self) -> Optional[QuotaSettings]:
        return self._settings

    @property
    def sampler(self) -> Optional[UsageSampler]:
        return self._sampler

    @property
    def storage_used(self) -> int:
        """Latest published storage usage in bytes."""
        return self._decider.used

    def configure(self, properties: Mapping[str, Any]) -> None:
        """Apply broker properties and (re)start storage sampling.

        Raises:
            CallbackStateError: If the callback was already closed.
            pydantic.ValidationError: If a property value cannot be parsed.
            SamplerShutdownError: If the previous sampler did not stop.
        """
        settings = QuotaSettings.from_properties(properties)
        self.apply_settings(settings)

    def apply_settings(self, settings: QuotaSettings) -> None:
        with self._lifecycle_lock:
            if self._state is CallbackState.STOPPED:
                raise CallbackStateError("Cannot configure a closed quota callback")

            # Old loop must be gone before the new thresholds become visible.
            self._stop_sampler()

            self._container.config.from_pydantic(settings)
            policy = settings.quota_policy()
            self._decider.install(policy)
            self._settings = settings

            self._sampler = self._container.sampler(plan=settings.sampling_plan())
            self._sampler.start()
            self._state = CallbackState.RUNNING

            logger.info(
                f"Configured quota callback with {dict((t.name, b.bound) for t, b in policy.bounds.items())}. "
                f"Storage quota (soft, hard): ({settings.storage_soft}, {settings.storage_hard}). "
                f"Storage check interval: {settings.storage_check_interval}"
            )

    def metric_tags(self, quota_type: QuotaType, principal: Optional[str], client_id: Optional[str]) -> dict[str, str]:
        return {"quota.type": quota_type.name}

    def limit(self, quota_type: QuotaType, metric_tags: Optional[Mapping[str, str]] = None) -> float:
        if self._state is not CallbackState.RUNNING:
            logger.debug(f"Quota limit requested while {self._state.name}; returning unbounded")
            return UNBOUNDED_RATE
        return self._decider.limit(quota_type)

    def update_quota(self, quota_type: QuotaType, entity: Any, new_value: float) -> None:
        # Unused: this callback does not track user or client id entities.
        pass

    def remove_quota(self, quota_type: QuotaType, entity: Any) -> None:
        # Unused: this callback does not track user or client id entities.
        pass

    def reset_required(self, quota_type: QuotaType) -> bool:
        if self._state is not CallbackState.RUNNING:
            raise CallbackStateError(f"reset_required is not valid while {self._state.name}")
        return self._decider.consume_reset_flag(quota_type)

    def update_cluster_metadata(self, cluster: Any) -> bool:
        return False

    def close(self) -> None:
        """Stop the sampler thread. Idempotent.

        Raises:
            SamplerShutdownError: If the sampler thread did not exit within stop_timeout.
        """
        with self._lifecycle_lock:
            if self._state is CallbackState.STOPPED:
                return
            self._stop_sampler()
            self._state = CallbackState.STOPPED
            logger.debug("Quota callback closed")

    def _stop_sampler(self) -> None:
        if self._sampler is None:
            return
        self._sampler.stop(self._stop_timeout)
        self._sampler = None

    def __enter__(self) -> StaticQuotaCallback:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
