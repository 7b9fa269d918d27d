from __future__ import annotations

import logging
from threading import Event, Lock, Thread
from typing import Optional

from ..domain.errors import SamplerShutdownError
from ..domain.models import SamplingPlan
from ..ports.disk_usage_port import DiskUsagePort
from .atomics import ResetFlags, UsageCell

logger = logging.getLogger(__name__)

THREAD_NAME = "storage-quota-checker"


class UsageSampler:
    """Background thread that re-measures storage usage every plan interval.

    Each pass publishes the measurement into the usage cell and raises every
    quota type's reset flag when the value changed. A failed measurement is logged and
    retried on the next interval; only `stop()` ends the loop.

    Example:
        sampler = UsageSampler(plan, disk_usage=WalkDiskUsage(), usage=UsageCell(), reset_flags=ResetFlags())
        sampler.start()
        ...
        sampler.stop()
    """

    def __init__(
        self,
        plan: SamplingPlan,
        disk_usage: DiskUsagePort,
        usage: UsageCell,
        reset_flags: ResetFlags,
    ) -> None:
        self._plan = plan
        self._disk_usage = disk_usage
        self._usage = usage
        self._reset_flags = reset_flags
        self._stop_event = Event()
        self._thread: Optional[Thread] = None
        self._lock = Lock()

    @property
    def plan(self) -> SamplingPlan:
        return self._plan

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            if not self._plan.enabled:
                logger.info(
                    f"Storage sampling disabled (interval={self._plan.interval_seconds}, "
                    f"dirs={list(self._plan.directories)}, thresholds={self._plan.thresholds})"
                )
                return
            self._stop_event.clear()
            self._thread = Thread(target=self._run, name=THREAD_NAME, daemon=True)
            self._thread.start()
            logger.debug(f"Started {THREAD_NAME} with interval {self._plan.interval_seconds}s")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to exit and join the thread.

        Raises:
            SamplerShutdownError: If the thread is still alive after `timeout` seconds.
        """
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            if thread is None:
                return
            thread.join(timeout)
            if thread.is_alive():
                raise SamplerShutdownError(f"{THREAD_NAME} did not exit within {timeout}s")
            self._thread = None
            logger.debug(f"Stopped {THREAD_NAME}")

    def sample_once(self) -> int:
        """Measure, publish, and flag a reset when usage changed. Returns the new usage."""
        disk_usage = self._disk_usage.measure(self._plan.directories)
        previous = self._usage.get_and_set(disk_usage)
        if disk_usage != previous:
            self._reset_flags.set_all()
        logger.debug(f"Storage usage checked: {disk_usage}")
        return disk_usage

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.sample_once()
            except Exception as e:
                logger.warning(f"Exception in storage checker thread: {e}", exc_info=True)
            if self._stop_event.wait(self._plan.interval_seconds):
                break
