from __future__ import annotations

import threading
import time
from typing import Sequence

import pytest

from static_quota.core.domain.errors import SamplerShutdownError
from static_quota.core.domain.models import SamplingPlan, StorageThresholds
from static_quota.core.ports.disk_usage_port import DiskUsagePort
from static_quota.core.domain.enums import QuotaType
from static_quota.core.services.atomics import ResetFlags, UsageCell
from static_quota.core.services.usage_sampler import THREAD_NAME, UsageSampler


class ScriptedDiskUsage(DiskUsagePort):
    """Returns scripted measurements in order, repeating the last one. Exceptions are raised."""

    def __init__(self, script: list) -> None:
        self._script = list(script)
        self.calls: list[tuple[str, ...]] = []

    def measure(self, directories: Sequence[str]) -> int:
        self.calls.append(tuple(directories))
        item = self._script.pop(0) if len(self._script) > 1 else self._script[0]
        if isinstance(item, Exception):
            raise item
        return item


def make_sampler(script: list, interval: int = 1, dirs: tuple[str, ...] = ("/data",)):
    usage = UsageCell()
    flags = ResetFlags()
    port = ScriptedDiskUsage(script)
    plan = SamplingPlan(interval_seconds=interval, directories=dirs, thresholds=StorageThresholds(100, 200))
    return UsageSampler(plan, disk_usage=port, usage=usage, reset_flags=flags), port, usage, flags


def sampler_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name == THREAD_NAME]


def test_sample_once_publishes_and_flags_change():
    sampler, port, usage, flags = make_sampler([60])
    assert sampler.sample_once() == 60
    assert usage.get() == 60
    assert flags.consume(QuotaType.PRODUCE) is True
    assert port.calls == [("/data",)]


def test_identical_measurement_does_not_flag_again():
    sampler, _, usage, flags = make_sampler([60, 60, 75])
    sampler.sample_once()
    assert flags.consume(QuotaType.PRODUCE) is True
    sampler.sample_once()
    assert flags.consume(QuotaType.PRODUCE) is False
    sampler.sample_once()
    assert usage.get() == 75
    assert flags.consume(QuotaType.PRODUCE) is True
    assert flags.consume(QuotaType.PRODUCE) is False


def test_unchanged_zero_usage_does_not_flag():
    sampler, _, _, flags = make_sampler([0])
    sampler.sample_once()
    assert flags.consume(QuotaType.PRODUCE) is False


def test_start_runs_first_measurement_immediately(wait_until):
    sampler, _, usage, _ = make_sampler([123], interval=60)
    sampler.start()
    try:
        assert wait_until(lambda: usage.get() == 123)
        assert sampler.is_running
    finally:
        sampler.stop()
    assert not sampler.is_running


def test_start_is_idempotent():
    sampler, _, _, _ = make_sampler([1], interval=60)
    sampler.start()
    try:
        first = sampler_threads()
        sampler.start()
        assert sampler_threads() == first
        assert len(first) == 1
    finally:
        sampler.stop()
    assert sampler_threads() == []


def test_stop_interrupts_interval_wait_promptly():
    sampler, _, _, _ = make_sampler([1], interval=3600)
    sampler.start()
    start = time.monotonic()
    sampler.stop()
    assert time.monotonic() - start < 2.0
    assert sampler_threads() == []


def test_start_then_immediate_stop_leaves_no_thread():
    for _ in range(20):
        sampler, _, _, _ = make_sampler([1], interval=60)
        sampler.start()
        sampler.stop()
        assert not sampler.is_running
    assert sampler_threads() == []


def test_stop_without_start_is_noop():
    sampler, port, _, _ = make_sampler([1])
    sampler.stop()
    sampler.stop()
    assert port.calls == []


def test_failed_measurement_does_not_kill_loop(wait_until):
    sampler, port, usage, flags = make_sampler([OSError("disk gone"), 42], interval=1)
    sampler.start()
    try:
        assert wait_until(lambda: usage.get() == 42, timeout=5.0)
        assert sampler.is_running
        assert flags.consume(QuotaType.PRODUCE) is True
    finally:
        sampler.stop()
    assert len(port.calls) >= 2


@pytest.mark.parametrize(
    "plan",
    [
        SamplingPlan(interval_seconds=0, directories=("/data",)),
        SamplingPlan(interval_seconds=5, directories=()),
        SamplingPlan(interval_seconds=5, directories=("/data",), thresholds=StorageThresholds(0, 0)),
    ],
)
def test_disabled_plan_does_no_work(plan):
    port = ScriptedDiskUsage([7])
    sampler = UsageSampler(plan, disk_usage=port, usage=UsageCell(), reset_flags=ResetFlags())
    sampler.start()
    assert not sampler.is_running
    sampler.stop()
    assert port.calls == []


def test_sampler_can_restart_after_stop(wait_until):
    sampler, _, usage, _ = make_sampler([5, 9], interval=60)
    sampler.start()
    assert wait_until(lambda: usage.get() == 5)
    sampler.stop()
    sampler.start()
    try:
        assert wait_until(lambda: usage.get() == 9)
    finally:
        sampler.stop()


def test_stop_raises_when_thread_does_not_exit():
    release = threading.Event()
    entered = threading.Event()

    class BlockingDiskUsage(DiskUsagePort):
        def measure(self, directories: Sequence[str]) -> int:
            entered.set()
            release.wait(10)
            return 0

    plan = SamplingPlan(interval_seconds=1, directories=("/data",), thresholds=StorageThresholds(1, 2))
    sampler = UsageSampler(plan, disk_usage=BlockingDiskUsage(), usage=UsageCell(), reset_flags=ResetFlags())
    sampler.start()
    assert entered.wait(5)
    with pytest.raises(SamplerShutdownError):
        sampler.stop(timeout=0.05)
    release.set()
    sampler.stop()
    assert not sampler.is_running


def test_change_raises_flag_for_every_quota_type():
    sampler, _, _, flags = make_sampler([60])
    sampler.sample_once()
    for qt in QuotaType:
        assert flags.consume(qt) is True
        assert flags.consume(qt) is False
