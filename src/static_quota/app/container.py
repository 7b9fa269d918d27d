from __future__ import annotations

from dependency_injector import containers, providers

from ..core.services.atomics import ResetFlags, UsageCell
from ..core.services.quota_decider import QuotaDecider
from ..core.services.usage_sampler import UsageSampler
from ..infra.disk_usage import DuDiskUsage, WalkDiskUsage


class Container(containers.DeclarativeContainer):
	"""Wiring for one callback instance.

	The usage cell and reset flags are singletons so a reconfigured callback keeps
	the last measured usage. Samplers are built per configuration.
	"""

	config = providers.Configuration()

	disk_usage = providers.Selector(
		config.usage_backend,
		walk=providers.Singleton(WalkDiskUsage),
		du=providers.Singleton(DuDiskUsage),
	)

	usage = providers.Singleton(UsageCell)
	reset_flags = providers.Singleton(ResetFlags)

	decider = providers.Singleton(QuotaDecider, usage=usage, reset_flags=reset_flags)

	# plan is supplied at call time: container.sampler(plan=settings.sampling_plan())
	sampler = providers.Factory(
		UsageSampler,
		disk_usage=disk_usage,
		usage=usage,
		reset_flags=reset_flags,
	)
