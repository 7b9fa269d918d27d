from __future__ import annotations


class QuotaCallbackError(Exception):
    """Base class for errors raised by the quota callback."""


class CallbackStateError(QuotaCallbackError):
    """Operation is not valid in the callback's current lifecycle state."""


class SamplerShutdownError(QuotaCallbackError):
    """The storage sampler thread did not exit when asked to stop."""


class DiskUsageError(QuotaCallbackError):
    """A disk usage measurement could not be completed."""
