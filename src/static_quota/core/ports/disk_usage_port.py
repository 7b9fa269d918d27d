from __future__ import annotations

from typing import Protocol, Sequence


class DiskUsagePort(Protocol):
    def measure(self, directories: Sequence[str]) -> int:
        """Return total bytes used under directories. Missing directories count as 0."""
        ...
