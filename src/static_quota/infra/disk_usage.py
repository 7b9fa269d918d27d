from __future__ import annotations

import logging
import os
import subprocess
from typing import Sequence

from ..core.domain.errors import DiskUsageError
from ..core.ports.disk_usage_port import DiskUsagePort

logger = logging.getLogger(__name__)


class WalkDiskUsage(DiskUsagePort):
    """Sums apparent file sizes by walking each directory with os.scandir.

    Symlinks are not followed. Entries that disappear while walking (log
    segments deleted by retention, for instance) or cannot be read contribute
    0 bytes; the rest of the tree is still counted.
    """

    def measure(self, directories: Sequence[str]) -> int:
        return sum(self._directory_size(d) for d in directories)

    def _directory_size(self, path: str) -> int:
        total = 0
        stack = [path]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except (FileNotFoundError, NotADirectoryError):
                logger.debug(f"Skipping missing directory: {current}")
                continue
            except OSError as e:
                logger.warning(f"Skipping unreadable directory {current}: {e}")
                continue
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        stack.append(entry.path)
                    elif entry.is_file(follow_symlinks=False):
                        total += entry.stat(follow_symlinks=False).st_size
                except FileNotFoundError:
                    continue
                except OSError as e:
                    logger.warning(f"Skipping unreadable entry {entry.path}: {e}")
                    continue
        return total


class DuDiskUsage(DiskUsagePort):
    """Measures usage with `du -s -B1`, summing the byte column of each output line.

    Reports allocated blocks rather than apparent sizes, like the broker's
    own tooling. Nonexistent directories are dropped before invoking du.
    """

    def __init__(self, executable: str = "du", timeout: float | None = 60.0) -> None:
        self._executable = executable
        self._timeout = timeout

    def measure(self, directories: Sequence[str]) -> int:
        existing = [d for d in directories if os.path.isdir(d)]
        if not existing:
            return 0
        try:
            cp = subprocess.run(
                [self._executable, "-s", "-B1", *existing],
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise DiskUsageError(f"Failed to run {self._executable}: {e}") from e
        if cp.returncode != 0:
            if not cp.stdout.strip():
                raise DiskUsageError(f"{self._executable} exited with {cp.returncode}: {cp.stderr.strip()}")
            # du exits non-zero when a file vanishes mid-scan; keep whatever it printed.
            logger.debug(f"{self._executable} exited with {cp.returncode}: {cp.stderr.strip()}")
        return self._parse(cp.stdout)

    @staticmethod
    def _parse(stdout: str) -> int:
        total = 0
        for line in stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                total += int(line.split()[0])
            except ValueError as e:
                raise DiskUsageError(f"Unexpected du output line: {line!r}") from e
        return total
