from __future__ import annotations

"""static_quota.app.cli
=================================
Command-line interface powered by Typer.

Settings are read from STATIC_QUOTA_* environment variables.

Usage examples
--------------
$ static-quota usage /var/lib/kafka/data            # measure storage once
$ static-quota limit produce --used 900000000       # evaluate the quota decision
$ static-quota watch --interval 5 --iterations 3    # run the sampler and print limits
"""

import logging
import time
from enum import Enum
from typing import Optional

import typer
from typing_extensions import Annotated

from .callback import StaticQuotaCallback
from ..config.settings import QuotaSettings
from ..core.domain.enums import QuotaType, UsageBackend
from ..core.services.atomics import ResetFlags, UsageCell
from ..core.services.quota_decider import QuotaDecider
from ..infra.disk_usage import DuDiskUsage, WalkDiskUsage
from ..shared.utils import format_rate, format_size

app = typer.Typer(add_completion=False, help="Static broker quotas with storage-aware produce throttling")


class LogLevel(str, Enum):
    OFF = "OFF"
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


@app.callback()
def main(
    log_level: Annotated[
        Optional[LogLevel],
        typer.Option(
            "--log-level",
            help="Set log level (OFF, CRITICAL, ERROR, WARNING, INFO, DEBUG). Default: OFF",
        ),
    ] = None,
) -> None:
    """Root command callback to configure logging if requested."""
    if log_level in (None, LogLevel.OFF):
        return

    level = logging.getLevelName(log_level.value)
    if not isinstance(level, int):
        level = logging.INFO

    package_name = __package__.split(".", 1)[0] if __package__ else "static_quota"
    logger = logging.getLogger(package_name)

    has_stream = any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
    if not has_stream:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    logger.propagate = False
    logger.setLevel(level)


@app.command(help="Measure storage used under DIRS once and print it.")
def usage(
    dirs: list[str] = typer.Argument(..., help="Directories to measure", metavar="DIR"),
    backend: UsageBackend = typer.Option(UsageBackend.WALK, help="Measurement backend"),
) -> None:
    disk_usage = DuDiskUsage() if backend is UsageBackend.DU else WalkDiskUsage()
    used = disk_usage.measure(dirs)
    typer.echo(f"Used: {used} bytes ({format_size(used)})")


@app.command(help="Print the limit enforced for TYPE (produce, fetch, request) at the given storage usage.")
def limit(
    quota_type: str = typer.Argument(..., metavar="TYPE", help="Quota type: produce, fetch or request"),
    used: int = typer.Option(0, "--used", help="Storage usage in bytes"),
    soft: Optional[int] = typer.Option(None, "--soft", help="Override the soft storage threshold"),
    hard: Optional[int] = typer.Option(None, "--hard", help="Override the hard storage threshold"),
) -> None:
    qt = QuotaType.from_str(quota_type)
    if qt is None:
        typer.echo(f"Unknown quota type: {quota_type}", err=True)
        raise typer.Exit(code=1)

    overrides = {}
    if soft is not None:
        overrides["storage_soft"] = soft
    if hard is not None:
        overrides["storage_hard"] = hard
    settings = QuotaSettings(**overrides)

    decider = QuotaDecider(UsageCell(used), ResetFlags(), settings.quota_policy())
    typer.echo(f"{qt.name}: {format_rate(decider.limit(qt))}")


@app.command(help="Run the storage sampler with settings from the environment and print limits.")
def watch(
    interval: int = typer.Option(5, min=1, help="Storage check interval in seconds"),
    iterations: int = typer.Option(0, min=0, help="Stop after this many reports (0 runs until interrupted)"),
) -> None:
    settings = QuotaSettings(storage_check_interval=interval)
    with StaticQuotaCallback() as callback:
        callback.apply_settings(settings)
        if callback.sampler is None or not callback.sampler.is_running:
            typer.echo("Storage sampling is disabled for the current settings", err=True)
            raise typer.Exit(code=1)

        count = 0
        try:
            while iterations == 0 or count < iterations:
                time.sleep(interval)
                count += 1
                used = callback.storage_used
                limits = ", ".join(f"{qt.name}={format_rate(callback.limit(qt))}" for qt in QuotaType)
                reset = callback.reset_required(QuotaType.PRODUCE)
                typer.echo(f"used={used} ({format_size(used)}) {limits} reset={reset}")
        except KeyboardInterrupt:
            typer.echo("Interrupted")
