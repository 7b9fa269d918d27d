from __future__ import annotations

from ..core.domain.models import UNBOUNDED_RATE


def split_log_dirs(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated directory list, dropping blanks.

    Examples:
        >>> split_log_dirs("/data/a, /data/b,,")
        ('/data/a', '/data/b')
        >>> split_log_dirs("")
        ()
    """
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def format_size(size_bytes: int) -> str:
    """Format size in bytes to human-readable string with appropriate unit.

    Args:
        size_bytes: Size in bytes (must be a valid integer).

    Returns:
        Human-readable size string (e.g., "1.5MB", "512KB").

    Examples:
        >>> format_size(512)
        '512B'
        >>> format_size(1536)
        '1.5KB'
        >>> format_size(1572864)
        '1.5MB'
        >>> format_size(1610612736)
        '1.50GB'
    """
    if size_bytes < 1024:
        return f"{size_bytes}B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f}KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f}MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f}GB"


def format_rate(limit: float) -> str:
    """Render a quota limit, showing the unbounded sentinel as 'unbounded'."""
    if limit >= UNBOUNDED_RATE:
        return "unbounded"
    return f"{limit:.2f}"
