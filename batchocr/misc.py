"""Miscellaneous helpers for the pipeline."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo

TimeZoneLike = str | tzinfo

_STATE: dict[str, tzinfo] = {"tz": UTC}


def _coerce_timezone(tz: TimeZoneLike) -> tzinfo:
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def set_default_timezone(tz: TimeZoneLike) -> None:
    """Set the default timezone used by tz_now."""
    _STATE["tz"] = _coerce_timezone(tz)


def tz_now() -> datetime:
    """Return the current time in the default timezone."""
    return datetime.now(_STATE["tz"])


def format_bytes(num_bytes: int) -> str:
    """Format a byte count with a binary unit.

    Example:
        >>> format_bytes(512)
        '512 B'
        >>> format_bytes(1536)
        '1.5 KB'
        >>> format_bytes(3 * 1024 * 1024)
        '3.0 MB'
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    if num_bytes < 1024 * 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.1f} MB"
    return f"{num_bytes / (1024 * 1024 * 1024):.1f} GB"


def format_duration(seconds: float) -> str:
    """Format seconds as ``1h 05m``, ``2m 09s`` or ``42s``."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes:02d}m"
    if minutes > 0:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"
