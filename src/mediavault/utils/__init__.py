"""Small helpers shared across mediavault packages."""

from __future__ import annotations

from datetime import datetime, timezone

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by a non tz-aware driver) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_bytes(size: int, decimals: int = 2) -> str:
    """Render a byte count using 1024-based units, e.g. ``1536 -> '1.5 KB'``."""
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while exponent < len(_SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / 1024**exponent, max(decimals, 0))
    # drop trailing zeros the way a float repr would
    text = f"{value:.{max(decimals, 0)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"


__all__ = ["as_utc", "format_bytes", "utcnow"]
