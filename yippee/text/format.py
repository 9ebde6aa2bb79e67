"""Small text formatting helpers: names, sizes and dates."""

from __future__ import annotations

import struct
from collections.abc import Iterable
from datetime import datetime

_SIZE_UNITS = ("", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi", "Yi")
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def split_db_from_name(pkg: str) -> tuple[str, str]:
    """Split ``db/package`` into ``(db, package)``; ``db`` is empty if absent."""
    db, sep, name = pkg.partition("/")
    if sep:
        return db, name
    return "", db


def _lower(char: str) -> str:
    lowered = char.lower()
    return lowered if len(lowered) == 1 else char


def less_runes(first: Iterable[str] | None, second: Iterable[str] | None) -> bool:
    """Return True if ``first`` sorts before ``second``, ignoring case first."""
    left = list(first or ())
    right = list(second or ())

    for a, b in zip(left, right):
        lower_a, lower_b = _lower(a), _lower(b)
        if lower_a != lower_b:
            return lower_a < lower_b
        # Same letter ignoring case: fall back to the original characters.
        if a != b:
            return a < b

    return len(left) < len(right)


def _float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def human(size: int) -> str:
    """Format a byte count with binary unit prefixes, e.g. ``1.5 KiB``."""
    value = _float32(float(size))
    for unit in _SIZE_UNITS:
        if value < 1024:
            return f"{value:.1f} {unit}B"
        value /= 1024
    return f"{size}B"


def format_time(timestamp: int) -> str:
    """Format a unix timestamp as a local ISO 8601 date (yyyy-mm-dd)."""
    return datetime.fromtimestamp(int(timestamp)).strftime("%Y-%m-%d")


def format_time_query(timestamp: int) -> str:
    """Format a unix timestamp as e.g. ``Mon 02 Jan 2006 03:04:05 PM MST``."""
    moment = datetime.fromtimestamp(int(timestamp)).astimezone()
    hour12 = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{_WEEKDAYS[moment.weekday()]} {moment.day:02d} "
        f"{_MONTHS[moment.month - 1]} {moment.year:04d} "
        f"{hour12:02d}:{moment.minute:02d}:{moment.second:02d} "
        f"{meridiem} {moment.tzname()}"
    )