"""Display formatting for sizes and dates.

Formatting never raises; callers get an empty string when a value is missing.
"""

from __future__ import annotations

from datetime import datetime

DATE_FMT = "%b %d, %Y"
DATETIME_FMT = "%b %d, %Y %H:%M"

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_file_size(num_bytes: int | None) -> str:
    """Format a byte count like `1.5 MB`, rounded to two decimals."""
    size = float(num_bytes or 0)
    if size <= 0:
        return "0 Bytes"
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{round(size, 2):g} {_SIZE_UNITS[unit]}"


def format_date(dt: datetime | None) -> str:
    """Format a date for display; empty string when None."""
    try:
        return dt.strftime(DATE_FMT) if dt else ""
    except (ValueError, TypeError, AttributeError):
        return ""


def format_datetime(dt: datetime | None) -> str:
    try:
        return dt.strftime(DATETIME_FMT) if dt else ""
    except (ValueError, TypeError, AttributeError):
        return ""
