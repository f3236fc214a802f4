"""Utility functions for FolderSync."""

import calendar
from datetime import datetime

# =============================================================================
# Constants
# =============================================================================

# Date format for versioned backups, in .NET custom date format notation
DEFAULT_DATE_FORMAT: str = "yyyyMMddhhmmss"

# Characters that start a date token in .NET custom date formats
_DATE_TOKEN_CHARS = "yMdHhmsft"


# =============================================================================
# Timestamp formatting utilities
# =============================================================================


def _format_token(dt: datetime, char: str, count: int) -> str:
    """Format a single run of identical token characters.

    Args:
        dt: Datetime to format
        char: Token character (one of ``yMdHhmsft``)
        count: Length of the run

    Returns:
        Formatted token value
    """
    if char == "y":
        if count == 1:
            return str(dt.year % 100)
        if count == 2:
            return f"{dt.year % 100:02d}"
        return str(dt.year).zfill(count)
    if char == "M":
        if count == 1:
            return str(dt.month)
        if count == 2:
            return f"{dt.month:02d}"
        if count == 3:
            return calendar.month_abbr[dt.month]
        return calendar.month_name[dt.month]
    if char == "d":
        if count == 1:
            return str(dt.day)
        if count == 2:
            return f"{dt.day:02d}"
        if count == 3:
            return calendar.day_abbr[dt.weekday()]
        return calendar.day_name[dt.weekday()]
    if char == "t":
        designator = "AM" if dt.hour < 12 else "PM"
        return designator[0] if count == 1 else designator
    if char == "f":
        digits = f"{dt.microsecond:06d}0"
        return digits[: min(count, 7)]

    if char == "H":
        value = dt.hour
    elif char == "h":
        value = dt.hour % 12 or 12
    elif char == "m":
        value = dt.minute
    else:
        value = dt.second
    return str(value) if count == 1 else f"{value:02d}"


def format_timestamp(dt: datetime, fmt: str) -> str:
    """Format a datetime using a .NET-style custom date format.

    Runs of ``y M d H h m s f t`` are date tokens (``hh`` is the 12-hour
    clock, ``HH`` the 24-hour clock). Text in single or double quotes and
    characters escaped with a backslash are copied literally, as is every
    other character. A format containing ``%`` is treated as a ``strftime``
    format instead.

    Args:
        dt: Datetime to format
        fmt: Format string

    Returns:
        Formatted timestamp

    Examples:
        >>> format_timestamp(datetime(2024, 3, 5, 14, 7, 9), "yyyyMMddHHmmss")
        '20240305140709'
        >>> format_timestamp(datetime(2024, 3, 5, 14, 7, 9), "yyyyMMddhhmmss")
        '20240305020709'
        >>> format_timestamp(datetime(2024, 3, 5, 14, 7, 9), "%Y-%m-%d")
        '2024-03-05'
    """
    if "%" in fmt:
        return dt.strftime(fmt)

    parts: list[str] = []
    i = 0
    while i < len(fmt):
        char = fmt[i]

        if char == "\\" and i + 1 < len(fmt):
            parts.append(fmt[i + 1])
            i += 2
            continue

        if char in ("'", '"'):
            end = fmt.find(char, i + 1)
            if end == -1:
                end = len(fmt)
            parts.append(fmt[i + 1 : end])
            i = end + 1
            continue

        if char in _DATE_TOKEN_CHARS:
            run_end = i
            while run_end < len(fmt) and fmt[run_end] == char:
                run_end += 1
            parts.append(_format_token(dt, char, run_end - i))
            i = run_end
            continue

        parts.append(char)
        i += 1

    return "".join(parts)


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
