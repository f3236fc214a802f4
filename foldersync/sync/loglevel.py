"""Log level mask selecting which sync events are emitted."""

from enum import IntFlag
from typing import Union


class LogLevel(IntFlag):
    """Event categories, usable as a bit mask.

    Each member is both the category of a LogEvent and a bit in the mask
    stored on a SyncJob.
    """

    NONE = 0
    ERROR = 1 << 0
    DIRECTORY = 1 << 1
    FILE = 1 << 2
    FINISHED = 1 << 3
    FILE_DELETED = 1 << 4
    DIRECTORY_DELETED = 1 << 5


DEFAULT_LOG_LEVEL = LogLevel.ERROR | LogLevel.FINISHED

ALL_LOG_LEVELS = (
    LogLevel.ERROR
    | LogLevel.DIRECTORY
    | LogLevel.FILE
    | LogLevel.FINISHED
    | LogLevel.FILE_DELETED
    | LogLevel.DIRECTORY_DELETED
)

# Names accepted by parse_log_level besides the member names
_ALIASES = {
    "dir": LogLevel.DIRECTORY,
    "directories": LogLevel.DIRECTORY,
    "files": LogLevel.FILE,
    "errors": LogLevel.ERROR,
    "deleted": LogLevel.FILE_DELETED | LogLevel.DIRECTORY_DELETED,
    "all": ALL_LOG_LEVELS,
    "default": DEFAULT_LOG_LEVEL,
}


def is_enabled(mask: int, category: LogLevel) -> bool:
    """Check whether a category is enabled in a log level mask."""
    return bool(mask & category)


def parse_log_level(value: Union[int, str]) -> LogLevel:
    """Parse a log level mask.

    Args:
        value: An integer mask, a decimal string, or a comma separated list
            of category names such as "error,file,finished"

    Returns:
        LogLevel mask

    Raises:
        ValueError: If a name is unknown or the mask has unknown bits

    Examples:
        >>> parse_log_level("error,finished") == DEFAULT_LOG_LEVEL
        True
        >>> parse_log_level(9) == DEFAULT_LOG_LEVEL
        True
    """
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())

    if isinstance(value, int):
        if value < 0 or value & ~int(ALL_LOG_LEVELS):
            raise ValueError(f"Invalid log level mask: {value}")
        return LogLevel(value)

    mask = LogLevel.NONE
    for name in value.split(","):
        key = name.strip().lower().replace("-", "_")
        if not key:
            continue
        if key in _ALIASES:
            mask |= _ALIASES[key]
            continue
        try:
            mask |= LogLevel[key.upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {name.strip()!r}") from None
    return mask


def describe_log_level(mask: int) -> str:
    """Describe a mask as comma separated category names.

    Examples:
        >>> describe_log_level(9)
        'error,finished'
    """
    names = [
        level.name.lower()
        for level in LogLevel
        if level and level & ALL_LOG_LEVELS and mask & level and level.name
    ]
    return ",".join(names) if names else "none"
