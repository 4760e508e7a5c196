"""Log level definitions and name lookup."""

from enum import IntEnum
from typing import Final


class LogLevel(IntEnum):
    """Logging levels ordered by priority (lower value = more important).

    The values 3, 5 and 7 are intentionally unused.
    """

    FATAL = 1
    ERROR = 2
    WARN = 4
    INFO = 6
    DEBUG = 8
    TRACE = 9


DEFAULT_LOG_LEVEL: Final = LogLevel.DEBUG

LEVELS_BY_NAME: Final[dict[str, LogLevel]] = {level.name: level for level in LogLevel}


def parse_log_level(value: "str | LogLevel | None") -> LogLevel | None:
    """Look up a log level by name.

    Args:
        value: Level name (case-insensitive) or an existing LogLevel

    Returns:
        The matching LogLevel, or None if the value does not name a level
    """
    if isinstance(value, LogLevel):
        return value
    if not isinstance(value, str):
        return None
    return LEVELS_BY_NAME.get(value.strip().upper())
