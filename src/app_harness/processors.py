"""structlog processors that render harness log lines.

Every emitted line has the fixed shape::

    2024-01-31 12:00:00 [INFO ] message

The processors in this module turn an event dictionary produced by
:class:`app_harness.logger.Logger` into that string. Exceptions attached via
``exc_info`` are rendered after the line, either with rich or with the
standard library traceback formatter.
"""

import io
import traceback
from typing import Any

import structlog
from rich.console import Console
from rich.traceback import Traceback
from structlog.types import EventDict, ExcInfo, Processor, WrappedLogger

from .log_levels import LogLevel

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TIMESTAMP_UTC = False
TRACEBACK_WIDTH = 100


def create_shared_processors(rich_tracebacks: bool = True) -> list[Processor]:
    """Create the processor chain used by every harness logger.

    Args:
        rich_tracebacks: Render exceptions with rich instead of the plain formatter

    Returns:
        List of structlog processors ending with the line renderer
    """
    exception_formatter = (
        rich_exception_formatter if rich_tracebacks else plain_exception_formatter
    )

    return [
        add_level_label,

        # Local time; the runner switches the process to UTC while an app runs
        structlog.processors.TimeStamper(
            fmt=TIMESTAMP_FORMAT,
            utc=TIMESTAMP_UTC
        ),

        structlog.processors.ExceptionRenderer(exception_formatter),
        render_line,
    ]


def add_level_label(
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict
) -> EventDict:
    """Add the fixed-width ``[LEVEL]`` label for the event's ``level`` key."""
    level = event_dict.get("level")
    name = level.name if isinstance(level, LogLevel) else str(level)
    event_dict["level_label"] = f"[{name:<5.5}]"
    return event_dict


def render_line(
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict
) -> str:
    """Render the final text line, followed by the exception if there is one.

    Returns:
        The line without its trailing newline; the print logger adds it
    """
    line = f"{event_dict['timestamp']} {event_dict['level_label']} {event_dict['event']}"
    exception = event_dict.get("exception")
    if exception:
        line = f"{line}\n{exception.rstrip()}"
    return line


def plain_exception_formatter(exc_info: ExcInfo) -> str:
    """Format an exception with the standard library traceback module."""
    return "".join(traceback.format_exception(*exc_info))


def rich_exception_formatter(exc_info: ExcInfo) -> str:
    """Format an exception with rich, without colors.

    Args:
        exc_info: Exception triple to render

    Returns:
        Rendered traceback text
    """
    sio = io.StringIO()
    console = Console(file=sio, width=TRACEBACK_WIDTH, color_system=None, force_terminal=False)
    console.print(Traceback.from_exception(*exc_info, show_locals=False))
    return sio.getvalue()


def format_message(template: str, args: tuple[Any, ...]) -> str:
    """Apply printf-style arguments to a message template.

    ``None`` arguments render as ``NULL``. A template that does not accept the
    given arguments never raises; the arguments are appended instead.

    Args:
        template:   Message template with ``%`` placeholders
        args:       Positional arguments for the template

    Returns:
        Formatted message
    """
    template = str(template)
    if not args:
        return template

    parsed = tuple("NULL" if arg is None else arg for arg in args)
    try:
        return template % parsed
    except (TypeError, ValueError, KeyError):
        return " ".join([template, *map(str, parsed)])
