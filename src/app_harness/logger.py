"""Level-gated logger shared by every harness component.

The logger is an explicitly constructed instance: the runner builds one and
hands it to the configuration resolver, the artifact gateway and the notifier.
Its threshold is resolved once when it is created and only changes through an
explicit call to :meth:`Logger.init`.

Threshold resolution order:
    1. ``LOG_LEVEL_SDK`` from the environment, if it names a level
    2. The explicit level given by the caller, if it names a level
    3. ``DEBUG``

Invalid names are reported as warnings and skipped; resolution never fails.
"""

import os
from collections.abc import Mapping
from typing import IO, Any, Final

import structlog

from .log_levels import DEFAULT_LOG_LEVEL, LogLevel, parse_log_level
from .processors import create_shared_processors, format_message

LOG_LEVEL_ENV_VAR: Final = "LOG_LEVEL_SDK"


class Logger:
    """Writes ``<timestamp> [<LEVEL>] <message>`` lines to stdout.

    Attributes:
        _environ:           Environment used for the threshold override
        _stream:            Output stream, the current sys.stdout when None
        _rich_tracebacks:   Render exceptions with rich
        _threshold:         Most verbose level currently emitted
    """

    def __init__(
            self,
            explicit_level: "LogLevel | str | None" = None,
            *,
            environ: Mapping[str, str] | None = None,
            stream: IO[str] | None = None,
            rich_tracebacks: bool = True
    ) -> None:
        """Create a logger and resolve its threshold.

        Args:
            explicit_level:     Level to use when the environment does not override it
            environ:            Environment mapping (defaults to os.environ)
            stream:             Output stream (defaults to sys.stdout at emission time)
            rich_tracebacks:    Render exceptions with rich instead of plain tracebacks
        """
        self._environ = os.environ if environ is None else environ
        self._stream = stream
        self._rich_tracebacks = rich_tracebacks
        self._threshold = DEFAULT_LOG_LEVEL
        self._logger: Any = None
        self.init(explicit_level)

    @property
    def threshold(self) -> LogLevel:
        """Most verbose level currently emitted."""
        return self._threshold

    def init(self, explicit_level: "LogLevel | str | None" = None) -> None:
        """(Re)initialize the threshold and the output pipeline.

        Args:
            explicit_level: Level to use when the environment does not override it
        """
        # None prints to whatever sys.stdout is when a line is emitted
        self._logger = structlog.wrap_logger(
            structlog.PrintLogger(self._stream),
            processors=create_shared_processors(self._rich_tracebacks),
            wrapper_class=structlog.BoundLogger,
            context_class=dict,
        )

        candidates = (
            (LOG_LEVEL_ENV_VAR, self._environ.get(LOG_LEVEL_ENV_VAR)),
            ("log level", explicit_level),
        )
        self._threshold = DEFAULT_LOG_LEVEL
        rejected = []
        for source, value in candidates:
            if value is None:
                continue
            if (level := parse_log_level(value)) is not None:
                self._threshold = level
                break
            rejected.append((source, value))

        for source, value in rejected:
            self.warn("Invalid %s value '%s', ignoring it", source, value)
        self.info("logger configured w/ threshold %s", self._threshold.name)

    def is_enabled_for(self, level: LogLevel) -> bool:
        """Check whether a message at ``level`` would be emitted."""
        return level <= self._threshold

    def log(self, level: LogLevel, template: str, *args: Any, exc_info: Any = None) -> None:
        """Emit a message if ``level`` passes the threshold.

        Args:
            level:      Level of the message
            template:   printf-style message template
            *args:      Template arguments, None renders as NULL
            exc_info:   Optional exception (or True for the current one) to render
        """
        if not self.is_enabled_for(level):
            return

        message = format_message(template, args)
        self._logger.msg(message, level=level, exc_info=exc_info)

    def trace(self, template: str, *args: Any) -> None:
        self.log(LogLevel.TRACE, template, *args)

    def debug(self, template: str, *args: Any) -> None:
        self.log(LogLevel.DEBUG, template, *args)

    def info(self, template: str, *args: Any) -> None:
        self.log(LogLevel.INFO, template, *args)

    def warn(self, template: str, *args: Any) -> None:
        self.log(LogLevel.WARN, template, *args)

    def error(self, template: str, *args: Any, exc_info: Any = None) -> None:
        self.log(LogLevel.ERROR, template, *args, exc_info=exc_info)

    def fatal(self, template: str, *args: Any, exc_info: Any = None) -> None:
        self.log(LogLevel.FATAL, template, *args, exc_info=exc_info)
