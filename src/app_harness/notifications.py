"""Notification hooks towards the hosting platform.

Notifications are fire-and-forget: a failing notifier is logged and the run
continues.
"""

from collections.abc import Callable
from typing import Any, Protocol

from .logger import Logger


class Notifier(Protocol):
    """Receives lifecycle events of an app run."""

    def notify_done(self, execution_type: str) -> None: ...

    def notify_push_bookmark(self, file_name: str) -> None: ...


class LoggingNotifier:
    """Notifier that only logs the events."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def notify_done(self, execution_type: str) -> None:
        self._logger.debug("[notifier] notify done %s", execution_type)

    def notify_push_bookmark(self, file_name: str) -> None:
        self._logger.debug("[notifier] notify push bookmark %s", file_name)


def fire_and_forget(logger: Logger, callback: Callable[..., Any], *args: Any) -> None:
    """Call a notification hook, logging instead of raising on failure."""
    try:
        callback(*args)
    except Exception as e:
        logger.error("Notification %s failed: %s", getattr(callback, "__name__", callback), e)
