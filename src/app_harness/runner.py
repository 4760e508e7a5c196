"""Execution of a single app invocation.

A run goes through these steps:
    1. Switch the process time zone to UTC
    2. Load the app configuration
    3. Read the input artifact and add it as the ``data`` argument
    4. Call the app function exactly once
    5. Store the result, or report the error

Failures are written to the error artifact and classified. Empty input stops
an interactive session with exit code 10; every other failure is re-raised.
There is no retry.
"""

import os
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Final

from .artifacts import ArtifactGateway, render_text
from .configuration import ConfigResolver, resolve_arguments
from .errors import NULL_INPUT_EXIT_CODE, ErrorKind, error_kind
from .logger import Logger
from .notifications import LoggingNotifier, Notifier, fire_and_forget
from .outcome import ExecutionOutcome, Failure, HaltWithCode, Propagate, Success
from .settings import RuntimeSettings

BATCH: Final = "BATCH"
SESSION: Final = "SESSION"


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()

AppFunction = Callable[..., Any]


@contextmanager
def utc_timezone() -> Iterator[None]:
    """Run the enclosed block with the process time zone set to UTC."""
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "UTC"
    _tzset()
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = previous
        _tzset()


def _tzset() -> None:
    # not available on Windows
    if hasattr(time, "tzset"):
        time.tzset()


class AppRunner:
    """Runs an app function against the artifacts named by the settings.

    Attributes:
        settings:   Runtime settings of the run
        logger:     Logger shared with all collaborators
    """

    def __init__(
            self,
            settings: RuntimeSettings | None = None,
            *,
            logger: Logger | None = None,
            gateway: ArtifactGateway | None = None,
            resolver: ConfigResolver | None = None,
            notifier: Notifier | None = None,
            schema: type | None = None
    ) -> None:
        """Create a runner; collaborators default to the standard implementations.

        Args:
            settings:   Runtime settings (defaults to the environment)
            logger:     Logger (defaults to one using settings.log_level)
            gateway:    Artifact gateway
            resolver:   Configuration resolver
            notifier:   Notification hooks
            schema:     Optional dataclass the configuration is bound to
        """
        self.settings = settings if settings is not None else RuntimeSettings.from_env()
        self.logger = logger if logger is not None else Logger(self.settings.log_level)
        self._gateway = gateway if gateway is not None else ArtifactGateway(self.logger)
        self._resolver = (
            resolver if resolver is not None else ConfigResolver(self.settings, self.logger)
        )
        self._notifier = notifier if notifier is not None else LoggingNotifier(self.logger)
        self._schema = schema

    def execute(
            self,
            app_function: AppFunction,
            *,
            data: Any = MISSING,
            execution_type: str = BATCH
    ) -> ExecutionOutcome:
        """Invoke the app function once and capture the outcome.

        Errors raised while loading, invoking or storing are not raised; they
        are logged, written to the error artifact and returned as a Failure.

        Args:
            app_function:   The app function
            data:           Input value; read from the source artifact when omitted
            execution_type: Reported to the notifier on success

        Returns:
            Success with the result or Failure with the error and termination mode
        """
        with utc_timezone():
            try:
                result = self._invoke(app_function, data)
                self._gateway.write(result, self.settings.output_file)

            except Exception as e:
                return self._fail(e)

        fire_and_forget(self.logger, self._notifier.notify_done, execution_type)
        return Success(result)

    def run(self, app_function: AppFunction) -> Any:
        """Batch run: return the result or re-raise the original error.

        Raises:
            Exception: Whatever the run failed with, after it was reported
        """
        outcome = self.execute(app_function, execution_type=BATCH)
        if isinstance(outcome, Failure):
            raise outcome.error
        return outcome.result

    def run_session(self, app_function: AppFunction, data: Any = MISSING) -> ExecutionOutcome:
        """Interactive run: halting failures are returned, others re-raised.

        Args:
            app_function:   The app function
            data:           Input value supplied by the session, if any

        Returns:
            Success, or a Failure whose termination is HaltWithCode
        """
        outcome = self.execute(app_function, data=data, execution_type=SESSION)
        if isinstance(outcome, Failure) and isinstance(outcome.termination, Propagate):
            raise outcome.error
        return outcome

    def _invoke(self, app_function: AppFunction, data: Any) -> Any:
        config = self._resolver.load()
        if data is MISSING:
            data = self._gateway.read(self.settings.source_file)

        arguments = resolve_arguments(config, data, self._schema, self.logger)
        name = getattr(app_function, "__name__", repr(app_function))
        self.logger.debug("Invoking app function '%s'", name)

        if self._schema is None:
            return app_function(**arguments)
        return app_function(arguments)

    def _fail(self, error: Exception) -> Failure:
        kind = error_kind(error)
        if not getattr(error, "logged", False):
            self.logger.error("ERROR: %s", render_text(error).strip(), exc_info=error)

        try:
            self._gateway.write_text(error, self.settings.error_file)

        except OSError as e:
            self.logger.error(
                "Failed to write the error report to '%s': %s", self.settings.error_file, e
            )

        if kind is ErrorKind.NULL_INPUT:
            termination = HaltWithCode(getattr(error, "code", NULL_INPUT_EXIT_CODE))
        else:
            termination = Propagate()
        self.logger.debug("Run failed (%s), termination: %s", kind.value, termination)

        return Failure(error=error, kind=kind, termination=termination)


def run_app(app_function: AppFunction, settings: RuntimeSettings | None = None) -> Any:
    """Run an app function in batch mode with settings from the environment."""
    return AppRunner(settings).run(app_function)
