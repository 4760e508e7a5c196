"""Execution harness for app functions run by a workflow platform.

This package runs a user-supplied app function the same way in a one-shot
batch run and in an interactive session. It resolves the app configuration,
reads the input artifact, calls the app function once and writes the result
or the error to well-known artifact paths where the platform picks them up.

Key Features:
    - Level-gated logging with a fixed line format on stdout
    - JSON app configuration with masking of secret settings in the log
    - Pickled input/output artifacts with distinguished empty artifacts
    - Error reports written to an error artifact
    - Structured error kinds deciding between halting and re-raising
    - Settings from the environment or from a TOML file for local runs

Basic Usage:
    ```python
    from app_harness import AppRunner

    def analyse(data, threshold=0.5):
        return [value for value in data if value > threshold]

    # Batch run with settings from the environment
    AppRunner().run(analyse)
    ```

    Or from the command line:

    ```shell
    app-harness run my_app:analyse
    ```

Environment:
    SOURCE_FILE             Input artifact path (empty: no input)
    OUTPUT_FILE             Output artifact path (empty: result is not stored)
    ERROR_FILE              Error artifact path (empty: errors are not reported)
    CONFIGURATION           Inline JSON app configuration
    CONFIGURATION_FILE      JSON app configuration file, used without CONFIGURATION
    PRINT_CONFIGURATION     "yes" logs the configuration on load
    MASK_SETTING_IDS        Comma-separated setting ids masked in that log
    LOG_LEVEL_SDK           FATAL, ERROR, WARN, INFO, DEBUG or TRACE
    CLEAR_OUTPUT            "yes" resets APP_ARTIFACTS_DIR and OUTPUT_FILE
    APP_ARTIFACTS_DIR       Directory for additional app artifacts

Typed Settings:
    Apps can declare their settings as a dataclass. The configuration is bound
    to it and the input value is merged into its ``data`` field:

    ```python
    from dataclasses import dataclass

    @dataclass
    class Arguments:
        threshold: float = 0.5
        data: list | None = None

    def analyse(arguments: Arguments):
        return [value for value in arguments.data if value > arguments.threshold]

    AppRunner(schema=Arguments).run(analyse)
    ```

Implementation Notes:
    - An empty input artifact raises InvalidNullInput; no input path is not an error
    - A None result is stored as an empty output artifact
    - Interactive sessions stop with code 10 on empty input
    - The process time zone is UTC while an app function runs
    - Artifact writes are not atomic
"""

from .artifacts import ArtifactGateway, clear_recent_output
from .configuration import ConfigResolver, merge_data, resolve_arguments
from .errors import (
    ConfigParseError,
    ErrorKind,
    HarnessError,
    InvalidNullInput,
    UserFunctionError,
)
from .log_levels import LogLevel
from .logger import Logger
from .masking import MaskSet
from .notifications import LoggingNotifier, Notifier
from .outcome import ExecutionOutcome, Failure, HaltWithCode, Propagate, Success
from .runner import AppRunner, run_app
from .settings import RuntimeSettings

__all__ = [
    "AppRunner",
    "ArtifactGateway",
    "ConfigParseError",
    "ConfigResolver",
    "ErrorKind",
    "ExecutionOutcome",
    "Failure",
    "HaltWithCode",
    "HarnessError",
    "InvalidNullInput",
    "LogLevel",
    "Logger",
    "LoggingNotifier",
    "MaskSet",
    "Notifier",
    "Propagate",
    "RuntimeSettings",
    "Success",
    "UserFunctionError",
    "clear_recent_output",
    "merge_data",
    "resolve_arguments",
    "run_app",
]
