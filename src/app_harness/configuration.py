"""App configuration loading and argument resolution.

The app configuration is a single JSON object mapping setting ids to values.
It is either given inline (``CONFIGURATION``) or as a file
(``CONFIGURATION_FILE``). When neither is set the configuration is empty.

The loaded configuration becomes the argument set of the app function. The
input value, if any, is added as the ``data`` argument.
"""

import dataclasses
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, TypeVar

from .errors import ConfigParseError
from .logger import Logger
from .masking import MaskSet
from .settings import RuntimeSettings

DATA_ARGUMENT: Final = "data"

T = TypeVar("T")


class ConfigResolver:
    """Loads the app configuration described by the runtime settings."""

    def __init__(self, settings: RuntimeSettings, logger: Logger) -> None:
        self._settings = settings
        self._logger = logger

    def load(self) -> dict[str, Any]:
        """Load and parse the configuration.

        Returns:
            Configuration dict, empty when no configuration is provided

        Raises:
            ConfigParseError: If the source is not a valid JSON object
        """
        document, origin = self._read_source()
        if not document.strip():
            self._logger.debug("No configuration provided")
            config: dict[str, Any] = {}
        else:
            config = self._parse(document, origin)

        if self._settings.print_configuration:
            self.print(config, self._settings.mask_setting_ids)

        return config

    def print(self, config: Mapping[str, Any], mask_ids: MaskSet) -> None:
        """Log the configuration with masked settings replaced.

        Args:
            config:     Configuration to log; it is not modified
            mask_ids:   Setting ids whose values are masked
        """
        masked = mask_ids.apply(config)
        self._logger.info(
            "app will be started with configuration:\n%s",
            json.dumps(masked, indent=2, ensure_ascii=False, default=str),
        )

    def _read_source(self) -> tuple[str, str]:
        if self._settings.configuration:
            return self._settings.configuration, "inline configuration"

        if not self._settings.configuration_file:
            return "", "no configuration"

        path = Path(self._settings.configuration_file)
        try:
            return path.read_text(encoding="utf-8"), str(path)

        except OSError as e:
            msg = f"Cannot read configuration file {path}: {e}"
            self._logger.error(msg)
            raise ConfigParseError(msg, logged=True) from e

    def _parse(self, document: str, origin: str) -> dict[str, Any]:
        try:
            config = json.loads(document)

        except json.JSONDecodeError as e:
            msg = f"Failed to parse configuration from {origin}: {e}"
            self._logger.error(msg)
            raise ConfigParseError(msg, logged=True) from e

        if not isinstance(config, dict):
            msg = (
                f"Configuration from {origin} must be a JSON object, "
                f"got {type(config).__name__}"
            )
            self._logger.error(msg)
            raise ConfigParseError(msg, logged=True)

        return config


def merge_data(arguments: T, data: Any) -> T:
    """Overlay the ``data`` argument onto an argument set.

    Nothing changes when ``data`` is None. Dicts get a ``data`` key,
    dataclass instances a replaced ``data`` field.

    Args:
        arguments:  A dict or a dataclass instance with a ``data`` field
        data:       Input value

    Returns:
        New argument set of the same shape

    Raises:
        TypeError: If the dataclass has no ``data`` field
    """
    if data is None:
        return arguments

    if dataclasses.is_dataclass(arguments) and not isinstance(arguments, type):
        field_names = {f.name for f in dataclasses.fields(arguments)}
        if DATA_ARGUMENT not in field_names:
            msg = f"{type(arguments).__name__} has no '{DATA_ARGUMENT}' field for the input"
            raise TypeError(msg)
        return dataclasses.replace(arguments, **{DATA_ARGUMENT: data})

    return {**arguments, DATA_ARGUMENT: data}


def resolve_arguments(
        config: Mapping[str, Any],
        data: Any,
        schema: type[T] | None = None,
        logger: Logger | None = None
) -> "dict[str, Any] | T":
    """Build the argument set of the app function.

    Args:
        config: Loaded configuration
        data:   Input value, or None
        schema: Optional dataclass describing the app's settings
        logger: Logger for settings the schema does not know

    Returns:
        A dict of keyword arguments, or an instance of ``schema``

    Raises:
        TypeError: If the schema is not a dataclass or required settings are missing
    """
    if schema is None:
        return merge_data(dict(config), data)

    if not dataclasses.is_dataclass(schema):
        msg = f"Argument schema must be a dataclass, got {schema!r}"
        raise TypeError(msg)

    known = {f.name for f in dataclasses.fields(schema) if f.init}
    unknown = [setting_id for setting_id in config if setting_id not in known]
    if unknown and logger is not None:
        logger.debug("Ignoring settings unknown to %s: %s", schema.__name__, ", ".join(unknown))

    values = {k: v for k, v in config.items() if k in known}
    if data is not None and DATA_ARGUMENT in known:
        values[DATA_ARGUMENT] = data
        return schema(**values)

    return merge_data(schema(**values), data)
