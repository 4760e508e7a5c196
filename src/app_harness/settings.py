"""Runtime settings handed to the harness by the surrounding orchestrator.

The settings come from the process environment in production. For local runs
they can be read from a TOML file instead::

    [runtime]
    source_file = "data/input.pickle"
    output_file = "data/output.pickle"
    error_file = "data/error.log"
    configuration_file = "app-configuration.json"
    print_configuration = true
    mask_setting_ids = ["api_key"]
    log_level = "INFO"

All keys are optional. Empty paths disable the corresponding feature.
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Final

from .log_levels import LogLevel, parse_log_level
from .masking import MaskSet

ENV_SOURCE_FILE: Final = "SOURCE_FILE"
ENV_OUTPUT_FILE: Final = "OUTPUT_FILE"
ENV_ERROR_FILE: Final = "ERROR_FILE"
ENV_CONFIGURATION: Final = "CONFIGURATION"
ENV_CONFIGURATION_FILE: Final = "CONFIGURATION_FILE"
ENV_PRINT_CONFIGURATION: Final = "PRINT_CONFIGURATION"
ENV_MASK_SETTING_IDS: Final = "MASK_SETTING_IDS"
ENV_CLEAR_OUTPUT: Final = "CLEAR_OUTPUT"
ENV_ARTIFACTS_DIR: Final = "APP_ARTIFACTS_DIR"

_TRUE_FLAGS: Final = frozenset({"yes", "true", "1"})


@dataclass(frozen=True, slots=True)
class RuntimeSettings:
    """Paths, flags and configuration source of a single app run.

    Attributes:
        source_file:            Input artifact path ("" when no input is configured)
        output_file:            Output artifact path ("" disables writing the result)
        error_file:             Error text artifact path ("" disables error reports)
        configuration:          Inline JSON configuration document
        configuration_file:     Path of a JSON configuration file, used when no inline one is set
        print_configuration:    Log the (masked) configuration when it is loaded
        mask_setting_ids:       Setting ids that are masked when the configuration is logged
        clear_output:           Reset the artifacts directory and output before running
        artifacts_dir:          Directory for additional app artifacts
        log_level:              Explicit logger threshold, overridden by LOG_LEVEL_SDK
    """

    source_file: str = ""
    output_file: str = ""
    error_file: str = ""
    configuration: str = ""
    configuration_file: str = ""
    print_configuration: bool = False
    mask_setting_ids: MaskSet = field(default_factory=MaskSet)
    clear_output: bool = False
    artifacts_dir: str = ""
    log_level: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values after initialization.

        Raises:
            ValueError: If log_level is set but is not a level name
        """
        if self.log_level is None or parse_log_level(self.log_level) is not None:
            return
        msg = (
            f"Invalid logging level: {self.log_level!r}. "
            f"Must be one of: {', '.join(level.name for level in LogLevel)}"
        )
        raise ValueError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RuntimeSettings":
        """Create settings from environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            RuntimeSettings instance
        """
        env = os.environ if environ is None else environ

        return cls(
            source_file=env.get(ENV_SOURCE_FILE, ""),
            output_file=env.get(ENV_OUTPUT_FILE, ""),
            error_file=env.get(ENV_ERROR_FILE, ""),
            configuration=env.get(ENV_CONFIGURATION, ""),
            configuration_file=env.get(ENV_CONFIGURATION_FILE, ""),
            print_configuration=parse_flag(env.get(ENV_PRINT_CONFIGURATION, "no")),
            mask_setting_ids=MaskSet.from_string(env.get(ENV_MASK_SETTING_IDS, "")),
            clear_output=parse_flag(env.get(ENV_CLEAR_OUTPUT, "no")),
            artifacts_dir=env.get(ENV_ARTIFACTS_DIR, ""),
        )

    @classmethod
    def from_toml(cls, settings_path: str | Path) -> "RuntimeSettings":
        """Create settings from the ``[runtime]`` table of a TOML file.

        Args:
            settings_path: Path to the TOML settings file

        Returns:
            RuntimeSettings instance

        Raises:
            FileNotFoundError:  If the settings file doesn't exist
            ValueError:         If the file is malformed or a value is invalid
        """
        path = Path(settings_path)
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)

        except FileNotFoundError as e:
            msg = f"Settings file not found: {path}"
            raise FileNotFoundError(msg) from e

        except tomllib.TOMLDecodeError as e:
            msg = f"Failed to parse TOML file {path}: {e}"
            raise ValueError(msg) from e

        return cls._parse_table(data.get("runtime", {}))

    @classmethod
    def _parse_table(cls, table: dict[str, Any]) -> "RuntimeSettings":
        mask_ids = table.get("mask_setting_ids", ())
        mask_set = (
            MaskSet.from_string(mask_ids)
            if isinstance(mask_ids, str)
            else MaskSet.from_ids(mask_ids)
        )

        return cls(
            source_file=str(table.get("source_file", "")),
            output_file=str(table.get("output_file", "")),
            error_file=str(table.get("error_file", "")),
            configuration=str(table.get("configuration", "")),
            configuration_file=str(table.get("configuration_file", "")),
            print_configuration=parse_flag(table.get("print_configuration", False)),
            mask_setting_ids=mask_set,
            clear_output=parse_flag(table.get("clear_output", False)),
            artifacts_dir=str(table.get("artifacts_dir", "")),
            log_level=table.get("log_level"),
        )

    def with_paths(
            self,
            source_file: str | None = None,
            output_file: str | None = None,
            error_file: str | None = None
    ) -> "RuntimeSettings":
        """Create a new instance with some artifact paths replaced.

        Returns:
            New RuntimeSettings instance
        """
        changes = {
            name: value for name, value in (
                ("source_file", source_file),
                ("output_file", output_file),
                ("error_file", error_file),
            )
            if value is not None
        }
        return replace(self, **changes)

    def artifact_path(self, artifact_name: str) -> Path:
        """Path of a named artifact inside the artifacts directory."""
        return Path(self.artifacts_dir) / artifact_name


def parse_flag(value: Any) -> bool:
    """Interpret ``yes``/``no`` style flags; booleans pass through."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_FLAGS
