"""Reading and writing of run artifacts.

An artifact is a single value stored at a filesystem path. Input and output
artifacts hold a pickled Python value; the error artifact holds plain text.

Zero-byte artifacts are meaningful:
    - A zero-byte output artifact means the app produced no result.
    - A zero-byte input artifact means the preceding stage produced no result,
      which the app cannot process (:class:`InvalidNullInput`).

Writes are not atomic. Artifacts belong to one run and are not durable state.
"""

import pickle
import shutil
import traceback
from pathlib import Path
from typing import Any, Final

from .errors import InvalidNullInput
from .logger import Logger
from .settings import RuntimeSettings

KEEP_FILE_NAME: Final = ".keep"
PICKLE_PROTOCOL: Final = pickle.HIGHEST_PROTOCOL


class ArtifactGateway:
    """Reads the input artifact and writes the output and error artifacts."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def read(self, path: str | Path | None) -> Any | None:
        """Read the value stored in an input artifact.

        Args:
            path: Input artifact path, None or "" when no input is configured

        Returns:
            The stored value, or None when no input is configured

        Raises:
            InvalidNullInput:   If the artifact exists but is empty
            FileNotFoundError:  If the artifact does not exist
        """
        if not path:
            self._logger.debug("Skip loading: no source file")
            return None

        path = Path(path)
        if path.stat().st_size == 0:
            self._logger.warn(
                "The App has received invalid input! It cannot process NULL-input. Aborting.."
            )
            raise InvalidNullInput(str(path), logged=True)

        self._logger.debug("Reading input from file '%s'", path)
        with path.open("rb") as f:
            return pickle.load(f)

    def write(self, value: Any, path: str | Path | None) -> None:
        """Store a result in the output artifact.

        A None value produces a zero-byte artifact. Without a path nothing is
        written.

        Args:
            value:  Result to store
            path:   Output artifact path
        """
        if not path:
            self._logger.debug("Skip storing the result: no output file")
            return

        path = Path(path)
        if value is None:
            self._logger.debug("Storing the null-result to file '%s'", path)
            path.write_bytes(b"")
            return

        self._logger.debug("Storing result to file '%s'", path)
        with path.open("wb") as f:
            pickle.dump(value, f, protocol=PICKLE_PROTOCOL)

    def write_text(self, value: Any, path: str | Path | None) -> None:
        """Write a value as text, e.g. an error report.

        Args:
            value:  Value to render; exceptions render as ``Type: message``
            path:   Target path
        """
        text = render_text(value)
        if not path or not text:
            self._logger.debug("Skip writing to file: no output file or value is missing")
            return

        self._logger.debug("Writing to file '%s'", path)
        Path(path).write_text(text if text.endswith("\n") else f"{text}\n", encoding="utf-8")


def render_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, BaseException):
        return "".join(traceback.format_exception_only(type(value), value))
    return str(value)


def clear_recent_output(settings: RuntimeSettings, logger: Logger) -> None:
    """Remove artifacts left over from a previous run.

    Only active when ``settings.clear_output`` is set. Recreates the artifacts
    directory with a ``.keep`` marker file and deletes the output artifact.

    Args:
        settings:   Runtime settings naming the artifacts directory and output
        logger:     Logger for progress messages
    """
    if not settings.clear_output:
        return

    logger.info("Clearing recent output")

    if settings.artifacts_dir:
        artifacts_dir = Path(settings.artifacts_dir)
        shutil.rmtree(artifacts_dir, ignore_errors=True)
        artifacts_dir.mkdir(parents=True, exist_ok=True)
        (artifacts_dir / KEEP_FILE_NAME).touch()
        logger.debug("Recreated artifacts directory '%s'", artifacts_dir)

    if settings.output_file:
        Path(settings.output_file).unlink(missing_ok=True)
        logger.debug("Deleted output file '%s'", settings.output_file)
