"""Error taxonomy of the harness.

Every error carries a structured :class:`ErrorKind`. The runner decides how a
failed run terminates from that kind alone, never from the error message.
"""

from enum import Enum
from typing import ClassVar, Final

NULL_INPUT_EXIT_CODE: Final = 10


class ErrorKind(Enum):
    """Classes of failures a run can end with."""

    CONFIG_PARSE = "config-parse"
    NULL_INPUT = "null-input"
    USER_FUNCTION = "user-function"


class HarnessError(Exception):
    """Base class for errors raised by the harness.

    Attributes:
        logged: True when the error was already logged where it was detected
    """

    kind: ClassVar[ErrorKind] = ErrorKind.USER_FUNCTION

    def __init__(self, *args: object, logged: bool = False) -> None:
        super().__init__(*args)
        self.logged = logged


class ConfigParseError(HarnessError, ValueError):
    """The configuration source is not a valid JSON object."""

    kind = ErrorKind.CONFIG_PARSE


class InvalidNullInput(HarnessError):
    """The input artifact exists but is empty.

    An empty input artifact means the preceding stage produced no usable
    output. This is different from "no input configured", which is not an
    error.

    Attributes:
        path: Path of the empty input artifact
        code: Exit code an interactive session stops with
    """

    kind = ErrorKind.NULL_INPUT
    code: ClassVar[int] = NULL_INPUT_EXIT_CODE

    def __init__(self, path: str, *, logged: bool = False) -> None:
        self.path = path
        msg = (
            "The App has received invalid input! It cannot process NULL-input. "
            f"Input artifact '{path}' is empty. Check the output of the preceding App "
            "or adjust the datasource configuration."
        )
        super().__init__(msg, logged=logged)


class UserFunctionError(HarnessError):
    """Raised by app functions to report a deliberate failure."""

    kind = ErrorKind.USER_FUNCTION


def error_kind(error: BaseException) -> ErrorKind:
    """Classify an error by its ``kind`` attribute.

    Errors that do not come from the harness are failures of the app function.
    """
    kind = getattr(error, "kind", None)
    return kind if isinstance(kind, ErrorKind) else ErrorKind.USER_FUNCTION
