"""Outcome of a single app invocation."""

from dataclasses import dataclass
from typing import Any

from .errors import ErrorKind


@dataclass(frozen=True, slots=True)
class Propagate:
    """Re-raise the original error to the caller."""


@dataclass(frozen=True, slots=True)
class HaltWithCode:
    """Stop the session gracefully with an exit code.

    Attributes:
        code: Exit code to stop with
    """

    code: int


TerminationMode = Propagate | HaltWithCode


@dataclass(frozen=True, slots=True)
class Success:
    """The app function returned normally.

    Attributes:
        result: Value returned by the app function (may be None)
    """

    result: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    """The run failed; the error has already been logged and reported.

    Attributes:
        error:          The original error
        kind:           Classification of the error
        termination:    How the caller should terminate
    """

    error: BaseException
    kind: ErrorKind
    termination: TerminationMode

    @property
    def ok(self) -> bool:
        return False


ExecutionOutcome = Success | Failure
