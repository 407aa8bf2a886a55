"""Error types and the transient/permanent failure classifier."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class TickworkError(Exception):
    """Base class for errors raised by tickwork itself."""


class InvalidIntervalError(TickworkError, ValueError):
    """Raised when a job is registered with a non-positive interval."""


class PermanentError(TickworkError):
    """Marks a work failure as non-retryable.

    The original exception is kept as :attr:`cause` and chained through
    ``__cause__`` so tracebacks still show where the failure came from.
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause
        self.__cause__ = cause

    def __repr__(self) -> str:
        return f"PermanentError({self.cause!r})"


class Outcome(str, Enum):
    """Result of a single job execution."""

    SUCCESS = "success"
    TRANSIENT_FAILURE = "transient_failure"
    PERMANENT_FAILURE = "permanent_failure"


def permanent(err: BaseException) -> PermanentError:
    """Wrap ``err`` so the scheduler stops the job that raised it."""

    if isinstance(err, PermanentError):
        return err
    return PermanentError(err)


def is_permanent(err: Optional[BaseException]) -> bool:
    """Return ``True`` if ``err`` is, or explicitly wraps, a :class:`PermanentError`.

    Explicit wrapping means ``raise Outer(...) from inner`` at any depth.
    Members of exception groups are inspected as well.
    """

    pending = [err]
    seen = set()
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, PermanentError):
            return True
        if isinstance(current, BaseExceptionGroup):
            pending.extend(current.exceptions)
        pending.append(current.__cause__)
    return False


def classify(err: Optional[BaseException]) -> Outcome:
    if err is None:
        return Outcome.SUCCESS
    if is_permanent(err):
        return Outcome.PERMANENT_FAILURE
    return Outcome.TRANSIENT_FAILURE
