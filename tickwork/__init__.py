"""tickwork: in-process periodic job scheduler."""

from .errors import (
    InvalidIntervalError,
    Outcome,
    PermanentError,
    TickworkError,
    classify,
    is_permanent,
    permanent,
)
from .services import CancellationScope, Job, JobID, JobState, Scheduler

__all__ = [
    "CancellationScope",
    "InvalidIntervalError",
    "Job",
    "JobID",
    "JobState",
    "Outcome",
    "PermanentError",
    "Scheduler",
    "TickworkError",
    "classify",
    "is_permanent",
    "permanent",
    "config",
    "errors",
    "services",
    "tasks",
]
