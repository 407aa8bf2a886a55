"""Scheduling primitives: cancellation scopes, jobs and the scheduler."""

from .job import Job, JobID, JobState
from .scheduler import Scheduler
from .scope import CancellationScope

__all__ = ["CancellationScope", "Job", "JobID", "JobState", "Scheduler"]
