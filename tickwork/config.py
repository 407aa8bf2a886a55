"""Configuration schema for tickwork.

The scheduler itself only needs :class:`SchedulerConfig`.  The remaining
dataclasses describe jobs declared in a YAML file and executed by the
``tickwork run`` command.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Sequence

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class SchedulerConfig:
    """Timing knobs for the scheduler."""

    shutdown_timeout: timedelta = timedelta(seconds=5)


@dataclass(slots=True)
class JobSpec:
    """A single configured job.

    Exactly one of ``command`` or ``url`` must be set; it decides whether the
    job runs a process or probes an HTTP endpoint.
    """

    name: str
    interval: timedelta
    command: Optional[Sequence[str]] = None
    url: Optional[str] = None
    method: str = "GET"
    timeout: float = 10.0
    permanent_exit_codes: Sequence[int] = field(default_factory=tuple)
    permanent_statuses: Sequence[int] = field(default_factory=tuple)


@dataclass(slots=True)
class TickworkConfig:
    """Top-level configuration bundle."""

    jobs: Sequence[JobSpec] = field(default_factory=tuple)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    log_level: str = "INFO"
