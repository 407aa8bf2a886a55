"""Ready-made work callables built from :class:`tickwork.config.JobSpec`."""
from __future__ import annotations

from typing import Callable

from tickwork.config import JobSpec

from .command import CommandFailedError, CommandTask, TaskError
from .http_probe import HttpProbeTask, ProbeFailedError


def build_task(spec: JobSpec) -> Callable[[], None]:
    """Return the callable that implements ``spec``."""

    if (spec.command is None) == (spec.url is None):
        raise ValueError(f"job {spec.name!r} must define exactly one of 'command' or 'url'")
    if spec.command is not None:
        return CommandTask(
            spec.command,
            timeout=spec.timeout,
            permanent_exit_codes=spec.permanent_exit_codes,
        )
    return HttpProbeTask(
        spec.url,
        method=spec.method,
        timeout=spec.timeout,
        permanent_statuses=spec.permanent_statuses,
    )


__all__ = [
    "build_task",
    "CommandFailedError",
    "CommandTask",
    "HttpProbeTask",
    "ProbeFailedError",
    "TaskError",
]
