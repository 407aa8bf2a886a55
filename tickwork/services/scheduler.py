"""Periodic job scheduler."""
from __future__ import annotations

import itertools
import logging
import math
import threading
import time
from datetime import timedelta
from typing import Dict, List, Optional, Union

from tickwork.config import SchedulerConfig
from tickwork.errors import InvalidIntervalError
from tickwork.services.job import Job, JobID, JobState, Work
from tickwork.services.scope import CancellationScope

logger = logging.getLogger(__name__)

Interval = Union[float, int, timedelta]


class Scheduler:
    """Runs registered work on fixed intervals until stopped.

    Every job gets its own :class:`CancellationScope` below the scheduler's
    scope, which in turn sits below ``parent``.  Cancelling ``parent`` has the
    same effect as :meth:`shutdown`.

    Usage::

        with Scheduler() as scheduler:
            job_id = scheduler.start_job_every(timedelta(seconds=30), refresh)
            ...
            scheduler.stop_job(job_id)
    """

    def __init__(
        self,
        parent: Optional[CancellationScope] = None,
        config: Optional[SchedulerConfig] = None,
    ) -> None:
        self._config = config or SchedulerConfig()
        self._scope = (parent or CancellationScope()).child()
        self._jobs: Dict[JobID, Job] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    @property
    def scope(self) -> CancellationScope:
        return self._scope

    @property
    def is_shut_down(self) -> bool:
        return self._scope.cancelled

    # ------------------------------------------------------------------
    # Public API
    def start_job_every(
        self, interval: Interval, work: Work, *, name: Optional[str] = None
    ) -> JobID:
        """Register ``work`` to run every ``interval`` and return its id.

        The first run happens one full interval after registration.  Work
        signals a retryable failure by raising any exception and stops the
        job by raising :func:`tickwork.errors.permanent` (or an exception
        chained from one).
        """

        seconds = _interval_seconds(interval)
        if not callable(work):
            raise TypeError("work must be callable")

        with self._lock:
            job_id = JobID(next(self._ids))
            job = Job(
                job_id,
                seconds,
                work,
                self._scope.child(),
                name=name,
                on_stop=self._forget,
            )
            self._jobs[job_id] = job
        logger.debug("registered %r", job)
        try:
            job.start()
        except RuntimeError:
            self._forget(job)
            job.scope.detach()
            raise
        return job_id

    def stop_job(self, job_id: JobID) -> None:
        """Stop a single job.  Unknown or already stopped ids are ignored."""

        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            return
        logger.debug("stopping %r", job)
        job.stop()

    def shutdown(self, wait: bool = False, timeout: Optional[float] = None) -> None:
        """Stop every current and future job.

        With ``wait=True`` block until all job loops have exited, including
        runs that were already in flight, for at most ``timeout`` seconds
        (``SchedulerConfig.shutdown_timeout`` by default).
        """

        if not self._scope.cancelled:
            logger.info("shutting down scheduler with %d job(s)", len(self))
        self._scope.cancel()
        if not wait:
            return

        if timeout is None:
            timeout = self._config.shutdown_timeout.total_seconds()
        deadline = time.monotonic() + timeout
        for job in self._snapshot():
            if not job.join(max(0.0, deadline - time.monotonic())):
                logger.warning("%r did not finish within %.3gs", job, timeout)

    def job_state(self, job_id: JobID) -> Optional[JobState]:
        """Return the job's state, or ``None`` once it is no longer registered."""

        with self._lock:
            job = self._jobs.get(job_id)
        return job.state if job is not None else None

    def job_ids(self) -> List[JobID]:
        with self._lock:
            return list(self._jobs)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __enter__(self) -> "Scheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.shutdown(wait=True)

    # ------------------------------------------------------------------
    # Internal helpers
    def _snapshot(self) -> List[Job]:
        with self._lock:
            return list(self._jobs.values())

    def _forget(self, job: Job) -> None:
        with self._lock:
            if self._jobs.get(job.job_id) is job:
                del self._jobs[job.job_id]


def _interval_seconds(interval: Interval) -> float:
    if isinstance(interval, timedelta):
        seconds = interval.total_seconds()
    elif isinstance(interval, (int, float)) and not isinstance(interval, bool):
        try:
            seconds = float(interval)
        except OverflowError as exc:
            raise InvalidIntervalError(f"interval is too large: {interval!r}") from exc
    else:
        raise InvalidIntervalError(f"unsupported interval value: {interval!r}")
    if not math.isfinite(seconds) or seconds <= 0:
        raise InvalidIntervalError(f"interval must be positive, got {interval!r}")
    if seconds > threading.TIMEOUT_MAX:
        raise InvalidIntervalError(f"interval is too large: {interval!r}")
    return seconds
