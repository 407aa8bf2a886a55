"""Execution loop for a single periodic job."""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, NewType, Optional

from tickwork.errors import Outcome, classify
from tickwork.services.scope import CancellationScope

logger = logging.getLogger(__name__)

JobID = NewType("JobID", int)
Work = Callable[[], object]


class JobState(str, Enum):
    PENDING = "pending"
    SLEEPING = "sleeping"
    RUNNING = "running"
    STOPPED = "stopped"


class Job:
    """One periodic unit of work running on its own thread.

    The loop waits ``interval`` seconds on the job scope, runs the work once
    and decides from the outcome whether to sleep again or stop.  The next
    wait only starts after the work has returned, so the period is measured
    from the end of the previous execution and runs never overlap.

    Cancellation is observed while sleeping only.  An execution that has
    already started always runs to completion.
    """

    def __init__(
        self,
        job_id: JobID,
        interval: float,
        work: Work,
        scope: CancellationScope,
        *,
        name: Optional[str] = None,
        on_stop: Optional[Callable[["Job"], None]] = None,
    ) -> None:
        self._job_id = job_id
        self._interval = interval
        self._work = work
        self._scope = scope
        self._name = name or f"job-{job_id}"
        self._on_stop = on_stop
        self._state = JobState.PENDING
        self._state_lock = threading.Lock()
        self._runs = 0
        self._thread = threading.Thread(
            target=self._run, name=f"tickwork-{self._name}", daemon=True
        )

    @property
    def job_id(self) -> JobID:
        return self._job_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def scope(self) -> CancellationScope:
        return self._scope

    @property
    def state(self) -> JobState:
        with self._state_lock:
            return self._state

    @property
    def runs(self) -> int:
        """Number of executions that have completed so far."""

        with self._state_lock:
            return self._runs

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        """Prevent any further execution.  Does not interrupt a running one."""

        self._scope.cancel()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the loop to exit; return ``True`` if it has."""

        if self._thread.ident is None:
            return self.state is JobState.STOPPED
        if self._thread is threading.current_thread():
            # called from the job's own work, e.g. a shutdown(wait=True)
            return False
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # ------------------------------------------------------------------
    def _run(self) -> None:
        self._set_state(JobState.SLEEPING)
        try:
            while not self._scope.wait(self._interval):
                self._set_state(JobState.RUNNING)
                outcome = self._execute()
                if outcome is Outcome.PERMANENT_FAILURE:
                    break
                self._set_state(JobState.SLEEPING)
        finally:
            self._set_state(JobState.STOPPED)
            self._scope.detach()
            logger.debug("job %s stopped after %d run(s)", self._name, self._runs)
            if self._on_stop is not None:
                self._on_stop(self)

    def _execute(self) -> Outcome:
        error: Optional[Exception] = None
        try:
            self._work()
        except Exception as exc:  # work failures never leave the job loop
            error = exc
        with self._state_lock:
            self._runs += 1

        outcome = classify(error)
        if outcome is Outcome.SUCCESS:
            logger.debug("job %s run #%d succeeded", self._name, self._runs)
        elif outcome is Outcome.TRANSIENT_FAILURE:
            logger.warning(
                "job %s run #%d failed, retrying in %.3gs",
                self._name,
                self._runs,
                self._interval,
                exc_info=error,
            )
        else:
            logger.error(
                "job %s run #%d failed permanently, stopping",
                self._name,
                self._runs,
                exc_info=error,
            )
        return outcome

    def _set_state(self, state: JobState) -> None:
        with self._state_lock:
            self._state = state

    def __repr__(self) -> str:
        return (
            f"<Job id={self._job_id} name={self._name!r} "
            f"interval={self._interval}s state={self.state.value}>"
        )
