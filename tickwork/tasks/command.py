"""Run an external command as periodic work."""
from __future__ import annotations

import logging
import subprocess
from typing import Optional, Sequence

from tickwork.errors import TickworkError, permanent

logger = logging.getLogger(__name__)


class TaskError(TickworkError):
    """Base class for failures raised by the bundled tasks."""


class CommandFailedError(TaskError):
    """Raised when a command exits with a non-zero status or times out."""

    def __init__(self, argv: Sequence[str], returncode: Optional[int], detail: str = "") -> None:
        self.argv = tuple(argv)
        self.returncode = returncode
        if returncode is None:
            message = f"{self.argv[0]} timed out"
        else:
            message = f"{self.argv[0]} exited with status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CommandTask:
    """Callable that executes ``argv`` once per tick.

    A program that cannot be started, or an exit status listed in
    ``permanent_exit_codes``, stops the job.  Other failures are retried on
    the next tick.
    """

    def __init__(
        self,
        argv: Sequence[str],
        *,
        timeout: float = 10.0,
        permanent_exit_codes: Sequence[int] = (),
    ) -> None:
        if not argv:
            raise ValueError("command must not be empty")
        self._argv = tuple(argv)
        self._timeout = timeout
        self._permanent_exit_codes = frozenset(permanent_exit_codes)

    @property
    def argv(self) -> Sequence[str]:
        return self._argv

    def __call__(self) -> None:
        try:
            completed = subprocess.run(
                self._argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except (FileNotFoundError, PermissionError) as exc:
            raise permanent(exc)
        except subprocess.TimeoutExpired as exc:
            raise CommandFailedError(self._argv, None) from exc

        if completed.returncode == 0:
            logger.debug("%s: %s", self._argv[0], completed.stdout.strip())
            return

        error = CommandFailedError(
            self._argv, completed.returncode, _last_line(completed.stderr)
        )
        if completed.returncode in self._permanent_exit_codes:
            raise permanent(error)
        raise error

    def __repr__(self) -> str:
        return f"CommandTask({list(self._argv)!r})"


def _last_line(text: str) -> str:
    lines = [line for line in (text or "").splitlines() if line.strip()]
    return lines[-1].strip() if lines else ""
