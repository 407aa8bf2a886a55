"""HTTP endpoint probe used as periodic work."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from tickwork.errors import permanent
from tickwork.tasks.command import TaskError

logger = logging.getLogger(__name__)


class ProbeFailedError(TaskError):
    """Raised when the probed endpoint is unreachable or answers with an error."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"{url}: {message}")


class HttpProbeTask:
    """Callable that sends one HTTP request per tick.

    Status codes listed in ``permanent_statuses`` stop the job (for example a
    ``410 Gone``); any other error status or transport failure is retried.
    """

    def __init__(
        self,
        url: str,
        *,
        method: str = "GET",
        timeout: float = 10.0,
        permanent_statuses: Sequence[int] = (),
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._url = url
        self._method = method.upper()
        self._permanent_statuses = frozenset(permanent_statuses)
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return self._url

    def __call__(self) -> None:
        try:
            response = self._client.request(self._method, self._url)
        except httpx.HTTPError as exc:
            raise ProbeFailedError(self._url, str(exc) or type(exc).__name__) from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = ProbeFailedError(
                self._url, f"HTTP {response.status_code}", response.status_code
            )
            if response.status_code in self._permanent_statuses:
                raise permanent(error)
            raise error from exc

        logger.debug("%s %s -> %d", self._method, self._url, response.status_code)

    def close(self) -> None:
        """Close the underlying :class:`httpx.Client` if this task created it."""

        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpProbeTask":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def __repr__(self) -> str:
        return f"HttpProbeTask({self._method} {self._url!r})"
