"""Bounded, cancellable waiting for remote jobs to reach a terminal state."""

import threading
import time
from typing import Callable

from docrouter.jobs.exceptions import JobCancelledError, JobTimeoutError
from docrouter.jobs.models import JobHandle, JobState, JobStatus
from docrouter.logging.logger import Log


class JobPoller:
    """Polls a job on a fixed interval until it is terminal, timed out or cancelled.

    ``max_wait_seconds`` of 0 disables the timeout.
    """

    def __init__(
        self,
        *,
        interval_seconds: float,
        max_wait_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._interval = max(0.0, float(interval_seconds))
        self._max_wait = max(0.0, float(max_wait_seconds))
        self._clock = clock
        self._sleep = sleep

    def wait(
        self,
        poll: Callable[[JobHandle], JobStatus],
        handle: JobHandle,
        cancel_event: threading.Event | None = None,
    ) -> JobStatus:
        """Return the first terminal status reported for ``handle``.

        Raises:
            JobCancelledError: if ``cancel_event`` is set while waiting.
            JobTimeoutError: if the job outlives the maximum wait.
        """
        started = self._clock()
        last_state: JobState | None = None
        while True:
            self._check_cancelled(handle, cancel_event)
            status = poll(handle)
            if status.state != last_state:
                Log.info(f"Job {handle.name} state: {status.state.value}")
                last_state = status.state
            if status.state.is_terminal:
                return status

            elapsed = self._clock() - started
            if self._max_wait and elapsed >= self._max_wait:
                raise JobTimeoutError(
                    f"Job {handle.name} still running after {elapsed:.0f}s "
                    f"(max {self._max_wait:.0f}s)"
                )
            if cancel_event is not None:
                if cancel_event.wait(self._interval):
                    self._check_cancelled(handle, cancel_event)
            else:
                self._sleep(self._interval)

    @staticmethod
    def _check_cancelled(handle: JobHandle, cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            Log.warning(f"Stopped waiting for job {handle.name}; remote job keeps running")
            raise JobCancelledError(f"Wait for job {handle.name} was cancelled")
