class JobError(Exception):
    """Base exception for remote job failures."""


class JobSubmissionError(JobError):
    """Raised when the remote engine rejects a job (bad processor id, quota...)."""


class JobFailedError(JobError):
    """Raised when a job reaches a terminal state other than SUCCEEDED."""

    def __init__(self, message: str, payload: str | None = None) -> None:
        super().__init__(message)
        self.payload = payload


class JobTimeoutError(JobFailedError):
    """Raised when a job is still running after the configured maximum wait."""


class JobCancelledError(JobError):
    """Raised when the caller abandoned the wait. The remote job keeps running."""
