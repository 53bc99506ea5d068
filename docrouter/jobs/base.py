from abc import ABC, abstractmethod

from docrouter.jobs.models import JobHandle, JobRequest, JobStatus


class BaseJobEngine(ABC):
    """Contract for document-intelligence engine adapters."""

    @abstractmethod
    def submit(self, request: JobRequest) -> JobHandle:
        """Start an asynchronous batch job.

        Raises:
            JobSubmissionError: if the engine rejects the request.
        """

    @abstractmethod
    def poll(self, handle: JobHandle) -> JobStatus:
        """Return the current state of a submitted job.

        Raises:
            JobFailedError: if the state cannot be fetched.
        """

    @abstractmethod
    def process_inline(self, processor_id: str, content: bytes, mime_type: str) -> dict[str, object]:
        """Process one document synchronously.

        Returns:
            The resulting Document as a JSON-compatible dict.

        Raises:
            JobFailedError: on any engine failure.
        """
