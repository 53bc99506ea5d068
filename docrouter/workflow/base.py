from abc import ABC, abstractmethod

from docrouter.jobs.models import JobHandle, JobStatus


class BaseWorkflowEngine(ABC):
    """Contract for long-running external workflow adapters."""

    @abstractmethod
    def start(self, argument: dict[str, object]) -> JobHandle:
        """Start one execution with a JSON-serializable argument.

        Raises:
            JobSubmissionError: if the execution cannot be created.
        """

    @abstractmethod
    def poll(self, handle: JobHandle) -> JobStatus:
        """Return the execution state; ``result`` is set once it succeeded."""
