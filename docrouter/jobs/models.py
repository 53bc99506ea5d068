from dataclasses import dataclass
from enum import Enum


class JobState(str, Enum):
    """Remote job states, collapsed to the vocabulary the pipeline acts on."""

    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not JobState.RUNNING


@dataclass(frozen=True)
class JobDocument:
    """One job input: a storage URI and its MIME type."""

    uri: str
    mime_type: str


@dataclass(frozen=True)
class JobRequest:
    """Batch request for one processor over a set of stored documents."""

    processor_id: str
    documents: tuple[JobDocument, ...]
    output_prefix: str


@dataclass(frozen=True)
class JobHandle:
    """Opaque reference to a submitted remote job."""

    name: str
    output_prefix: str = ""
    processor_id: str = ""


@dataclass(frozen=True)
class JobStatus:
    """Polled state of a remote job."""

    state: JobState
    error: str | None = None
    result: str | None = None
