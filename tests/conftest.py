import json
from dataclasses import dataclass, field

import pytest

from docrouter.jobs.base import BaseJobEngine
from docrouter.jobs.exceptions import JobSubmissionError
from docrouter.jobs.job_client import AsyncJobClient
from docrouter.jobs.models import JobHandle, JobRequest, JobState, JobStatus
from docrouter.jobs.polling import JobPoller
from docrouter.storage.blob_store import BlobStoreAdapter
from docrouter.storage.memory_adapter import InMemoryBlobStore


@dataclass
class ScriptedJob:
    """What the fake engine does when a processor receives a batch job."""

    outputs: dict[str, dict[str, object]] = field(default_factory=dict)
    state: JobState = JobState.SUCCEEDED
    error: str | None = None
    running_polls: int = 0
    submit_error: str | None = None
    submit_exception: Exception | None = None


class FakeJobEngine(BaseJobEngine):
    """Job engine that writes scripted outputs into an in-memory store on submit."""

    def __init__(self, store: InMemoryBlobStore) -> None:
        self._store = store
        self.scripts: dict[str, ScriptedJob] = {}
        self.inline: dict[str, dict[str, object] | Exception] = {}
        self.requests: list[JobRequest] = []
        self.inline_calls: list[str] = []
        self._remaining_polls: dict[str, int] = {}

    def script(self, processor_id: str, **kwargs: object) -> ScriptedJob:
        job = ScriptedJob(**kwargs)  # type: ignore[arg-type]
        self.scripts[processor_id] = job
        return job

    def submit(self, request: JobRequest) -> JobHandle:
        job = self.scripts.get(request.processor_id, ScriptedJob())
        if job.submit_error:
            raise JobSubmissionError(job.submit_error)
        if job.submit_exception is not None:
            raise job.submit_exception
        self.requests.append(request)
        name = f"operations/{len(self.requests)}"
        prefix = self._store.key_from_uri(request.output_prefix)
        if job.state is JobState.SUCCEEDED:
            for filename, payload in job.outputs.items():
                self._store.put(
                    json.dumps(payload).encode("utf-8"),
                    f"{prefix}{len(self.requests)}/0/{filename}",
                    content_type="application/json",
                )
        self._remaining_polls[name] = job.running_polls
        return JobHandle(
            name=name, output_prefix=request.output_prefix, processor_id=request.processor_id
        )

    def poll(self, handle: JobHandle) -> JobStatus:
        if self._remaining_polls.get(handle.name, 0) > 0:
            self._remaining_polls[handle.name] -= 1
            return JobStatus(state=JobState.RUNNING)
        job = self.scripts.get(handle.processor_id, ScriptedJob())
        return JobStatus(state=job.state, error=job.error)

    def process_inline(self, processor_id: str, content: bytes, mime_type: str) -> dict[str, object]:
        self.inline_calls.append(processor_id)
        result = self.inline.get(processor_id, {"text": "", "entities": []})
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture()
def memory_store() -> InMemoryBlobStore:
    return InMemoryBlobStore(bucket_name="test-bucket")


@pytest.fixture()
def blob_store(memory_store: InMemoryBlobStore) -> BlobStoreAdapter:
    return BlobStoreAdapter(memory_store)


@pytest.fixture()
def fake_engine(memory_store: InMemoryBlobStore) -> FakeJobEngine:
    return FakeJobEngine(memory_store)


@pytest.fixture()
def poller() -> JobPoller:
    return JobPoller(interval_seconds=0, max_wait_seconds=0, sleep=lambda _seconds: None)


@pytest.fixture()
def job_client(
    fake_engine: FakeJobEngine, blob_store: BlobStoreAdapter, poller: JobPoller
) -> AsyncJobClient:
    return AsyncJobClient(fake_engine, blob_store, poller)
