import threading

from docrouter.jobs.base import BaseJobEngine
from docrouter.jobs.exceptions import JobFailedError, JobSubmissionError
from docrouter.jobs.models import JobDocument, JobHandle, JobRequest, JobState
from docrouter.jobs.polling import JobPoller
from docrouter.logging.logger import Log
from docrouter.processor.models import InputDocument
from docrouter.storage.blob_store import BlobStoreAdapter


class AsyncJobClient:
    """Submits batch jobs for stored documents and blocks until they finish."""

    def __init__(
        self,
        engine: BaseJobEngine,
        blob_store: BlobStoreAdapter,
        poller: JobPoller,
    ) -> None:
        self._engine = engine
        self._blob_store = blob_store
        self._poller = poller

    @property
    def engine(self) -> BaseJobEngine:
        return self._engine

    def submit(
        self,
        processor_id: str,
        documents: list[InputDocument],
        output_prefix: str,
    ) -> JobHandle:
        """Start one job of ``processor_id`` over already uploaded ``documents``.

        Raises:
            JobSubmissionError: if the engine rejects the job.
        """
        if not processor_id:
            raise JobSubmissionError("Processor id is empty")
        unstored = [d.local_id for d in documents if not d.storage_key]
        if unstored:
            raise JobSubmissionError(f"Documents were not uploaded: {unstored}")

        request = JobRequest(
            processor_id=processor_id,
            documents=tuple(
                JobDocument(uri=self._blob_store.uri(d.storage_key), mime_type=d.mime_type)
                for d in documents
            ),
            output_prefix=self._blob_store.uri(output_prefix),
        )
        handle = self._engine.submit(request)
        Log.info(
            f"Submitted job {handle.name}",
            processor=processor_id,
            documents=len(documents),
            output_prefix=output_prefix,
        )
        return handle

    def await_completion(
        self,
        handle: JobHandle,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """Block until the job is terminal and return its output prefix.

        Raises:
            JobFailedError: if the job did not succeed or the wait timed out.
            JobCancelledError: if ``cancel_event`` was set.
        """
        status = self._poller.wait(self._engine.poll, handle, cancel_event)
        if status.state is not JobState.SUCCEEDED:
            Log.error(f"Job {handle.name} ended with state {status.state.value}: {status.error}")
            raise JobFailedError(
                f"Job {handle.name} ended with state {status.state.value}",
                payload=status.error,
            )
        return self._blob_store.store.key_from_uri(handle.output_prefix)
