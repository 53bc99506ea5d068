import json
import threading
import uuid
from dataclasses import dataclass

from docrouter.jobs.exceptions import JobFailedError
from docrouter.jobs.models import JobState
from docrouter.jobs.polling import JobPoller
from docrouter.logging.logger import Log
from docrouter.processor.exceptions import BatchFailedError
from docrouter.processor.models import BatchContext, InputDocument
from docrouter.processor.validation import validate_documents
from docrouter.storage.blob_store import BlobStoreAdapter
from docrouter.workflow.base import BaseWorkflowEngine

WORKFLOW_STAGE = "workflow"


@dataclass(frozen=True)
class WorkflowResult:
    batch_id: str
    result: object


class WorkflowRunner:
    """Hands a whole uploaded batch to an external workflow and waits for it."""

    def __init__(
        self,
        blob_store: BlobStoreAdapter,
        engine: BaseWorkflowEngine,
        poller: JobPoller,
        bucket_name: str,
    ) -> None:
        self._blob_store = blob_store
        self._engine = engine
        self._poller = poller
        self._bucket_name = bucket_name

    def run(
        self,
        documents: list[InputDocument],
        cancel_event: threading.Event | None = None,
        batch_id: str | None = None,
    ) -> WorkflowResult:
        """Upload ``documents``, run the workflow and return its decoded result.

        Raises:
            InvalidBatchError: if the batch is empty or has duplicate filenames.
            BatchFailedError: if upload or the workflow execution failed.
        """
        validate_documents(documents)
        batch = BatchContext(batch_id=batch_id or str(uuid.uuid4()), inputs=tuple(documents))

        stage = "uploading"
        try:
            stored = self._blob_store.upload_documents(batch.batch_id, documents)
            stage = WORKFLOW_STAGE
            handle = self._engine.start(self.build_argument(batch, stored))
            Log.info(f"Started workflow execution {handle.name} for batch {batch.batch_id}")
            status = self._poller.wait(self._engine.poll, handle, cancel_event)
            if status.state is not JobState.SUCCEEDED:
                raise JobFailedError(
                    f"Workflow execution {handle.name} ended with state {status.state.value}",
                    payload=status.error,
                )
            result = self._decode_result(status.result)
        except Exception as exc:
            Log.exception(f"Workflow batch {batch.batch_id} failed while {stage}: {exc}")
            raise BatchFailedError(
                f"Batch failed while {stage}: {exc}", stage=stage, batch_id=batch.batch_id
            ) from exc

        Log.info(f"Workflow batch {batch.batch_id} succeeded")
        return WorkflowResult(batch_id=batch.batch_id, result=result)

    def build_argument(
        self, batch: BatchContext, documents: list[InputDocument]
    ) -> dict[str, object]:
        return {
            "batchId": batch.batch_id,
            "bucket": self._bucket_name,
            "outputPrefix": self._blob_store.uri(batch.output_prefix(WORKFLOW_STAGE)),
            "documents": [
                {
                    "uri": self._blob_store.uri(d.storage_key),
                    "mimeType": d.mime_type,
                    "fileName": d.local_id,
                }
                for d in documents
            ],
        }

    @staticmethod
    def _decode_result(raw: str | None) -> object:
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            Log.warning("Workflow result is not JSON, returning it as text")
            return raw
