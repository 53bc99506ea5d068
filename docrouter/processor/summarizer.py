import threading
import uuid

from docrouter.decoding.decoder import OutputDecoder
from docrouter.jobs.job_client import AsyncJobClient
from docrouter.logging.logger import Log
from docrouter.processor.exceptions import BatchFailedError
from docrouter.processor.models import (
    AnnotatedDocument,
    BatchContext,
    InputDocument,
    SummaryRecord,
    SummaryResult,
)
from docrouter.processor.validation import validate_documents
from docrouter.storage.blob_store import BlobStoreAdapter

SUMMARY_STAGE = "summary"


def summary_text(annotated: AnnotatedDocument) -> str:
    """Label values joined by newlines, or the raw text when that is blank."""
    joined = "\n".join(label.value for label in annotated.labels)
    if annotated.labels and joined.strip():
        return joined
    return annotated.raw_text


class SummarizerPipeline:
    """Upload -> one summarizer job -> decode -> one summary per output."""

    def __init__(
        self,
        blob_store: BlobStoreAdapter,
        job_client: AsyncJobClient,
        decoder: OutputDecoder,
        processor_id: str,
    ) -> None:
        self._blob_store = blob_store
        self._job_client = job_client
        self._decoder = decoder
        self._processor_id = processor_id

    def process(
        self,
        documents: list[InputDocument],
        cancel_event: threading.Event | None = None,
        batch_id: str | None = None,
    ) -> SummaryResult:
        """Summarize every document of the batch.

        Raises:
            InvalidBatchError: if the batch is empty or has duplicate filenames.
            BatchFailedError: if upload, the job or the output listing failed.
        """
        validate_documents(documents)
        batch = BatchContext(batch_id=batch_id or str(uuid.uuid4()), inputs=tuple(documents))
        Log.info(f"Summarizing batch {batch.batch_id} with {len(documents)} documents")

        stage = "uploading"
        try:
            stored = self._blob_store.upload_documents(batch.batch_id, documents)
            stage = "summarizing"
            handle = self._job_client.submit(
                self._processor_id, stored, batch.output_prefix(SUMMARY_STAGE)
            )
            output_prefix = self._job_client.await_completion(handle, cancel_event)
            outputs = self._decoder.decode(output_prefix)
        except Exception as exc:
            Log.exception(f"Summary batch {batch.batch_id} failed while {stage}: {exc}")
            raise BatchFailedError(
                f"Batch failed while {stage}: {exc}", stage=stage, batch_id=batch.batch_id
            ) from exc

        summaries = [
            SummaryRecord(source_output_id=output.source_output_key, summary_text=summary_text(output))
            for output in outputs
        ]
        Log.info(f"Summary batch {batch.batch_id} done: {len(summaries)} summaries")
        return SummaryResult(batch_id=batch.batch_id, summaries=summaries)
