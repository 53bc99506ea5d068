import json

from google.api_core import exceptions as google_exceptions
from google.api_core.client_options import ClientOptions
from google.cloud import documentai

from docrouter.jobs.base import BaseJobEngine
from docrouter.jobs.exceptions import JobFailedError, JobSubmissionError
from docrouter.jobs.models import JobHandle, JobRequest, JobState, JobStatus

_BatchState = documentai.BatchProcessMetadata.State

_STATE_MAP: dict[int, JobState] = {
    _BatchState.SUCCEEDED: JobState.SUCCEEDED,
    _BatchState.FAILED: JobState.FAILED,
    _BatchState.CANCELLED: JobState.CANCELLED,
}


class DocumentAiEngineAdapter(BaseJobEngine):
    """Job engine adapter built on the Document AI processor service."""

    def __init__(
        self,
        *,
        project_id: str,
        location: str,
        client: documentai.DocumentProcessorServiceClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._location = location
        if client is None:
            client = documentai.DocumentProcessorServiceClient(
                client_options=ClientOptions(api_endpoint=f"{location}-documentai.googleapis.com")
            )
        self._client = client
        self._operations: dict[str, object] = {}

    def processor_name(self, processor_id: str) -> str:
        return self._client.processor_path(self._project_id, self._location, processor_id)

    def submit(self, request: JobRequest) -> JobHandle:
        docai_request = documentai.BatchProcessRequest(
            name=self.processor_name(request.processor_id),
            input_documents=documentai.BatchDocumentsInputConfig(
                gcs_documents=documentai.GcsDocuments(
                    documents=[
                        documentai.GcsDocument(gcs_uri=d.uri, mime_type=d.mime_type)
                        for d in request.documents
                    ]
                )
            ),
            document_output_config=documentai.DocumentOutputConfig(
                gcs_output_config=documentai.DocumentOutputConfig.GcsOutputConfig(
                    gcs_uri=request.output_prefix
                )
            ),
        )
        try:
            operation = self._client.batch_process_documents(request=docai_request)
        except google_exceptions.GoogleAPIError as exc:
            raise JobSubmissionError(
                f"Document AI rejected batch for processor {request.processor_id}: {exc}"
            ) from exc

        name = operation.operation.name
        self._operations[name] = operation
        return JobHandle(
            name=name,
            output_prefix=request.output_prefix,
            processor_id=request.processor_id,
        )

    def poll(self, handle: JobHandle) -> JobStatus:
        operation = self._operations.get(handle.name)
        if operation is None:
            raise JobFailedError(f"Unknown Document AI operation {handle.name}")
        try:
            done = operation.done()
        except google_exceptions.GoogleAPIError as exc:
            raise JobFailedError(f"Polling {handle.name} failed: {exc}") from exc

        metadata = operation.metadata
        state = _STATE_MAP.get(metadata.state) if metadata is not None else None
        if state is None and done:
            error = operation.exception()
            state = JobState.FAILED if error is not None else JobState.SUCCEEDED
        if state is None:
            return JobStatus(state=JobState.RUNNING)

        if state.is_terminal:
            self._operations.pop(handle.name, None)
        error_message = None
        if state is not JobState.SUCCEEDED:
            error_message = metadata.state_message if metadata is not None else ""
            if not error_message and done:
                error_message = str(operation.exception())
        return JobStatus(state=state, error=error_message)

    def process_inline(self, processor_id: str, content: bytes, mime_type: str) -> dict[str, object]:
        request = documentai.ProcessRequest(
            name=self.processor_name(processor_id),
            raw_document=documentai.RawDocument(content=content, mime_type=mime_type),
        )
        try:
            result = self._client.process_document(request=request)
        except google_exceptions.GoogleAPIError as exc:
            raise JobFailedError(
                f"Document AI online processing failed on {processor_id}: {exc}",
                payload=str(exc),
            ) from exc
        return json.loads(documentai.Document.to_json(result.document))
