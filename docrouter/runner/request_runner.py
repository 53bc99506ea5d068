import threading
from dataclasses import dataclass, field
from enum import Enum

from docrouter.config.exceptions import ConfigurationError
from docrouter.config.settings import Settings
from docrouter.logging.logger import Log
from docrouter.processor.exceptions import BatchFailedError, InvalidBatchError
from docrouter.processor.models import InputDocument
from docrouter.processor.orchestrator import BatchOrchestrator
from docrouter.processor.single_document import SingleDocumentProcessor
from docrouter.processor.summarizer import SummarizerPipeline
from docrouter.workflow.runner import WorkflowRunner


class Operation(str, Enum):
    CLASSIFY_AND_EXTRACT = "classify-and-extract"
    SUMMARIZE = "summarize"
    WORKFLOW = "workflow"
    CLASSIFY_SINGLE = "classify"


REQUIRED_SETTINGS: dict[Operation, tuple[str, ...]] = {
    Operation.CLASSIFY_AND_EXTRACT: ("classifier_processor_id",),
    Operation.SUMMARIZE: ("summarizer_processor_id",),
    Operation.WORKFLOW: ("workflow_name",),
    Operation.CLASSIFY_SINGLE: ("classifier_processor_id",),
}


@dataclass(frozen=True)
class RunResponse:
    """Outcome of one request, ready to be serialized by the HTTP layer."""

    ok: bool
    status_code: int = 200
    payload: dict[str, object] = field(default_factory=dict)
    error: str = ""
    details: str | None = None

    def body(self) -> dict[str, object]:
        if self.ok:
            return dict(self.payload)
        body: dict[str, object] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.payload)
        return body


class RequestRunner:
    """Run one request, catch exceptions, and shape the response."""

    def __init__(
        self,
        settings: Settings,
        orchestrator: BatchOrchestrator,
        summarizer: SummarizerPipeline,
        single_processor: SingleDocumentProcessor,
        workflow_runner: WorkflowRunner | None = None,
    ) -> None:
        self._settings = settings
        self._orchestrator = orchestrator
        self._summarizer = summarizer
        self._single_processor = single_processor
        self._workflow_runner = workflow_runner

    def run(
        self,
        operation: Operation,
        documents: list[InputDocument],
        cancel_event: threading.Event | None = None,
    ) -> RunResponse:
        """Execute ``operation`` over ``documents``. Never raises."""
        Log.info(f"Running {operation.value} for {len(documents)} documents")
        try:
            self._settings.require(*REQUIRED_SETTINGS[operation])
            payload = self._dispatch(operation, documents, cancel_event)
        except InvalidBatchError as exc:
            Log.warning(f"Rejected {operation.value} request: {exc}")
            return RunResponse(ok=False, status_code=400, error=str(exc))
        except ConfigurationError as exc:
            Log.error(f"{operation.value} is not configured: {exc}")
            return RunResponse(
                ok=False, status_code=500, error="Configuration error", details=str(exc)
            )
        except BatchFailedError as exc:
            Log.error(f"{operation.value} failed at stage {exc.stage}: {exc}")
            return RunResponse(
                ok=False,
                status_code=500,
                error="Internal server error",
                details=str(exc),
                payload={"stage": exc.stage, "batchId": exc.batch_id},
            )
        except Exception as exc:
            Log.exception(f"{operation.value} failed unexpectedly: {exc}")
            return RunResponse(
                ok=False, status_code=500, error="Internal server error", details=str(exc)
            )
        return RunResponse(ok=True, payload=payload)

    def _dispatch(
        self,
        operation: Operation,
        documents: list[InputDocument],
        cancel_event: threading.Event | None,
    ) -> dict[str, object]:
        if operation is Operation.CLASSIFY_AND_EXTRACT:
            result = self._orchestrator.process(documents, cancel_event)
            return {
                "message": "Batch processing completed",
                "batchId": result.batch_id,
                "results": result.to_dicts(),
            }
        if operation is Operation.SUMMARIZE:
            summaries = self._summarizer.process(documents, cancel_event)
            return {
                "message": "Summarization completed",
                "batchId": summaries.batch_id,
                "results": summaries.to_dicts(),
            }
        if operation is Operation.WORKFLOW:
            if self._workflow_runner is None:
                raise ConfigurationError("Workflow hand-off is not configured")
            outcome = self._workflow_runner.run(documents, cancel_event)
            return {
                "message": "Workflow completed",
                "batchId": outcome.batch_id,
                "results": outcome.result,
            }
        if len(documents) != 1:
            raise InvalidBatchError("Exactly one document is required")
        record = self._single_processor.process(documents[0])
        return {"message": "Document processed", "result": record.to_dict()}
