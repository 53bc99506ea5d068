import threading
import uuid

from docrouter.config.settings import Settings
from docrouter.decoding.decoder import OutputDecoder
from docrouter.jobs.job_client import AsyncJobClient
from docrouter.logging.logger import Log
from docrouter.processor.exceptions import BatchFailedError
from docrouter.processor.models import BatchContext, BatchResult, BatchStage, InputDocument
from docrouter.processor.pipeline import PipelineContext, PipelineStep
from docrouter.processor.steps import (
    ClassifyStep,
    CorrelateStep,
    ExtractStep,
    MergeStep,
    RouteStep,
    UploadStep,
)
from docrouter.processor.validation import validate_documents
from docrouter.routing.registry import ProcessorRegistry
from docrouter.routing.type_router import TypeRouter
from docrouter.storage.blob_store import BlobStoreAdapter


class BatchOrchestrator:
    """Runs one batch through the classification and routing pipeline.

    Pipeline: upload -> classify -> correlate -> route -> extract -> merge.
    Per-document problems are reported as FailureEntry outcomes; anything else
    aborts the batch with a single BatchFailedError.
    """

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    def process(
        self,
        documents: list[InputDocument],
        cancel_event: threading.Event | None = None,
        batch_id: str | None = None,
    ) -> BatchResult:
        """Run the pipeline and return every per-document outcome in input order.

        Raises:
            InvalidBatchError: if the batch is empty or has duplicate filenames.
            BatchFailedError: if a batch-fatal error aborted the run.
        """
        validate_documents(documents)
        batch = BatchContext(batch_id=batch_id or str(uuid.uuid4()), inputs=tuple(documents))
        context = PipelineContext(batch=batch, cancel_event=cancel_event)
        Log.info("Processing batch", batch_id=batch.batch_id, documents=len(documents))

        for step in self._steps:
            context.stage = step.stage
            Log.info(f"Batch stage {step.stage.value}", batch_id=batch.batch_id)
            try:
                context = step.run(context)
            except Exception as exc:
                failed_stage = context.stage
                context.stage = BatchStage.FAILED
                Log.exception(
                    f"Batch failed while {failed_stage.value}: {exc}", batch_id=batch.batch_id
                )
                raise BatchFailedError(
                    f"Batch failed while {failed_stage.value}: {exc}",
                    stage=failed_stage.value,
                    batch_id=batch.batch_id,
                ) from exc

        context.stage = BatchStage.DONE
        Log.info(
            "Batch done",
            batch_id=batch.batch_id,
            records=len(context.records),
            failures=len(context.failures),
        )
        return BatchResult(batch_id=batch.batch_id, outcomes=list(context.outcomes))


def build_orchestrator(
    settings: Settings,
    blob_store: BlobStoreAdapter,
    job_client: AsyncJobClient,
    registry: ProcessorRegistry | None = None,
) -> BatchOrchestrator:
    """Build a BatchOrchestrator with the default step sequence."""
    router = TypeRouter(registry or ProcessorRegistry.from_settings(settings))
    decoder = OutputDecoder(blob_store)
    return BatchOrchestrator(
        steps=[
            UploadStep(blob_store),
            ClassifyStep(job_client, settings.classifier_processor_id),
            CorrelateStep(decoder, router, settings.batch_classification_threshold),
            RouteStep(router),
            ExtractStep(job_client, decoder, router, settings.extraction_max_workers),
            MergeStep(),
        ]
    )
