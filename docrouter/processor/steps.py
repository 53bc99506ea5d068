import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import replace
from itertools import chain

from docrouter.decoding.decoder import OutputDecoder
from docrouter.jobs.exceptions import JobFailedError, JobSubmissionError
from docrouter.jobs.job_client import AsyncJobClient
from docrouter.logging.logger import Log
from docrouter.processor.exceptions import (
    ExtractionFailedError,
    NoClassificationError,
    NoProcessorForTypeError,
)
from docrouter.processor.models import (
    AnnotatedDocument,
    BatchOutcome,
    BatchStage,
    ClassificationDecision,
    ExtractionRecord,
    FailureEntry,
    InputDocument,
)
from docrouter.processor.pipeline import PipelineContext, PipelineStep
from docrouter.routing.correlator import correlate
from docrouter.routing.type_router import TypeRouter
from docrouter.storage.blob_store import BlobStoreAdapter
from docrouter.storage.exceptions import StorageReadError

CLASSIFICATION_STAGE = "classification"
EXTRACTION_STAGE = "extraction"

# How often the parallel extraction loop checks the caller's cancel event
_CANCEL_CHECK_SECONDS = 0.5


class UploadStep(PipelineStep):
    stage = BatchStage.UPLOADING

    def __init__(self, blob_store: BlobStoreAdapter) -> None:
        self._blob_store = blob_store

    def run(self, context: PipelineContext) -> PipelineContext:
        batch = context.batch
        stored = self._blob_store.upload_documents(batch.batch_id, list(batch.inputs))
        context.batch = replace(batch, inputs=tuple(stored))
        Log.info(f"Batch {batch.batch_id}: uploaded {len(stored)} documents")
        return context


class ClassifyStep(PipelineStep):
    stage = BatchStage.CLASSIFYING

    def __init__(self, job_client: AsyncJobClient, classifier_processor_id: str) -> None:
        self._job_client = job_client
        self._classifier_processor_id = classifier_processor_id

    def run(self, context: PipelineContext) -> PipelineContext:
        prefix = context.batch.output_prefix(CLASSIFICATION_STAGE)
        handle = self._job_client.submit(
            self._classifier_processor_id, list(context.batch.inputs), prefix
        )
        context.classification_prefix = self._job_client.await_completion(
            handle, context.cancel_event
        )
        return context


class CorrelateStep(PipelineStep):
    """Builds exactly one ClassificationDecision per input document."""

    stage = BatchStage.CORRELATING

    def __init__(self, decoder: OutputDecoder, router: TypeRouter, threshold: float) -> None:
        self._decoder = decoder
        self._router = router
        self._threshold = threshold

    def run(self, context: PipelineContext) -> PipelineContext:
        inputs = list(context.batch.inputs)
        outputs = self._decoder.decode(context.classification_prefix)
        matched = self._group_by_input(outputs, inputs)

        for document in inputs:
            decision = self._decide(document, matched.get(document.local_id, []))
            context.decisions.append(decision)
            if decision.resolved_type is not None:
                Log.info(
                    f"Classified {document.local_id} as {decision.resolved_type} "
                    f"({decision.confidence:.2f})"
                )
                continue
            reason = (
                "Could not classify document or confidence too low."
                if decision.correlated
                else "No classifier output matched this document."
            )
            Log.warning(f"{document.local_id}: {reason}")
            context.failures.append(
                FailureEntry.from_error(document, NoClassificationError(reason))
            )
        return context

    @staticmethod
    def _group_by_input(
        outputs: list[AnnotatedDocument],
        inputs: list[InputDocument],
    ) -> dict[str, list[AnnotatedDocument]]:
        matched: dict[str, list[AnnotatedDocument]] = {}
        for output in outputs:
            document = correlate(output.source_output_key, inputs)
            if document is None:
                Log.warning(f"No input matches classifier output {output.source_output_key}")
                continue
            matched.setdefault(document.local_id, []).append(output)
        return matched

    def _decide(
        self,
        document: InputDocument,
        outputs: list[AnnotatedDocument],
    ) -> ClassificationDecision:
        if not outputs:
            return ClassificationDecision(input=document, correlated=False)
        # shards of one input are classified together
        top = self._router.top_label(
            chain.from_iterable(o.labels for o in outputs), self._threshold
        )
        output_key = outputs[0].source_output_key
        if top is None:
            return ClassificationDecision(input=document, correlated=True, output_key=output_key)
        type_name, confidence = top
        return ClassificationDecision(
            input=document,
            resolved_type=type_name,
            confidence=confidence,
            correlated=True,
            output_key=output_key,
        )


class RouteStep(PipelineStep):
    stage = BatchStage.ROUTING

    def __init__(self, router: TypeRouter) -> None:
        self._router = router

    def run(self, context: PipelineContext) -> PipelineContext:
        context.buckets = self._router.bucketize(context.decisions)
        Log.info(
            f"Batch {context.batch.batch_id}: buckets "
            + ", ".join(f"{t}={len(docs)}" for t, docs in context.buckets.items())
        )
        return context


class ExtractStep(PipelineStep):
    """Runs one extraction job per type bucket.

    Failures are scoped to the bucket; cancellation aborts the batch. In
    parallel mode any error that escapes one bucket stops the waits of the
    others before it is re-raised.
    """

    stage = BatchStage.EXTRACTING

    def __init__(
        self,
        job_client: AsyncJobClient,
        decoder: OutputDecoder,
        router: TypeRouter,
        max_workers: int = 1,
    ) -> None:
        self._job_client = job_client
        self._decoder = decoder
        self._router = router
        self._max_workers = max(1, int(max_workers))

    def run(self, context: PipelineContext) -> PipelineContext:
        buckets = [(t, docs) for t, docs in context.buckets.items() if docs]
        if self._max_workers == 1 or len(buckets) <= 1:
            results = [
                self._extract_bucket(context, t, docs, context.cancel_event) for t, docs in buckets
            ]
        else:
            results = self._extract_parallel(context, buckets)

        for records, failures in results:
            context.records.extend(records)
            context.failures.extend(failures)
        return context

    def _extract_parallel(
        self,
        context: PipelineContext,
        buckets: list[tuple[str, list[InputDocument]]],
    ) -> list[tuple[list[ExtractionRecord], list[FailureEntry]]]:
        abort = threading.Event()
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(buckets))) as executor:
            futures: list[Future] = [
                executor.submit(self._extract_bucket, context, t, docs, abort) for t, docs in buckets
            ]
            pending = set(futures)
            try:
                while pending:
                    done, pending = wait(
                        pending, timeout=_CANCEL_CHECK_SECONDS, return_when=FIRST_EXCEPTION
                    )
                    for future in done:
                        future.result()
                    if context.cancel_event is not None and context.cancel_event.is_set():
                        abort.set()
            except Exception:
                abort.set()
                raise
        return [future.result() for future in futures]

    def _extract_bucket(
        self,
        context: PipelineContext,
        type_name: str,
        documents: list[InputDocument],
        cancel_event: threading.Event | None,
    ) -> tuple[list[ExtractionRecord], list[FailureEntry]]:
        processor_id = self._router.resolve_processor(type_name)
        if processor_id is None:
            Log.warning(f"No processor configured for type {type_name}")
            error = NoProcessorForTypeError(type_name)
            return [], [FailureEntry.from_error(d, error) for d in documents]

        Log.info("Extracting bucket", type=type_name, documents=len(documents))
        prefix = context.batch.output_prefix(EXTRACTION_STAGE, type_name)
        try:
            handle = self._job_client.submit(processor_id, documents, prefix)
            output_prefix = self._job_client.await_completion(handle, cancel_event)
            outputs = self._decoder.decode(output_prefix)
        except (JobSubmissionError, JobFailedError, StorageReadError) as exc:
            Log.error(f"Extraction failed: {exc}", type=type_name, documents=len(documents))
            reason = str(exc)
            payload = getattr(exc, "payload", None)
            if payload:
                reason = f"{reason}: {payload}"
            error = ExtractionFailedError(reason, type_name)
            return [], [FailureEntry.from_error(d, error) for d in documents]

        records = []
        for output in outputs:
            source = correlate(output.source_output_key, documents)
            if source is None:
                Log.warning(f"No input matches extraction output {output.source_output_key}")
            records.append(
                ExtractionRecord(
                    source_input=source,
                    type=type_name,
                    fields=output.fields(),
                    output_key=output.source_output_key,
                )
            )
        return records, []


class MergeStep(PipelineStep):
    """Orders records and failures by the position of their input document."""

    stage = BatchStage.MERGING

    def run(self, context: PipelineContext) -> PipelineContext:
        positions = {d.local_id: i for i, d in enumerate(context.batch.inputs)}
        unattributed = len(positions)

        def position(outcome: BatchOutcome) -> int:
            document = (
                outcome.source_input if isinstance(outcome, ExtractionRecord) else outcome.input
            )
            if document is None:
                return unattributed
            return positions.get(document.local_id, unattributed)

        context.outcomes = sorted([*context.records, *context.failures], key=position)
        return context
