from docrouter.decoding.document_parser import parse_document
from docrouter.decoding.exceptions import DecodingError
from docrouter.jobs.base import BaseJobEngine
from docrouter.jobs.exceptions import JobFailedError
from docrouter.logging.logger import Log
from docrouter.processor.exceptions import (
    BatchFailedError,
    ExtractionFailedError,
    NoClassificationError,
    NoProcessorForTypeError,
)
from docrouter.processor.models import (
    BatchOutcome,
    BatchStage,
    ExtractionRecord,
    FailureEntry,
    InputDocument,
)
from docrouter.processor.validation import validate_documents
from docrouter.routing.type_router import TypeRouter


class SingleDocumentProcessor:
    """Online classify-then-extract for one document, without storage."""

    def __init__(
        self,
        engine: BaseJobEngine,
        router: TypeRouter,
        classifier_processor_id: str,
        threshold: float,
    ) -> None:
        self._engine = engine
        self._router = router
        self._classifier_processor_id = classifier_processor_id
        self._threshold = threshold

    def process(self, document: InputDocument) -> BatchOutcome:
        """Classify and extract ``document`` synchronously.

        Raises:
            InvalidBatchError: if the document has no filename.
            BatchFailedError: if the classifier call itself failed.
        """
        validate_documents([document])
        Log.info(f"Classifying {document.local_id} online")
        try:
            payload = self._engine.process_inline(
                self._classifier_processor_id, document.content, document.mime_type
            )
            annotated = parse_document(document.local_id, payload)
        except Exception as exc:
            Log.exception(f"Online classification of {document.local_id} failed: {exc}")
            raise BatchFailedError(
                f"Batch failed while {BatchStage.CLASSIFYING.value}: {exc}",
                stage=BatchStage.CLASSIFYING.value,
            ) from exc

        top = self._router.classify_decision(annotated, self._threshold)
        if top is None:
            Log.warning(f"{document.local_id}: no label reached {self._threshold}")
            return FailureEntry.from_error(
                document, NoClassificationError("Could not classify document or confidence too low.")
            )
        type_name = self._router.canonical_type(top[0])
        Log.info(f"Classified {document.local_id} as {type_name} ({top[1]:.2f})")

        processor_id = self._router.resolve_processor(type_name)
        if processor_id is None:
            return FailureEntry.from_error(document, NoProcessorForTypeError(type_name))

        try:
            payload = self._engine.process_inline(processor_id, document.content, document.mime_type)
            extracted = parse_document(document.local_id, payload)
        except (JobFailedError, DecodingError) as exc:
            Log.error(f"Online extraction of {document.local_id} failed: {exc}")
            return FailureEntry.from_error(document, ExtractionFailedError(str(exc), type_name))
        return ExtractionRecord(
            source_input=document,
            type=type_name,
            fields=extracted.fields(),
            output_key=document.local_id,
        )
