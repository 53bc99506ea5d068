import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from docrouter.processor.models import (
    BatchContext,
    BatchOutcome,
    BatchStage,
    ClassificationDecision,
    ExtractionRecord,
    FailureEntry,
    TypeBucket,
)


@dataclass(slots=True)
class PipelineContext:
    """Accumulates data as a batch moves through the pipeline states."""

    batch: BatchContext
    cancel_event: threading.Event | None = None
    stage: BatchStage = BatchStage.UPLOADING
    classification_prefix: str = ""
    decisions: list[ClassificationDecision] = field(default_factory=list)
    buckets: TypeBucket = field(default_factory=dict)
    records: list[ExtractionRecord] = field(default_factory=list)
    failures: list[FailureEntry] = field(default_factory=list)
    outcomes: list[BatchOutcome] = field(default_factory=list)


class PipelineStep(ABC):
    stage: BatchStage

    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
