from dataclasses import dataclass, field
from enum import Enum

STRUCTURED_OUTPUT_EXTENSION = ".json"


class BatchStage(str, Enum):
    """States of one batch classification-and-routing run."""

    UPLOADING = "uploading"
    CLASSIFYING = "classifying"
    CORRELATING = "correlating"
    ROUTING = "routing"
    EXTRACTING = "extracting"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class InputDocument:
    """A client-submitted file. ``storage_key`` is assigned on upload."""

    local_id: str
    content: bytes = field(repr=False)
    mime_type: str
    storage_key: str = ""


@dataclass(frozen=True)
class BatchContext:
    """Identity and key layout of one batch request."""

    batch_id: str
    inputs: tuple[InputDocument, ...] = ()
    output_prefixes: dict[str, str] = field(default_factory=dict)

    def output_prefix(self, stage: str, type_name: str | None = None) -> str:
        """Build ``output/{batch_id}/{stage}/[{type}/]``."""
        prefix = self.output_prefixes.get(stage) or f"output/{self.batch_id}/{stage}/"
        if type_name:
            prefix = f"{prefix}{type_name}/"
        return prefix


@dataclass(frozen=True)
class Label:
    """One typed annotation of a decoded output document."""

    type: str
    confidence: float = 0.0
    mention_text: str = ""
    normalized_value: str | None = None

    @property
    def value(self) -> str:
        return self.mention_text or self.normalized_value or ""


@dataclass(frozen=True)
class AnnotatedDocument:
    """A parsed structured-output file produced by the remote engine."""

    source_output_key: str
    raw_text: str = ""
    labels: tuple[Label, ...] = ()

    def fields(self) -> dict[str, str]:
        """Label values keyed by label type; later labels of a type win."""
        return {label.type: label.value for label in self.labels if label.type}


@dataclass(frozen=True)
class ClassificationDecision:
    """Outcome of classifying exactly one input document."""

    input: InputDocument
    resolved_type: str | None = None
    confidence: float | None = None
    correlated: bool = False
    output_key: str | None = None


TypeBucket = dict[str, list[InputDocument]]


@dataclass(frozen=True)
class ExtractionRecord:
    """Fields extracted from one output document of a type bucket."""

    source_input: InputDocument | None
    type: str
    fields: dict[str, str] = field(default_factory=dict)
    output_key: str = ""

    @property
    def correlated(self) -> bool:
        return self.source_input is not None

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.source_input.local_id if self.source_input else None,
            "type": self.type,
            "fields": dict(self.fields),
            "sourceFile": self.output_key,
            "correlated": self.correlated,
        }


@dataclass(frozen=True)
class FailureEntry:
    """A per-document failure reported inline with successful records."""

    input: InputDocument
    error: str
    reason: str
    type: str | None = None

    @classmethod
    def from_error(cls, document: InputDocument, error: Exception) -> "FailureEntry":
        """Build an entry from a DocumentOutcomeError (kind, reason, type_name)."""
        return cls(
            input=document,
            error=getattr(error, "kind", "error"),
            reason=str(error),
            type=getattr(error, "type_name", None),
        )

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "file": self.input.local_id,
            "error": self.error,
            "reason": self.reason,
        }
        if self.type is not None:
            payload["type"] = self.type
        return payload


BatchOutcome = ExtractionRecord | FailureEntry


@dataclass(frozen=True)
class BatchResult:
    """Merged per-document outcomes of one batch."""

    batch_id: str
    outcomes: list[BatchOutcome] = field(default_factory=list)

    def to_dicts(self) -> list[dict[str, object]]:
        return [outcome.to_dict() for outcome in self.outcomes]


@dataclass(frozen=True)
class SummaryRecord:
    """Summary text of one decoded output document."""

    source_output_id: str
    summary_text: str

    def to_dict(self) -> dict[str, str]:
        return {"sourceOutputId": self.source_output_id, "summaryText": self.summary_text}


@dataclass(frozen=True)
class SummaryResult:
    """Summaries of one batch, one per decoded output."""

    batch_id: str
    summaries: list[SummaryRecord] = field(default_factory=list)

    def to_dicts(self) -> list[dict[str, str]]:
        return [summary.to_dict() for summary in self.summaries]
