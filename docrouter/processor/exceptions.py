class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class InvalidBatchError(ProcessorError):
    """Raised when a batch is rejected before any remote call."""


class BatchFailedError(ProcessorError):
    """Raised once per request when a batch-fatal error aborted the run."""

    def __init__(self, message: str, stage: str, batch_id: str = "") -> None:
        super().__init__(message)
        self.stage = stage
        self.batch_id = batch_id


class DocumentOutcomeError(ProcessorError):
    """A per-document failure. Reported as a FailureEntry, never raised."""

    kind: str = "error"

    def __init__(self, reason: str, type_name: str | None = None) -> None:
        super().__init__(reason)
        self.type_name = type_name


class NoClassificationError(DocumentOutcomeError):
    """No classifier output matched the document or its confidence was too low."""

    kind = "classification"


class NoProcessorForTypeError(DocumentOutcomeError):
    """The document's type has no configured extraction processor."""

    kind = "no processor configured"

    def __init__(self, type_name: str) -> None:
        super().__init__(f"No processor configured for type '{type_name}'", type_name)


class ExtractionFailedError(DocumentOutcomeError):
    """The extraction job of the document's type bucket failed."""

    kind = "extraction"
