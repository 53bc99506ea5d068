from collections import Counter

from docrouter.processor.exceptions import InvalidBatchError
from docrouter.processor.models import InputDocument


def validate_documents(documents: list[InputDocument]) -> None:
    """Reject empty batches and filenames that would share a storage key.

    Raises:
        InvalidBatchError: if the batch cannot be processed.
    """
    if not documents:
        raise InvalidBatchError("No documents submitted")
    duplicates = sorted(name for name, count in Counter(d.local_id for d in documents).items() if count > 1)
    if duplicates:
        raise InvalidBatchError(f"Duplicate filenames in batch: {duplicates}")
    empty_names = [d for d in documents if not d.local_id.strip()]
    if empty_names:
        raise InvalidBatchError("Every document needs a filename")
