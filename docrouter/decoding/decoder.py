from docrouter.decoding.document_parser import parse_document_bytes
from docrouter.decoding.exceptions import DecodingError
from docrouter.logging.logger import Log
from docrouter.processor.models import AnnotatedDocument
from docrouter.storage.blob_store import BlobStoreAdapter


class OutputDecoder:
    """Downloads and parses every structured output beneath a prefix."""

    def __init__(self, blob_store: BlobStoreAdapter) -> None:
        self._blob_store = blob_store

    def decode(self, prefix: str) -> list[AnnotatedDocument]:
        """Return one AnnotatedDocument per parseable output, in key order.

        An empty list is a valid result. Unparseable objects are skipped.

        Raises:
            StorageReadError: if the prefix cannot be listed.
        """
        documents: list[AnnotatedDocument] = []
        for key, raw in self._blob_store.list_and_download(prefix):
            try:
                documents.append(parse_document_bytes(key, raw))
            except DecodingError as exc:
                Log.warning(f"Skipping unparseable output {key}: {exc}")
        Log.info(f"Decoded {len(documents)} documents from {prefix}")
        return documents
