"""Batch-level upload and download policy on top of a blob store adapter."""

from dataclasses import replace

from docrouter.logging.logger import Log
from docrouter.processor.models import STRUCTURED_OUTPUT_EXTENSION, InputDocument
from docrouter.storage.base import BaseBlobStore
from docrouter.storage.exceptions import StorageError, StorageReadError, StorageWriteError


def input_key(batch_id: str, local_id: str) -> str:
    """Build the storage key of an input: input/{batch_id}/{local_id}"""
    return f"input/{batch_id}/{local_id}"


class BlobStoreAdapter:
    """Uploads batch inputs and downloads structured outputs."""

    def __init__(self, store: BaseBlobStore) -> None:
        self._store = store

    @property
    def store(self) -> BaseBlobStore:
        return self._store

    def upload(self, batch_id: str, documents: list[InputDocument]) -> dict[str, str]:
        """Write every document under its per-batch key.

        Returns:
            Mapping of InputDocument.local_id to storage key.

        Raises:
            StorageWriteError: if any write fails. The batch must be aborted.
        """
        keys: dict[str, str] = {}
        for document in documents:
            key = input_key(batch_id, document.local_id)
            try:
                self._store.put(document.content, key, content_type=document.mime_type)
            except StorageWriteError:
                raise
            except StorageError as exc:
                raise StorageWriteError(f"Upload of {key} failed: {exc}") from exc
            keys[document.local_id] = key
            Log.info(f"Uploaded {key} ({len(document.content)} bytes)")
        return keys

    def upload_documents(
        self, batch_id: str, documents: list[InputDocument]
    ) -> list[InputDocument]:
        """Upload and return copies of ``documents`` carrying their storage keys."""
        keys = self.upload(batch_id, documents)
        return [replace(document, storage_key=keys[document.local_id]) for document in documents]

    def list_and_download(self, prefix: str) -> list[tuple[str, bytes]]:
        """Download every structured-output object beneath ``prefix``.

        Objects that fail to download are logged and skipped.

        Raises:
            StorageReadError: if the prefix cannot be listed.
        """
        prefix = self._store.key_from_uri(prefix)
        keys = sorted(
            key
            for key in self._store.list_keys(prefix)
            if key.endswith(STRUCTURED_OUTPUT_EXTENSION)
        )
        Log.info(f"Found {len(keys)} output files under {prefix}")

        downloaded: list[tuple[str, bytes]] = []
        for key in keys:
            try:
                downloaded.append((key, self._store.get(key)))
            except StorageReadError as exc:
                Log.warning(f"Skipping output {key}: {exc}")
        return downloaded

    def uri(self, key: str) -> str:
        return self._store.uri(key)
