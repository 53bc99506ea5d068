"""In-memory blob store adapter.

No network calls. Useful for local development and tests, and as a template
for implementing other storage backends. Implement BaseBlobStore and register
the backend in BlobStoreFactory.
"""

from docrouter.storage.base import BaseBlobStore
from docrouter.storage.exceptions import StorageReadError


class InMemoryBlobStore(BaseBlobStore):
    """Stores objects in a dict keyed by object key."""

    def __init__(self, bucket_name: str = "memory") -> None:
        self._bucket_name = bucket_name
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str | None] = {}

    def put(self, data: bytes, key: str, content_type: str | None = None) -> None:
        self.objects[key] = bytes(data)
        self.content_types[key] = content_type

    def list_keys(self, prefix: str) -> list[str]:
        return [key for key in self.objects if key.startswith(prefix)]

    def get(self, key: str) -> bytes:
        try:
            return self.objects[key]
        except KeyError as exc:
            raise StorageReadError(f"Object not found: {key}") from exc

    def uri(self, key: str) -> str:
        return f"mem://{self._bucket_name}/{key}"

    def key_from_uri(self, uri: str) -> str:
        bucket_prefix = f"mem://{self._bucket_name}/"
        if uri.startswith(bucket_prefix):
            return uri[len(bucket_prefix):]
        return uri
