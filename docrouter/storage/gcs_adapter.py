import requests
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud import storage
from google.cloud.storage.exceptions import DataCorruption, InvalidResponse

from docrouter.storage.base import BaseBlobStore
from docrouter.storage.exceptions import StorageReadError, StorageWriteError

# API, auth-transport, HTTP and checksum failures raised by the storage client
_CLIENT_ERRORS: tuple[type[Exception], ...] = (
    google_exceptions.GoogleAPIError,
    google_auth_exceptions.TransportError,
    requests.exceptions.RequestException,
    DataCorruption,
    InvalidResponse,
)


class GcsBlobStoreAdapter(BaseBlobStore):
    """Blob store adapter backed by a single Google Cloud Storage bucket."""

    def __init__(self, *, bucket_name: str, client: storage.Client | None = None) -> None:
        self._bucket_name = bucket_name
        self._client = client if client is not None else storage.Client()
        self._bucket = self._client.bucket(bucket_name)

    def put(self, data: bytes, key: str, content_type: str | None = None) -> None:
        try:
            self._bucket.blob(key).upload_from_string(data, content_type=content_type)
        except _CLIENT_ERRORS as exc:
            raise StorageWriteError(f"GCS upload of {key} failed: {exc}") from exc

    def list_keys(self, prefix: str) -> list[str]:
        try:
            return [blob.name for blob in self._client.list_blobs(self._bucket_name, prefix=prefix)]
        except _CLIENT_ERRORS as exc:
            raise StorageReadError(f"GCS listing of {prefix} failed: {exc}") from exc

    def get(self, key: str) -> bytes:
        try:
            return self._bucket.blob(key).download_as_bytes()
        except _CLIENT_ERRORS as exc:
            raise StorageReadError(f"GCS download of {key} failed: {exc}") from exc

    def uri(self, key: str) -> str:
        return f"gs://{self._bucket_name}/{key}"

    def key_from_uri(self, uri: str) -> str:
        bucket_prefix = f"gs://{self._bucket_name}/"
        if uri.startswith(bucket_prefix):
            return uri[len(bucket_prefix):]
        return uri
