from unittest.mock import MagicMock

import pytest
import requests
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud.storage.exceptions import DataCorruption

from docrouter.storage.blob_store import BlobStoreAdapter
from docrouter.storage.exceptions import StorageReadError, StorageWriteError
from docrouter.storage.gcs_adapter import GcsBlobStoreAdapter


def _make_adapter() -> tuple[GcsBlobStoreAdapter, MagicMock, MagicMock]:
    client = MagicMock()
    bucket = client.bucket.return_value
    adapter = GcsBlobStoreAdapter(bucket_name="docs", client=client)
    return adapter, client, bucket


class TestPut:
    def test_uploads_with_content_type(self) -> None:
        adapter, _client, bucket = _make_adapter()

        adapter.put(b"data", "input/b/a.pdf", content_type="application/pdf")

        bucket.blob.assert_called_once_with("input/b/a.pdf")
        bucket.blob.return_value.upload_from_string.assert_called_once_with(
            b"data", content_type="application/pdf"
        )

    def test_api_error_becomes_write_error(self) -> None:
        adapter, _client, bucket = _make_adapter()
        bucket.blob.return_value.upload_from_string.side_effect = google_exceptions.Forbidden("no")

        with pytest.raises(StorageWriteError, match="input/b/a.pdf"):
            adapter.put(b"data", "input/b/a.pdf")


class TestListKeys:
    def test_returns_blob_names(self) -> None:
        adapter, client, _bucket = _make_adapter()
        first, second = MagicMock(), MagicMock()
        first.name = "output/b/x-0.json"
        second.name = "output/b/y-0.json"
        client.list_blobs.return_value = iter([first, second])

        assert adapter.list_keys("output/b/") == ["output/b/x-0.json", "output/b/y-0.json"]
        client.list_blobs.assert_called_once_with("docs", prefix="output/b/")

    def test_api_error_becomes_read_error(self) -> None:
        adapter, client, _bucket = _make_adapter()
        client.list_blobs.side_effect = google_exceptions.NotFound("bucket")

        with pytest.raises(StorageReadError):
            adapter.list_keys("output/b/")


class TestGet:
    def test_downloads_bytes(self) -> None:
        adapter, _client, bucket = _make_adapter()
        bucket.blob.return_value.download_as_bytes.return_value = b"{}"

        assert adapter.get("output/b/x-0.json") == b"{}"

    def test_api_error_becomes_read_error(self) -> None:
        adapter, _client, bucket = _make_adapter()
        bucket.blob.return_value.download_as_bytes.side_effect = google_exceptions.NotFound("x")

        with pytest.raises(StorageReadError):
            adapter.get("output/b/x-0.json")


class TestUri:
    def test_gs_uri(self) -> None:
        adapter, _client, _bucket = _make_adapter()
        assert adapter.uri("input/b/a.pdf") == "gs://docs/input/b/a.pdf"

    def test_key_from_uri(self) -> None:
        adapter, _client, _bucket = _make_adapter()
        assert adapter.key_from_uri("gs://docs/output/b/") == "output/b/"
        assert adapter.key_from_uri("output/b/") == "output/b/"


class TestTransportErrors:
    def test_connection_error_on_upload_becomes_write_error(self) -> None:
        adapter, _client, bucket = _make_adapter()
        bucket.blob.return_value.upload_from_string.side_effect = requests.ConnectionError("reset")

        with pytest.raises(StorageWriteError):
            adapter.put(b"data", "input/b/a.pdf")

    def test_auth_transport_error_on_listing_becomes_read_error(self) -> None:
        adapter, client, _bucket = _make_adapter()
        client.list_blobs.side_effect = google_auth_exceptions.TransportError("metadata server")

        with pytest.raises(StorageReadError):
            adapter.list_keys("output/b/")

    def test_checksum_mismatch_becomes_read_error(self) -> None:
        adapter, _client, bucket = _make_adapter()
        bucket.blob.return_value.download_as_bytes.side_effect = DataCorruption(None, "md5 mismatch")

        with pytest.raises(StorageReadError, match="md5 mismatch"):
            adapter.get("out/b-0.json")

    def test_corrupt_object_is_skipped_by_list_and_download(self) -> None:
        adapter, client, bucket = _make_adapter()
        names = ["out/a-0.json", "out/b-0.json"]
        listed = []
        for name in names:
            blob = MagicMock()
            blob.name = name
            listed.append(blob)
        client.list_blobs.return_value = listed

        def blob_for(key: str) -> MagicMock:
            blob = MagicMock()
            if key == "out/b-0.json":
                blob.download_as_bytes.side_effect = DataCorruption(None, "md5 mismatch")
            else:
                blob.download_as_bytes.return_value = b"{}"
            return blob

        bucket.blob.side_effect = blob_for

        result = BlobStoreAdapter(adapter).list_and_download("out/")

        assert [key for key, _ in result] == ["out/a-0.json"]
