from docrouter.config.settings import Settings
from docrouter.storage.base import BaseBlobStore
from docrouter.storage.gcs_adapter import GcsBlobStoreAdapter
from docrouter.storage.memory_adapter import InMemoryBlobStore


class BlobStoreFactory:
    """Creates the configured blob store adapter."""

    BACKENDS: tuple[str, ...] = ("gcs", "memory")

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        backend = settings.storage_backend.lower()
        if backend == "memory":
            return InMemoryBlobStore(bucket_name=settings.gcs_bucket_name or "memory")
        if backend == "gcs":
            settings.require("gcs_bucket_name")
            return GcsBlobStoreAdapter(bucket_name=settings.gcs_bucket_name)
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
