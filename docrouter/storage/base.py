from abc import ABC, abstractmethod


class BaseBlobStore(ABC):
    """Contract for all blob store adapters."""

    @abstractmethod
    def put(self, data: bytes, key: str, content_type: str | None = None) -> None:
        """Write ``data`` under ``key``.

        Raises:
            StorageWriteError: if the object cannot be written.
        """

    @abstractmethod
    def list_keys(self, prefix: str) -> list[str]:
        """Return every object key beneath ``prefix``.

        Raises:
            StorageReadError: if listing fails.
        """

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the bytes stored under ``key``.

        Raises:
            StorageReadError: if the object cannot be read.
        """

    @abstractmethod
    def uri(self, key: str) -> str:
        """Return the fully qualified URI the remote engine uses for ``key``."""

    @abstractmethod
    def key_from_uri(self, uri: str) -> str:
        """Inverse of ``uri``; keys are returned unchanged."""
