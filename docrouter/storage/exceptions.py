class StorageError(Exception):
    """Base exception for blob store failures."""


class StorageWriteError(StorageError):
    """Raised when an object cannot be written to the blob store."""


class StorageReadError(StorageError):
    """Raised when objects cannot be listed or read from the blob store."""
