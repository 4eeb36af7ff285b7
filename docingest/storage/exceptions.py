class StorageError(Exception):
    """Raised when the blob store cannot be read or written."""


class BlobNotFoundError(StorageError):
    """Raised when no blob exists for a storage ref."""


class UnsupportedStorageBackendError(StorageError):
    """Raised when settings name a storage backend that does not exist."""
