import re
from abc import ABC, abstractmethod

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9._\-]")


def sanitize_filename(filename: str) -> str:
    """Strip directory components and replace characters unsafe in blob keys."""
    basename = filename.replace("\\", "/").rsplit("/", 1)[-1]
    safe = _UNSAFE_NAME_CHARS.sub("_", basename)
    return safe[:200] or "upload"


class BaseBlobStorage(ABC):
    """Contract for all blob storage adapters."""

    @abstractmethod
    def store(self, data: bytes, suggested_name: str) -> str:
        """Persist raw bytes and return an opaque storage ref.

        Raises:
            StorageError: if the blob could not be written.
        """

    @abstractmethod
    def fetch(self, storage_ref: str) -> bytes:
        """Read raw bytes for a storage ref.

        Raises:
            BlobNotFoundError: if no blob exists for the ref.
            StorageError: on any other read failure.
        """

    def close(self) -> None:
        """Release resources held by the adapter. No-op by default."""
