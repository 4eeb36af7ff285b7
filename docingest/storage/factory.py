from pathlib import Path

from docingest.config.settings import Settings
from docingest.storage.base import BaseBlobStorage
from docingest.storage.exceptions import UnsupportedStorageBackendError
from docingest.storage.http_adapter import HttpBlobStorage
from docingest.storage.local_adapter import LocalBlobStorage


class BlobStorageFactory:
    """Creates the blob storage adapter named in settings."""

    BACKENDS: tuple[str, ...] = ("local", "http")

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStorage:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalBlobStorage(Path(settings.storage_root))
        if backend == "http":
            if not settings.storage_base_url.strip():
                raise ValueError("storage_base_url is required for storage_backend=http")
            return HttpBlobStorage(
                base_url=settings.storage_base_url,
                timeout_seconds=settings.storage_timeout_seconds,
            )
        raise UnsupportedStorageBackendError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
