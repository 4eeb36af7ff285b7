import uuid
from pathlib import Path

from docingest.storage.base import BaseBlobStorage, sanitize_filename
from docingest.storage.exceptions import BlobNotFoundError, StorageError


class LocalBlobStorage(BaseBlobStorage):
    """Stores blobs as files under a root directory.

    Storage refs are paths relative to the root: ``{uuid}/{sanitized name}``.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    def store(self, data: bytes, suggested_name: str) -> str:
        storage_ref = f"{uuid.uuid4()}/{sanitize_filename(suggested_name)}"
        path = self._root / storage_ref
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to store blob {storage_ref}: {exc}") from exc
        return storage_ref

    def fetch(self, storage_ref: str) -> bytes:
        path = self._resolve_path(storage_ref)
        if not path.is_file():
            raise BlobNotFoundError(f"Blob not found: {storage_ref}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read blob {storage_ref}: {exc}") from exc

    def _resolve_path(self, storage_ref: str) -> Path:
        root = self._root.resolve()
        path = (root / storage_ref).resolve()
        if not path.is_relative_to(root):
            raise StorageError(f"Storage ref escapes storage root: {storage_ref}")
        return path
