import uuid

import httpx

from docingest.storage.base import BaseBlobStorage, sanitize_filename
from docingest.storage.exceptions import BlobNotFoundError, StorageError


class HttpBlobStorage(BaseBlobStorage):
    """Blob store reachable over HTTP.

    Blobs are written with PUT and read with GET. The storage ref is the
    blob's absolute URL, so documents can also point at pre-existing URLs.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: int,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def store(self, data: bytes, suggested_name: str) -> str:
        url = f"{self._base_url}/{uuid.uuid4()}/{sanitize_filename(suggested_name)}"
        try:
            response = self._client.put(url, content=data)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to store blob at {url}: {exc}") from exc
        return url

    def fetch(self, storage_ref: str) -> bytes:
        try:
            response = self._client.get(storage_ref)
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to fetch blob {storage_ref}: {exc}") from exc
        if response.status_code == httpx.codes.NOT_FOUND:
            raise BlobNotFoundError(f"Blob not found: {storage_ref}")
        if response.is_error:
            raise StorageError(
                f"Failed to fetch blob {storage_ref}: HTTP {response.status_code}"
            )
        return response.content

    def close(self) -> None:
        self._client.close()
