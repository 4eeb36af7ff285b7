from abc import ABC, abstractmethod

from docingest.extraction.models import ExtractionResult


def decode_text(data: bytes) -> str:
    """Decode uploaded text as UTF-8, dropping a BOM and replacing invalid bytes."""
    return data.decode("utf-8-sig", errors="replace")


class BaseExtractor(ABC):
    """Contract for all format extractors."""

    @abstractmethod
    def extract(self, data: bytes) -> ExtractionResult:
        """Convert raw document bytes into text and metadata.

        Args:
            data: Raw file content as fetched from storage.

        Returns:
            ExtractionResult whose counts are computed from its own text.

        Raises:
            ExtractionError: if the content cannot be parsed at all.
        """

    def close(self) -> None:
        """Release resources held by the extractor. No-op by default."""
