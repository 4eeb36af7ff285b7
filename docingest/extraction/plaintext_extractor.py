from docingest.extraction.base import BaseExtractor, decode_text
from docingest.extraction.metadata import calculate_text_metadata
from docingest.extraction.models import ExtractionResult
from docingest.logging.logger import Log


class PlainTextExtractor(BaseExtractor):
    """Identity transform for plain text. Empty input yields empty text."""

    FORMAT = "plaintext"

    def extract(self, data: bytes) -> ExtractionResult:
        text = decode_text(data) if data else ""
        if not text:
            Log.info("Plain text content is empty, returning empty result")
        return ExtractionResult(
            text=text,
            metadata=calculate_text_metadata(text, format=self.FORMAT),
        )
