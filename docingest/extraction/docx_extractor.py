import io

import mammoth

from docingest.extraction.base import BaseExtractor
from docingest.extraction.exceptions import ExtractionError
from docingest.extraction.metadata import calculate_text_metadata
from docingest.extraction.models import ExtractionResult
from docingest.logging.logger import Log


class DocxExtractor(BaseExtractor):
    """Extracts raw text from DOCX using mammoth.

    Parser messages (e.g. ignored embedded elements) are kept as warnings.
    """

    FORMAT = "docx"

    def extract(self, data: bytes) -> ExtractionResult:
        if not data:
            raise ExtractionError("DOCX content is empty")
        try:
            result = mammoth.extract_raw_text(io.BytesIO(data))
        except Exception as exc:
            raise ExtractionError(f"DOCX parsing failed: {exc}") from exc

        text = result.value or ""
        warnings = [message.message for message in result.messages]
        if warnings:
            Log.info(f"DOCX extraction produced {len(warnings)} warnings: {warnings}")

        return ExtractionResult(
            text=text,
            metadata=calculate_text_metadata(text, format=self.FORMAT, warnings=warnings),
        )
