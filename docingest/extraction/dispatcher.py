from collections.abc import Mapping

from docingest.extraction.base import BaseExtractor
from docingest.extraction.models import ExtractionResult
from docingest.logging.logger import Log
from docingest.processor.models import DocumentFormat


class ExtractionDispatcher:
    """Routes document bytes to the extractor for their declared format.

    ``dispatch`` never raises for content problems: unsupported formats and
    extractor exceptions both come back as an empty result with a warning.
    """

    UNSUPPORTED_FORMAT = "unsupported"
    ERROR_FORMAT = "error"

    def __init__(self, extractors: Mapping[DocumentFormat, BaseExtractor]) -> None:
        missing = DocumentFormat.extractable() - set(extractors)
        if missing:
            raise ValueError(
                f"No extractor registered for formats: {sorted(fmt.value for fmt in missing)}"
            )
        self._extractors = dict(extractors)

    def dispatch(self, declared_format: DocumentFormat, data: bytes) -> ExtractionResult:
        extractor = (
            self._extractors.get(declared_format)
            if declared_format.supports_extraction
            else None
        )
        if extractor is None:
            Log.error(f"Unsupported file type for text extraction: {declared_format}")
            return ExtractionResult.degraded(
                format=self.UNSUPPORTED_FORMAT,
                warning=f"Unsupported file type: {declared_format}",
            )

        Log.info(f"Extracting {declared_format} content ({len(data)} bytes)")
        try:
            result = extractor.extract(data)
        except Exception as exc:
            Log.error(f"Text extraction failed for {declared_format} content: {exc}")
            return ExtractionResult.degraded(
                format=self.ERROR_FORMAT,
                warning=f"Extraction failed: {exc}",
            )

        Log.info(
            f"Text extraction completed: {len(result.text)} chars, "
            f"{result.metadata.word_count} words"
        )
        return result

    def close(self) -> None:
        for extractor in self._extractors.values():
            extractor.close()
