from docingest.extraction.base import BaseExtractor
from docingest.extraction.exceptions import ExtractionError
from docingest.extraction.metadata import calculate_text_metadata
from docingest.extraction.models import ExtractionResult
from docingest.logging.logger import Log
from docingest.ocr.client import OcrClient
from docingest.ocr.exceptions import OcrError


class PdfOcrExtractor(BaseExtractor):
    """Extracts PDF text by delegating entirely to the external OCR service.

    OCR failures of any kind (timeout, transport, non-2xx, ``success: false``)
    degrade to an empty result with a warning instead of raising.
    """

    FORMAT = "pdf"
    EXTRACTION_METHOD = "external-ocr-api"

    def __init__(self, ocr_client: OcrClient) -> None:
        self._ocr_client = ocr_client

    def extract(self, data: bytes) -> ExtractionResult:
        if not data:
            raise ExtractionError("PDF content is empty")

        try:
            ocr = self._ocr_client.recognize(data)
        except OcrError as exc:
            Log.error(
                f"External OCR API failed, returning empty result: {exc} "
                f"(api_response_time={exc.elapsed_seconds}s)"
            )
            return ExtractionResult.degraded(
                format=self.FORMAT,
                warning=(
                    f"External OCR API failed: {exc} "
                    f"(api_response_time={exc.elapsed_seconds}s)"
                ),
                extraction_method=self.EXTRACTION_METHOD,
                api_response_time=exc.elapsed_seconds,
            )

        result = ExtractionResult(
            text=ocr.extracted_text,
            metadata=calculate_text_metadata(
                ocr.extracted_text,
                format=self.FORMAT,
                extraction_method=self.EXTRACTION_METHOD,
                page_count=ocr.page_count,
                ocr_processing_time=ocr.execution_time_seconds,
                ocr_language=ocr.language,
                api_response_time=ocr.api_response_time,
            ),
        )
        Log.info(
            f"PDF OCR extraction completed: {ocr.page_count} pages, "
            f"{result.metadata.word_count} words, "
            f"api_response_time={ocr.api_response_time}s"
        )
        return result

    def close(self) -> None:
        self._ocr_client.close()
