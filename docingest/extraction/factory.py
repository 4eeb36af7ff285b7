from docingest.config.settings import Settings
from docingest.extraction.dispatcher import ExtractionDispatcher
from docingest.extraction.docx_extractor import DocxExtractor
from docingest.extraction.markdown_extractor import MarkdownExtractor
from docingest.extraction.pdf_extractor import PdfOcrExtractor
from docingest.extraction.plaintext_extractor import PlainTextExtractor
from docingest.ocr.client import OcrClient
from docingest.processor.models import DocumentFormat


class ExtractionDispatcherFactory:
    """Creates a dispatcher with one extractor per extractable format."""

    @classmethod
    def create(cls, settings: Settings, ocr_client: OcrClient | None = None) -> ExtractionDispatcher:
        ocr_client = ocr_client or OcrClient(
            api_url=settings.ocr_api_url,
            timeout_seconds=settings.ocr_api_timeout_seconds,
            language=settings.ocr_language,
        )
        return ExtractionDispatcher(
            {
                DocumentFormat.PDF: PdfOcrExtractor(ocr_client),
                DocumentFormat.DOCX: DocxExtractor(),
                DocumentFormat.MARKDOWN: MarkdownExtractor(),
                DocumentFormat.PLAINTEXT: PlainTextExtractor(),
            }
        )
