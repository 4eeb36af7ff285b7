from docingest.database.repositories.documents_repository import DocumentsRepository
from docingest.extraction.dispatcher import ExtractionDispatcher
from docingest.extraction.models import ExtractionResult
from docingest.logging.logger import Log
from docingest.processor.models import ProcessingStatus
from docingest.processor.pipeline import ExtractionContext, PipelineStep
from docingest.storage.base import BaseBlobStorage


class BeginExtractionStep(PipelineStep):
    def __init__(self, doc_repo: DocumentsRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: ExtractionContext) -> ExtractionContext:
        context.ticket = self._doc_repo.begin_extraction(context.document.id)
        Log.info(
            f"Document {context.document.id} marked as processing "
            f"(extraction version {context.ticket.extraction_version})"
        )
        return context


class FetchBlobStep(PipelineStep):
    def __init__(self, storage: BaseBlobStorage) -> None:
        self._storage = storage

    def run(self, context: ExtractionContext) -> ExtractionContext:
        storage_ref = context.document.storage_ref
        if storage_ref is None:
            raise ValueError(f"Document {context.document.id} has no storage ref")
        context.raw_bytes = self._storage.fetch(storage_ref)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes for document {context.document.id}")
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, dispatcher: ExtractionDispatcher) -> None:
        self._dispatcher = dispatcher

    def close(self) -> None:
        self._dispatcher.close()

    def run(self, context: ExtractionContext) -> ExtractionContext:
        context.result = self._dispatcher.dispatch(
            context.document.declared_format,
            context.raw_bytes,
        )
        Log.info(
            f"Extracted {len(context.result.text)} chars from document {context.document.id}"
        )
        return context


class PersistExtractionStep(PipelineStep):
    def __init__(self, doc_repo: DocumentsRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: ExtractionContext) -> ExtractionContext:
        if context.ticket is None or context.result is None:
            raise ValueError("ExtractionContext.ticket and result must be set before persist")
        context.applied = self._doc_repo.complete_extraction(
            context.ticket,
            extracted_text=context.result.text,
            extraction_metadata=context.result.metadata.to_dict(),
            stage_status=ProcessingStatus.SUCCESS,
        )
        _log_completion(context)
        return context


class RecordExtractionFailureStep(PipelineStep):
    """Keeps the document usable after an unexpected extraction failure.

    Persists empty text with an ``error`` metadata marker, closes the processing
    record as failed and moves the document to 'ready'.
    """

    ERROR_FORMAT = "error"

    def __init__(self, doc_repo: DocumentsRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: ExtractionContext) -> ExtractionContext:
        if context.ticket is None:
            raise ValueError("ExtractionContext.ticket must be set before recording a failure")
        context.result = ExtractionResult.degraded(
            format=self.ERROR_FORMAT,
            warning=f"Extraction failed: {context.error_message}",
        )
        context.applied = self._doc_repo.complete_extraction(
            context.ticket,
            extracted_text=context.result.text,
            extraction_metadata=context.result.metadata.to_dict(),
            stage_status=ProcessingStatus.FAILED,
            error_message=context.error_message,
        )
        _log_completion(context)
        return context


def _log_completion(context: ExtractionContext) -> None:
    if context.applied:
        Log.info(f"Document {context.document.id} is ready")
    else:
        Log.warning(
            f"Extraction result for document {context.document.id} discarded: "
            "a newer extraction attempt has started"
        )
