import uuid
from collections.abc import Iterable
from concurrent.futures import Executor
from typing import Any

from docingest.config.settings import Settings
from docingest.database.repositories.documents_repository import DocumentsRepository
from docingest.database.repositories.processing_records_repository import (
    ProcessingRecordsRepository,
)
from docingest.extraction.factory import ExtractionDispatcherFactory
from docingest.extraction.models import ExtractionResult
from docingest.logging.logger import Log
from docingest.ocr.client import OcrClient
from docingest.processor.exceptions import (
    ProcessorError,
    UploadFailedError,
    UploadRejectedError,
)
from docingest.processor.formats import format_for_content_type
from docingest.processor.models import (
    BatchUploadResult,
    Document,
    DocumentStatus,
    FileDescriptor,
    ProcessingRecord,
    ProcessingStage,
    ProcessingStatus,
    UploadError,
)
from docingest.processor.pipeline import ExtractionContext, ExtractionPipeline
from docingest.processor.steps import (
    BeginExtractionStep,
    ExtractTextStep,
    FetchBlobStep,
    PersistExtractionStep,
    RecordExtractionFailureStep,
)
from docingest.storage.base import BaseBlobStorage
from docingest.storage.exceptions import BlobNotFoundError, StorageError
from docingest.storage.factory import BlobStorageFactory
from docingest.worker.scheduler import ExtractionScheduler


class DocumentProcessor:
    """Owns the document lifecycle from upload to a usable 'ready' state.

    Upload:     uploading -> processing (extractable format, extraction scheduled)
                uploading -> ready      (unsupported format, no extraction)
                uploading -> failed     (blob could not be stored)
    Extraction: processing -> ready, whatever the extraction outcome.
    """

    def __init__(
        self,
        *,
        doc_repo: DocumentsRepository,
        processing_repo: ProcessingRecordsRepository,
        storage: BaseBlobStorage,
        pipeline: ExtractionPipeline,
        scheduler: ExtractionScheduler,
        max_upload_size_bytes: int,
    ) -> None:
        self._doc_repo = doc_repo
        self._processing_repo = processing_repo
        self._storage = storage
        self._pipeline = pipeline
        self._scheduler = scheduler
        self._max_upload_size_bytes = max_upload_size_bytes

    def create_document(
        self,
        owner_id: str | None,
        file: FileDescriptor,
        metadata: dict[str, Any] | None = None,
    ) -> Document:
        """Store an upload and schedule its text extraction.

        Returns without waiting for extraction.

        Raises:
            UploadRejectedError: if the file exceeds the upload size limit.
            UploadFailedError: if the blob could not be stored (document is 'failed').
        """
        if file.size_bytes > self._max_upload_size_bytes:
            raise UploadRejectedError(
                f"File '{file.original_name}' is {file.size_bytes} bytes; "
                f"limit is {self._max_upload_size_bytes} bytes"
            )

        declared_format = format_for_content_type(file.content_type)
        document_id = str(uuid.uuid4())
        self._doc_repo.insert(document_id, owner_id, file, declared_format, metadata or {})
        Log.info(
            f"Document {document_id} created for '{file.original_name}' "
            f"({declared_format}, {file.size_bytes} bytes)"
        )

        try:
            storage_ref = self._storage.store(file.content, file.original_name)
        except StorageError as exc:
            self._processing_repo.record_stage(
                document_id, ProcessingStage.UPLOAD, ProcessingStatus.FAILED, str(exc)
            )
            self._doc_repo.update_status(document_id, DocumentStatus.FAILED)
            Log.error(f"Upload of document {document_id} failed: {exc}")
            raise UploadFailedError(
                f"Failed to store upload for document {document_id}: {exc}"
            ) from exc

        self._doc_repo.attach_blob(document_id, storage_ref)
        self._processing_repo.record_stage(
            document_id, ProcessingStage.UPLOAD, ProcessingStatus.SUCCESS
        )

        if declared_format.supports_extraction:
            self._doc_repo.update_status(document_id, DocumentStatus.PROCESSING)
            self._scheduler.submit(document_id, self.process_document_text)
        else:
            self._doc_repo.update_status(document_id, DocumentStatus.READY)
            Log.info(f"Document {document_id} is ready; no extraction for {file.content_type}")

        return self._doc_repo.find_by_id(document_id)

    def create_documents(
        self,
        owner_id: str | None,
        files: Iterable[FileDescriptor],
        metadata: dict[str, Any] | None = None,
    ) -> BatchUploadResult:
        """Ingest several files; a rejected or failed file does not stop the batch."""
        batch = BatchUploadResult()
        for file in files:
            try:
                batch.documents.append(self.create_document(owner_id, file, metadata))
            except ProcessorError as exc:
                batch.errors.append(UploadError(filename=file.original_name, error=str(exc)))

        Log.info(f"Batch upload completed: {batch.summary}")
        return batch

    def process_document_text(self, document_id: str) -> ExtractionResult:
        """Extract text for a document and move it to 'ready'.

        Safe to call again on a 'ready' document; the newest attempt wins.
        Extraction problems are returned as warnings in the result metadata.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            BlobNotFoundError: if the document's upload never stored a blob.
            psycopg.Error: if the database cannot be written.
        """
        document = self._doc_repo.find_by_id(document_id)
        if document.storage_ref is None:
            raise BlobNotFoundError(f"Document {document_id} has no stored blob")

        Log.info(f"Processing text for document {document_id} ({document.declared_format})")
        context = self._pipeline.run(ExtractionContext(document=document))
        if context.result is None:
            raise RuntimeError(f"Extraction pipeline produced no result for {document_id}")
        return context.result

    def get_document(self, document_id: str) -> Document:
        """Raises DocumentNotFoundError if the document does not exist."""
        return self._doc_repo.find_by_id(document_id)

    def get_processing_history(self, document_id: str) -> list[ProcessingRecord]:
        """Return the document's processing records, oldest first."""
        self._doc_repo.find_by_id(document_id)
        return self._processing_repo.find_by_document(document_id)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the extraction scheduler, then close the storage and OCR clients.

        By default pending extractions finish first.
        """
        self._scheduler.shutdown(wait=wait)
        self._pipeline.close()
        self._storage.close()


def build_pipeline(
    doc_repo: DocumentsRepository,
    storage: BaseBlobStorage,
    settings: Settings,
    ocr_client: OcrClient | None = None,
) -> ExtractionPipeline:
    dispatcher = ExtractionDispatcherFactory.create(settings, ocr_client=ocr_client)
    return ExtractionPipeline(
        steps=[
            BeginExtractionStep(doc_repo),
            FetchBlobStep(storage),
            ExtractTextStep(dispatcher),
            PersistExtractionStep(doc_repo),
        ],
        failed_step=RecordExtractionFailureStep(doc_repo),
    )


def build_processor(
    settings: Settings,
    *,
    storage: BaseBlobStorage | None = None,
    ocr_client: OcrClient | None = None,
    executor: Executor | None = None,
) -> DocumentProcessor:
    """Build a DocumentProcessor with all required adapters."""
    doc_repo = DocumentsRepository()
    storage = storage or BlobStorageFactory.create(settings)
    return DocumentProcessor(
        doc_repo=doc_repo,
        processing_repo=ProcessingRecordsRepository(),
        storage=storage,
        pipeline=build_pipeline(doc_repo, storage, settings, ocr_client),
        scheduler=ExtractionScheduler(settings.extraction_workers, executor=executor),
        max_upload_size_bytes=settings.max_upload_size_bytes,
    )
