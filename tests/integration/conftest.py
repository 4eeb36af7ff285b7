import os
import uuid
from collections.abc import Callable, Generator
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx
import psycopg
import pytest

from docingest.config.settings import Settings
from docingest.database.connection import close_pool, get_connection, init_pool
from docingest.database.repositories.documents_repository import DocumentsRepository
from docingest.database.repositories.processing_records_repository import (
    ProcessingRecordsRepository,
)
from docingest.ocr.client import OcrClient
from docingest.processor.exceptions import DocumentNotFoundError
from docingest.processor.models import (
    Document,
    DocumentFormat,
    DocumentStatus,
    ExtractionTicket,
    FileDescriptor,
    ProcessingRecord,
    ProcessingStage,
    ProcessingStatus,
)
from docingest.processor.processor import DocumentProcessor, build_pipeline
from docingest.storage.local_adapter import LocalBlobStorage
from docingest.worker.scheduler import ExtractionScheduler

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    id UUID PRIMARY KEY,
    owner_id TEXT NULL,
    storage_ref TEXT NULL,
    declared_format TEXT NOT NULL,
    content_type TEXT NOT NULL,
    original_name TEXT NOT NULL,
    size_bytes BIGINT NOT NULL,
    status TEXT NOT NULL,
    extracted_text TEXT NULL,
    extraction_metadata JSONB NULL,
    metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
    extraction_version INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE TABLE IF NOT EXISTS document_processing (
    id BIGSERIAL PRIMARY KEY,
    document_id UUID NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    stage TEXT NOT NULL,
    status TEXT NOT NULL,
    error_message TEXT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


class InMemoryDatabase:
    """Shared state behind the in-memory repositories."""

    def __init__(self) -> None:
        self.documents: dict[str, Document] = {}
        self.records: list[ProcessingRecord] = []

    def get(self, document_id: str) -> Document:
        try:
            return self.documents[document_id]
        except KeyError:
            raise DocumentNotFoundError(f"Document {document_id} not found") from None

    def add_record(
        self,
        document_id: str,
        stage: ProcessingStage,
        status: ProcessingStatus,
        error_message: str | None = None,
    ) -> ProcessingRecord:
        now = datetime.now(timezone.utc)
        record = ProcessingRecord(
            id=len(self.records) + 1,
            document_id=document_id,
            stage=stage,
            status=status,
            error_message=error_message,
            created_at=now,
            updated_at=now,
        )
        self.records.append(record)
        return record


class InMemoryDocumentsRepository(DocumentsRepository):
    """Documents repository with the same write rules as the SQL one."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db
        self.status_history: dict[str, list[DocumentStatus]] = {}

    def _set(self, document: Document) -> None:
        self._db.documents[document.id] = document
        history = self.status_history.setdefault(document.id, [])
        if not history or history[-1] is not document.status:
            history.append(document.status)

    def insert(
        self,
        document_id: str,
        owner_id: str | None,
        file: FileDescriptor,
        declared_format: DocumentFormat,
        metadata: dict[str, Any],
    ) -> Document:
        now = datetime.now(timezone.utc)
        document = Document(
            id=document_id,
            owner_id=owner_id,
            storage_ref=None,
            declared_format=declared_format,
            content_type=file.content_type,
            original_name=file.original_name,
            size_bytes=file.size_bytes,
            status=DocumentStatus.UPLOADING,
            metadata=dict(metadata),
            created_at=now,
            updated_at=now,
        )
        self._set(document)
        return document

    def find_by_id(self, document_id: str) -> Document:
        return self._db.get(document_id)

    def attach_blob(self, document_id: str, storage_ref: str) -> None:
        document = self._db.get(document_id)
        if document.storage_ref is not None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        self._set(replace(document, storage_ref=storage_ref))

    def update_status(self, document_id: str, status: DocumentStatus) -> None:
        self._set(replace(self._db.get(document_id), status=status))

    def begin_extraction(self, document_id: str) -> ExtractionTicket:
        document = self._db.get(document_id)
        version = document.extraction_version + 1
        self._set(
            replace(document, status=DocumentStatus.PROCESSING, extraction_version=version)
        )
        record = self._db.add_record(
            document_id, ProcessingStage.EXTRACT, ProcessingStatus.PROCESSING
        )
        return ExtractionTicket(
            document_id=document_id,
            processing_record_id=record.id,
            extraction_version=version,
        )

    def complete_extraction(
        self,
        ticket: ExtractionTicket,
        extracted_text: str,
        extraction_metadata: dict[str, Any],
        stage_status: ProcessingStatus,
        error_message: str | None = None,
    ) -> bool:
        document = self._db.get(ticket.document_id)
        record = self._db.records[ticket.processing_record_id - 1]
        record.status = stage_status
        record.error_message = error_message
        if document.extraction_version != ticket.extraction_version:
            return False
        self._set(
            replace(
                document,
                extracted_text=extracted_text,
                extraction_metadata=extraction_metadata,
                status=DocumentStatus.READY,
            )
        )
        return True


class InMemoryProcessingRecordsRepository(ProcessingRecordsRepository):
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def record_stage(
        self,
        document_id: str,
        stage: ProcessingStage,
        status: ProcessingStatus,
        error_message: str | None = None,
    ) -> ProcessingRecord:
        return self._db.add_record(document_id, stage, status, error_message)

    def find_by_document(self, document_id: str) -> list[ProcessingRecord]:
        return [r for r in self._db.records if r.document_id == document_id]


class OcrStub:
    """Scripted OCR service behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.responses: list[Callable[[httpx.Request], httpx.Response]] = []
        self.calls = 0

    def succeed(self, text: str, page_count: int = 1) -> None:
        body = {
            "success": True,
            "data": {
                "extracted_text": text,
                "metrics": {"page_count": page_count, "execution_time_seconds": 0.3},
                "language": "en",
            },
        }
        self.responses.append(lambda request: httpx.Response(200, json=body))

    def fail(self, status_code: int, message: str) -> None:
        body = {"success": False, "message": message}
        self.responses.append(lambda request: httpx.Response(status_code, json=body))

    def time_out(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        self.responses.append(handler)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return self.responses.pop(0)(request)


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def memory_doc_repo(memory_db: InMemoryDatabase) -> InMemoryDocumentsRepository:
    return InMemoryDocumentsRepository(memory_db)


@pytest.fixture
def ocr_stub() -> OcrStub:
    return OcrStub()


@pytest.fixture
def blob_storage(tmp_path: Path) -> LocalBlobStorage:
    return LocalBlobStorage(tmp_path / "blobs")


@pytest.fixture
def flow_processor(
    memory_db: InMemoryDatabase,
    memory_doc_repo: InMemoryDocumentsRepository,
    blob_storage: LocalBlobStorage,
    ocr_stub: OcrStub,
    inline_executor: Any,
) -> DocumentProcessor:
    """Processor over in-memory tables, real blob storage and a scripted OCR service."""
    settings = Settings()
    ocr_client = OcrClient(
        api_url="http://ocr.test/api/v1/ocr/extract",
        timeout_seconds=5,
        client=httpx.Client(transport=httpx.MockTransport(ocr_stub.handle)),
    )
    return DocumentProcessor(
        doc_repo=memory_doc_repo,
        processing_repo=InMemoryProcessingRecordsRepository(memory_db),
        storage=blob_storage,
        pipeline=build_pipeline(memory_doc_repo, blob_storage, settings, ocr_client),
        scheduler=ExtractionScheduler(executor=inline_executor),
        max_upload_size_bytes=settings.max_upload_size_bytes,
    )


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docingest_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_SQL)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for document_id in cleanup:
                cur.execute("DELETE FROM documents WHERE id = %s::uuid", (document_id,))
        conn.commit()


@pytest.fixture
def seed_document(integration_cleanup: list[str]) -> Document:
    document_id = str(uuid.uuid4())
    file = FileDescriptor(original_name="notes.txt", content_type="text/plain", content=b"hi there")
    document = DocumentsRepository().insert(
        document_id, "user-1", file, DocumentFormat.PLAINTEXT, {"source": "test"}
    )
    integration_cleanup.append(document_id)
    return document
