from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class DocumentStatus(StrEnum):
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class DocumentFormat(StrEnum):
    PDF = "pdf"
    DOCX = "docx"
    MARKDOWN = "markdown"
    PLAINTEXT = "plaintext"
    UNSUPPORTED = "unsupported"

    @property
    def supports_extraction(self) -> bool:
        return self is not DocumentFormat.UNSUPPORTED

    @classmethod
    def extractable(cls) -> frozenset["DocumentFormat"]:
        return frozenset(fmt for fmt in cls if fmt.supports_extraction)


class ProcessingStage(StrEnum):
    UPLOAD = "upload"
    EXTRACT = "extract"


class ProcessingStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class FileDescriptor:
    """An uploaded file as handed over by the transport layer."""

    original_name: str
    content_type: str
    content: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass
class Document:
    """Represents a row from the documents table."""

    id: str
    owner_id: str | None
    storage_ref: str | None
    declared_format: DocumentFormat
    content_type: str
    original_name: str
    size_bytes: int
    status: DocumentStatus
    extracted_text: str | None = None
    extraction_metadata: dict[str, Any] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    extraction_version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_public(self) -> bool:
        return self.owner_id is None


@dataclass
class ProcessingRecord:
    """Represents a row from the document_processing table."""

    id: int
    document_id: str
    stage: ProcessingStage
    status: ProcessingStatus
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ExtractionTicket:
    """Handle for one extraction attempt, returned when the attempt begins."""

    document_id: str
    processing_record_id: int
    extraction_version: int


@dataclass(frozen=True)
class UploadError:
    """A file from a batch upload that could not be ingested."""

    filename: str
    error: str


@dataclass
class BatchUploadResult:
    """Outcome of ingesting several files in one call."""

    documents: list[Document] = field(default_factory=list)
    errors: list[UploadError] = field(default_factory=list)

    @property
    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.documents) + len(self.errors),
            "successful": len(self.documents),
            "failed": len(self.errors),
        }
