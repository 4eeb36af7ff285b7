import uuid
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docingest.database.connection import get_connection
from docingest.processor.exceptions import DocumentNotFoundError
from docingest.processor.models import (
    Document,
    DocumentFormat,
    DocumentStatus,
    ExtractionTicket,
    FileDescriptor,
    ProcessingStage,
    ProcessingStatus,
)

_DOCUMENT_COLUMNS = """
    id, owner_id, storage_ref, declared_format, content_type, original_name,
    size_bytes, status, extracted_text, extraction_metadata, metadata,
    extraction_version, created_at, updated_at
"""


def _require_uuid(document_id: str) -> None:
    try:
        uuid.UUID(document_id)
    except ValueError:
        raise DocumentNotFoundError(f"Document {document_id} not found") from None


def _row_to_document(row: dict[str, Any]) -> Document:
    return Document(
        id=str(row["id"]),
        owner_id=row["owner_id"],
        storage_ref=row["storage_ref"],
        declared_format=DocumentFormat(row["declared_format"]),
        content_type=row["content_type"],
        original_name=row["original_name"],
        size_bytes=row["size_bytes"],
        status=DocumentStatus(row["status"]),
        extracted_text=row["extracted_text"],
        extraction_metadata=row["extraction_metadata"],
        metadata=row["metadata"] or {},
        extraction_version=row["extraction_version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class DocumentsRepository:
    """Database operations for the documents table."""

    def insert(
        self,
        document_id: str,
        owner_id: str | None,
        file: FileDescriptor,
        declared_format: DocumentFormat,
        metadata: dict[str, Any],
    ) -> Document:
        """Insert a new document row in the 'uploading' state."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO documents
                    (id, owner_id, declared_format, content_type, original_name,
                     size_bytes, status, metadata)
                    VALUES (%s::uuid, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_DOCUMENT_COLUMNS}
                    """,
                    (
                        document_id,
                        owner_id,
                        declared_format.value,
                        file.content_type,
                        file.original_name,
                        file.size_bytes,
                        DocumentStatus.UPLOADING.value,
                        Jsonb(metadata),
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert of document {document_id} returned no row")
        return _row_to_document(row)

    def find_by_id(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if the ID is not a UUID or no document has it.
        """
        _require_uuid(document_id)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_DOCUMENT_COLUMNS}
                    FROM documents
                    WHERE id = %s::uuid
                    """,
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _row_to_document(row)

    def attach_blob(self, document_id: str, storage_ref: str) -> None:
        """Record where the blob was stored. A storage ref is written only once.

        Raises:
            DocumentNotFoundError: if no document without a storage ref has this ID.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET storage_ref = %s, updated_at = NOW()
                    WHERE id = %s::uuid AND storage_ref IS NULL
                    """,
                    (storage_ref, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def update_status(self, document_id: str, status: DocumentStatus) -> None:
        """Set the document status.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET status = %s, updated_at = NOW()
                    WHERE id = %s::uuid
                    """,
                    (status.value, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def begin_extraction(self, document_id: str) -> ExtractionTicket:
        """Open an extraction attempt in a single transaction.

        Moves the document to 'processing', bumps its extraction_version and
        inserts an 'extract' processing record in the 'processing' state.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET status = %s,
                        extraction_version = extraction_version + 1,
                        updated_at = NOW()
                    WHERE id = %s::uuid
                    RETURNING extraction_version
                    """,
                    (DocumentStatus.PROCESSING.value, document_id),
                )
                version_row = cur.fetchone()
                if version_row is None:
                    conn.rollback()
                    raise DocumentNotFoundError(f"Document {document_id} not found")

                cur.execute(
                    """
                    INSERT INTO document_processing (document_id, stage, status)
                    VALUES (%s::uuid, %s, %s)
                    RETURNING id
                    """,
                    (
                        document_id,
                        ProcessingStage.EXTRACT.value,
                        ProcessingStatus.PROCESSING.value,
                    ),
                )
                record_row = cur.fetchone()
            conn.commit()

        if record_row is None:
            raise RuntimeError(f"Insert of processing record for {document_id} returned no row")
        return ExtractionTicket(
            document_id=document_id,
            processing_record_id=record_row[0],
            extraction_version=version_row[0],
        )

    def complete_extraction(
        self,
        ticket: ExtractionTicket,
        extracted_text: str,
        extraction_metadata: dict[str, Any],
        stage_status: ProcessingStatus,
        error_message: str | None = None,
    ) -> bool:
        """Close an extraction attempt in a single transaction.

        The processing record is always updated. The document text, metadata
        and 'ready' status are written only while the attempt is still the
        latest one (extraction_version unchanged).

        Returns:
            True if the document was updated, False if a newer attempt superseded it.

        Raises:
            DocumentNotFoundError: if the document no longer exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE document_processing
                    SET status = %s, error_message = %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (stage_status.value, error_message, ticket.processing_record_id),
                )
                cur.execute(
                    """
                    UPDATE documents
                    SET extracted_text = %s,
                        extraction_metadata = %s,
                        status = %s,
                        updated_at = NOW()
                    WHERE id = %s::uuid AND extraction_version = %s
                    """,
                    (
                        extracted_text,
                        Jsonb(extraction_metadata),
                        DocumentStatus.READY.value,
                        ticket.document_id,
                        ticket.extraction_version,
                    ),
                )
                applied = cur.rowcount > 0
                if not applied:
                    cur.execute(
                        "SELECT 1 FROM documents WHERE id = %s::uuid",
                        (ticket.document_id,),
                    )
                    if cur.fetchone() is None:
                        conn.rollback()
                        raise DocumentNotFoundError(
                            f"Document {ticket.document_id} not found"
                        )
            conn.commit()
        return applied
