from psycopg.rows import dict_row

from docingest.database.connection import get_connection
from docingest.processor.models import ProcessingRecord, ProcessingStage, ProcessingStatus


class ProcessingRecordsRepository:
    """Database operations for the document_processing audit table."""

    def record_stage(
        self,
        document_id: str,
        stage: ProcessingStage,
        status: ProcessingStatus,
        error_message: str | None = None,
    ) -> ProcessingRecord:
        """Append a processing record for one stage attempt."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO document_processing
                    (document_id, stage, status, error_message)
                    VALUES (%s::uuid, %s, %s, %s)
                    RETURNING id, document_id, stage, status, error_message,
                              created_at, updated_at
                    """,
                    (document_id, stage.value, status.value, error_message),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert of processing record for {document_id} returned no row")
        return ProcessingRecord(
            id=row["id"],
            document_id=str(row["document_id"]),
            stage=ProcessingStage(row["stage"]),
            status=ProcessingStatus(row["status"]),
            error_message=row["error_message"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def find_by_document(self, document_id: str) -> list[ProcessingRecord]:
        """Return the audit trail of a document, oldest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, document_id, stage, status, error_message,
                           created_at, updated_at
                    FROM document_processing
                    WHERE document_id = %s::uuid
                    ORDER BY created_at, id
                    """,
                    (document_id,),
                )
                rows = cur.fetchall()

        return [
            ProcessingRecord(
                id=row["id"],
                document_id=str(row["document_id"]),
                stage=ProcessingStage(row["stage"]),
                status=ProcessingStatus(row["status"]),
                error_message=row["error_message"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in rows
        ]
