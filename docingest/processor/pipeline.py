from abc import ABC, abstractmethod
from dataclasses import dataclass

import psycopg

from docingest.extraction.models import ExtractionResult
from docingest.logging.logger import Log
from docingest.processor.exceptions import DocumentNotFoundError
from docingest.processor.models import Document, ExtractionTicket


@dataclass(slots=True)
class ExtractionContext:
    document: Document
    ticket: ExtractionTicket | None = None
    raw_bytes: bytes = b""
    result: ExtractionResult | None = None
    applied: bool = False
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: ExtractionContext) -> ExtractionContext:
        raise NotImplementedError

    def close(self) -> None:
        """Release resources owned by the step. No-op by default."""


class ExtractionPipeline:
    """Runs extraction steps in order and degrades on unexpected failures.

    A failing step hands the context to ``failed_step``, which must leave the
    document usable. Missing documents and database errors are re-raised: they
    are failures of the operation itself, not of extraction.
    """

    PROPAGATED_ERRORS: tuple[type[Exception], ...] = (DocumentNotFoundError, psycopg.Error)

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def run(self, context: ExtractionContext) -> ExtractionContext:
        try:
            for step in self._steps:
                context = step.run(context)
        except self.PROPAGATED_ERRORS:
            raise
        except Exception as exc:
            if context.ticket is None:
                raise
            context.error_message = str(exc) or type(exc).__name__
            Log.error(
                f"Extraction pipeline failed for document {context.document.id}: "
                f"{context.error_message}"
            )
            context = self._failed_step.run(context)
        return context

    def close(self) -> None:
        for step in [*self._steps, self._failed_step]:
            step.close()
