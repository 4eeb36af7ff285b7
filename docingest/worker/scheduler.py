from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from docingest.logging.logger import Log


class ExtractionScheduler:
    """Runs extraction tasks in the background so uploads never wait on them.

    Task failures are logged, never raised back into the submitting thread.
    """

    def __init__(self, max_workers: int = 2, executor: Executor | None = None) -> None:
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="extraction",
        )

    def submit(self, document_id: str, task: Callable[[str], object]) -> Future[None]:
        """Schedule ``task(document_id)`` and return immediately."""
        Log.info(f"Scheduling text extraction for document {document_id}")
        return self._executor.submit(self._run, document_id, task)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks; optionally wait for in-flight extractions."""
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _run(document_id: str, task: Callable[[str], object]) -> None:
        try:
            task(document_id)
        except Exception as exc:
            Log.exception(f"Background extraction for document {document_id} failed: {exc}")
