class OcrError(Exception):
    """Raised when the OCR service does not return usable text.

    ``elapsed_seconds`` is the wall-clock time spent on the call before it failed.
    """

    def __init__(self, message: str, *, elapsed_seconds: float = 0.0) -> None:
        super().__init__(message)
        self.elapsed_seconds = elapsed_seconds


class OcrNetworkError(OcrError):
    """Raised when the OCR service cannot be reached."""


class OcrTimeoutError(OcrNetworkError):
    """Raised when the OCR call exceeds the configured timeout."""


class OcrServiceError(OcrError):
    """Raised when the OCR service answers with an error or a malformed body."""
