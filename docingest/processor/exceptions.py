class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class DocumentNotFoundError(ProcessorError):
    """Raised when a document cannot be found in the database."""


class UploadRejectedError(ProcessorError):
    """Raised when an upload is refused before anything is stored."""


class UploadFailedError(ProcessorError):
    """Raised when the uploaded blob could not be stored."""
