class ExtractionError(Exception):
    """Raised by an extractor when a document's content cannot be converted to text."""
