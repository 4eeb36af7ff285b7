from docingest.processor.models import DocumentFormat

CONTENT_TYPE_FORMATS: dict[str, DocumentFormat] = {
    "application/pdf": DocumentFormat.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        DocumentFormat.DOCX
    ),
    "application/msword": DocumentFormat.DOCX,
    "text/markdown": DocumentFormat.MARKDOWN,
    "text/x-markdown": DocumentFormat.MARKDOWN,
    "text/plain": DocumentFormat.PLAINTEXT,
    "application/rtf": DocumentFormat.PLAINTEXT,
}


def format_for_content_type(content_type: str) -> DocumentFormat:
    """Map an upload content type to the format used for extraction.

    Parameters such as ``; charset=utf-8`` are ignored. Unknown types map to
    ``DocumentFormat.UNSUPPORTED``.
    """
    mime = content_type.split(";", 1)[0].strip().lower()
    return CONTENT_TYPE_FORMATS.get(mime, DocumentFormat.UNSUPPORTED)
