from dataclasses import dataclass


@dataclass(frozen=True)
class OcrResult:
    """Successful OCR response, with defaults applied to missing fields."""

    extracted_text: str
    page_count: int
    execution_time_seconds: float
    language: str
    api_response_time: float
