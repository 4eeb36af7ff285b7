"""Word/character statistics shared by every extractor.

A word is a whitespace-delimited, non-empty token. A character is any
non-whitespace code point. Every extractor builds its metadata through
``calculate_text_metadata`` so the counts always match the returned text.
"""

from dataclasses import dataclass, field, fields
from typing import Any


def count_words(text: str) -> int:
    return len(text.split())


def count_characters(text: str) -> int:
    return sum(1 for char in text if not char.isspace())


@dataclass
class ExtractionMetadata:
    """Descriptive metadata persisted next to the extracted text."""

    word_count: int
    character_count: int
    format: str
    extraction_method: str | None = None
    warnings: list[str] = field(default_factory=list)
    page_count: int | None = None
    ocr_processing_time: float | None = None
    ocr_language: str | None = None
    api_response_time: float | None = None
    has_front_matter: bool | None = None
    front_matter: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSONB-ready dict. Unset optional fields and empty warnings are omitted."""
        payload: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or (f.name == "warnings" and not value):
                continue
            payload[f.name] = list(value) if f.name == "warnings" else value
        return payload


def calculate_text_metadata(text: str, *, format: str, **hints: Any) -> ExtractionMetadata:
    """Compute counts for ``text`` and merge extractor-supplied hints.

    Raises:
        TypeError: if a hint does not name an ExtractionMetadata field.
    """
    return ExtractionMetadata(
        word_count=count_words(text),
        character_count=count_characters(text),
        format=format,
        **hints,
    )
