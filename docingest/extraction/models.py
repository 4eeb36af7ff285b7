from dataclasses import dataclass
from typing import Any

from docingest.extraction.metadata import ExtractionMetadata, calculate_text_metadata


@dataclass(frozen=True)
class ExtractionResult:
    """Output of one extraction: plain text plus its metadata.

    Failures are expressed as a degraded result (empty text, warnings),
    never as an exception crossing the dispatcher.
    """

    text: str
    metadata: ExtractionMetadata

    @property
    def warnings(self) -> list[str]:
        return self.metadata.warnings

    @classmethod
    def degraded(cls, *, format: str, warning: str, **hints: Any) -> "ExtractionResult":
        """Empty-text result carrying a single warning."""
        return cls(
            text="",
            metadata=calculate_text_metadata("", format=format, warnings=[warning], **hints),
        )
