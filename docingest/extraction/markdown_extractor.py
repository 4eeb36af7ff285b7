import json
from typing import Any

import frontmatter

from docingest.extraction.base import BaseExtractor, decode_text
from docingest.extraction.exceptions import ExtractionError
from docingest.extraction.metadata import calculate_text_metadata
from docingest.extraction.models import ExtractionResult
from docingest.logging.logger import Log


class MarkdownExtractor(BaseExtractor):
    """Extracts Markdown body text, prefixed by its flattened front-matter."""

    FORMAT = "markdown"

    def extract(self, data: bytes) -> ExtractionResult:
        content = decode_text(data)
        if not content:
            raise ExtractionError("Markdown content is empty")

        try:
            front_matter, body = frontmatter.parse(content)
        except Exception as exc:
            raise ExtractionError(f"Invalid Markdown front-matter: {exc}") from exc

        text = self._render_front_matter(front_matter) + body

        Log.debug(
            f"Markdown parsed: {len(front_matter)} front-matter keys, "
            f"{len(body)} body chars"
        )
        return ExtractionResult(
            text=text,
            metadata=calculate_text_metadata(
                text,
                format=self.FORMAT,
                has_front_matter=bool(front_matter),
                front_matter=self._json_safe(front_matter) if front_matter else None,
            ),
        )

    @staticmethod
    def _render_front_matter(front_matter: dict[str, Any]) -> str:
        if not front_matter:
            return ""
        lines = [f"{key}: {value}" for key, value in front_matter.items()]
        return "\n".join(lines) + "\n\n"

    @staticmethod
    def _json_safe(front_matter: dict[str, Any]) -> dict[str, Any]:
        # YAML keys and values may be dates, numbers or other non-JSON scalars.
        safe = {str(key): value for key, value in front_matter.items()}
        return json.loads(json.dumps(safe, default=str))
