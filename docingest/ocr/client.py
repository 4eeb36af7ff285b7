"""HTTP client for the external OCR service.

Wire contract (multipart POST):
    request:  file=<pdf bytes>, language=<code>
    success:  {"success": true, "data": {"extracted_text": str,
               "metrics": {"page_count": int, "execution_time_seconds": float},
               "language": str}}
    failure:  {"success": false, "message": str} or a non-2xx status

Every failure mode, timeouts included, is raised as an ``OcrError`` carrying
the elapsed call time. Calls are never retried.
"""

import time
from typing import Any

import httpx

from docingest.logging.logger import Log
from docingest.ocr.exceptions import (
    OcrNetworkError,
    OcrServiceError,
    OcrTimeoutError,
)
from docingest.ocr.models import OcrResult


class OcrClient:
    """Sends PDFs to the OCR service and parses its response."""

    def __init__(
        self,
        *,
        api_url: str,
        timeout_seconds: float,
        language: str = "en",
        client: httpx.Client | None = None,
    ) -> None:
        self._api_url = api_url
        self._timeout = httpx.Timeout(timeout_seconds)
        self._language = language
        self._client = client or httpx.Client()

    def recognize(self, pdf_bytes: bytes, language: str | None = None) -> OcrResult:
        """Run OCR over a PDF.

        Raises:
            OcrTimeoutError: if the call exceeds the configured timeout.
            OcrNetworkError: if the service cannot be reached.
            OcrServiceError: on non-2xx status, ``success: false`` or a malformed body.
        """
        language = language or self._language
        Log.info(f"Sending {len(pdf_bytes)} bytes to OCR service (language={language})")

        started = time.perf_counter()
        try:
            response = self._client.post(
                self._api_url,
                files={"file": ("document.pdf", pdf_bytes, "application/pdf")},
                data={"language": language},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise OcrTimeoutError(
                f"OCR request timed out: {exc}", elapsed_seconds=_since(started)
            ) from exc
        except httpx.HTTPError as exc:
            raise OcrNetworkError(
                f"OCR request failed: {exc}", elapsed_seconds=_since(started)
            ) from exc

        elapsed = _since(started)
        payload = self._parse_body(response, elapsed)
        if response.is_error:
            message = payload.get("message") if payload else None
            raise OcrServiceError(
                f"OCR API returned HTTP {response.status_code}: {message or response.reason_phrase}",
                elapsed_seconds=elapsed,
            )
        if payload is None:
            raise OcrServiceError("OCR API returned a non-JSON body", elapsed_seconds=elapsed)
        if not payload.get("success"):
            raise OcrServiceError(
                f"OCR API failed: {payload.get('message') or 'Unknown error'}",
                elapsed_seconds=elapsed,
            )

        return self._build_result(payload.get("data"), elapsed)

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        self._client.close()

    @staticmethod
    def _parse_body(response: httpx.Response, elapsed: float) -> dict[str, Any] | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            raise OcrServiceError("OCR API response must be an object", elapsed_seconds=elapsed)
        return body

    @staticmethod
    def _build_result(data: object, elapsed: float) -> OcrResult:
        if not isinstance(data, dict):
            raise OcrServiceError("OCR API response has no data object", elapsed_seconds=elapsed)
        metrics = data.get("metrics") or {}
        if not isinstance(metrics, dict):
            raise OcrServiceError("OCR API metrics must be an object", elapsed_seconds=elapsed)
        try:
            return OcrResult(
                extracted_text=str(data.get("extracted_text") or ""),
                page_count=int(metrics.get("page_count") or 1),
                execution_time_seconds=float(metrics.get("execution_time_seconds") or 0),
                language=str(data.get("language") or "en"),
                api_response_time=elapsed,
            )
        except (TypeError, ValueError) as exc:
            raise OcrServiceError(
                f"OCR API returned invalid metrics: {exc}", elapsed_seconds=elapsed
            ) from exc


def _since(started: float) -> float:
    return round(time.perf_counter() - started, 3)
