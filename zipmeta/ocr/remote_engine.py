"""Client for a hosted OCR service.

The service accepts ``{"base64String": ...}`` and answers with
``{"success": true, "result": "..."}``; a ``null`` result means no text.
"""

import base64

import httpx

from zipmeta.exceptions import OCRBackendError
from zipmeta.utils.logger import get_logger

from .base import BaseOCRBackend

logger = get_logger(__name__)


class RemoteOCREngine(BaseOCRBackend):
    """OCR backend that posts images to an HTTP text-extraction endpoint.

    Args:
        url: Full URL of the extraction endpoint.
        timeout_s: Per-request timeout in seconds.
        client: Optional preconfigured ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        url: str,
        timeout_s: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def recognize(self, image_bytes: bytes, languages: str | None = None) -> str:
        payload: dict[str, str] = {
            "base64String": base64.b64encode(image_bytes).decode("ascii"),
        }
        if languages:
            payload["languages"] = languages

        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise OCRBackendError(f"OCR service request failed: {exc}") from exc
        except ValueError as exc:
            raise OCRBackendError(f"OCR service returned invalid JSON: {exc}") from exc

        if not body.get("success"):
            raise OCRBackendError(
                f"OCR service reported failure: {body.get('error') or body.get('result')}"
            )

        text = body.get("result") or ""
        logger.debug("Remote OCR returned %d characters", len(text))
        return text

    async def aclose(self) -> None:
        await self._client.aclose()
