"""Caption backend calling a caption service over HTTP.

Request: ``{"action": "analyzeText", "inputText": "..."}``.
Response: ``{"success": true, "payload": {"result": "..."}}``.
"""

import httpx

from zipmeta.exceptions import CaptionBackendError
from zipmeta.utils.logger import get_logger

from .base import BaseCaptionBackend

logger = get_logger(__name__)


class HttpCaptionBackend(BaseCaptionBackend):
    """Posts document text to a caption service endpoint.

    Prompt templating happens on the service side.

    Args:
        url: Caption service URL.
        timeout_s: Per-request timeout in seconds.
        client: Optional preconfigured ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        url: str,
        timeout_s: float = 600.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def generate_caption(self, text: str) -> str:
        request = {"action": "analyzeText", "inputText": text}
        logger.debug("Requesting caption for %d chars from %s", len(text), self.url)
        try:
            response = await self._client.post(self.url, json=request)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise CaptionBackendError(f"Caption service request failed: {exc}") from exc
        except ValueError as exc:
            raise CaptionBackendError(f"Caption service returned invalid JSON: {exc}") from exc

        payload = body.get("payload") or {}
        if not body.get("success"):
            raise CaptionBackendError(
                f"Caption service reported failure: {payload.get('error') or payload.get('result')}"
            )
        return (payload.get("result") or "").strip()

    async def aclose(self) -> None:
        await self._client.aclose()
