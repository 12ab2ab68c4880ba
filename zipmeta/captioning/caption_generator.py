"""Caption generation with input and output length limits."""

from zipmeta.utils.logger import get_logger

from .base import BaseCaptionBackend

logger = get_logger(__name__)


class CaptionGenerator:
    """Derives a short caption from extracted document text.

    Backend failures never propagate: they are logged and reported as an
    empty caption so the caller can fall back to the file name.

    Args:
        backend: Captioning backend to query.
        max_input_chars: Text is truncated to this length before sending.
        max_caption_length: Returned captions are truncated to this length.
    """

    def __init__(
        self,
        backend: BaseCaptionBackend,
        max_input_chars: int = 8000,
        max_caption_length: int = 50,
    ) -> None:
        self.backend = backend
        self.max_input_chars = max_input_chars
        self.max_caption_length = max_caption_length

    async def caption(self, text: str) -> str:
        """Generate a caption for ``text``.

        Args:
            text: Cleaned, non-empty document text.

        Returns:
            The caption, at most ``max_caption_length`` characters, or ``""``
            if the backend failed or returned nothing.
        """
        text = text[: self.max_input_chars]

        try:
            caption = await self.backend.generate_caption(text)
        except Exception as exc:
            logger.error("Error in caption generation: %s", exc)
            return ""

        caption = (caption or "").strip()
        if not caption:
            logger.warning("Caption backend returned an empty caption")
        return caption[: self.max_caption_length]
