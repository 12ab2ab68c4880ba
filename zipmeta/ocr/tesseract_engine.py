"""Tesseract OCR engine wrapper.

Runs Tesseract on decoded raster images in a worker thread so the
event loop keeps scheduling other archive entries meanwhile.
"""

import asyncio
import io

import numpy as np
import pytesseract
from PIL import Image, UnidentifiedImageError

from zipmeta.exceptions import OCRBackendError
from zipmeta.utils.logger import get_logger

from .base import BaseOCRBackend

logger = get_logger(__name__)


class TesseractEngine(BaseOCRBackend):
    """Wrapper around Tesseract OCR for document text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language codes joined by ``+``.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng+heb",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def image_to_text(self, image: np.ndarray | Image.Image, lang: str | None = None) -> str:
        """Extract text from a decoded image.

        Args:
            image: Image as a numpy array or PIL image.
            lang: OCR language codes. Defaults to the engine default.

        Returns:
            Raw text recognized by Tesseract.

        Raises:
            OCRBackendError: If Tesseract fails.
        """
        lang = lang or self.default_lang
        pil_image = Image.fromarray(image) if isinstance(image, np.ndarray) else image

        try:
            text = pytesseract.image_to_string(
                pil_image, lang=lang, config=f"--psm {self.psm}"
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise OCRBackendError(f"Tesseract failed: {exc}") from exc

        logger.debug("OCR extracted %d characters (lang=%s)", len(text), lang)
        return text

    def bytes_to_text(self, image_bytes: bytes, lang: str | None = None) -> str:
        """Decode encoded image bytes and run OCR on them.

        Args:
            image_bytes: Encoded raster image.
            lang: OCR language codes.

        Returns:
            Raw text recognized by Tesseract.

        Raises:
            OCRBackendError: If the bytes are not a readable image or OCR fails.
        """
        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                img.load()
                return self.image_to_text(img, lang)
        except (UnidentifiedImageError, OSError) as exc:
            raise OCRBackendError(f"Cannot decode image: {exc}") from exc

    async def recognize(self, image_bytes: bytes, languages: str | None = None) -> str:
        return await asyncio.to_thread(self.bytes_to_text, image_bytes, languages)
