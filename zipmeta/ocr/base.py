"""Abstract OCR backend interface."""

from abc import ABC, abstractmethod


class BaseOCRBackend(ABC):
    """Turns one raster image into plain text.

    Implementations may run locally or call a remote service; callers
    treat every call as slow and fallible.
    """

    @abstractmethod
    async def recognize(self, image_bytes: bytes, languages: str | None = None) -> str:
        """Run OCR over encoded image bytes (PNG, JPEG, TIFF, ...).

        Args:
            image_bytes: Encoded raster image.
            languages: Tesseract-style language hints, e.g. ``"eng+heb"``.

        Returns:
            Raw recognized text.

        Raises:
            OCRBackendError: If the image cannot be read or OCR fails.
        """

    async def aclose(self) -> None:
        """Release held connections. Backends without any keep the default."""
