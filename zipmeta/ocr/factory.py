"""Factory: instantiate the OCR backend from configuration."""

from zipmeta.utils.config import OCRConfig

from .base import BaseOCRBackend
from .tesseract_engine import TesseractEngine


def create_ocr_backend(config: OCRConfig) -> BaseOCRBackend:
    """Create the OCR backend selected by ``config.backend``.

    Raises:
        ValueError: If the backend is unknown or misconfigured.
    """
    if config.backend == "tesseract":
        return TesseractEngine(
            tesseract_cmd=config.tesseract_cmd,
            default_lang=config.languages,
            psm=config.psm,
        )

    if config.backend == "remote":
        from .remote_engine import RemoteOCREngine

        if not config.remote_url:
            raise ValueError("ocr.remote_url must be set when ocr.backend is 'remote'")
        return RemoteOCREngine(config.remote_url, timeout_s=config.timeout_s)

    raise ValueError(f"Unsupported OCR backend: {config.backend!r}")
