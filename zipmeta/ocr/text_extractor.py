"""Text extraction for a single archive entry.

Classifies the entry by content, runs the matching extraction strategy
(direct OCR for images; render, binarize and OCR plus the text layer
for PDFs), and cleans the result.
"""

import asyncio
import tempfile
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from zipmeta.preprocessing.binarize import to_monochrome
from zipmeta.utils.config import OCRConfig
from zipmeta.utils.logger import get_logger

from .base import BaseOCRBackend
from .document_kind import DocumentKind, classify_document
from .pdf_handler import PDFHandler
from .text_cleaner import clean_text

logger = get_logger(__name__)

# Stored verbatim as captions. Neither carries the "Error: " marker, so a
# record built from one is not counted as failed by FileRecord.is_error.
UNSUPPORTED_TEXT = "Unsupported or corrupt file."
PDF_ERROR_TEXT = "Error extracting text from PDF."
SENTINEL_TEXTS = frozenset({UNSUPPORTED_TEXT, PDF_ERROR_TEXT})


class TextExtractor:
    """Converts one raw document blob into cleaned plain text.

    Args:
        config: OCR configuration (languages, DPI, page cap, binarization).
        ocr_backend: Backend used to recognize text in raster images.
    """

    def __init__(self, config: OCRConfig, ocr_backend: BaseOCRBackend) -> None:
        self.config = config
        self.ocr = ocr_backend
        self.pdf_handler = PDFHandler(dpi=config.pdf_dpi, max_pages=config.max_pdf_pages)

    async def extract(self, entry_bytes: bytes, entry_name: str) -> str:
        """Extract and clean the text of one document.

        Args:
            entry_bytes: Raw document content.
            entry_name: Entry name inside the archive, for diagnostics.

        Returns:
            Cleaned text, ``""`` when nothing meaningful was found, or one of
            ``SENTINEL_TEXTS`` when the content is unsupported or the PDF
            could not be parsed.

        Raises:
            OCRBackendError: If the OCR backend fails on an image or page.
        """
        if not entry_bytes:
            return ""

        kind = classify_document(entry_bytes, entry_name)
        logger.info("Extracting text from %s (%s)", entry_name, kind)

        if kind is DocumentKind.UNSUPPORTED:
            return UNSUPPORTED_TEXT

        if kind is DocumentKind.PAGINATED:
            raw = await self._extract_paginated(entry_bytes, entry_name)
            if raw is None:
                return PDF_ERROR_TEXT
        else:
            raw = await self.ocr.recognize(entry_bytes, self.config.languages)

        return clean_text(raw)

    @contextmanager
    def scratch_space(self) -> Iterator[Path]:
        """Create a private scratch directory removed on every exit path."""
        with tempfile.TemporaryDirectory(
            prefix=f"zipmeta-{uuid.uuid4().hex}-", dir=self.config.scratch_dir
        ) as tmp:
            yield Path(tmp)

    async def _extract_paginated(self, data: bytes, name: str) -> str | None:
        """OCR the rendered pages and append the PDF text layer.

        Returns:
            Combined raw text, or ``None`` if the PDF could not be parsed
            or rendered.
        """
        with self.scratch_space() as scratch:
            pdf_path = scratch / "document.pdf"
            pdf_path.write_bytes(data)

            try:
                page_count = await asyncio.to_thread(
                    self.pdf_handler.pages_to_process, pdf_path
                )
                page_files = await asyncio.to_thread(
                    self.pdf_handler.render_pages, pdf_path, scratch, page_count
                )
                text_layer = await asyncio.to_thread(
                    self.pdf_handler.extract_text_layer, pdf_path, page_count
                )
            except Exception as exc:
                logger.error("Error extracting text from PDF %s: %s", name, exc)
                return None

            ocr_texts: list[str] = []
            for page_file in page_files:
                image_bytes = await asyncio.to_thread(self._binarize_page, page_file)
                ocr_texts.append(
                    await self.ocr.recognize(image_bytes, self.config.languages)
                )

        logger.info("OCR processed %d pages of %s", len(ocr_texts), name)
        return " ".join(ocr_texts + text_layer)

    def _binarize_page(self, page_file: Path) -> bytes:
        """Load a rendered page, binarize it, and encode it as PNG."""
        with Image.open(page_file) as img:
            page = np.array(img.convert("L"))

        binary = to_monochrome(
            page,
            method=self.config.binarize_method,
            percent=self.config.binarize_threshold,
        )
        ok, encoded = cv2.imencode(".png", binary)
        if not ok:
            raise RuntimeError(f"Failed to encode page image {page_file.name}")
        return encoded.tobytes()
