"""Tests for per-entry text extraction."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest
from PIL import Image

from zipmeta.exceptions import OCRBackendError
from zipmeta.ocr.text_extractor import PDF_ERROR_TEXT, UNSUPPORTED_TEXT, TextExtractor
from zipmeta.utils.config import OCRConfig

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def ocr_backend() -> MagicMock:
    backend = MagicMock()
    backend.recognize = AsyncMock(return_value="Page   text")
    return backend


@pytest.fixture
def extractor(scratch_dir: Path, ocr_backend: MagicMock) -> TextExtractor:
    return TextExtractor(OCRConfig(scratch_dir=str(scratch_dir)), ocr_backend)


def _fake_pdf_handler(page_image: np.ndarray, pages: int, text_layer: list[str]) -> MagicMock:
    """PDF handler stub that writes real page images into the scratch directory."""

    def render(pdf_path: Path, output_dir: Path, page_count: int) -> list[Path]:
        paths = []
        for i in range(page_count):
            path = output_dir / f"page-{i + 1}.png"
            Image.fromarray(page_image).save(path)
            paths.append(path)
        return paths

    handler = MagicMock()
    handler.pages_to_process.return_value = pages
    handler.render_pages.side_effect = render
    handler.extract_text_layer.return_value = text_layer
    return handler


class TestTextExtractor:
    """Tests for the TextExtractor class."""

    @pytest.mark.asyncio
    async def test_empty_entry(self, extractor: TextExtractor, ocr_backend: MagicMock) -> None:
        assert await extractor.extract(b"", "empty.jpg") == ""
        ocr_backend.recognize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_entry(
        self, extractor: TextExtractor, ocr_backend: MagicMock
    ) -> None:
        assert await extractor.extract(b"plain text", "notes.txt") == UNSUPPORTED_TEXT
        ocr_backend.recognize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_text_starting_with_bm_unsupported(
        self, extractor: TextExtractor, ocr_backend: MagicMock
    ) -> None:
        text = await extractor.extract(b"BMW service invoice, plain text", "notes.txt")
        assert text == UNSUPPORTED_TEXT
        ocr_backend.recognize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_image_entry(
        self, extractor: TextExtractor, ocr_backend: MagicMock, png_bytes: bytes
    ) -> None:
        text = await extractor.extract(png_bytes, "scan.png")

        assert text == "Page text"
        ocr_backend.recognize.assert_awaited_once_with(png_bytes, "eng+heb")

    @pytest.mark.asyncio
    async def test_image_without_text(
        self, extractor: TextExtractor, ocr_backend: MagicMock, png_bytes: bytes
    ) -> None:
        ocr_backend.recognize.return_value = " _____ \n"
        assert await extractor.extract(png_bytes, "blank.png") == ""

    @pytest.mark.asyncio
    async def test_pdf_entry(
        self,
        extractor: TextExtractor,
        ocr_backend: MagicMock,
        scratch_dir: Path,
        sample_color_image: np.ndarray,
    ) -> None:
        extractor.pdf_handler = _fake_pdf_handler(
            sample_color_image, 2, ["Layer one", ""]
        )

        text = await extractor.extract(b"%PDF-1.7 fake", "report.pdf")

        assert text == "Page text Page text Layer one"
        assert ocr_backend.recognize.await_count == 2
        page_bytes, languages = ocr_backend.recognize.await_args.args
        assert page_bytes.startswith(PNG_SIGNATURE)
        assert languages == "eng+heb"
        assert list(scratch_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_pdf_written_to_scratch(
        self,
        extractor: TextExtractor,
        scratch_dir: Path,
        sample_color_image: np.ndarray,
    ) -> None:
        extractor.pdf_handler = _fake_pdf_handler(sample_color_image, 1, [""])

        await extractor.extract(b"%PDF-1.7 fake", "report.pdf")

        pdf_path = extractor.pdf_handler.pages_to_process.call_args.args[0]
        assert pdf_path.name == "document.pdf"
        assert pdf_path.parent.parent == scratch_dir
        assert not pdf_path.exists()

    @pytest.mark.asyncio
    async def test_pdf_parse_failure(
        self, extractor: TextExtractor, ocr_backend: MagicMock, scratch_dir: Path
    ) -> None:
        extractor.pdf_handler = MagicMock()
        extractor.pdf_handler.pages_to_process.side_effect = RuntimeError("bad xref")

        assert await extractor.extract(b"%PDF-1.7 broken", "broken.pdf") == PDF_ERROR_TEXT
        ocr_backend.recognize.assert_not_awaited()
        assert list(scratch_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_pdf_ocr_failure_propagates(
        self,
        extractor: TextExtractor,
        ocr_backend: MagicMock,
        scratch_dir: Path,
        sample_color_image: np.ndarray,
    ) -> None:
        extractor.pdf_handler = _fake_pdf_handler(sample_color_image, 1, [""])
        ocr_backend.recognize.side_effect = OCRBackendError("Tesseract failed: boom")

        with pytest.raises(OCRBackendError):
            await extractor.extract(b"%PDF-1.7 fake", "report.pdf")
        assert list(scratch_dir.iterdir()) == []

    def test_scratch_spaces_are_distinct(self, extractor: TextExtractor) -> None:
        with extractor.scratch_space() as first, extractor.scratch_space() as second:
            assert first != second
            assert first.is_dir() and second.is_dir()
        assert not first.exists()
        assert not second.exists()
