"""Tests for the per-entry file worker."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from zipmeta.exceptions import OCRBackendError
from zipmeta.ocr.text_extractor import PDF_ERROR_TEXT, UNSUPPORTED_TEXT
from zipmeta.pipeline.file_worker import FileWorker
from zipmeta.pipeline.models import Entry


def _worker(text: str = "Invoice #123", caption: str = "Invoice 123") -> FileWorker:
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=text)
    captioner = MagicMock()
    captioner.caption = AsyncMock(return_value=caption)
    return FileWorker(extractor, captioner)


class TestFileWorker:
    """Tests for the FileWorker class."""

    @pytest.mark.asyncio
    async def test_caption_from_text(self) -> None:
        worker = _worker()
        record = await worker.process(Entry(name="scan1.jpg", data=b"\xff\xd8\xff"))

        assert record.file_name == "scan1.jpg"
        assert record.file_caption == "Invoice 123"
        worker.extractor.extract.assert_awaited_once_with(b"\xff\xd8\xff", "scan1.jpg")
        worker.captioner.caption.assert_awaited_once_with("Invoice #123")

    @pytest.mark.asyncio
    async def test_empty_text_falls_back_to_name(self) -> None:
        worker = _worker(text="")
        record = await worker.process(Entry(name="scan2.pdf", data=b"%PDF-"))

        assert record.file_caption == "scan2.pdf"
        worker.captioner.caption.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_caption_falls_back_to_name(self) -> None:
        worker = _worker(caption="")
        record = await worker.process(Entry(name="memo.png", data=b"x"))
        assert record.file_caption == "memo.png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sentinel", [UNSUPPORTED_TEXT, PDF_ERROR_TEXT])
    async def test_sentinel_text_used_as_caption(self, sentinel: str) -> None:
        worker = _worker(text=sentinel)
        record = await worker.process(Entry(name="odd.bin", data=b"x"))

        assert record.file_caption == sentinel
        assert not record.is_error
        worker.captioner.caption.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_extraction_failure_becomes_error_record(self) -> None:
        worker = _worker()
        worker.extractor.extract.side_effect = OCRBackendError("Tesseract failed: boom")

        record = await worker.process(Entry(name="scan.jpg", data=b"x"))

        assert record.file_name == "scan.jpg"
        assert record.file_caption == "Error: Tesseract failed: boom"
        assert record.is_error

    @pytest.mark.asyncio
    async def test_exception_without_message(self) -> None:
        worker = _worker()
        worker.captioner.caption.side_effect = TimeoutError()

        record = await worker.process(Entry(name="scan.jpg", data=b"x"))
        assert record.file_caption == "Error: TimeoutError"

    @pytest.mark.asyncio
    async def test_unreadable_entry(self) -> None:
        worker = _worker()
        record = await worker.process(
            Entry(name="secret.pdf", read_error="File is encrypted")
        )

        assert record.file_caption == "Error: File is encrypted"
        worker.extractor.extract.assert_not_awaited()
