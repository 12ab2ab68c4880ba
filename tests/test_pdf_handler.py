"""Tests for PDF page rendering and text-layer extraction."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from zipmeta.ocr.pdf_handler import PDFHandler


class TestPDFHandler:
    """Tests for the PDFHandler class."""

    def test_init_defaults(self) -> None:
        handler = PDFHandler()
        assert handler.dpi == 300
        assert handler.max_pages == 5

    @patch("zipmeta.ocr.pdf_handler.pdfinfo_from_path")
    def test_get_page_count(self, mock_info: MagicMock) -> None:
        mock_info.return_value = {"Pages": 7}
        handler = PDFHandler()

        assert handler.get_page_count(Path("/fake/doc.pdf")) == 7
        mock_info.assert_called_once_with("/fake/doc.pdf")

    @pytest.mark.parametrize("pages,expected", [(1, 1), (5, 5), (12, 5)])
    @patch("zipmeta.ocr.pdf_handler.pdfinfo_from_path")
    def test_pages_to_process_capped(
        self, mock_info: MagicMock, pages: int, expected: int
    ) -> None:
        mock_info.return_value = {"Pages": pages}
        handler = PDFHandler(max_pages=5)
        assert handler.pages_to_process(Path("/fake/doc.pdf")) == expected

    @patch("zipmeta.ocr.pdf_handler.convert_from_path")
    def test_render_pages(self, mock_convert: MagicMock, tmp_path: Path) -> None:
        mock_convert.return_value = [
            str(tmp_path / "page-1.png"),
            str(tmp_path / "page-2.png"),
        ]
        handler = PDFHandler(dpi=200)

        pages = handler.render_pages(Path("/fake/doc.pdf"), tmp_path, 2)

        assert pages == [tmp_path / "page-1.png", tmp_path / "page-2.png"]
        mock_convert.assert_called_once_with(
            "/fake/doc.pdf",
            dpi=200,
            first_page=1,
            last_page=2,
            output_folder=str(tmp_path),
            fmt="png",
            grayscale=True,
            paths_only=True,
        )

    @patch("zipmeta.ocr.pdf_handler.convert_from_path")
    def test_render_zero_pages(self, mock_convert: MagicMock, tmp_path: Path) -> None:
        assert PDFHandler().render_pages(Path("/fake/doc.pdf"), tmp_path, 0) == []
        mock_convert.assert_not_called()

    @patch("zipmeta.ocr.pdf_handler.convert_from_path")
    def test_render_failure(self, mock_convert: MagicMock, tmp_path: Path) -> None:
        mock_convert.side_effect = ValueError("poppler missing")
        with pytest.raises(RuntimeError, match="PDF conversion failed"):
            PDFHandler().render_pages(Path("/fake/doc.pdf"), tmp_path, 1)

    @patch("zipmeta.ocr.pdf_handler.PdfReader")
    def test_extract_text_layer(self, mock_reader: MagicMock) -> None:
        pages = [MagicMock(), MagicMock(), MagicMock()]
        pages[0].extract_text.return_value = "Contract"
        pages[1].extract_text.return_value = None
        pages[2].extract_text.return_value = "Appendix"
        mock_reader.return_value.pages = pages

        texts = PDFHandler().extract_text_layer(Path("/fake/doc.pdf"), 2)

        assert texts == ["Contract", ""]
        pages[2].extract_text.assert_not_called()
