"""PDF page rendering and text-layer extraction.

Renders a capped number of PDF pages to image files for OCR and reads
the selectable text layer of the same pages.
"""

from pathlib import Path

from pdf2image import convert_from_path
from pdf2image.pdf2image import pdfinfo_from_path
from pypdf import PdfReader

from zipmeta.utils.logger import get_logger

logger = get_logger(__name__)


class PDFHandler:
    """Handles PDF to image conversion for OCR processing.

    Args:
        dpi: Resolution for PDF rendering. Higher values produce
            better OCR results but use more memory.
        max_pages: Maximum number of leading pages to process per document.
    """

    def __init__(self, dpi: int = 300, max_pages: int = 5) -> None:
        self.dpi = dpi
        self.max_pages = max_pages

    def get_page_count(self, pdf_path: Path) -> int:
        """Get the number of pages in a PDF without converting.

        Args:
            pdf_path: Path to the PDF file.

        Returns:
            Number of pages in the PDF.
        """
        info = pdfinfo_from_path(str(pdf_path))
        count = info["Pages"]
        logger.debug("PDF %s has %d pages", pdf_path, count)
        return count

    def pages_to_process(self, pdf_path: Path) -> int:
        """Number of pages that will be rendered, after applying the cap."""
        return min(self.get_page_count(pdf_path), self.max_pages)

    def render_pages(self, pdf_path: Path, output_dir: Path, page_count: int) -> list[Path]:
        """Render the first ``page_count`` pages to grayscale PNG files.

        One file is written per page inside ``output_dir``; the caller owns
        the directory and its cleanup.

        Args:
            pdf_path: Path to the PDF file.
            output_dir: Existing directory for the rendered page files.
            page_count: Number of leading pages to render.

        Returns:
            Paths of the rendered page images in page order.

        Raises:
            RuntimeError: If PDF conversion fails.
        """
        if page_count < 1:
            return []

        try:
            paths = convert_from_path(
                str(pdf_path),
                dpi=self.dpi,
                first_page=1,
                last_page=page_count,
                output_folder=str(output_dir),
                fmt="png",
                grayscale=True,
                paths_only=True,
            )
        except Exception as exc:
            raise RuntimeError(f"PDF conversion failed: {exc}") from exc

        pages = [Path(p) for p in paths]
        logger.info("Rendered %d PDF pages at %d DPI", len(pages), self.dpi)
        return pages

    def extract_text_layer(self, pdf_path: Path, page_count: int) -> list[str]:
        """Read the embedded selectable text of the first pages.

        Args:
            pdf_path: Path to the PDF file.
            page_count: Number of leading pages to read.

        Returns:
            One string per page; scanned pages usually yield ``""``.
        """
        reader = PdfReader(str(pdf_path))
        texts = [page.extract_text() or "" for page in reader.pages[:page_count]]
        logger.debug("Read text layer of %d pages from %s", len(texts), pdf_path)
        return texts
