"""Content-based classification of archive entries."""

from enum import StrEnum
from pathlib import PurePosixPath

from zipmeta.utils.logger import get_logger

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF-"

_IMAGE_SIGNATURES: tuple[bytes, ...] = (
    b"\xff\xd8\xff",  # JPEG
    b"\x89PNG\r\n\x1a\n",
    b"GIF87a",
    b"GIF89a",
    b"II*\x00",  # TIFF, little endian
    b"MM\x00*",  # TIFF, big endian
)

# DIB header sizes: core, Windows info (v1 to v5) and OS/2 v2.
_BMP_DIB_HEADER_SIZES = frozenset({12, 40, 52, 56, 64, 108, 124})


class DocumentKind(StrEnum):
    """Extraction strategy selected for an entry."""

    IMAGE = "image"
    PAGINATED = "paginated"
    UNSUPPORTED = "unsupported"


def _is_webp(data: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


def _is_bmp(data: bytes) -> bool:
    if not data.startswith(b"BM") or len(data) < 18:
        return False
    return int.from_bytes(data[14:18], "little") in _BMP_DIB_HEADER_SIZES


def classify_document(data: bytes, name: str = "") -> DocumentKind:
    """Pick the extraction strategy from the entry's leading bytes.

    The file name is not trusted: archive uploads often carry wrong or
    missing extensions, so only the content signature decides.

    Args:
        data: Raw entry content.
        name: Entry name, used for diagnostics only.

    Returns:
        The document kind for this content.
    """
    if data.startswith(PDF_MAGIC):
        return DocumentKind.PAGINATED

    if data.startswith(_IMAGE_SIGNATURES) or _is_webp(data) or _is_bmp(data):
        return DocumentKind.IMAGE

    if PurePosixPath(name).suffix.lower() == ".pdf":
        logger.warning("Skipping unsupported or corrupt PDF file: %s", name)
    else:
        logger.debug("Unrecognized content signature for %s", name)
    return DocumentKind.UNSUPPORTED
