"""Per-entry unit of work: extract text, then caption it."""

from zipmeta.captioning.caption_generator import CaptionGenerator
from zipmeta.ocr.text_extractor import SENTINEL_TEXTS, TextExtractor
from zipmeta.utils.logger import get_logger

from .models import Entry, FileRecord

logger = get_logger(__name__)


class FileWorker:
    """Produces the metadata record for one archive entry.

    ``process`` never raises: every failure becomes a record whose caption
    starts with ``"Error: "``, so each entry is represented exactly once.

    Args:
        extractor: Text extractor for the entry content.
        captioner: Caption generator for the extracted text.
    """

    def __init__(self, extractor: TextExtractor, captioner: CaptionGenerator) -> None:
        self.extractor = extractor
        self.captioner = captioner

    async def process(self, entry: Entry) -> FileRecord:
        """Extract and caption one entry.

        Args:
            entry: Archive entry to process.

        Returns:
            The entry's record. Empty text falls back to the entry name
            without calling the captioning backend.
        """
        if entry.read_error is not None:
            logger.error("Cannot read %s from archive: %s", entry.name, entry.read_error)
            return FileRecord.error(entry.name, entry.read_error)

        try:
            logger.info("Starting OCR analysis for %s", entry.name)
            text = await self.extractor.extract(entry.data, entry.name)

            if text in SENTINEL_TEXTS:
                caption = text
            elif not text:
                logger.info("No text found in %s, using file name as caption", entry.name)
                caption = entry.name
            else:
                logger.info("Starting caption generation for %s", entry.name)
                caption = await self.captioner.caption(text) or entry.name

        except Exception as exc:
            logger.error("Error processing file %s: %s", entry.name, exc)
            return FileRecord.error(entry.name, str(exc) or type(exc).__name__)

        logger.info("File %s processed successfully", entry.name)
        return FileRecord(file_name=entry.name, file_caption=caption)
