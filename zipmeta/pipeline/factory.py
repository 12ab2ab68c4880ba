"""Factory: wire the full pipeline from configuration."""

from dataclasses import dataclass, field

from zipmeta.captioning.base import BaseCaptionBackend
from zipmeta.captioning.factory import create_caption_generator
from zipmeta.ocr.base import BaseOCRBackend
from zipmeta.ocr.factory import create_ocr_backend
from zipmeta.ocr.text_extractor import TextExtractor
from zipmeta.storage.factory import create_storage
from zipmeta.utils.config import AppConfig

from .archive_processor import ArchiveProcessor
from .batch_orchestrator import BatchOrchestrator
from .file_worker import FileWorker


@dataclass
class Pipeline:
    """All pipeline components built from one configuration.

    ``backends`` lists the OCR and captioning backends whose connections
    ``aclose`` releases once the pipeline is no longer used.
    """

    config: AppConfig
    worker: FileWorker
    processor: ArchiveProcessor
    orchestrator: BatchOrchestrator
    backends: list[BaseOCRBackend | BaseCaptionBackend] = field(default_factory=list)

    async def aclose(self) -> None:
        for backend in self.backends:
            await backend.aclose()


def build_pipeline(config: AppConfig) -> Pipeline:
    """Create storage, OCR and captioning backends and wire them together.

    Args:
        config: Application configuration.

    Returns:
        The wired pipeline.

    Raises:
        ValueError: If a backend is unknown or misconfigured.
    """
    storage = create_storage(config.storage)
    ocr_backend = create_ocr_backend(config.ocr)
    captioner = create_caption_generator(config.captioning)
    worker = FileWorker(TextExtractor(config.ocr, ocr_backend), captioner)
    processor = ArchiveProcessor(
        worker,
        storage=storage,
        max_parallel_tasks=config.batch.max_parallel_tasks,
        overwrite_metadata=config.batch.overwrite_metadata,
    )
    orchestrator = BatchOrchestrator(
        storage,
        processor,
        max_parallel_archives=config.batch.max_parallel_archives,
    )
    return Pipeline(
        config=config,
        worker=worker,
        processor=processor,
        orchestrator=orchestrator,
        backends=[ocr_backend, captioner.backend],
    )
