"""Batch runs over all archives in storage.

Lists candidate archives, optionally keeps only those without a metadata
sidecar, and processes each one in isolation so a single bad archive
never stops the batch.
"""

import asyncio
import threading
from enum import StrEnum

from zipmeta.storage.base import BaseStorage
from zipmeta.utils.logger import get_logger

from .archive_processor import ArchiveProcessor
from .models import ARCHIVE_SUFFIX, METADATA_SUFFIX, ArchiveHandle, BatchReport

logger = get_logger(__name__)


def filter_archives(keys: list[str], only_new: bool) -> list[ArchiveHandle]:
    """Select archives, optionally dropping those that already have metadata.

    Extensions and base names are compared case-insensitively.

    Args:
        keys: All keys in storage.
        only_new: Drop archives whose ``.json`` sidecar is listed.

    Returns:
        Archive handles in listing order.
    """
    archives = [ArchiveHandle(k) for k in keys if k.lower().endswith(ARCHIVE_SUFFIX)]
    if not only_new:
        return archives

    described = {k.lower() for k in keys if k.lower().endswith(METADATA_SUFFIX)}
    return [a for a in archives if a.metadata_key.lower() not in described]


async def list_archives(storage: BaseStorage, only_new: bool) -> list[ArchiveHandle]:
    """List archives in storage.

    Raises:
        StorageError: If the listing fails.
    """
    return filter_archives(await storage.list_keys(), only_new)


class BatchState(StrEnum):
    """Lifecycle of the orchestrator's batch run."""

    IDLE = "idle"
    RUNNING = "running"


class BatchOrchestrator:
    """Runs batches of archives with a re-entrancy guard.

    Args:
        storage: Storage backend holding the archives.
        processor: Processor handling one archive at a time.
        max_parallel_archives: Archives processed concurrently; 1 means
            strictly sequential in listing order.
    """

    def __init__(
        self,
        storage: BaseStorage,
        processor: ArchiveProcessor,
        max_parallel_archives: int = 1,
    ) -> None:
        if max_parallel_archives < 1:
            raise ValueError("max_parallel_archives must be at least 1")
        self.storage = storage
        self.processor = processor
        self.max_parallel_archives = max_parallel_archives
        self._state = BatchState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> BatchState:
        return self._state

    def _try_begin(self) -> bool:
        with self._state_lock:
            if self._state is BatchState.RUNNING:
                return False
            self._state = BatchState.RUNNING
            return True

    def _finish(self) -> None:
        with self._state_lock:
            self._state = BatchState.IDLE

    async def run_batch(self, only_new: bool = True) -> BatchReport:
        """Process every pending archive once.

        A call made while another run is in progress is skipped, not
        queued.

        Args:
            only_new: Skip archives that already have a metadata sidecar.

        Returns:
            Report of listed, succeeded and failed archives.

        Raises:
            StorageError: If the archive listing fails.
        """
        if not self._try_begin():
            logger.warning("Previous batch still running. Skipping this run.")
            return BatchReport(skipped=True)

        try:
            logger.info("Checking for zip files in storage...")
            archives = await list_archives(self.storage, only_new)
            report = BatchReport(listed=[a.key for a in archives])

            if not archives:
                logger.info("No zip files found.")
                return report

            logger.info("Found %d zip files. Processing...", len(archives))
            await self._process_all(archives, report)
            logger.info(
                "Batch complete: %d succeeded, %d failed",
                len(report.succeeded),
                len(report.failed),
            )
            return report
        finally:
            self._finish()

    async def _process_all(
        self, archives: list[ArchiveHandle], report: BatchReport
    ) -> None:
        if self.max_parallel_archives == 1:
            for archive in archives:
                await self._process_one(archive, report)
            return

        permits = asyncio.Semaphore(self.max_parallel_archives)

        async def bounded(archive: ArchiveHandle) -> None:
            async with permits:
                await self._process_one(archive, report)

        await asyncio.gather(*(bounded(a) for a in archives))

    async def _process_one(self, archive: ArchiveHandle, report: BatchReport) -> None:
        try:
            await self.processor.process_key(archive.key)
        except Exception as exc:
            logger.error("Error processing zip %s: %s", archive.key, exc)
            report.failed[archive.key] = str(exc)
            return
        report.succeeded.append(archive.key)
