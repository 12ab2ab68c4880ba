"""Fan-out processing of one zip archive.

Lists the archive's file entries, runs one file worker per entry under a
bounded permit pool, collects one record per entry, and writes the JSON
metadata sidecar next to the archive. An entry is decompressed only once
its worker holds a permit, so at most ``max_parallel_tasks`` decompressed
entries are alive per archive.
"""

import asyncio
import io
import zipfile
import zlib

from zipmeta.exceptions import (
    ArchiveError,
    MetadataExistsError,
    MetadataPersistError,
    StorageError,
)
from zipmeta.storage.base import BaseStorage
from zipmeta.utils.logger import get_logger

from .file_worker import FileWorker
from .models import ArchiveMetadata, Entry, FileRecord, metadata_key_for

logger = get_logger(__name__)

_ENTRY_READ_ERRORS = (
    RuntimeError,
    NotImplementedError,
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    OSError,
)


def open_archive(archive_bytes: bytes, archive_key: str) -> zipfile.ZipFile:
    """Open an in-memory zip archive.

    Raises:
        ArchiveError: If the bytes are not a readable zip container.
    """
    try:
        return zipfile.ZipFile(io.BytesIO(archive_bytes))
    except (zipfile.BadZipFile, zlib.error, OSError, EOFError, ValueError) as exc:
        raise ArchiveError(archive_key, f"not a valid zip archive: {exc}") from exc


def file_entries(archive: zipfile.ZipFile) -> list[zipfile.ZipInfo]:
    """List file entries in archive order, skipping directory entries."""
    return [info for info in archive.infolist() if not info.is_dir()]


def read_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> Entry:
    """Decompress one entry.

    An entry whose content cannot be read (encrypted, corrupt, unsupported
    compression) is still returned, with ``read_error`` set.
    """
    try:
        return Entry(name=info.filename, data=archive.read(info))
    except _ENTRY_READ_ERRORS as exc:
        return Entry(name=info.filename, read_error=str(exc))


class ArchiveProcessor:
    """Processes archives entry by entry with bounded concurrency.

    Args:
        worker: Per-entry worker producing one record per entry.
        storage: Storage backend for downloads and sidecar uploads.
            Without storage, metadata is computed but not persisted.
        max_parallel_tasks: Maximum number of entries processed at once.
        overwrite_metadata: Whether an existing sidecar may be replaced.
    """

    def __init__(
        self,
        worker: FileWorker,
        storage: BaseStorage | None = None,
        max_parallel_tasks: int = 5,
        overwrite_metadata: bool = True,
    ) -> None:
        if max_parallel_tasks < 1:
            raise ValueError("max_parallel_tasks must be at least 1")
        self.worker = worker
        self.storage = storage
        self.max_parallel_tasks = max_parallel_tasks
        self.overwrite_metadata = overwrite_metadata

    async def process_archive(
        self, archive_bytes: bytes, archive_key: str, persist: bool = True
    ) -> ArchiveMetadata:
        """Process one archive and persist its metadata sidecar.

        Args:
            archive_bytes: Raw archive content.
            archive_key: Storage key (or file name) of the archive.
            persist: Write the sidecar to storage when storage is configured.

        Returns:
            Metadata with exactly one record per file entry.

        Raises:
            ArchiveError: If the archive cannot be read.
            MetadataPersistError: If the sidecar cannot be written.
        """
        archive = await asyncio.to_thread(open_archive, archive_bytes, archive_key)
        with archive:
            infos = file_entries(archive)
            logger.info(
                "Processing %d entries of %s (max %d in parallel)",
                len(infos),
                archive_key,
                self.max_parallel_tasks,
            )
            records = await self.run_workers(archive, infos)

        metadata = ArchiveMetadata(zip_file_name=archive_key, files=records)
        failed = sum(1 for r in records if r.is_error)
        logger.info(
            "Finished %s: %d files, %d with errors", archive_key, len(records), failed
        )

        if persist and self.storage is not None:
            await self.persist(metadata)
        return metadata

    async def process_key(self, archive_key: str) -> ArchiveMetadata:
        """Download an archive from storage, process it, and persist its sidecar.

        Raises:
            ArchiveError: If the archive cannot be downloaded or read.
            MetadataPersistError: If the sidecar cannot be written.
        """
        if self.storage is None:
            raise ArchiveError(archive_key, "no storage configured")

        logger.info("Downloading %s", archive_key)
        try:
            archive_bytes = await self.storage.get(archive_key)
        except StorageError as exc:
            raise ArchiveError(archive_key, f"download failed: {exc}") from exc
        return await self.process_archive(archive_bytes, archive_key, persist=True)

    async def run_workers(
        self, archive: zipfile.ZipFile, infos: list[zipfile.ZipInfo]
    ) -> list[FileRecord]:
        """Run the worker over the given entries, at most ``max_parallel_tasks`` at once.

        The permit pool is created per call, so concurrently processed
        archives never share permits. Each entry is decompressed in a
        worker thread while its permit is held. Waits for every worker to
        finish.

        Returns:
            One record per entry, in entry order.
        """
        permits = asyncio.Semaphore(self.max_parallel_tasks)

        async def run_one(info: zipfile.ZipInfo) -> FileRecord:
            async with permits:
                entry = await asyncio.to_thread(read_entry, archive, info)
                try:
                    return await self.worker.process(entry)
                except Exception as exc:
                    logger.error("Worker failed on %s: %s", entry.name, exc)
                    return FileRecord.error(entry.name, str(exc) or type(exc).__name__)

        return list(await asyncio.gather(*(run_one(info) for info in infos)))

    async def persist(self, metadata: ArchiveMetadata) -> str:
        """Write the metadata sidecar for an archive.

        Returns:
            The sidecar key.

        Raises:
            MetadataExistsError: If the sidecar exists and overwriting is disabled.
            MetadataPersistError: If the storage backend fails.
        """
        if self.storage is None:
            raise MetadataPersistError(
                metadata.zip_file_name, "no storage configured", metadata
            )

        key = metadata_key_for(metadata.zip_file_name)
        try:
            if not self.overwrite_metadata and await self.storage.exists(key):
                raise MetadataExistsError(
                    metadata.zip_file_name,
                    f"metadata file {key} already exists and overwrite is disabled",
                    metadata,
                )
            await self.storage.put(key, metadata.to_json_bytes(), "application/json")
        except StorageError as exc:
            raise MetadataPersistError(
                metadata.zip_file_name, f"cannot write metadata file {key}: {exc}", metadata
            ) from exc

        logger.info("Metadata file %s uploaded", key)
        return key
