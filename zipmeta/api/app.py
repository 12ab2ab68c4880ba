"""FastAPI application for the archive captioning API.

Provides REST endpoints for captioning a single document, processing an
uploaded zip archive, listing and batch-processing stored archives, and
health checks.
"""

import shutil
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated

import torch
from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from zipmeta.exceptions import ArchiveError, MetadataPersistError, StorageError
from zipmeta.pipeline.batch_orchestrator import list_archives
from zipmeta.pipeline.factory import Pipeline, build_pipeline
from zipmeta.pipeline.models import ArchiveMetadata, Entry, FileRecord
from zipmeta.utils.config import load_config
from zipmeta.utils.logger import get_logger

from .schemas import ArchiveListResponse, BatchRunResponse, HealthResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close the shared pipeline's backend connections on shutdown."""
    yield
    if _get_pipeline.cache_info().currsize:
        await _get_pipeline().aclose()
        _get_pipeline.cache_clear()


app = FastAPI(
    title="Zip Archive Captioning API",
    description="OCR and caption the documents inside zip archives",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def _get_pipeline() -> Pipeline:
    """Build the shared pipeline once per process.

    The orchestrator's re-entrancy guard only works if every request
    sees the same instance.
    """
    return build_pipeline(load_config())


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        tesseract_available=shutil.which("tesseract") is not None,
        gpu_available=torch.cuda.is_available(),
    )


@app.get("/archives", response_model=ArchiveListResponse)
async def get_archives(
    only_new: Annotated[bool, Query()] = True,
) -> ArchiveListResponse:
    """List archive keys in storage, optionally only those without metadata."""
    pipeline = _get_pipeline()
    try:
        archives = await list_archives(pipeline.orchestrator.storage, only_new)
    except StorageError as exc:
        logger.error("Listing archives failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ArchiveListResponse(only_new=only_new, archives=[a.key for a in archives])


@app.post("/caption", response_model=FileRecord)
async def caption_document(
    file: Annotated[UploadFile, File(...)],
) -> FileRecord:
    """OCR and caption one uploaded document.

    Per-file failures are reported in the record's caption, as they would
    be inside an archive.
    """
    pipeline = _get_pipeline()
    content = await file.read()
    entry = Entry(name=file.filename or "document", data=content)
    return await pipeline.worker.process(entry)


@app.post("/archives/process", response_model=ArchiveMetadata)
async def process_archive(
    file: Annotated[UploadFile, File(...)],
    persist: Annotated[bool, Query()] = False,
) -> ArchiveMetadata:
    """Process an uploaded zip archive.

    Args:
        file: Uploaded zip archive.
        persist: Store the metadata sidecar under the upload's file name.

    Returns:
        Metadata with one record per file in the archive.
    """
    pipeline = _get_pipeline()
    content = await file.read()
    archive_key = file.filename or "archive.zip"

    try:
        return await pipeline.processor.process_archive(
            content, archive_key, persist=persist
        )
    except MetadataPersistError as exc:
        logger.error("Storing metadata failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ArchiveError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/batch/run", response_model=BatchRunResponse)
async def run_batch(
    only_new: Annotated[bool, Query()] = True,
) -> BatchRunResponse:
    """Run one batch over the stored archives and wait for it to finish."""
    pipeline = _get_pipeline()
    try:
        report = await pipeline.orchestrator.run_batch(only_new)
    except StorageError as exc:
        logger.error("Batch run failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    if report.skipped:
        raise HTTPException(status_code=409, detail="A batch run is already in progress")

    return BatchRunResponse(
        listed=len(report.listed),
        succeeded=report.succeeded,
        failed=report.failed,
    )
