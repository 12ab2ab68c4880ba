"""Pydantic response schemas for the FastAPI endpoints.

Per-file records and archive metadata are returned as the pipeline's own
models (``FileRecord``, ``ArchiveMetadata``), serialized with their
camelCase aliases.
"""

from pydantic import BaseModel


class ArchiveListResponse(BaseModel):
    """Response schema listing archive keys in storage."""

    only_new: bool
    archives: list[str]


class BatchRunResponse(BaseModel):
    """Response schema for a triggered batch run."""

    listed: int
    succeeded: list[str]
    failed: dict[str, str]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
    gpu_available: bool
