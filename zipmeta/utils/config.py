"""Configuration management for the archive metadata pipeline.

Loads and validates YAML configuration with sensible defaults
for OCR, captioning, storage, and batch processing settings.
"""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONTENT_PLACEHOLDER = "@FILE_CONTENT@"

DEFAULT_PROMPT_TEMPLATE = (
    "Below is the text extracted from a scanned document. "
    "Reply with a short descriptive title for the document, in the "
    "document's own language, and nothing else.\n"
    f"Document text: {CONTENT_PLACEHOLDER}"
)


class OCRConfig(BaseModel):
    """Configuration for text extraction and the OCR backend."""

    backend: Literal["tesseract", "remote"] = "tesseract"
    tesseract_cmd: str | None = None
    languages: str = "eng+heb"
    psm: int = 3
    pdf_dpi: int = Field(default=300, ge=72)
    max_pdf_pages: int = Field(default=5, ge=1)
    binarize_method: Literal["threshold", "otsu", "adaptive"] = "threshold"
    binarize_threshold: float = Field(default=65.0, gt=0, lt=100)
    scratch_dir: str | None = None
    remote_url: str | None = None
    timeout_s: float = 120.0


class CaptioningConfig(BaseModel):
    """Configuration for caption generation."""

    backend: Literal["bedrock", "http", "local"] = "bedrock"
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE
    max_input_chars: int = Field(default=8000, ge=1)
    max_caption_length: int = Field(default=50, ge=1)
    bedrock_region: str = "eu-central-1"
    bedrock_model_id: str = "anthropic.claude-3-sonnet-20240229-v1:0"
    max_tokens: int = 1000
    http_url: str | None = None
    timeout_s: float = 600.0
    local_model_name: str = "google/flan-t5-small"
    device: str | None = None


class StorageConfig(BaseModel):
    """Configuration for the archive storage backend."""

    backend: Literal["local", "s3"] = "local"
    local_root: str = "data"
    bucket: str | None = None
    prefix: str = ""
    region: str | None = None
    endpoint_url: str | None = None


class BatchConfig(BaseModel):
    """Configuration for batch and archive-level concurrency."""

    max_parallel_tasks: int = Field(default=5, ge=1)
    max_parallel_archives: int = Field(default=1, ge=1)
    only_new: bool = True
    interval_minutes: float = Field(default=10.0, gt=0)
    overwrite_metadata: bool = True


class ApiConfig(BaseModel):
    """Configuration for the REST API server."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    captioning: CaptioningConfig = Field(default_factory=CaptioningConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
