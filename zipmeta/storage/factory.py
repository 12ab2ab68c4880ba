"""Factory: instantiate the storage backend from configuration."""

from zipmeta.utils.config import StorageConfig

from .base import BaseStorage
from .local_storage import LocalStorage


def create_storage(config: StorageConfig) -> BaseStorage:
    """Create the storage backend selected by ``config.backend``.

    Raises:
        ValueError: If the backend is unknown or misconfigured.
    """
    if config.backend == "local":
        return LocalStorage(config.local_root)

    if config.backend == "s3":
        from .s3_storage import S3Storage

        if not config.bucket:
            raise ValueError("storage.bucket must be set when storage.backend is 's3'")
        return S3Storage(
            bucket=config.bucket,
            prefix=config.prefix,
            region=config.region,
            endpoint_url=config.endpoint_url,
        )

    raise ValueError(f"Unsupported storage backend: {config.backend!r}")
