"""Exception hierarchy for the archive metadata pipeline."""


class ZipMetaError(Exception):
    """Base class for pipeline errors."""


class StorageError(ZipMetaError):
    """A storage backend call (list, get, put, head) failed."""


class OCRBackendError(ZipMetaError):
    """The OCR backend could not produce text for an image."""


class CaptionBackendError(ZipMetaError):
    """The captioning backend returned an error or an unusable response."""


class ArchiveError(ZipMetaError):
    """An archive could not be read or its metadata could not be stored."""

    def __init__(self, archive_key: str, message: str) -> None:
        super().__init__(f"{archive_key}: {message}")
        self.archive_key = archive_key


class MetadataPersistError(ArchiveError):
    """Writing the metadata sidecar failed after all entries were processed.

    The computed metadata is kept on the exception so callers can still
    inspect or retry it.
    """

    def __init__(self, archive_key: str, message: str, metadata: object) -> None:
        super().__init__(archive_key, message)
        self.metadata = metadata


class MetadataExistsError(MetadataPersistError):
    """The metadata sidecar exists and overwriting is disabled."""
