"""Data model for archives, entries, and the persisted metadata sidecar."""

import json
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field

ERROR_MARKER = "Error: "
METADATA_SUFFIX = ".json"
ARCHIVE_SUFFIX = ".zip"


def metadata_key_for(archive_key: str) -> str:
    """Derive the sidecar key: same base name, ``.json`` extension."""
    return str(PurePosixPath(archive_key).with_suffix(METADATA_SUFFIX))


@dataclass(frozen=True)
class ArchiveHandle:
    """Storage key of one zip archive and its derived sidecar key."""

    key: str

    @property
    def metadata_key(self) -> str:
        return metadata_key_for(self.key)


@dataclass
class Entry:
    """One file inside an archive.

    ``read_error`` is set when the entry is listed in the archive but its
    content could not be decompressed.
    """

    name: str
    data: bytes = b""
    read_error: str | None = None


class FileRecord(BaseModel):
    """Caption result for one archive entry."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName")
    file_caption: str = Field(alias="fileCaption")

    @classmethod
    def error(cls, file_name: str, message: str) -> "FileRecord":
        """Build a record whose caption carries the error marker."""
        return cls(file_name=file_name, file_caption=f"{ERROR_MARKER}{message}")

    @property
    def is_error(self) -> bool:
        return self.file_caption.startswith(ERROR_MARKER)


class ArchiveMetadata(BaseModel):
    """The JSON sidecar persisted for one archive."""

    model_config = ConfigDict(populate_by_name=True)

    zip_file_name: str = Field(alias="zipFileName")
    files: list[FileRecord] = Field(default_factory=list)

    def to_json_bytes(self) -> bytes:
        """Serialize as indented UTF-8 JSON, leaving non-ASCII unescaped."""
        return json.dumps(
            self.model_dump(by_alias=True), ensure_ascii=False, indent=2
        ).encode("utf-8")


@dataclass
class BatchReport:
    """Outcome of one batch run."""

    listed: list[str] = field(default_factory=list)
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: bool = False
