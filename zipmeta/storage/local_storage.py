"""Local filesystem storage backend (default)."""

import asyncio
from pathlib import Path

from zipmeta.exceptions import StorageError
from zipmeta.utils.logger import get_logger

from .base import BaseStorage

logger = get_logger(__name__)


class LocalStorage(BaseStorage):
    """Stores objects as files below a root directory.

    Args:
        root: Directory holding archives and metadata sidecars.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise StorageError(f"Key escapes storage root: {key!r}")
        return path

    def _list(self, prefix: str) -> list[str]:
        if not self.root.is_dir():
            raise StorageError(f"Storage root does not exist: {self.root}")
        keys = (
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*")
            if p.is_file()
        )
        return sorted(k for k in keys if k.startswith(prefix))

    async def list_keys(self, prefix: str = "") -> list[str]:
        return await asyncio.to_thread(self._list, prefix)

    async def get(self, key: str) -> bytes:
        path = self._resolve(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise StorageError(f"Cannot read {key}: {exc}") from exc

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        path = self._resolve(key)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as exc:
            raise StorageError(f"Cannot write {key}: {exc}") from exc
        logger.debug("Stored %s (%d bytes, %s)", path, len(data), content_type)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._resolve(key).is_file)
