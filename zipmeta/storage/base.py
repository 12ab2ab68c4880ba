"""Abstract storage interface for archives and metadata sidecars."""

from abc import ABC, abstractmethod


class BaseStorage(ABC):
    """Key/value object storage used to discover archives and persist metadata.

    Keys are ``/``-separated relative paths. Every method may raise
    ``StorageError``.
    """

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> list[str]:
        """List all keys starting with ``prefix``, in sorted order."""

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Read the full content stored under ``key``."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        """Store ``data`` under ``key``, replacing any previous content."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether ``key`` exists."""
