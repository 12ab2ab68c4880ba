"""Shared test fixtures for the zip archive captioning test suite."""

import io
import zipfile
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from zipmeta.exceptions import StorageError
from zipmeta.storage.base import BaseStorage


class MemoryStorage(BaseStorage):
    """In-memory storage backend for pipeline tests."""

    def __init__(
        self,
        objects: dict[str, bytes] | None = None,
        fail_put: bool = False,
        fail_list: bool = False,
    ) -> None:
        self.objects = dict(objects or {})
        self.content_types: dict[str, str] = {}
        self.fail_put = fail_put
        self.fail_list = fail_list

    async def list_keys(self, prefix: str = "") -> list[str]:
        if self.fail_list:
            raise StorageError("listing unavailable")
        return sorted(k for k in self.objects if k.startswith(prefix))

    async def get(self, key: str) -> bytes:
        try:
            return self.objects[key]
        except KeyError as exc:
            raise StorageError(f"no such key: {key}") from exc

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        if self.fail_put:
            raise StorageError("disk full")
        self.objects[key] = data
        self.content_types[key] = content_type

    async def exists(self, key: str) -> bool:
        return key in self.objects


def build_zip(files: dict[str, bytes], compression: int = zipfile.ZIP_STORED) -> bytes:
    """Create an in-memory zip archive from a name to content mapping."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=compression) as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return buf.getvalue()


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def png_bytes(sample_color_image: np.ndarray) -> bytes:
    """Encode the synthetic color image as PNG."""
    buf = io.BytesIO()
    Image.fromarray(sample_color_image).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_zip() -> Callable[..., bytes]:
    """Return a builder for in-memory zip archives."""
    return build_zip


@pytest.fixture
def make_storage() -> Callable[..., MemoryStorage]:
    """Return a factory for in-memory storage backends."""
    return MemoryStorage


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
