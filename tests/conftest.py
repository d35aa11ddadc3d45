"""Shared test fixtures and doubles for the notepix test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import httpx
import pytest

from notepix.config import StorageConfig
from notepix.models import ImageFile, OperationResult, UploadFailure, UploadResult, UploadSuccess
from notepix.storage.supabase import SupabaseStorageService
from notepix.storage.transport import StorageTransport

ENDPOINT = "https://proj.supabase.co"
BUCKET = "notes"

# Smallest payload that still starts with the PNG signature.
PNG_BYTES = b"\x89PNG\r\n\x1a\n"


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------

class FakeStorage:
    """In-memory :class:`StorageService` that echoes ``<base_url>/<path>``."""

    def __init__(self, base_url: str = "https://mock") -> None:
        self.base_url = base_url
        self.uploaded: list[tuple[ImageFile, str]] = []
        self.deleted: list[str] = []
        self.fail_with: str | None = None

    async def upload(self, file: ImageFile, path: str) -> UploadResult:
        if self.fail_with is not None:
            return UploadFailure(self.fail_with)
        self.uploaded.append((file, path))
        return UploadSuccess(f"{self.base_url}/{path}")

    async def delete(self, path: str) -> OperationResult:
        self.deleted.append(path)
        return OperationResult(True, "Image deleted successfully")

    async def test_connection(self) -> OperationResult:
        return OperationResult(True, "Connection successful")

    def extract_path_from_url(self, url: str) -> str | None:
        prefix = f"{self.base_url}/"
        if isinstance(url, str) and url.startswith(prefix) and len(url) > len(prefix):
            return url[len(prefix):]
        return None

    def is_supabase_url(self, url: str) -> bool:
        return isinstance(url, str) and url.startswith(self.base_url)


class FakePathGenerator:
    """Predictable :class:`PathGenerator`: ``mock/path/<n>.<ext>``."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def generate(self, filename: str) -> str:
        self.calls.append(filename)
        extension = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
        return f"mock/path/{len(self.calls)}.{extension}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_config(**overrides) -> StorageConfig:
    """Return a StorageConfig pointing at the fake project."""
    defaults = dict(url=ENDPOINT, key="test-key-abcd1234", bucket=BUCKET)
    defaults.update(overrides)
    return StorageConfig(**defaults)


def make_service(
    handler: Callable[[httpx.Request], httpx.Response],
    **config_overrides,
) -> SupabaseStorageService:
    """Build a SupabaseStorageService whose HTTP calls go to *handler*."""
    config = make_config(**config_overrides)
    client = httpx.AsyncClient(
        base_url=config.endpoint + "/storage/v1",
        headers={"Authorization": f"Bearer {config.key}", "apikey": config.key},
        transport=httpx.MockTransport(handler),
    )
    return SupabaseStorageService(config, transport=StorageTransport(config, client=client))


def fixed_clock(year: int = 2024, month: int = 6, day: int = 15) -> Callable[[], datetime]:
    moment = datetime(year, month, day, 12, 30)
    return lambda: moment


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> StorageConfig:
    return make_config()


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def fake_paths() -> FakePathGenerator:
    return FakePathGenerator()


@pytest.fixture
def png_image() -> ImageFile:
    return ImageFile.create(name="My Photo.PNG", mime_type="image/png", data=PNG_BYTES)
