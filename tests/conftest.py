"""
Pytest configuration and fixtures for folioadmin tests.
"""

import io
import json
import threading
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from folioadmin.error_handling import StorageError
from folioadmin.models.content import ContentCategory
from folioadmin.services.auth import AdminAuthService
from folioadmin.services.content_index import ContentIndexService, JsonFileIndexStore
from folioadmin.services.image_processor import ImageProcessor
from folioadmin.services.storage import ObjectStore

PUBLIC_BASE_URL = "https://media.example.com"


class InMemoryObjectStore(ObjectStore):
    """ObjectStore double keeping objects in a dict and recording every call."""

    def __init__(self, public_base_url: str | None = PUBLIC_BASE_URL) -> None:
        super().__init__(public_base_url)
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.cache_controls: dict[str, str | None] = {}
        self.calls: list[tuple[str, str]] = []
        # "put" fails every put, ("put", key) only that key
        self.failures: dict[object, Exception] = {}
        self._lock = threading.Lock()

    def _record(self, operation: str, key: str) -> None:
        with self._lock:
            self.calls.append((operation, key))
        failure = self.failures.get((operation, key)) or self.failures.get(operation)
        if failure is not None:
            raise failure

    def operations(self, operation: str) -> list[str]:
        return [key for op, key in self.calls if op == operation]

    def get_object(self, key: str) -> bytes:
        self._record("get", key)
        if key not in self.objects:
            raise StorageError(f"Object not found: {key}", code="object_not_found", details={"key": key})
        return self.objects[key]

    def put_object(self, key: str, data: bytes, content_type: str, cache_control: str | None = None) -> None:
        self._record("put", key)
        with self._lock:
            self.objects[key] = data
            self.content_types[key] = content_type
            self.cache_controls[key] = cache_control

    def delete_object(self, key: str) -> None:
        self._record("delete", key)
        with self._lock:
            self.objects.pop(key, None)

    def object_exists(self, key: str) -> bool:
        self._record("exists", key)
        return key in self.objects

    def generate_presigned_write_url(self, key: str, content_type: str, expiration: int) -> str:
        self._record("sign", key)
        return f"https://storage.example.com/{key}?expires={expiration}&content-type={content_type}"


def make_image_bytes(
    size: tuple[int, int] = (800, 600),
    image_format: str = "JPEG",
    mode: str = "RGB",
    color: object = (200, 80, 40),
) -> bytes:
    """Encode a solid-colour test image."""
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Set up test environment variables and reset cached singletons."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
    monkeypatch.setenv("GCS_MEDIA_BUCKET", "test-media-bucket")
    monkeypatch.setenv("PUBLIC_BASE_URL", PUBLIC_BASE_URL)
    monkeypatch.setenv("CONTENT_DIR", str(tmp_path / "content"))
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", "correct-horse")
    monkeypatch.setenv("AUTH_SECRET", "test-secret-key-with-enough-length")

    monkeypatch.setattr("folioadmin.config._config", None)
    monkeypatch.setattr("folioadmin.services.storage._object_store", None)
    monkeypatch.setattr("folioadmin.services.auth._auth_service", None)
    monkeypatch.setattr("folioadmin.services.content_index._index_service", None)
    monkeypatch.setattr("folioadmin.services.image_processor._image_processor", None)


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes(size=(320, 240), image_format="PNG", mode="RGBA", color=(0, 128, 255, 128))


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Content directory seeded with an empty index for every category."""
    directory = tmp_path / "content"
    directory.mkdir(exist_ok=True)
    for category in ContentCategory:
        (directory / category.index_filename).write_text(json.dumps({category.records_key: []}), encoding="utf-8")
    return directory


@pytest.fixture
def index_store(content_dir: Path) -> JsonFileIndexStore:
    return JsonFileIndexStore(content_dir)


@pytest.fixture
def index_service(index_store: JsonFileIndexStore) -> ContentIndexService:
    return ContentIndexService(index_store)


@pytest.fixture
def seed_index(content_dir: Path) -> Callable[[ContentCategory, list[dict]], None]:
    """Write records into a category index."""

    def _seed(category: ContentCategory, records: list[dict]) -> None:
        path = content_dir / category.index_filename
        path.write_text(json.dumps({category.records_key: records}), encoding="utf-8")

    return _seed


@pytest.fixture
def image_processor() -> ImageProcessor:
    return ImageProcessor()


@pytest.fixture
def auth_service() -> AdminAuthService:
    return AdminAuthService(
        username="admin",
        password="correct-horse",
        secret="test-secret-key-with-enough-length",
        session_ttl=3600,
        email="admin@example.com",
    )
