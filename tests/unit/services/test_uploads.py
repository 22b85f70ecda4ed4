"""
Unit tests for the upload URL issuer and upload processor.
"""

import re
import threading
from unittest.mock import MagicMock, patch

import pytest

from folioadmin.error_handling import ImageProcessingError, StorageError, ValidationError
from folioadmin.models.content import ContentCategory
from folioadmin.services.image_processor import WEBP_CONTENT_TYPE
from folioadmin.services.storage import IMMUTABLE_CACHE_CONTROL
from folioadmin.services.uploads import (
    UploadProcessor,
    UploadUrlIssuer,
    content_type_for,
    derived_keys,
    file_extension,
    run_jointly,
)

UUID_KEY = re.compile(r"^gallery/uploads/[0-9a-f-]{36}\.jpg$")


@pytest.fixture
def issuer(object_store) -> UploadUrlIssuer:
    return UploadUrlIssuer(object_store, expiration=3600)


@pytest.fixture
def processor(object_store, index_service, image_processor) -> UploadProcessor:
    return UploadProcessor(object_store, index_service, image_processor)


def _staged(object_store, data: bytes, key: str = "gallery/uploads/abc123.jpg") -> str:
    object_store.objects[key] = data
    return key


class TestHelpers:
    """Test cases for key helpers."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("IMG_1.JPG", "jpg"),
            ("archive.tar.png", "png"),
            ("noextension", "noextension"),
            ("trailing-dot.", "jpg"),
            ("pano.HEIF", "heif"),
        ],
    )
    def test_file_extension(self, filename, expected):
        assert file_extension(filename) == expected

    def test_content_type_for(self):
        assert content_type_for("a.JPG") == "image/jpeg"
        assert content_type_for("a.heic") == "image/heic"
        assert content_type_for("a.gif") == "application/octet-stream"

    def test_derived_keys(self):
        assert derived_keys(ContentCategory.GALLERY, "gallery/uploads/abc123.jpeg") == (
            "abc123",
            "gallery/abc123.webp",
            "gallery/abc123-thumb.webp",
        )
        assert derived_keys(ContentCategory.PHOTOS360, "photos360/uploads/x.heic")[1] == "photos360/x.webp"


class TestRunJointly:
    """Test cases for run_jointly."""

    def test_runs_all_operations_concurrently(self):
        barrier = threading.Barrier(3, timeout=5)
        finished = []

        def operation(name):
            def _run():
                barrier.wait()
                finished.append(name)

            return _run

        run_jointly([operation("a"), operation("b"), operation("c")])

        assert sorted(finished) == ["a", "b", "c"]

    def test_waits_for_all_then_raises_first_failure(self):
        finished = []

        def fail():
            raise StorageError("upload failed")

        def succeed():
            finished.append("ok")

        with pytest.raises(StorageError, match="upload failed"):
            run_jointly([fail, succeed, succeed])

        assert finished == ["ok", "ok"]


class TestUploadUrlIssuer:
    """Test cases for UploadUrlIssuer."""

    def test_issue(self, issuer, object_store):
        ticket = issuer.issue("gallery", "sunset.jpg", "image/jpeg")

        assert UUID_KEY.match(ticket.key)
        assert ticket.expires_in == 3600
        assert ticket.upload_url.startswith(f"https://storage.example.com/{ticket.key}")
        assert ticket.to_dict() == {"uploadUrl": ticket.upload_url, "key": ticket.key, "expiresIn": 3600}
        assert object_store.objects == {}

    def test_keys_are_unique(self, issuer):
        keys = {issuer.issue("gallery", "same.jpg", "image/jpeg").key for _ in range(20)}

        assert len(keys) == 20

    def test_photos360_prefix_and_heif(self, issuer):
        ticket = issuer.issue(ContentCategory.PHOTOS360, "pano.HEIF", "image/heif")

        assert ticket.key.startswith("photos360/uploads/")
        assert ticket.key.endswith(".heif")

    def test_trailing_dot_defaults_to_jpg(self, issuer):
        assert issuer.issue("gallery", "camera-export.", "image/jpeg").key.endswith(".jpg")

    def test_filename_without_dot_is_rejected(self, issuer, object_store):
        with pytest.raises(ValidationError) as exc_info:
            issuer.issue("gallery", "camera-export", "image/jpeg")

        assert exc_info.value.code == "extension_not_allowed"
        assert exc_info.value.details["extension"] == "camera-export"
        assert object_store.calls == []

    @pytest.mark.parametrize(
        "filename,content_type,code",
        [
            ("", "image/jpeg", "filename_required"),
            (None, "image/jpeg", "filename_required"),
            ("a.jpg", "", "content_type_required"),
            ("a.pdf", "application/pdf", "not_an_image"),
            ("a.gif", "image/gif", "extension_not_allowed"),
            ("a.heif", "image/heif", "extension_not_allowed"),
        ],
    )
    def test_invalid_requests_issue_nothing(self, issuer, object_store, filename, content_type, code):
        with pytest.raises(ValidationError) as exc_info:
            issuer.issue("gallery", filename, content_type)

        assert exc_info.value.code == code
        assert object_store.calls == []

    def test_disallowed_extension_message_lists_allowed(self, issuer):
        with pytest.raises(ValidationError, match="File type not allowed. Allowed: jpg, jpeg, png, webp, heic"):
            issuer.issue("gallery", "anim.gif", "image/gif")

    @pytest.mark.parametrize("category", ["videos", "tours"])
    def test_link_categories_do_not_accept_uploads(self, issuer, category):
        with pytest.raises(ValidationError) as exc_info:
            issuer.issue(category, "a.jpg", "image/jpeg")
        assert exc_info.value.code == "uploads_not_supported"

    def test_signing_failure_propagates(self, issuer, object_store):
        object_store.failures["sign"] = StorageError("signing failed", code="signing_failed")

        with pytest.raises(StorageError):
            issuer.issue("gallery", "a.jpg", "image/jpeg")

    def test_stage_puts_original_under_staging_prefix(self, issuer, object_store, jpeg_bytes):
        key = issuer.stage("gallery", "a.jpg", "image/jpeg", jpeg_bytes)

        assert UUID_KEY.match(key)
        assert object_store.objects[key] == jpeg_bytes
        assert object_store.content_types[key] == "image/jpeg"


class TestUploadProcessor:
    """Test cases for UploadProcessor."""

    def test_process_publishes_assets_and_appends_record(self, processor, object_store, index_service, jpeg_bytes):
        key = _staged(object_store, jpeg_bytes)

        result = processor.process("gallery", key, "  Sunset  ", description="Over the bay", category_label="Travel")

        assert result.record == {
            "id": "abc123",
            "url": "https://media.example.com/gallery/abc123.webp",
            "thumbnailUrl": "https://media.example.com/gallery/abc123-thumb.webp",
            "title": "Sunset",
            "description": "Over the bay",
            "category": "Travel",
        }
        assert key not in object_store.objects
        assert object_store.content_types["gallery/abc123.webp"] == WEBP_CONTENT_TYPE
        assert object_store.cache_controls["gallery/abc123-thumb.webp"] == IMMUTABLE_CACHE_CONTROL
        assert index_service.list_records("gallery") == [result.record]

    def test_stats(self, processor, object_store, jpeg_bytes):
        key = _staged(object_store, jpeg_bytes)

        stats = processor.process("gallery", key, "Sunset").stats

        assert stats["originalSize"] == len(jpeg_bytes)
        assert stats["optimizedSize"] == len(object_store.objects["gallery/abc123.webp"])
        assert stats["thumbnailSize"] == len(object_store.objects["gallery/abc123-thumb.webp"])
        assert re.fullmatch(r"-?\d+\.\d%", stats["compressionRatio"])

    def test_default_category_label(self, processor, object_store, jpeg_bytes):
        key = _staged(object_store, jpeg_bytes)

        record = processor.process("gallery", key, "Sunset", category_label="   ").record

        assert record["category"] == "Uncategorized"
        assert "description" not in record

    def test_photos360_view_fields(self, processor, object_store, index_service, jpeg_bytes):
        key = _staged(object_store, jpeg_bytes, "photos360/uploads/pano1.jpg")

        record = processor.process(
            ContentCategory.PHOTOS360, key, "Dome", initial_yaw="45", initial_pitch=-10, initial_hfov=None
        ).record

        assert record["url"] == "https://media.example.com/photos360/pano1.webp"
        assert record["initialYaw"] == 45.0
        assert record["initialPitch"] == -10.0
        assert "initialHfov" not in record
        assert index_service.count(ContentCategory.PHOTOS360) == 1

    @pytest.mark.parametrize(
        "view",
        [
            {"initial_pitch": 120},
            {"initial_hfov": 0},
            {"initial_yaw": 270},
            {"initial_yaw": "left"},
            {"initial_yaw": True},
            {"initial_yaw": float("nan")},
            {"initial_pitch": float("inf")},
            {"initial_hfov": "NaN"},
        ],
    )
    def test_invalid_view_values_touch_nothing(self, processor, object_store, jpeg_bytes, view):
        key = _staged(object_store, jpeg_bytes, "photos360/uploads/pano1.jpg")

        with pytest.raises(ValidationError) as exc_info:
            processor.process("photos360", key, "Dome", **view)

        assert exc_info.value.code == "invalid_view"
        assert object_store.calls == []

    @pytest.mark.parametrize("title", ["", "   ", None, 42])
    def test_missing_title_does_no_storage_access(self, processor, object_store, jpeg_bytes, title):
        key = _staged(object_store, jpeg_bytes)

        with pytest.raises(ValidationError) as exc_info:
            processor.process("gallery", key, title)

        assert exc_info.value.code == "title_required"
        assert object_store.calls == []

    @pytest.mark.parametrize(
        "key,code",
        [
            ("", "key_required"),
            (None, "key_required"),
            ("gallery/abc.webp", "invalid_key"),
            ("photos360/uploads/abc.jpg", "invalid_key"),
            ("gallery/uploads/", "invalid_key"),
            ("gallery/uploads/../abc.jpg", "invalid_key"),
            ("gallery/uploads/nested/abc.jpg", "invalid_key"),
        ],
    )
    def test_invalid_keys(self, processor, object_store, key, code):
        with pytest.raises(ValidationError) as exc_info:
            processor.process("gallery", key, "Sunset")

        assert exc_info.value.code == code
        assert object_store.calls == []

    def test_missing_public_base_url_fails_before_storage(self, index_service, image_processor, jpeg_bytes):
        from tests.conftest import InMemoryObjectStore

        store = InMemoryObjectStore(public_base_url=None)
        key = _staged(store, jpeg_bytes)

        with pytest.raises(StorageError) as exc_info:
            UploadProcessor(store, index_service, image_processor).process("gallery", key, "Sunset")

        assert exc_info.value.code == "public_url_not_configured"
        assert store.calls == []

    def test_missing_original(self, processor, object_store, index_service):
        with pytest.raises(StorageError) as exc_info:
            processor.process("gallery", "gallery/uploads/missing.jpg", "Sunset")

        assert exc_info.value.code == "object_not_found"
        assert object_store.operations("put") == []
        assert index_service.count("gallery") == 0

    def test_undecodable_original_leaves_staging_object(self, processor, object_store, index_service):
        key = _staged(object_store, b"not an image")

        with pytest.raises(ImageProcessingError):
            processor.process("gallery", key, "Sunset")

        assert key in object_store.objects
        assert object_store.operations("put") == []
        assert index_service.count("gallery") == 0

    def test_storage_failure_skips_index_and_may_orphan(self, processor, object_store, index_service, jpeg_bytes):
        key = _staged(object_store, jpeg_bytes)
        object_store.failures[("put", "gallery/abc123-thumb.webp")] = StorageError("thumbnail upload failed")

        with pytest.raises(StorageError, match="thumbnail upload failed"):
            processor.process("gallery", key, "Sunset")

        # the other operations still ran to completion
        assert "gallery/abc123.webp" in object_store.objects
        assert key not in object_store.objects
        assert index_service.count("gallery") == 0

    @pytest.mark.parametrize(
        "failure", [StorageError("thumbnail upload failed"), ConnectionResetError("connection reset by peer")]
    )
    def test_any_store_failure_logs_possible_orphans(self, processor, object_store, index_service, jpeg_bytes, failure):
        key = _staged(object_store, jpeg_bytes)
        object_store.failures[("put", "gallery/abc123-thumb.webp")] = failure

        with patch("folioadmin.services.uploads.logger") as mock_logger:
            with pytest.raises(type(failure)):
                processor.process("gallery", key, "Sunset")

        mock_logger.warning.assert_called_once_with(
            "orphaned_objects_possible",
            category="gallery",
            original_key=key,
            derived_keys=["gallery/abc123.webp", "gallery/abc123-thumb.webp"],
            error_type=type(failure).__name__,
        )
        assert index_service.count("gallery") == 0

    def test_index_failure_after_storage(self, object_store, image_processor, jpeg_bytes):
        index_service = MagicMock()
        index_service.append_record.side_effect = RuntimeError("index unavailable")
        key = _staged(object_store, jpeg_bytes)

        with pytest.raises(RuntimeError):
            UploadProcessor(object_store, index_service, image_processor).process("gallery", key, "Sunset")

        assert "gallery/abc123.webp" in object_store.objects
        assert key not in object_store.objects
