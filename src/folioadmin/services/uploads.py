"""
Direct-to-storage upload flow for image categories.

1. UploadUrlIssuer hands the client a signed PUT URL and a staging key.
2. The client uploads the original straight to the bucket.
3. UploadProcessor turns the staged original into public WebP assets and
   appends a record to the category index.

Nothing here retries. A completion that fails after its storage writes
can leave orphaned objects behind; the index is only written as the very
last step, so it never references objects that were not stored. Because
the original is deleted during completion, re-running a completion whose
storage step succeeded fails at the download.
"""

import math
import uuid
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..config import get_upload_url_expiration
from ..error_handling import ValidationError
from ..logging_config import get_logger, log_performance
from ..models.content import DEFAULT_CATEGORY_LABEL, ContentCategory, Photo, Photo360
from .content_index import ContentIndexService
from .image_processor import WEBP_CONTENT_TYPE, ImageProcessor
from .storage import IMMUTABLE_CACHE_CONTROL, ObjectStore

logger = get_logger(__name__)


@dataclass
class UploadTicket:
    """Signed upload URL plus the staging key the client must report back."""

    upload_url: str
    key: str
    expires_in: int

    def to_dict(self) -> dict[str, Any]:
        return {"uploadUrl": self.upload_url, "key": self.key, "expiresIn": self.expires_in}


@dataclass
class ProcessingResult:
    """Record appended to the index and size statistics of the conversion."""

    record: dict[str, Any]
    stats: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"photo": self.record, "stats": self.stats}


def _require_upload_category(category: ContentCategory | str) -> ContentCategory:
    category = ContentCategory.parse(category)
    if not category.settings.accepts_uploads:
        raise ValidationError(
            f"Category '{category.value}' does not accept image uploads",
            code="uploads_not_supported",
            details={"category": category.value},
        )
    return category


def file_extension(filename: str) -> str:
    """
    Lower-cased text after the last dot, or jpg when that text is empty.

    A name without any dot is all extension: "photo" gives "photo", which no
    allow-list accepts, while "photo." gives "jpg".
    """
    return filename.rsplit(".", 1)[-1].lower() or "jpg"


IMAGE_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "heic": "image/heic",
    "heif": "image/heif",
}


def content_type_for(filename: str) -> str:
    """Image content type implied by a file name, for callers that only have a path."""
    return IMAGE_CONTENT_TYPES.get(file_extension(filename), "application/octet-stream")


class UploadUrlIssuer:
    """Issues signed URLs for uploading originals into a category's staging prefix."""

    def __init__(self, object_store: ObjectStore, expiration: int | None = None) -> None:
        self.object_store = object_store
        self.expiration = expiration or get_upload_url_expiration()

    def validate_request(self, category: ContentCategory, filename: Any, content_type: Any) -> str:
        """
        Check an upload request and return the normalised extension.

        Raises:
            ValidationError: On missing fields, non-image content types or
                extensions outside the category allow-list
        """
        if not filename or not isinstance(filename, str):
            raise ValidationError("Filename is required", code="filename_required")
        if not content_type or not isinstance(content_type, str):
            raise ValidationError("Content type is required", code="content_type_required")
        if not content_type.startswith("image/"):
            raise ValidationError(
                "File must be an image", code="not_an_image", details={"content_type": content_type}
            )

        extension = file_extension(filename)
        allowed = category.settings.allowed_extensions
        if extension not in allowed:
            raise ValidationError(
                f"File type not allowed. Allowed: {', '.join(allowed)}",
                code="extension_not_allowed",
                details={"extension": extension, "allowed": list(allowed)},
            )
        return extension

    def allocate_key(self, category: ContentCategory | str, filename: Any, content_type: Any) -> str:
        """Validate an upload request and return a fresh staging key for it."""
        category = _require_upload_category(category)
        extension = self.validate_request(category, filename, content_type)
        return f"{category.settings.staging_prefix}/{uuid.uuid4()}.{extension}"

    def issue(self, category: ContentCategory | str, filename: Any, content_type: Any) -> UploadTicket:
        """
        Issue a signed upload URL for a new staging key.

        No object is written; only a credential is generated.

        Raises:
            ValidationError: If the request is invalid
            StorageError: If the URL cannot be signed
        """
        category = _require_upload_category(category)
        key = self.allocate_key(category, filename, content_type)
        upload_url = self.object_store.generate_presigned_write_url(key, content_type, self.expiration)

        logger.info(
            "upload_url_issued",
            category=category.value,
            filename=filename,
            key=key,
            content_type=content_type,
            expires_in=self.expiration,
        )
        return UploadTicket(upload_url=upload_url, key=key, expires_in=self.expiration)

    def stage(self, category: ContentCategory | str, filename: Any, content_type: Any, data: bytes) -> str:
        """
        Put an original into the staging prefix from the server side.

        Used where the bytes are already in hand (admin panel form, CLI);
        the result is the same staging key a signed-URL upload produces.
        """
        key = self.allocate_key(category, filename, content_type)
        self.object_store.put_object(key, data, content_type)
        logger.info("upload_staged", key=key, filename=filename, size=len(data))
        return key


def derived_keys(category: ContentCategory, staging_key: str) -> tuple[str, str, str]:
    """
    Map a staging key to (record id, image key, thumbnail key).

    gallery/uploads/{id}.{ext} -> gallery/{id}.webp, gallery/{id}-thumb.webp
    """
    record_id = staging_key.rsplit("/", 1)[-1].split(".", 1)[0]
    prefix = category.settings.public_prefix
    return record_id, f"{prefix}/{record_id}.webp", f"{prefix}/{record_id}-thumb.webp"


def run_jointly(operations: list[Callable[[], None]]) -> None:
    """
    Run independent operations concurrently and wait for all of them.

    Raises the first failure (in submission order) once every operation
    has finished; operations that succeeded are not undone.
    """
    with ThreadPoolExecutor(max_workers=len(operations), thread_name_prefix="store-op") as executor:
        futures = [executor.submit(operation) for operation in operations]
        wait(futures)

    errors = [future.exception() for future in futures if future.exception() is not None]
    if errors:
        raise errors[0]  # type: ignore[misc]


class UploadProcessor:
    """Converts staged originals into published WebP assets and index records."""

    def __init__(
        self,
        object_store: ObjectStore,
        index_service: ContentIndexService,
        image_processor: ImageProcessor,
    ) -> None:
        self.object_store = object_store
        self.index_service = index_service
        self.image_processor = image_processor

    def _validate_key(self, category: ContentCategory, key: Any) -> str:
        if not key or not isinstance(key, str):
            raise ValidationError("Storage key is required", code="key_required")
        staging_prefix = f"{category.settings.staging_prefix}/"
        name = key[len(staging_prefix) :] if key.startswith(staging_prefix) else ""
        if not name or "/" in name or name.startswith("."):
            raise ValidationError(
                f"Key must reference an upload under '{staging_prefix}'",
                code="invalid_key",
                details={"key": key, "category": category.value},
            )
        return key

    def _build_record(
        self,
        category: ContentCategory,
        record_id: str,
        image_key: str,
        thumbnail_key: str,
        title: str,
        description: str | None,
        category_label: str | None,
        view: dict[str, Any],
    ) -> dict[str, Any]:
        common = {
            "id": record_id,
            "url": self.object_store.public_url(image_key),
            "thumbnail_url": self.object_store.public_url(thumbnail_key),
            "title": title,
            "description": description,
            "category": category_label or DEFAULT_CATEGORY_LABEL,
        }
        if category is ContentCategory.PHOTOS360:
            try:
                record = Photo360(
                    **common,
                    initial_yaw=_optional_float(view.get("initial_yaw")),
                    initial_pitch=_optional_float(view.get("initial_pitch")),
                    initial_hfov=_optional_float(view.get("initial_hfov")),
                )
            except (TypeError, ValueError) as e:
                raise ValidationError("Viewer orientation values must be numbers", code="invalid_view") from e
            if not record.validate():
                raise ValidationError(
                    "Viewer orientation out of range (yaw -180..180, pitch -90..90, hfov 0..180)", code="invalid_view"
                )
            return record.to_dict()
        return Photo(**common).to_dict()

    def process(
        self,
        category: ContentCategory | str,
        key: Any,
        title: Any,
        description: str | None = None,
        category_label: str | None = None,
        **view: Any,
    ) -> ProcessingResult:
        """
        Publish a staged upload.

        Validation happens before any storage access. The three store
        operations (upload image, upload thumbnail, delete original) run
        concurrently and must all succeed before the index is touched.

        Args:
            category: Image category the upload belongs to
            key: Staging key returned by UploadUrlIssuer
            title: Record title, required after trimming
            description: Optional description
            category_label: Optional display category (defaults to Uncategorized)
            **view: initial_yaw / initial_pitch / initial_hfov for 360 photos

        Returns:
            ProcessingResult: The appended record and size statistics

        Raises:
            ValidationError: On invalid input, before any storage access
            StorageError: If download, upload or delete fails
            ImageProcessingError: If the original cannot be converted
            ContentIndexError: If the index cannot be read or written
        """
        start_time = datetime.now()
        category = _require_upload_category(category)
        key = self._validate_key(category, key)

        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required", code="title_required")

        record_id, image_key, thumbnail_key = derived_keys(category, key)
        record = self._build_record(
            category,
            record_id,
            image_key,
            thumbnail_key,
            title=title.strip(),
            description=(description or "").strip() or None,
            category_label=(category_label or "").strip() or None,
            view=view,
        )

        logger.info("processing_upload", category=category.value, key=key)
        original = self.object_store.get_object(key)
        processed = self.image_processor.process_image(original, key)

        try:
            run_jointly(
                [
                    lambda: self.object_store.put_object(
                        image_key, processed.image, WEBP_CONTENT_TYPE, IMMUTABLE_CACHE_CONTROL
                    ),
                    lambda: self.object_store.put_object(
                        thumbnail_key, processed.thumbnail, WEBP_CONTENT_TYPE, IMMUTABLE_CACHE_CONTROL
                    ),
                    lambda: self.object_store.delete_object(key),
                ]
            )
        except Exception as e:
            logger.warning(
                "orphaned_objects_possible",
                category=category.value,
                original_key=key,
                derived_keys=[image_key, thumbnail_key],
                error_type=type(e).__name__,
            )
            raise

        self.index_service.append_record(category, record)

        stats = {
            "originalSize": processed.original_size,
            "optimizedSize": processed.metadata.size,
            "thumbnailSize": processed.thumbnail_metadata.size,
            "compressionRatio": processed.compression_ratio,
        }
        log_performance(
            "process_upload",
            (datetime.now() - start_time).total_seconds(),
            category=category.value,
            record_id=record_id,
            **stats,
        )
        logger.info("upload_processed", category=category.value, record_id=record_id, image_key=image_key)
        return ProcessingResult(record=record, stats=stats)


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    number = float(value)
    # NaN and Infinity have no JSON representation
    if not math.isfinite(number):
        raise ValueError(f"{value!r} is not a finite number")
    return number
