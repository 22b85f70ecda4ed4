"""Image processing service: WebP normalisation and thumbnail generation."""

import io
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from PIL import Image, ImageOps, UnidentifiedImageError
from pillow_heif import register_heif_opener  # type: ignore[import-untyped]

from ..config import get_env
from ..error_handling import ImageProcessingError, ValidationError
from ..logging_config import get_logger, log_performance

register_heif_opener()

logger = get_logger(__name__)

WEBP_CONTENT_TYPE = "image/webp"


@dataclass
class ImageMetadata:
    """Dimensions and encoded size of one output image."""

    width: int
    height: int
    size: int
    format: str = "webp"

    def to_dict(self) -> dict[str, Any]:
        return {"width": self.width, "height": self.height, "format": self.format, "size": self.size}


@dataclass
class ProcessedImage:
    """Result of normalising one uploaded image."""

    image: bytes
    thumbnail: bytes
    original_extension: str
    original_size: int
    metadata: ImageMetadata
    thumbnail_metadata: ImageMetadata
    processed_at: datetime = field(default_factory=datetime.now)

    @property
    def compression_ratio(self) -> str:
        return compression_ratio(self.original_size, self.metadata.size)


def compression_ratio(original_size: int, optimized_size: int) -> str:
    """
    Percentage reduction from original to optimized size, e.g. "62.4%".

    Negative when the optimized output is larger.
    """
    if original_size <= 0:
        return "0.0%"
    return f"{(1 - optimized_size / original_size) * 100:.1f}%"


class ImageProcessor:
    """Service for converting uploads to WebP and deriving thumbnails."""

    def __init__(
        self,
        webp_quality: int | None = None,
        thumbnail_quality: int | None = None,
        thumbnail_size: int | None = None,
        max_dimension: int | None = None,
        max_file_size: int | None = None,
    ) -> None:
        """Initialize the image processor, falling back to configured defaults."""
        self.webp_quality = webp_quality or int(get_env("WEBP_QUALITY", 85, int))
        self.thumbnail_quality = thumbnail_quality or int(get_env("THUMBNAIL_QUALITY", 75, int))
        self.thumbnail_size = thumbnail_size or int(get_env("THUMBNAIL_SIZE", 400, int))
        self.max_dimension = max_dimension or int(get_env("MAX_IMAGE_DIMENSION", 8192, int))
        self.max_file_size = max_file_size or int(get_env("MAX_FILE_SIZE", 50 * 1024 * 1024, int))
        # 0-6, higher is smaller but slower
        self.webp_method = 4

    def validate_file_size(self, image_data: bytes, filename: str) -> None:
        """
        Validate that the file size is within acceptable limits.

        Raises:
            ValidationError: If the data is empty or larger than max_file_size
        """
        file_size = len(image_data)

        if file_size == 0:
            raise ValidationError(
                f"File '{filename}' is empty",
                code="file_empty",
                details={"filename": filename},
            )

        if file_size > self.max_file_size:
            max_size_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                f"File '{filename}' is too large ({file_size / (1024 * 1024):.1f}MB). Maximum size: {max_size_mb:.0f}MB",
                code="file_too_large",
                details={"filename": filename, "file_size": file_size, "max_size": self.max_file_size},
            )

    def _open(self, image_data: bytes, filename: str) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(image_data))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageProcessingError(
                f"Invalid or corrupted image file '{filename}': {e}",
                code="image_decode_failed",
                details={"filename": filename, "file_size": len(image_data)},
                original_exception=e,
            ) from e
        return ImageOps.exif_transpose(image)

    @staticmethod
    def _to_webp_mode(image: Image.Image) -> Image.Image:
        has_alpha = image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info)
        target = "RGBA" if has_alpha else "RGB"
        return image if image.mode == target else image.convert(target)

    def _encode_webp(self, image: Image.Image, quality: int) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format="WEBP", quality=quality, method=self.webp_method)
        return buffer.getvalue()

    def process_image(self, image_data: bytes, filename: str) -> ProcessedImage:
        """
        Convert an image to WebP and derive a square thumbnail.

        The main image keeps its aspect ratio and is only shrunk when a side
        exceeds max_dimension. The thumbnail is centre-cropped to
        thumbnail_size x thumbnail_size. Output is deterministic for the
        same input and settings.

        Args:
            image_data: Raw bytes of the uploaded original
            filename: Original filename or storage key, used for the extension

        Returns:
            ProcessedImage: Encoded image, thumbnail and their metadata

        Raises:
            ValidationError: If the data is empty or too large
            ImageProcessingError: If the image cannot be decoded or encoded
        """
        start_time = datetime.now()
        self.validate_file_size(image_data, filename)
        original_extension = Path(filename).suffix.lstrip(".").lower() or "jpg"

        source = self._open(image_data, filename)
        original_dimensions = source.size
        try:
            image = self._to_webp_mode(source)
            if image.width > self.max_dimension or image.height > self.max_dimension:
                image = image.copy()
                image.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)
            image_bytes = self._encode_webp(image, self.webp_quality)

            thumbnail = ImageOps.fit(
                image,
                (self.thumbnail_size, self.thumbnail_size),
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )
            thumbnail_bytes = self._encode_webp(thumbnail, self.thumbnail_quality)
        except (OSError, ValueError) as e:
            raise ImageProcessingError(
                f"Failed to convert '{filename}' to WebP: {e}",
                code="webp_conversion_failed",
                details={"filename": filename, "file_size": len(image_data)},
                original_exception=e,
            ) from e

        result = ProcessedImage(
            image=image_bytes,
            thumbnail=thumbnail_bytes,
            original_extension=original_extension,
            original_size=len(image_data),
            metadata=ImageMetadata(width=image.width, height=image.height, size=len(image_bytes)),
            thumbnail_metadata=ImageMetadata(
                width=thumbnail.width, height=thumbnail.height, size=len(thumbnail_bytes)
            ),
        )

        log_performance(
            "process_image",
            (datetime.now() - start_time).total_seconds(),
            filename=filename,
            original_dimensions=original_dimensions,
            output_dimensions=(image.width, image.height),
            original_file_size=len(image_data),
            webp_file_size=len(image_bytes),
            thumbnail_file_size=len(thumbnail_bytes),
            compression_ratio=result.compression_ratio,
        )
        return result

    def convert_to_webp(
        self, image_data: bytes, quality: int | None = None, filename: str = "image"
    ) -> tuple[bytes, ImageMetadata]:
        """
        Convert an image to WebP at the given quality, without a thumbnail.

        Same orientation, mode and dimension handling as process_image.

        Raises:
            ValidationError: If quality is outside 1..100 or the data is empty/too large
            ImageProcessingError: If decoding or encoding fails
        """
        quality = self.webp_quality if quality is None else quality
        if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
            raise ValidationError("Quality must be an integer between 1 and 100", code="invalid_quality")
        self.validate_file_size(image_data, filename)

        image = self._to_webp_mode(self._open(image_data, filename))
        try:
            if image.width > self.max_dimension or image.height > self.max_dimension:
                image = image.copy()
                image.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)
            webp_data = self._encode_webp(image, quality)
        except (OSError, ValueError) as e:
            raise ImageProcessingError(
                f"Failed to convert '{filename}' to WebP: {e}",
                code="webp_conversion_failed",
                details={"filename": filename, "file_size": len(image_data)},
                original_exception=e,
            ) from e

        return webp_data, ImageMetadata(width=image.width, height=image.height, size=len(webp_data))

    def convert_heic_to_png(self, image_data: bytes, filename: str = "image.heic") -> bytes:
        """
        Convert a HEIC/HEIF image to PNG at full resolution.

        Raises:
            ValidationError: If the filename is not .heic/.heif or the data is empty/too large
            ImageProcessingError: If decoding or encoding fails
        """
        if Path(filename).suffix.lower() not in (".heic", ".heif"):
            raise ValidationError("File must be HEIC or HEIF format", code="unsupported_format")
        self.validate_file_size(image_data, filename)

        image = self._open(image_data, filename)
        try:
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
        except (OSError, ValueError) as e:
            raise ImageProcessingError(
                f"Failed to convert '{filename}' to PNG: {e}",
                code="png_conversion_failed",
                details={"filename": filename},
                original_exception=e,
            ) from e

        png_data = buffer.getvalue()
        logger.info("heic_converted", filename=filename, original_size=len(image_data), png_size=len(png_data))
        return png_data


# Global image processor instance
_image_processor: ImageProcessor | None = None


def get_image_processor() -> ImageProcessor:
    """Get the global image processor instance."""
    global _image_processor

    if _image_processor is None:
        _image_processor = ImageProcessor()

    return _image_processor
