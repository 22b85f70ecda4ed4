"""
Content record models for folioadmin.

This module contains the media categories and the record dataclasses
stored in each category's JSON content index. Records serialize with the
camelCase keys the public site reads.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..error_handling import ValidationError

DEFAULT_CATEGORY_LABEL = "Uncategorized"

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "heic")


@dataclass(frozen=True)
class CategorySettings:
    """Storage and index layout of one media category."""

    index_filename: str
    records_key: str
    staging_prefix: str | None = None
    public_prefix: str | None = None
    allowed_extensions: tuple[str, ...] = ()

    @property
    def accepts_uploads(self) -> bool:
        return self.staging_prefix is not None and self.public_prefix is not None


class ContentCategory(Enum):
    """Media categories managed from the admin panel."""

    GALLERY = "gallery"
    PHOTOS360 = "photos360"
    VIDEOS = "videos"
    TOURS = "tours"

    @property
    def settings(self) -> CategorySettings:
        return _CATEGORY_SETTINGS[self]

    @property
    def index_filename(self) -> str:
        return self.settings.index_filename

    @property
    def records_key(self) -> str:
        return self.settings.records_key

    @classmethod
    def parse(cls, value: "str | ContentCategory") -> "ContentCategory":
        """Resolve a category from its name, rejecting unknown values."""
        if isinstance(value, ContentCategory):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(c.value for c in cls)
            raise ValidationError(
                f"Unknown content category '{value}'. Allowed: {allowed}",
                code="unknown_category",
                details={"category": str(value)},
            ) from None


_CATEGORY_SETTINGS = {
    ContentCategory.GALLERY: CategorySettings(
        index_filename="gallery.json",
        records_key="photos",
        staging_prefix="gallery/uploads",
        public_prefix="gallery",
        allowed_extensions=IMAGE_EXTENSIONS,
    ),
    ContentCategory.PHOTOS360: CategorySettings(
        index_filename="photos360.json",
        records_key="photos",
        staging_prefix="photos360/uploads",
        public_prefix="photos360",
        allowed_extensions=IMAGE_EXTENSIONS + ("heif",),
    ),
    ContentCategory.VIDEOS: CategorySettings(index_filename="videos.json", records_key="videos"),
    ContentCategory.TOURS: CategorySettings(index_filename="tours.json", records_key="tours"),
}


def _drop_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None and value != ""}


@dataclass
class Photo:
    """A gallery photo."""

    id: str
    url: str
    title: str
    category: str = DEFAULT_CATEGORY_LABEL
    description: str | None = None
    thumbnail_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty(
            {
                "id": self.id,
                "url": self.url,
                "thumbnailUrl": self.thumbnail_url,
                "title": self.title,
                "description": self.description,
                "category": self.category,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Photo":
        return cls(
            id=data["id"],
            url=data["url"],
            title=data["title"],
            category=data.get("category") or DEFAULT_CATEGORY_LABEL,
            description=data.get("description"),
            thumbnail_url=data.get("thumbnailUrl"),
        )

    def validate(self) -> bool:
        return bool(self.id and self.url and self.title and self.title.strip())


@dataclass
class Photo360:
    """A 360° panoramic photo with optional initial viewer orientation."""

    id: str
    url: str
    title: str
    category: str = DEFAULT_CATEGORY_LABEL
    description: str | None = None
    thumbnail_url: str | None = None
    initial_yaw: float | None = None
    initial_pitch: float | None = None
    initial_hfov: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty(
            {
                "id": self.id,
                "url": self.url,
                "thumbnailUrl": self.thumbnail_url,
                "title": self.title,
                "description": self.description,
                "category": self.category,
                "initialYaw": self.initial_yaw,
                "initialPitch": self.initial_pitch,
                "initialHfov": self.initial_hfov,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Photo360":
        return cls(
            id=data["id"],
            url=data["url"],
            title=data["title"],
            category=data.get("category") or DEFAULT_CATEGORY_LABEL,
            description=data.get("description"),
            thumbnail_url=data.get("thumbnailUrl"),
            initial_yaw=data.get("initialYaw"),
            initial_pitch=data.get("initialPitch"),
            initial_hfov=data.get("initialHfov"),
        )

    def validate(self) -> bool:
        if not (self.id and self.url and self.title and self.title.strip()):
            return False
        if self.initial_yaw is not None and not -180 <= self.initial_yaw <= 180:
            return False
        if self.initial_pitch is not None and not -90 <= self.initial_pitch <= 90:
            return False
        if self.initial_hfov is not None and not 0 < self.initial_hfov <= 180:
            return False
        return True


@dataclass
class Video:
    """A YouTube video."""

    id: str
    youtube_id: str
    title: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty(
            {
                "id": self.id,
                "youtubeId": self.youtube_id,
                "title": self.title,
                "description": self.description,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Video":
        return cls(
            id=data["id"],
            youtube_id=data["youtubeId"],
            title=data["title"],
            description=data.get("description"),
        )

    def validate(self) -> bool:
        return bool(self.id and self.title and YOUTUBE_ID_PATTERN.fullmatch(self.youtube_id or ""))


@dataclass
class Tour:
    """An embedded virtual tour."""

    id: str
    slug: str
    title: str
    iframe_url: str
    description: str | None = None
    thumbnail_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty(
            {
                "id": self.id,
                "slug": self.slug,
                "title": self.title,
                "description": self.description,
                "iframeUrl": self.iframe_url,
                "thumbnailUrl": self.thumbnail_url,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tour":
        return cls(
            id=data["id"],
            slug=data["slug"],
            title=data["title"],
            iframe_url=data["iframeUrl"],
            description=data.get("description"),
            thumbnail_url=data.get("thumbnailUrl"),
        )

    def validate(self) -> bool:
        return bool(self.id and self.slug and self.title and self.iframe_url.startswith(("http://", "https://")))


RECORD_TYPES: dict[ContentCategory, type] = {
    ContentCategory.GALLERY: Photo,
    ContentCategory.PHOTOS360: Photo360,
    ContentCategory.VIDEOS: Video,
    ContentCategory.TOURS: Tour,
}


YOUTUBE_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{11}")

_YOUTUBE_URL_PATTERNS = [
    re.compile(r"(?:youtube\.com|youtube-nocookie\.com)/(?:watch\?(?:.*&)?v=|embed/|shorts/|live/|v/)([A-Za-z0-9_-]{11})"),
    re.compile(r"youtu\.be/([A-Za-z0-9_-]{11})"),
]


def extract_youtube_id(value: str) -> str | None:
    """
    Extract the 11-character video id from a YouTube URL or bare id.

    Returns None when the value is neither.
    """
    value = (value or "").strip()
    if YOUTUBE_ID_PATTERN.fullmatch(value):
        return value
    for pattern in _YOUTUBE_URL_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)
    return None


def slugify(text: str) -> str:
    """Lower-case ASCII slug with hyphens, accents folded."""
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug
