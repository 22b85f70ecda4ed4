"""Admin operations for the link-based categories: YouTube videos and virtual tours."""

import uuid
from typing import Any

from ..error_handling import ValidationError
from ..logging_config import get_logger
from ..models.content import ContentCategory, Tour, Video, extract_youtube_id, slugify
from .content_index import ContentIndexService

logger = get_logger(__name__)


def _required_text(value: Any, field_name: str, label: str | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label or field_name.capitalize()} is required", code=f"{field_name}_required")
    return value.strip()


def _optional_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


class ContentManager:
    """Adds video and tour records to their content indexes."""

    def __init__(self, index_service: ContentIndexService) -> None:
        self.index_service = index_service

    def add_video(self, url_or_id: Any, title: Any, description: Any = None) -> dict[str, Any]:
        """
        Append a YouTube video to the videos index.

        Raises:
            ValidationError: If the title is empty or no video id can be extracted
        """
        title = _required_text(title, "title")
        youtube_id = extract_youtube_id(url_or_id if isinstance(url_or_id, str) else "")
        if not youtube_id:
            raise ValidationError(
                "A YouTube URL or video id is required",
                code="invalid_youtube_url",
                details={"value": str(url_or_id)},
            )

        video = Video(id=uuid.uuid4().hex, youtube_id=youtube_id, title=title, description=_optional_text(description))
        record = self.index_service.append_record(ContentCategory.VIDEOS, video.to_dict())
        logger.info("video_added", record_id=video.id, youtube_id=youtube_id)
        return record

    def add_tour(
        self,
        title: Any,
        iframe_url: Any,
        description: Any = None,
        slug: Any = None,
        thumbnail_url: Any = None,
    ) -> dict[str, Any]:
        """
        Append a virtual tour to the tours index.

        The slug is derived from the title when not given and must be unique.

        Raises:
            ValidationError: On empty title, non-http(s) iframe URL or duplicate slug
        """
        title = _required_text(title, "title")
        iframe_url = _required_text(iframe_url, "iframe_url", "Tour iframe URL")
        if not iframe_url.startswith(("http://", "https://")):
            raise ValidationError("Tour iframe URL must be http(s)", code="invalid_iframe_url")

        tour_slug = slugify(_optional_text(slug) or title)
        if not tour_slug:
            raise ValidationError("Could not derive a slug from the title", code="invalid_slug")

        existing = self.index_service.list_records(ContentCategory.TOURS)
        if any(record.get("slug") == tour_slug for record in existing if isinstance(record, dict)):
            raise ValidationError(
                f"A tour with slug '{tour_slug}' already exists", code="duplicate_slug", details={"slug": tour_slug}
            )

        tour = Tour(
            id=uuid.uuid4().hex,
            slug=tour_slug,
            title=title,
            iframe_url=iframe_url,
            description=_optional_text(description),
            thumbnail_url=_optional_text(thumbnail_url),
        )
        record = self.index_service.append_record(ContentCategory.TOURS, tour.to_dict())
        logger.info("tour_added", record_id=tour.id, slug=tour_slug)
        return record
