"""
Unit tests for content models.
"""

import pytest

from folioadmin.error_handling import ValidationError
from folioadmin.models.content import (
    DEFAULT_CATEGORY_LABEL,
    ContentCategory,
    Photo,
    Photo360,
    Tour,
    Video,
    extract_youtube_id,
    slugify,
)


class TestContentCategory:
    """Test cases for ContentCategory."""

    def test_index_files_and_record_keys(self):
        assert ContentCategory.GALLERY.index_filename == "gallery.json"
        assert ContentCategory.GALLERY.records_key == "photos"
        assert ContentCategory.PHOTOS360.index_filename == "photos360.json"
        assert ContentCategory.PHOTOS360.records_key == "photos"
        assert ContentCategory.VIDEOS.records_key == "videos"
        assert ContentCategory.TOURS.records_key == "tours"

    def test_staging_and_public_prefixes(self):
        assert ContentCategory.GALLERY.settings.staging_prefix == "gallery/uploads"
        assert ContentCategory.GALLERY.settings.public_prefix == "gallery"
        assert ContentCategory.PHOTOS360.settings.staging_prefix == "photos360/uploads"
        assert ContentCategory.PHOTOS360.settings.public_prefix == "photos360"

    def test_only_image_categories_accept_uploads(self):
        assert ContentCategory.GALLERY.settings.accepts_uploads
        assert ContentCategory.PHOTOS360.settings.accepts_uploads
        assert not ContentCategory.VIDEOS.settings.accepts_uploads
        assert not ContentCategory.TOURS.settings.accepts_uploads

    def test_photos360_also_allows_heif(self):
        assert "heif" in ContentCategory.PHOTOS360.settings.allowed_extensions
        assert "heif" not in ContentCategory.GALLERY.settings.allowed_extensions

    def test_parse(self):
        assert ContentCategory.parse("gallery") is ContentCategory.GALLERY
        assert ContentCategory.parse(ContentCategory.TOURS) is ContentCategory.TOURS

    def test_parse_unknown_category(self):
        with pytest.raises(ValidationError) as exc_info:
            ContentCategory.parse("documents")

        assert exc_info.value.code == "unknown_category"
        assert exc_info.value.http_status == 400


class TestPhoto:
    """Test cases for Photo records."""

    def test_to_dict_uses_camel_case_and_drops_empty_fields(self):
        photo = Photo(
            id="abc",
            url="https://media.example.com/gallery/abc.webp",
            thumbnail_url="https://media.example.com/gallery/abc-thumb.webp",
            title="Harbour",
        )

        assert photo.to_dict() == {
            "id": "abc",
            "url": "https://media.example.com/gallery/abc.webp",
            "thumbnailUrl": "https://media.example.com/gallery/abc-thumb.webp",
            "title": "Harbour",
            "category": DEFAULT_CATEGORY_LABEL,
        }

    def test_from_dict_defaults_category(self):
        photo = Photo.from_dict({"id": "abc", "url": "https://x/abc.webp", "title": "Harbour"})

        assert photo.category == "Uncategorized"
        assert photo.thumbnail_url is None

    def test_validate_rejects_blank_title(self):
        assert Photo(id="abc", url="https://x/abc.webp", title="Harbour").validate()
        assert not Photo(id="abc", url="https://x/abc.webp", title="   ").validate()


class TestPhoto360:
    """Test cases for 360° photo records."""

    def test_view_fields_serialized_only_when_set(self):
        record = Photo360(id="p", url="https://x/p.webp", title="Dome", initial_yaw=90.0).to_dict()

        assert record["initialYaw"] == 90.0
        assert "initialPitch" not in record
        assert "initialHfov" not in record

    def test_zero_yaw_is_kept(self):
        record = Photo360(id="p", url="https://x/p.webp", title="Dome", initial_yaw=0.0).to_dict()

        assert record["initialYaw"] == 0.0

    @pytest.mark.parametrize(
        "pitch,hfov,expected",
        [
            (0.0, 100.0, True),
            (-90.0, 180.0, True),
            (91.0, None, False),
            (None, 0.0, False),
            (None, 181.0, False),
        ],
    )
    def test_validate_view_ranges(self, pitch, hfov, expected):
        photo = Photo360(id="p", url="https://x/p.webp", title="Dome", initial_pitch=pitch, initial_hfov=hfov)

        assert photo.validate() is expected

    @pytest.mark.parametrize("yaw,expected", [(-180.0, True), (180.0, True), (181.0, False), (float("nan"), False)])
    def test_validate_yaw_range(self, yaw, expected):
        photo = Photo360(id="p", url="https://x/p.webp", title="Dome", initial_yaw=yaw)

        assert photo.validate() is expected


class TestVideoAndTour:
    """Test cases for link-based records."""

    def test_video_round_trip_keys(self):
        video = Video(id="v1", youtube_id="dQw4w9WgXcQ", title="Walkthrough")

        assert video.to_dict() == {"id": "v1", "youtubeId": "dQw4w9WgXcQ", "title": "Walkthrough"}
        assert Video.from_dict(video.to_dict()) == video

    def test_tour_validate_requires_http_iframe(self):
        assert Tour(id="t", slug="loft", title="Loft", iframe_url="https://tours.example.com/loft").validate()
        assert not Tour(id="t", slug="loft", title="Loft", iframe_url="javascript:alert(1)").validate()


class TestHelpers:
    """Test cases for YouTube id extraction and slugs."""

    @pytest.mark.parametrize(
        "value",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://youtube.com/shorts/dQw4w9WgXcQ",
            "dQw4w9WgXcQ",
        ],
    )
    def test_extract_youtube_id(self, value):
        assert extract_youtube_id(value) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize("value", ["", "https://vimeo.com/12345", "not a video"])
    def test_extract_youtube_id_rejects_other_values(self, value):
        assert extract_youtube_id(value) is None

    def test_slugify(self):
        assert slugify("Château Loft / Level 2") == "chateau-loft-level-2"
        assert slugify("!!!") == ""
