"""
Models module for folioadmin.

This module contains the content data models:
- ContentCategory: media categories and their storage/index layout
- Photo, Photo360, Video, Tour: records stored in the content indexes
"""

from .content import (
    DEFAULT_CATEGORY_LABEL,
    RECORD_TYPES,
    CategorySettings,
    ContentCategory,
    Photo,
    Photo360,
    Tour,
    Video,
    extract_youtube_id,
    slugify,
)

__all__ = [
    "DEFAULT_CATEGORY_LABEL",
    "RECORD_TYPES",
    "CategorySettings",
    "ContentCategory",
    "Photo",
    "Photo360",
    "Tour",
    "Video",
    "extract_youtube_id",
    "slugify",
]
