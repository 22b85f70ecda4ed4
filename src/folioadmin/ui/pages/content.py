"""Per-category content listings.

The index is read on every render so the page always reflects the file
on disk, including records written by the API or the CLI.
"""

from typing import Any

import streamlit as st

from ...models.content import ContentCategory
from ...services.content_index import get_content_index_service
from ..components.common import render_empty_state
from ..components.error_display import error_context
from .media import render_tour_form, render_video_form

SUMMARY_FIELDS = {
    ContentCategory.GALLERY: ("title", "category", "id"),
    ContentCategory.PHOTOS360: ("title", "category", "initialYaw", "initialPitch", "initialHfov", "id"),
    ContentCategory.VIDEOS: ("title", "youtubeId", "id"),
    ContentCategory.TOURS: ("title", "slug", "iframeUrl", "id"),
}


def summarize(category: ContentCategory, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Rows with only the columns worth showing for category."""
    fields = SUMMARY_FIELDS[category]
    return [{field: record.get(field) for field in fields} for record in records]


def _render_image_grid(records: list[dict[str, Any]], columns: int = 4) -> None:
    grid = st.columns(columns)
    for position, record in enumerate(records):
        with grid[position % columns]:
            image_url = record.get("thumbnailUrl") or record.get("url")
            if image_url:
                st.image(image_url, caption=record.get("title"), use_container_width=True)


def _render_records(category: ContentCategory) -> None:
    records = get_content_index_service().list_records(category)

    if not records:
        render_empty_state("Nothing here yet", f"{category.index_filename} has no records.")
        return

    st.caption(f"{len(records)} record(s) in {category.index_filename}")
    if category in (ContentCategory.GALLERY, ContentCategory.PHOTOS360):
        _render_image_grid(records)
    st.dataframe(summarize(category, records), use_container_width=True)


def render_content_page(category: ContentCategory | str) -> None:
    """Render every record of one category, plus the add form for videos and tours."""
    category = ContentCategory.parse(category)
    st.subheader(f"{category.value.capitalize()} content")

    with error_context(f"Could not read the {category.value} index"):
        _render_records(category)

    if category is ContentCategory.VIDEOS:
        render_video_form()
    elif category is ContentCategory.TOURS:
        render_tour_form()
