"""Dashboard page with per-category record counts."""

import streamlit as st

from ...error_handling import ContentIndexError
from ...models.content import ContentCategory
from ...services.content_index import ContentIndexService, get_content_index_service
from ..components.common import NAVIGATION, navigate_to

CATEGORY_LABELS = {
    ContentCategory.GALLERY: "Gallery photos",
    ContentCategory.PHOTOS360: "360° photos",
    ContentCategory.VIDEOS: "Videos",
    ContentCategory.TOURS: "Virtual tours",
}


def collect_counts(index_service: ContentIndexService) -> dict[ContentCategory, int | None]:
    """Record count per category; None where the index cannot be read."""
    counts: dict[ContentCategory, int | None] = {}
    for category in ContentCategory:
        try:
            counts[category] = index_service.count(category)
        except ContentIndexError:
            counts[category] = None
    return counts


def render_dashboard_page() -> None:
    """Render record counts and shortcuts to each content page."""
    st.subheader("Dashboard")

    counts = collect_counts(get_content_index_service())
    columns = st.columns(len(counts))
    for column, (category, count) in zip(columns, counts.items()):
        with column:
            st.metric(CATEGORY_LABELS[category], "n/a" if count is None else count)
            if st.button(NAVIGATION[category.value], key=f"open_{category.value}", use_container_width=True):
                navigate_to(category.value)

    unavailable = [category.value for category, count in counts.items() if count is None]
    if unavailable:
        st.warning(f"Content index unavailable for: {', '.join(unavailable)}")

    st.divider()
    if st.button(NAVIGATION["upload"], type="primary", use_container_width=True):
        navigate_to("upload")
