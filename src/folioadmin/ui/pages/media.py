"""Forms for adding YouTube videos and virtual tours."""

import streamlit as st

from ...logging_config import log_user_action
from ...services.content_index import get_content_index_service
from ...services.content_manager import ContentManager
from ..components.error_display import error_context


def render_video_form() -> None:
    """Render the add-video form."""
    st.markdown("#### Add video")

    with st.form("video_form", clear_on_submit=True):
        url = st.text_input("YouTube URL or video id", placeholder="https://www.youtube.com/watch?v=...")
        title = st.text_input("Title")
        description = st.text_area("Description")
        submitted = st.form_submit_button("Add video", type="primary")

    if not submitted:
        return

    with error_context("Could not add the video"):
        record = ContentManager(get_content_index_service()).add_video(url, title, description)
        log_user_action(st.session_state.user_id, "video_added", record_id=record["id"])
        st.success(f"Added '{record['title']}'")


def render_tour_form() -> None:
    """Render the add-tour form."""
    st.markdown("#### Add virtual tour")

    with st.form("tour_form", clear_on_submit=True):
        title = st.text_input("Title")
        iframe_url = st.text_input("Embed URL", placeholder="https://...")
        slug = st.text_input("Slug", help="Derived from the title when left empty")
        thumbnail_url = st.text_input("Thumbnail URL")
        description = st.text_area("Description")
        submitted = st.form_submit_button("Add tour", type="primary")

    if not submitted:
        return

    with error_context("Could not add the tour"):
        record = ContentManager(get_content_index_service()).add_tour(
            title,
            iframe_url,
            description=description,
            slug=slug,
            thumbnail_url=thumbnail_url,
        )
        log_user_action(st.session_state.user_id, "tour_added", record_id=record["id"])
        st.success(f"Added '{record['title']}' at /tours/{record['slug']}")
