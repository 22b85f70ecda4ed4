"""Image upload page.

The admin panel already holds the file bytes, so it stages the original
from the server side and then runs the same completion step the API uses.
"""

from typing import Any

import streamlit as st

from ...error_handling import ValidationError
from ...logging_config import get_logger, log_user_action
from ...models.content import ContentCategory
from ...services.content_index import get_content_index_service
from ...services.image_processor import get_image_processor
from ...services.storage import get_object_store
from ...services.uploads import ProcessingResult, UploadProcessor, UploadUrlIssuer, content_type_for
from ..components.common import format_file_size, render_processing_stats
from ..components.error_display import error_context

logger = get_logger(__name__)

UPLOAD_CATEGORIES = [ContentCategory.GALLERY, ContentCategory.PHOTOS360]


def publish_upload(
    category: ContentCategory,
    filename: str,
    content_type: str,
    data: bytes,
    title: str,
    description: str | None = None,
    category_label: str | None = None,
    **view: Any,
) -> ProcessingResult:
    """Stage an original and publish it through UploadProcessor."""
    # Staging writes to the bucket, so reject an empty title before it
    if not title or not title.strip():
        raise ValidationError("Title is required", code="title_required")

    logger.info("admin_upload_started", category=category.value, filename=filename, size=len(data))
    object_store = get_object_store()
    key = UploadUrlIssuer(object_store).stage(category, filename, content_type, data)
    processor = UploadProcessor(object_store, get_content_index_service(), get_image_processor())
    return processor.process(
        category,
        key,
        title,
        description=description,
        category_label=category_label,
        **view,
    )


def _content_type(uploaded_file: Any) -> str:
    # Browsers often send HEIC as application/octet-stream
    if (uploaded_file.type or "").startswith("image/"):
        return uploaded_file.type
    return content_type_for(uploaded_file.name)


def _render_view_inputs() -> dict[str, float | None]:
    st.caption("Initial viewer orientation (optional)")
    col1, col2, col3 = st.columns(3)
    with col1:
        yaw = st.number_input("Yaw", min_value=-180.0, max_value=180.0, value=None, step=1.0)
    with col2:
        pitch = st.number_input("Pitch", min_value=-90.0, max_value=90.0, value=None, step=1.0)
    with col3:
        hfov = st.number_input("Field of view", min_value=1.0, max_value=180.0, value=None, step=1.0)
    return {"initial_yaw": yaw, "initial_pitch": pitch, "initial_hfov": hfov}


def render_upload_page() -> None:
    """Render the image upload form."""
    st.subheader("📤 Upload image")

    category = st.radio(
        "Category",
        UPLOAD_CATEGORIES,
        format_func=lambda c: "Gallery" if c is ContentCategory.GALLERY else "360° photo",
        horizontal=True,
    )

    with st.form("upload_form", clear_on_submit=True):
        uploaded_file = st.file_uploader("Image", type=list(category.settings.allowed_extensions))
        title = st.text_input("Title")
        description = st.text_area("Description")
        category_label = st.text_input("Display category", placeholder="Uncategorized")
        view = _render_view_inputs() if category is ContentCategory.PHOTOS360 else {}
        submitted = st.form_submit_button("Upload", type="primary")

    if not submitted:
        return

    if uploaded_file is None:
        st.warning("Choose an image to upload")
        return

    data = uploaded_file.getvalue()
    with error_context("Upload failed"):
        with st.spinner(f"Processing {uploaded_file.name} ({format_file_size(len(data))})..."):
            result = publish_upload(
                category,
                uploaded_file.name,
                _content_type(uploaded_file),
                data,
                title,
                description=description,
                category_label=category_label,
                **view,
            )

        log_user_action(
            st.session_state.user_id,
            "upload_processed",
            category=category.value,
            record_id=result.record["id"],
        )
        st.success(f"Published '{result.record['title']}'")
        render_processing_stats(result.stats)
        st.image(result.record["url"], caption=result.record["title"])
