"""Reusable UI components for the admin panel."""

from typing import Any

import streamlit as st
import structlog

logger = structlog.get_logger()

NAVIGATION = {
    "dashboard": "🏠 Dashboard",
    "upload": "📤 Upload image",
    "gallery": "🖼️ Gallery",
    "photos360": "🌐 360° photos",
    "videos": "🎬 Videos",
    "tours": "🧭 Virtual tours",
}


def render_empty_state(title: str, description: str, icon: str = "📭") -> None:
    """
    Render an empty state message.

    Args:
        title: Main title for the empty state
        description: Description text
        icon: Emoji icon to display
    """
    st.markdown(f"### {icon} {title}")
    st.caption(description)


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        str: Formatted file size (e.g., "1.5 MB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def render_processing_stats(stats: dict[str, Any]) -> None:
    """Show the size statistics returned by an upload completion."""
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Original", format_file_size(stats["originalSize"]))
    col2.metric("Optimized", format_file_size(stats["optimizedSize"]))
    col3.metric("Thumbnail", format_file_size(stats["thumbnailSize"]))
    col4.metric("Saved", stats["compressionRatio"])


def render_header() -> None:
    """Render the application header."""
    st.markdown("# 🗂️ folioadmin")
    st.divider()


def navigate_to(page: str) -> None:
    st.session_state.current_page = page
    st.rerun()


def render_sidebar() -> None:
    """Render navigation and the signed-in user with a logout button."""
    with st.sidebar:
        if not st.session_state.authenticated:
            st.info("Sign in to manage content")
            return

        st.markdown(f"**Signed in as** {st.session_state.user_name}")

        for page, label in NAVIGATION.items():
            button_type = "primary" if st.session_state.current_page == page else "secondary"
            if st.button(label, key=f"nav_{page}", use_container_width=True, type=button_type):
                navigate_to(page)

        st.divider()
        if st.button("Log out", use_container_width=True):
            from ..auth_handlers import logout

            logout()
            st.rerun()
