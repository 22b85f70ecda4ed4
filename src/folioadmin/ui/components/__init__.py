"""Reusable Streamlit components."""

from .common import format_file_size, render_empty_state, render_header, render_processing_stats, render_sidebar
from .error_display import error_context

__all__ = [
    "error_context",
    "format_file_size",
    "render_empty_state",
    "render_header",
    "render_processing_stats",
    "render_sidebar",
]
