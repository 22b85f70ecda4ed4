"""
Error presentation for the admin panel.

FolioError subclasses carry a user-facing message; anything else is shown
as a generic failure and logged with its traceback context.
"""

from typing import Any

import streamlit as st

from ...error_handling import ErrorCategory, FolioError
from ...logging_config import get_logger, log_error

# Type alias for Streamlit container
StreamlitContainer = Any

logger = get_logger(__name__)


def display_exception(
    exception: Exception,
    container: StreamlitContainer | None = None,
    show_details: bool = False,
    fallback_message: str = "Something went wrong",
) -> None:
    """Show an exception in the panel using its user message when it has one."""
    target = container or st

    if isinstance(exception, FolioError):
        if exception.category is ErrorCategory.VALIDATION:
            target.warning(exception.user_message)
        else:
            target.error(exception.user_message)
    else:
        log_error(exception, {"operation": "admin_panel"})
        target.error(fallback_message)

    if show_details:
        with target.expander("Error details"):
            target.code(f"{type(exception).__name__}: {exception}")


class StreamlitErrorContext:
    """Context manager for handling errors in Streamlit code blocks."""

    def __init__(
        self,
        error_message: str = "Something went wrong",
        show_details: bool = False,
        container: StreamlitContainer | None = None,
    ):
        self.error_message = error_message
        self.show_details = show_details
        self.container = container

    def __enter__(self) -> "StreamlitErrorContext":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if exc_type is None:
            return False

        from streamlit.runtime.scriptrunner_utils.exceptions import RerunException, StopException

        # st.rerun() and st.stop() are control flow, not errors
        if isinstance(exc_val, (RerunException, StopException)):
            return False

        if not isinstance(exc_val, Exception):
            return False

        display_exception(exc_val, self.container, self.show_details, self.error_message)
        return True


def error_context(
    error_message: str = "Something went wrong",
    show_details: bool = False,
    container: StreamlitContainer | None = None,
) -> StreamlitErrorContext:
    """Create an error context manager for Streamlit operations."""
    return StreamlitErrorContext(error_message, show_details, container)
