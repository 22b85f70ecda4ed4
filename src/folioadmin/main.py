"""
Main Streamlit application for folioadmin.

This is the entry point for the admin panel: ``streamlit run src/folioadmin/main.py``.
"""

import streamlit as st

from folioadmin.config import get_config
from folioadmin.logging_config import configure_structured_logging, get_logger
from folioadmin.ui.auth_handlers import LOGIN_PAGE, render_login_form, require_authentication
from folioadmin.ui.components.common import render_header, render_sidebar
from folioadmin.ui.components.error_display import error_context
from folioadmin.ui.pages.content import render_content_page
from folioadmin.ui.pages.dashboard import render_dashboard_page
from folioadmin.ui.pages.upload import render_upload_page

# Configure structured logging
configure_structured_logging()
logger = get_logger(__name__)

CONTENT_PAGES = {"gallery", "photos360", "videos", "tours"}


def initialize_session_state() -> None:
    """Initialize session state variables."""
    # Authentication state
    if "authenticated" not in st.session_state:
        st.session_state.authenticated = False

    if "session_token" not in st.session_state:
        st.session_state.session_token = None

    if "user_id" not in st.session_state:
        st.session_state.user_id = None

    if "user_name" not in st.session_state:
        st.session_state.user_name = None

    if "auth_error" not in st.session_state:
        st.session_state.auth_error = None

    # Application state
    if "current_page" not in st.session_state:
        st.session_state.current_page = "dashboard"


def render_main_content() -> None:
    """Render the main content area based on current page."""
    current_page = st.session_state.current_page

    if current_page == LOGIN_PAGE:
        render_login_form()
        return

    with error_context(f"Could not load page '{current_page}'"):
        if current_page == "dashboard":
            render_dashboard_page()
        elif current_page == "upload":
            render_upload_page()
        elif current_page in CONTENT_PAGES:
            render_content_page(current_page)
        else:
            st.warning(f"Page '{current_page}' not found.")
            if st.button("🏠 Back to dashboard", use_container_width=True, type="primary"):
                st.session_state.current_page = "dashboard"
                st.rerun()


def main() -> None:
    """Main application entry point."""
    st.set_page_config(
        page_title="folioadmin",
        page_icon="🗂️",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    initialize_session_state()
    require_authentication()

    logger.debug(
        "session_initialized",
        authenticated=st.session_state.authenticated,
        current_page=st.session_state.current_page,
    )

    render_header()
    render_sidebar()

    with st.container():
        render_main_content()

    if get_config().get("DEBUG", False, bool):
        with st.expander("Debug Info"):
            st.write("Session State:", {k: v for k, v in st.session_state.items() if k != "session_token"})


if __name__ == "__main__":
    main()
