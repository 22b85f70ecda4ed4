"""Authentication handlers for the admin panel.

The panel keeps the signed session token in ``st.session_state`` and
re-verifies it on every script run, so an expired session drops back to
the login page on the next interaction.
"""

import streamlit as st
import structlog

from ..error_handling import AuthenticationError
from ..services.auth import get_auth_service

logger = structlog.get_logger()

LOGIN_PAGE = "login"


def _clear_session() -> None:
    st.session_state.authenticated = False
    st.session_state.session_token = None
    st.session_state.user_id = None
    st.session_state.user_name = None


def authenticate_user() -> bool:
    """
    Verify the session token held in session state.

    Returns:
        bool: True if the stored session is valid, False otherwise
    """
    token = st.session_state.get("session_token")
    if not token:
        _clear_session()
        return False

    try:
        user = get_auth_service().verify_session(token)
    except AuthenticationError as e:
        logger.info("admin_session_rejected", code=e.code)
        _clear_session()
        st.session_state.auth_error = "Your session has expired. Please sign in again."
        return False

    st.session_state.authenticated = True
    st.session_state.user_id = user.user_id
    st.session_state.user_name = user.name
    return True


def require_authentication() -> bool:
    """
    Access gate: send every page except login to login without a session.

    Returns:
        bool: True if the current page may be rendered
    """
    if authenticate_user():
        if st.session_state.current_page == LOGIN_PAGE:
            st.session_state.current_page = "dashboard"
        return True

    if st.session_state.current_page != LOGIN_PAGE:
        logger.info("redirect_to_login", requested_page=st.session_state.current_page)
        st.session_state.current_page = LOGIN_PAGE
    return False


def render_login_form() -> None:
    """Render the admin login form."""
    st.subheader("🔐 Admin login")

    if st.session_state.get("auth_error"):
        st.warning(st.session_state.auth_error)

    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if not submitted:
        return

    try:
        token, user = get_auth_service().login(username, password)
    except AuthenticationError as e:
        st.error(e.user_message)
        return

    st.session_state.session_token = token
    st.session_state.authenticated = True
    st.session_state.user_id = user.user_id
    st.session_state.user_name = user.name
    st.session_state.auth_error = None
    st.session_state.current_page = "dashboard"
    logger.info("admin_panel_login", user_id=user.user_id)
    st.rerun()


def logout() -> None:
    """Forget the session held by this browser tab."""
    logger.info("admin_panel_logout", user_id=st.session_state.get("user_id"))
    _clear_session()
    st.session_state.auth_error = None
    st.session_state.current_page = LOGIN_PAGE
