"""
Unit tests for the admin panel access gate.
"""

from unittest.mock import MagicMock, patch

import pytest

from folioadmin.error_handling import AuthenticationError
from folioadmin.ui import auth_handlers


class SessionState(dict):
    """Dict with attribute access, like st.session_state."""

    __getattr__ = dict.get

    def __setattr__(self, name, value):
        self[name] = value


@pytest.fixture
def mock_st():
    st = MagicMock()
    st.session_state = SessionState(
        authenticated=False,
        session_token=None,
        user_id=None,
        user_name=None,
        auth_error=None,
        current_page="dashboard",
    )
    with patch.object(auth_handlers, "st", st):
        yield st


@pytest.mark.security
class TestRequireAuthentication:
    """Test cases for require_authentication."""

    @pytest.mark.parametrize("page", ["dashboard", "upload", "gallery", "tours"])
    def test_unauthenticated_pages_redirect_to_login(self, mock_st, page):
        mock_st.session_state.current_page = page

        assert auth_handlers.require_authentication() is False
        assert mock_st.session_state.current_page == "login"

    def test_login_page_stays_reachable(self, mock_st):
        mock_st.session_state.current_page = "login"

        assert auth_handlers.require_authentication() is False
        assert mock_st.session_state.current_page == "login"

    def test_valid_session_passes(self, mock_st, auth_service):
        token, _ = auth_service.login("admin", "correct-horse")
        mock_st.session_state.session_token = token
        mock_st.session_state.current_page = "upload"

        with patch.object(auth_handlers, "get_auth_service", return_value=auth_service):
            assert auth_handlers.require_authentication() is True

        assert mock_st.session_state.current_page == "upload"
        assert mock_st.session_state.user_name == "Admin"

    def test_authenticated_user_leaves_login_page(self, mock_st, auth_service):
        mock_st.session_state.session_token = auth_service.login("admin", "correct-horse")[0]
        mock_st.session_state.current_page = "login"

        with patch.object(auth_handlers, "get_auth_service", return_value=auth_service):
            assert auth_handlers.require_authentication() is True

        assert mock_st.session_state.current_page == "dashboard"

    def test_rejected_token_clears_session(self, mock_st):
        mock_st.session_state.session_token = "stale"
        mock_st.session_state.authenticated = True
        auth_service = MagicMock()
        auth_service.verify_session.side_effect = AuthenticationError("Session expired", code="session_expired")

        with patch.object(auth_handlers, "get_auth_service", return_value=auth_service):
            assert auth_handlers.require_authentication() is False

        assert mock_st.session_state.session_token is None
        assert mock_st.session_state.authenticated is False
        assert mock_st.session_state.auth_error
        assert mock_st.session_state.current_page == "login"


class TestLogout:
    """Test cases for logout."""

    def test_logout_forgets_session(self, mock_st):
        mock_st.session_state.update(authenticated=True, session_token="t", user_id="1", current_page="gallery")

        auth_handlers.logout()

        assert mock_st.session_state.session_token is None
        assert mock_st.session_state.authenticated is False
        assert mock_st.session_state.current_page == "login"
