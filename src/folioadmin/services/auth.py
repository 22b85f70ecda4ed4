"""Admin authentication: credential check and signed session tokens."""

import hmac
import time
from dataclasses import dataclass

import jwt

from ..config import get_env, get_session_ttl
from ..error_handling import AuthenticationError
from ..logging_config import get_logger, log_security_event, log_user_action

logger = get_logger(__name__)

SESSION_ALGORITHM = "HS256"
SESSION_ISSUER = "folioadmin"


@dataclass
class AdminUser:
    """The authenticated site administrator."""

    user_id: str
    name: str
    email: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.user_id, "name": self.name, "email": self.email}


class AdminAuthService:
    """
    Access gate for admin pages and mutating API routes.

    There is a single admin account configured through ADMIN_USERNAME and
    ADMIN_PASSWORD. A successful login yields an HS256 JWT signed with
    AUTH_SECRET; the rest of the application only asks whether a token is
    currently valid.
    """

    def __init__(
        self,
        username: str | None = None,
        password: str | None = None,
        secret: str | None = None,
        session_ttl: int | None = None,
        email: str | None = None,
    ) -> None:
        self.username = username if username is not None else get_env("ADMIN_USERNAME")
        self.password = password if password is not None else get_env("ADMIN_PASSWORD")
        self.secret = secret if secret is not None else get_env("AUTH_SECRET")
        self.session_ttl = session_ttl or get_session_ttl()
        self.email = email or get_env("ADMIN_EMAIL", "admin@example.com")

    def _admin_user(self) -> AdminUser:
        return AdminUser(user_id="1", name="Admin", email=self.email)

    def _require_configuration(self) -> None:
        if not self.username or not self.password or not self.secret:
            log_security_event("auth_not_configured")
            raise AuthenticationError(
                "Admin credentials or AUTH_SECRET are not configured", code="auth_not_configured"
            )

    def authenticate(self, username: str | None, password: str | None) -> AdminUser:
        """
        Check admin credentials.

        Raises:
            AuthenticationError: If credentials are wrong or auth is not configured
        """
        self._require_configuration()

        username_ok = hmac.compare_digest((username or "").encode(), self.username.encode())
        password_ok = hmac.compare_digest((password or "").encode(), self.password.encode())
        if not (username_ok and password_ok):
            raise AuthenticationError(
                "Invalid username or password",
                code="invalid_credentials",
                user_message="Invalid username or password",
                details={"username": username},
            )

        user = self._admin_user()
        log_user_action(user.user_id, "login", email=user.email)
        return user

    def create_session(self, user: AdminUser) -> str:
        """Issue a signed session token for user."""
        self._require_configuration()
        now = int(time.time())
        payload = {
            "sub": user.user_id,
            "name": user.name,
            "email": user.email,
            "iss": SESSION_ISSUER,
            "iat": now,
            "exp": now + self.session_ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=SESSION_ALGORITHM)

    def login(self, username: str | None, password: str | None) -> tuple[str, AdminUser]:
        """Authenticate and issue a session token."""
        user = self.authenticate(username, password)
        return self.create_session(user), user

    def verify_session(self, token: str | None) -> AdminUser:
        """
        Validate a session token.

        Raises:
            AuthenticationError: If the token is missing, expired or tampered with
        """
        if not token:
            raise AuthenticationError("No session token provided", code="session_missing")
        self._require_configuration()

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[SESSION_ALGORITHM],
                issuer=SESSION_ISSUER,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Session expired", code="session_expired", original_exception=e) from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid session token", code="session_invalid", original_exception=e) from e

        return AdminUser(
            user_id=str(payload["sub"]),
            name=str(payload.get("name", "Admin")),
            email=str(payload.get("email", self.email)),
        )

    def is_authenticated(self, token: str | None) -> bool:
        """Does token carry a valid admin session."""
        if not token:
            return False
        try:
            self.verify_session(token)
        except AuthenticationError:
            return False
        return True


# Global auth service instance
_auth_service: AdminAuthService | None = None


def get_auth_service() -> AdminAuthService:
    """Get the global admin auth service instance."""
    global _auth_service

    if _auth_service is None:
        _auth_service = AdminAuthService()

    return _auth_service
