"""Configuration management for folioadmin.

This module provides centralized configuration management using environment variables
and Streamlit secrets as fallback. Designed for a single-admin portfolio back office.
"""

import os
from typing import Any

try:
    import streamlit as st

    STREAMLIT_AVAILABLE = True
except ImportError:
    STREAMLIT_AVAILABLE = False

from .logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """Centralized configuration management using environment variables."""

    def __init__(self):
        """Initialize configuration."""
        self._cache = {}

    def get(self, key: str, default: Any = None, cast_type: type = str) -> Any:
        """Get configuration value from environment variables or Streamlit secrets.

        Args:
            key: Configuration key
            default: Default value if not found
            cast_type: Type to cast the value to (str, int, bool, float)

        Returns:
            Configuration value cast to the specified type
        """
        cache_key = f"{key}:{cast_type.__name__}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        value = os.getenv(key)

        # Streamlit secrets only exist inside a running Streamlit app
        if value is None and STREAMLIT_AVAILABLE:
            try:
                value = st.secrets.get(key)
            except Exception:  # nosec B110
                pass

        if value is None:
            value = default

        if value is not None:
            try:
                if cast_type is bool:
                    if isinstance(value, str):
                        value = value.lower() in ("true", "1", "yes", "on")  # type: ignore[assignment]
                    else:
                        value = bool(value)  # type: ignore[assignment]
                elif cast_type is not str:
                    value = cast_type(value)
            except (ValueError, TypeError) as e:
                logger.warning("config_cast_failed", key=key, cast_type=cast_type.__name__, error=str(e))
                value = default

        self._cache[cache_key] = value
        return value

    def get_required(self, key: str, cast_type: type = str) -> Any:
        """Get required configuration value.

        Args:
            key: Configuration key
            cast_type: Type to cast the value to

        Returns:
            Configuration value

        Raises:
            ValueError: If the required configuration is not found
        """
        value = self.get(key, cast_type=cast_type)
        if value is None or value == "":
            raise ValueError(f"Required configuration '{key}' not found")
        return value

    def is_development(self) -> bool:
        """Check if running in development mode."""
        environment = self.get("ENVIRONMENT", "development").lower()
        return environment in ["development", "dev", "local", "test"]

    def is_production(self) -> bool:
        """Check if running in production mode."""
        environment = self.get("ENVIRONMENT", "development").lower()
        return environment in ["production", "prod"]

    def clear_cache(self):
        """Clear configuration cache."""
        self._cache.clear()


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_env(key: str, default: Any = None, cast_type: type = str) -> Any:
    """Get environment variable with type casting."""
    return get_config().get(key, default, cast_type)


def get_required_env(key: str, cast_type: type = str) -> Any:
    """Get required environment variable.

    Raises:
        ValueError: If the required environment variable is not found
    """
    return get_config().get_required(key, cast_type)


def is_development() -> bool:
    """Check if running in development mode."""
    return get_config().is_development()


def is_production() -> bool:
    """Check if running in production mode."""
    return get_config().is_production()


# Common configuration getters
def get_project_id() -> str:
    """Get Google Cloud project ID."""
    return str(get_required_env("GOOGLE_CLOUD_PROJECT"))


def get_media_bucket() -> str:
    """Get the GCS bucket holding staged uploads and derived assets."""
    return str(get_required_env("GCS_MEDIA_BUCKET"))


def get_public_base_url() -> str:
    """Get the base URL derived assets are publicly served from."""
    return str(get_required_env("PUBLIC_BASE_URL")).rstrip("/")


def get_upload_url_expiration() -> int:
    """Get the lifetime of pre-signed upload URLs in seconds."""
    return int(get_env("UPLOAD_URL_EXPIRATION", 3600, int))


def get_content_dir() -> str:
    """Get the directory holding the JSON content indexes."""
    return str(get_env("CONTENT_DIR", "content"))


def get_session_ttl() -> int:
    """Get admin session lifetime in seconds."""
    return int(get_env("SESSION_TTL", 86400, int))


def get_environment() -> str:
    """Get current environment."""
    return str(get_env("ENVIRONMENT", "development"))


def get_log_level() -> str:
    """Get log level."""
    return str(get_env("LOG_LEVEL", "INFO"))


def get_debug_mode() -> bool:
    """Get debug mode setting."""
    return get_env("DEBUG", False, bool) or is_development()
