"""
Centralized logging configuration for folioadmin.

structlog is set up once per process (API, admin panel or CLI). Every
event carries the service name and environment, request-scoped values
bound with ``bind_request_context`` and no credential values: admin
passwords, session tokens and signed upload URLs are masked before
rendering.
"""

import logging
import os
import sys
from collections.abc import Mapping, MutableMapping
from typing import Any

import structlog

SERVICE_NAME = "folioadmin"

REDACTED = "[redacted]"

# Event keys whose values are credentials or bearer URLs
SENSITIVE_KEYS = frozenset(
    {"password", "token", "session_token", "authorization", "secret", "auth_secret", "upload_url", "cookie"}
)

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    """Log level from LOG_LEVEL, INFO when unset or unknown."""
    return LEVELS.get(os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def is_development_environment() -> bool:
    """Check if running in development environment."""
    return os.getenv("ENVIRONMENT", "development").lower() in ["development", "dev", "local", "test"]


def redact_sensitive_values(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credential values, including inside nested dicts such as error details."""

    def _redact(mapping: Mapping[str, Any]) -> dict[str, Any]:
        cleaned = {}
        for key, value in mapping.items():
            if key.lower() in SENSITIVE_KEYS and value:
                cleaned[key] = REDACTED
            elif isinstance(value, Mapping):
                cleaned[key] = _redact(value)
            else:
                cleaned[key] = value
        return cleaned

    return _redact(event_dict)


def add_service_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Stamp the service name and environment on every event."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("environment", os.getenv("ENVIRONMENT", "development"))
    return event_dict


def configure_structured_logging() -> None:
    """
    Configure structured logging for the entire application.

    Development gets the console renderer, everything else JSON lines
    on stderr.
    """
    log_level = get_log_level()
    is_dev = is_development_environment()

    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stderr)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_sensitive_values,
        structlog.processors.UnicodeDecoder(),
    ]

    if is_dev:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.getLogger().setLevel(log_level)

    structlog.get_logger("folioadmin.logging").info(
        "logging_configured",
        log_level=logging.getLevelName(log_level),
        renderer="console" if is_dev else "json",
    )


def bind_request_context(**context: Any) -> None:
    """Bind values (request id, path, admin id) to every event of the current request or task."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**context)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (optional, defaults to calling module)
    """
    if name is None:
        import inspect

        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")

    return structlog.get_logger(name)


def log_performance(operation: str, duration: float, **context: Any) -> None:
    """Timing of a media operation (image conversion, upload completion)."""
    get_logger("folioadmin.performance").info(
        "performance_metric", operation=operation, duration_seconds=duration, **context
    )


def log_user_action(user_id: str, action: str, **context: Any) -> None:
    """Audit trail entry for an admin action that changed published content."""
    get_logger("folioadmin.user_actions").info("user_action", user_id=user_id, action=action, **context)


def log_error(error: Exception, context: dict[str, Any] | None = None) -> None:
    """
    Log errors with structured context.

    Args:
        error: Exception that occurred
        context: Additional context information
    """
    error_context = {"error_type": type(error).__name__, "error_message": str(error), **(context or {})}
    get_logger("folioadmin.errors").error("error_occurred", **error_context, exc_info=error)


def log_security_event(event_type: str, user_id: str | None = None, **context: Any) -> None:
    """Login failures, rejected sessions and access-gate denials."""
    get_logger("folioadmin.security").warning("security_event", event_type=event_type, user_id=user_id, **context)
