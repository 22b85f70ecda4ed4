"""
Health checks for folioadmin.

Used by the API's /health endpoint and by the Streamlit health page.
"""

import os
import sys
import time
from typing import Any

from . import __version__
from .logging_config import get_logger
from .models.content import ContentCategory
from .services.content_index import JsonFileIndexStore
from .services.storage import GCSObjectStore

logger = get_logger(__name__)

REQUIRED_ENV_VARS = [
    "GOOGLE_CLOUD_PROJECT",
    "GCS_MEDIA_BUCKET",
    "PUBLIC_BASE_URL",
    "ADMIN_USERNAME",
    "ADMIN_PASSWORD",
    "AUTH_SECRET",
]


def check_storage_health() -> dict[str, Any]:
    """Check that the media bucket is reachable."""
    try:
        store = GCSObjectStore()
        if not store.check_bucket_exists():
            return {
                "status": "unhealthy",
                "message": f"Bucket not accessible: {store.bucket_name}",
                "timestamp": time.time(),
            }
        return {
            "status": "healthy",
            "message": f"Storage connection successful to bucket: {store.bucket_name}",
            "timestamp": time.time(),
            "bucket": store.bucket_name,
        }
    except Exception as e:
        logger.error("storage_health_check_failed", error=str(e))
        return {"status": "unhealthy", "message": f"Storage connection failed: {e}", "timestamp": time.time()}


def check_content_index_health(index_store: JsonFileIndexStore | None = None) -> dict[str, Any]:
    """Check that every content index can be read."""
    index_store = index_store or JsonFileIndexStore()
    counts: dict[str, int] = {}
    failures: dict[str, str] = {}

    for category in ContentCategory:
        try:
            counts[category.value] = len(index_store.read(category)[category.records_key])
        except Exception as e:
            failures[category.value] = str(e)

    if failures:
        return {
            "status": "unhealthy",
            "message": f"Unreadable content indexes: {', '.join(sorted(failures))}",
            "timestamp": time.time(),
            "failures": failures,
            "records": counts,
        }
    return {
        "status": "healthy",
        "message": "All content indexes readable",
        "timestamp": time.time(),
        "records": counts,
    }


def check_environment_health() -> dict[str, Any]:
    """Check that required configuration is present."""
    missing_vars = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]

    if missing_vars:
        return {
            "status": "unhealthy",
            "message": f"Missing environment variables: {', '.join(missing_vars)}",
            "timestamp": time.time(),
            "missing_vars": missing_vars,
        }

    return {
        "status": "healthy",
        "message": "Environment configuration is valid",
        "timestamp": time.time(),
    }


def get_application_info() -> dict[str, Any]:
    """Get application information."""
    return {
        "name": "folioadmin",
        "version": __version__,
        "environment": os.getenv("ENVIRONMENT", "unknown"),
        "python_version": sys.version.split()[0],
    }


def perform_health_check(include_storage: bool = True) -> dict[str, Any]:
    """Run all checks and aggregate them into one status."""
    start_time = time.time()

    checks = {
        "content_index": check_content_index_health(),
        "environment": check_environment_health(),
    }
    if include_storage:
        checks["storage"] = check_storage_health()

    unhealthy_services = [name for name, result in checks.items() if result["status"] != "healthy"]
    health_response: dict[str, Any] = {
        "status": "unhealthy" if unhealthy_services else "healthy",
        "timestamp": time.time(),
        "duration_ms": round((time.time() - start_time) * 1000, 2),
        "application": get_application_info(),
        "checks": checks,
    }
    if unhealthy_services:
        health_response["unhealthy_services"] = unhealthy_services

    logger.info(
        "health_check_completed",
        status=health_response["status"],
        duration_ms=health_response["duration_ms"],
        unhealthy_services=unhealthy_services,
    )
    return health_response


def render_health_page() -> None:
    """Render health check page for Streamlit."""
    import streamlit as st

    st.set_page_config(page_title="Health Check - folioadmin", page_icon="🏥", layout="wide")
    st.title("🏥 Health Check")

    with st.spinner("Performing health check..."):
        health_data = perform_health_check()

    if health_data["status"] == "healthy":
        st.success(f"✅ Application is healthy (checked in {health_data['duration_ms']}ms)")
    else:
        st.error(f"❌ Application is unhealthy (checked in {health_data['duration_ms']}ms)")
        st.warning(f"Unhealthy services: {', '.join(health_data['unhealthy_services'])}")

    for service, check_result in health_data["checks"].items():
        with st.expander(f"{service.replace('_', ' ').title()}", expanded=check_result["status"] != "healthy"):
            if check_result["status"] == "healthy":
                st.success(check_result["message"])
            else:
                st.error(check_result["message"])
            st.json(check_result)
