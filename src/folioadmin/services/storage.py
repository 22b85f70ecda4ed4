"""Object storage for staged uploads and derived media assets."""

from abc import ABC, abstractmethod
from datetime import timedelta

import google.auth
import google.auth.transport.requests
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage  # type: ignore[attr-defined]
from google.cloud.exceptions import GoogleCloudError, NotFound
from google.oauth2 import service_account

from ..config import get_env
from ..error_handling import StorageError, ValidationError
from ..logging_config import get_logger

logger = get_logger(__name__)

IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


class ObjectStore(ABC):
    """Capabilities the media pipeline needs from an object store."""

    def __init__(self, public_base_url: str | None = None) -> None:
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

    @abstractmethod
    def get_object(self, key: str) -> bytes:
        """Return the bytes stored at key, raising StorageError if absent."""

    @abstractmethod
    def put_object(self, key: str, data: bytes, content_type: str, cache_control: str | None = None) -> None:
        """Store data at key, replacing any existing object."""

    @abstractmethod
    def delete_object(self, key: str) -> None:
        """Delete the object at key."""

    @abstractmethod
    def object_exists(self, key: str) -> bool:
        """Check whether an object exists at key."""

    @abstractmethod
    def generate_presigned_write_url(self, key: str, content_type: str, expiration: int) -> str:
        """Return a URL that lets a client PUT an object at key for expiration seconds."""

    def public_url(self, key: str) -> str:
        """
        Build the public URL of a derived asset.

        Raises:
            StorageError: If no public base URL is configured
        """
        if not self.public_base_url:
            raise StorageError(
                "PUBLIC_BASE_URL is not configured",
                code="public_url_not_configured",
                details={"key": key},
            )
        return f"{self.public_base_url}/{key}"

    def key_for_public_url(self, url: str) -> str:
        """
        Map a public URL back to its object key.

        Only URLs under the public base URL are accepted; the path must not
        climb out of the bucket or carry a query string.

        Raises:
            ValidationError: If url is missing or not one of this store's public URLs
            StorageError: If no public base URL is configured
        """
        if not url or not isinstance(url, str):
            raise ValidationError("Missing url parameter", code="url_required")
        prefix = self.public_url("")
        key = url[len(prefix) :] if url.startswith(prefix) else ""
        segments = key.split("/")
        if not key or any(part in ("", ".", "..") for part in segments) or "?" in key or "#" in key:
            raise ValidationError(
                "Invalid URL domain", code="url_not_allowed", details={"url": url[:200]}
            )
        return key


class GCSObjectStore(ObjectStore):
    """ObjectStore backed by a Google Cloud Storage bucket."""

    def __init__(
        self,
        bucket_name: str | None = None,
        project_id: str | None = None,
        public_base_url: str | None = None,
    ) -> None:
        """
        Initialize the GCS object store.

        Args:
            bucket_name: Media bucket name (defaults to GCS_MEDIA_BUCKET)
            project_id: GCP project ID (defaults to GOOGLE_CLOUD_PROJECT)
            public_base_url: Base URL for public assets (defaults to PUBLIC_BASE_URL)

        Raises:
            StorageError: If configuration is missing or the client cannot be created
        """
        super().__init__(public_base_url or get_env("PUBLIC_BASE_URL"))
        self.bucket_name = bucket_name or get_env("GCS_MEDIA_BUCKET")
        self.project_id = project_id or get_env("GOOGLE_CLOUD_PROJECT")

        if not self.bucket_name:
            raise StorageError("GCS_MEDIA_BUCKET environment variable is required", code="storage_not_configured")
        if not self.project_id:
            raise StorageError("GOOGLE_CLOUD_PROJECT environment variable is required", code="storage_not_configured")

        try:
            self.client = storage.Client(project=self.project_id)
            self.bucket = self.client.bucket(self.bucket_name)
            logger.info(
                "object_store_initialized",
                bucket=self.bucket_name,
                project_id=self.project_id,
                public_base_url=self.public_base_url,
            )
        except Exception as e:
            raise StorageError(
                f"Failed to initialize GCS client: {e}", code="storage_not_configured", original_exception=e
            ) from e

    def get_object(self, key: str) -> bytes:
        try:
            data: bytes = self.bucket.blob(key).download_as_bytes()
            logger.debug("object_downloaded", key=key, size=len(data))
            return data
        except NotFound as e:
            raise StorageError(f"Object not found: {key}", code="object_not_found", details={"key": key}) from e
        except GoogleCloudError as e:
            raise StorageError(
                f"Failed to download '{key}': {e}", details={"key": key}, original_exception=e
            ) from e
        except Exception as e:
            raise StorageError(
                f"Unexpected error downloading '{key}': {e}", details={"key": key}, original_exception=e
            ) from e

    def put_object(self, key: str, data: bytes, content_type: str, cache_control: str | None = None) -> None:
        try:
            blob = self.bucket.blob(key)
            if cache_control:
                blob.cache_control = cache_control
            blob.upload_from_string(data, content_type=content_type)
            logger.info("object_uploaded", key=key, size=len(data), content_type=content_type)
        except GoogleCloudError as e:
            raise StorageError(f"Failed to upload '{key}': {e}", details={"key": key}, original_exception=e) from e
        except Exception as e:
            raise StorageError(
                f"Unexpected error uploading '{key}': {e}", details={"key": key}, original_exception=e
            ) from e

    def delete_object(self, key: str) -> None:
        try:
            self.bucket.blob(key).delete()
            logger.info("object_deleted", key=key)
        except NotFound:
            logger.warning("object_not_found_for_deletion", key=key)
        except GoogleCloudError as e:
            raise StorageError(f"Failed to delete '{key}': {e}", details={"key": key}, original_exception=e) from e
        except Exception as e:
            raise StorageError(
                f"Unexpected error deleting '{key}': {e}", details={"key": key}, original_exception=e
            ) from e

    def object_exists(self, key: str) -> bool:
        try:
            exists: bool = self.bucket.blob(key).exists()
            return exists
        except Exception as e:
            raise StorageError(
                f"Failed to check existence of '{key}': {e}", details={"key": key}, original_exception=e
            ) from e

    def _signing_kwargs(self) -> dict:
        """
        Credentials for V4 signing.

        Service account keys sign locally. Workload credentials (Cloud Run,
        GCE) have no private key and sign through IAM with a fresh token.
        """
        credentials, _ = google.auth.default()
        if isinstance(credentials, service_account.Credentials):
            return {"credentials": credentials}

        credentials.refresh(google.auth.transport.requests.Request())
        return {
            "service_account_email": credentials.service_account_email,
            "access_token": credentials.token,
        }

    def generate_presigned_write_url(self, key: str, content_type: str, expiration: int) -> str:
        try:
            blob = self.bucket.blob(key)
            upload_url: str = blob.generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=expiration),
                method="PUT",
                content_type=content_type,
                **self._signing_kwargs(),
            )
            logger.debug("upload_url_signed", key=key, expires_in=expiration)
            return upload_url
        except (GoogleAuthError, GoogleCloudError) as e:
            raise StorageError(
                f"Failed to sign upload URL for '{key}': {e}",
                code="signing_failed",
                details={"key": key},
                original_exception=e,
            ) from e
        except Exception as e:
            raise StorageError(
                f"Unexpected error signing upload URL: {e}",
                code="signing_failed",
                details={"key": key},
                original_exception=e,
            ) from e

    def check_bucket_exists(self) -> bool:
        """Check that the configured bucket exists and is accessible."""
        try:
            self.bucket.reload()
            return True
        except NotFound:
            logger.error("bucket_not_found", bucket=self.bucket_name)
            return False
        except Exception as e:
            logger.error("bucket_check_failed", bucket=self.bucket_name, error=str(e))
            return False


# Global object store instance
_object_store: ObjectStore | None = None


def get_object_store() -> ObjectStore:
    """
    Get the global object store instance.

    Returns:
        ObjectStore: Global GCS-backed object store
    """
    global _object_store

    if _object_store is None:
        _object_store = GCSObjectStore()

    return _object_store
