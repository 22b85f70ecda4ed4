"""FastAPI dependency providers.

Route handlers receive services through these functions so tests can
swap them with ``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from ..services.auth import AdminAuthService, AdminUser, get_auth_service
from ..services.content_index import ContentIndexService, get_content_index_service
from ..services.content_manager import ContentManager
from ..services.image_processor import ImageProcessor, get_image_processor
from ..services.storage import ObjectStore, get_object_store
from ..services.uploads import UploadProcessor, UploadUrlIssuer

SESSION_COOKIE = "session"


def provide_auth_service() -> AdminAuthService:
    return get_auth_service()


def provide_object_store() -> ObjectStore:
    return get_object_store()


def provide_index_service() -> ContentIndexService:
    return get_content_index_service()


def provide_image_processor() -> ImageProcessor:
    return get_image_processor()


def provide_upload_url_issuer(object_store: ObjectStore = Depends(provide_object_store)) -> UploadUrlIssuer:
    return UploadUrlIssuer(object_store)


def provide_upload_processor(
    object_store: ObjectStore = Depends(provide_object_store),
    index_service: ContentIndexService = Depends(provide_index_service),
    image_processor: ImageProcessor = Depends(provide_image_processor),
) -> UploadProcessor:
    return UploadProcessor(object_store, index_service, image_processor)


def provide_content_manager(
    index_service: ContentIndexService = Depends(provide_index_service),
) -> ContentManager:
    return ContentManager(index_service)


def session_token(request: Request) -> str | None:
    """Session token from the session cookie or an Authorization: Bearer header."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE)


def require_admin(
    request: Request,
    auth_service: AdminAuthService = Depends(provide_auth_service),
) -> AdminUser:
    """Access gate for admin routes; raises AuthenticationError (401) without a valid session."""
    return auth_service.verify_session(session_token(request))
