"""JSON API routes.

Admin routes depend on ``require_admin``; the session check runs before the
request reaches any service, so unauthenticated calls have no side effects.
"""

import base64
import re

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from fastapi.responses import JSONResponse

from ..config import get_session_ttl, is_production
from ..error_handling import FolioError, StorageError, ValidationError, error_payload
from ..health import perform_health_check
from ..logging_config import get_logger, log_user_action
from ..models.content import ContentCategory
from ..services.auth import AdminAuthService, AdminUser
from ..services.content_index import ContentIndexService
from ..services.content_manager import ContentManager
from ..services.image_processor import WEBP_CONTENT_TYPE, ImageProcessor, compression_ratio
from ..services.storage import IMMUTABLE_CACHE_CONTROL, ObjectStore
from ..services.uploads import IMAGE_CONTENT_TYPES, UploadProcessor, UploadUrlIssuer, file_extension
from .dependencies import (
    SESSION_COOKIE,
    provide_auth_service,
    provide_content_manager,
    provide_image_processor,
    provide_index_service,
    provide_object_store,
    provide_upload_processor,
    provide_upload_url_issuer,
    require_admin,
)
from .schemas import LoginRequest, ProcessUploadRequest, TourRequest, UploadUrlRequest, VideoRequest

logger = get_logger(__name__)

router = APIRouter()


@router.post("/api/auth/login")
def login(
    body: LoginRequest,
    response: Response,
    auth_service: AdminAuthService = Depends(provide_auth_service),
):
    token, user = auth_service.login(body.username, body.password)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=get_session_ttl(),
        httponly=True,
        secure=is_production(),
        samesite="lax",
    )
    return {"token": token, "user": user.to_dict()}


@router.post("/api/auth/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"message": "Logged out"}


@router.post("/api/{category}/upload-url")
def create_upload_url(
    category: str,
    body: UploadUrlRequest,
    user: AdminUser = Depends(require_admin),
    issuer: UploadUrlIssuer = Depends(provide_upload_url_issuer),
):
    ticket = issuer.issue(category, body.filename, body.content_type)
    log_user_action(user.user_id, "upload_url_issued", category=category, key=ticket.key)
    return {**ticket.to_dict(), "message": "Pre-signed URL generated successfully"}


@router.post("/api/{category}/process-upload", status_code=status.HTTP_201_CREATED)
def process_upload(
    category: str,
    body: ProcessUploadRequest,
    user: AdminUser = Depends(require_admin),
    processor: UploadProcessor = Depends(provide_upload_processor),
):
    result = processor.process(
        category,
        body.key,
        body.title,
        description=body.description,
        category_label=body.category,
        initial_yaw=body.initial_yaw,
        initial_pitch=body.initial_pitch,
        initial_hfov=body.initial_hfov,
    )
    log_user_action(user.user_id, "upload_processed", category=category, record_id=result.record["id"])
    return {**result.to_dict(), "message": "Photo processed and added successfully"}


@router.get("/api/content/{category}")
def read_content(
    category: str,
    _: AdminUser = Depends(require_admin),
    index_service: ContentIndexService = Depends(provide_index_service),
):
    return index_service.read_document(category)


@router.post("/api/videos", status_code=status.HTTP_201_CREATED)
def add_video(
    body: VideoRequest,
    user: AdminUser = Depends(require_admin),
    manager: ContentManager = Depends(provide_content_manager),
):
    record = manager.add_video(body.url, body.title, body.description)
    log_user_action(user.user_id, "video_added", record_id=record["id"])
    return {"video": record}


@router.post("/api/tours", status_code=status.HTTP_201_CREATED)
def add_tour(
    body: TourRequest,
    user: AdminUser = Depends(require_admin),
    manager: ContentManager = Depends(provide_content_manager),
):
    record = manager.add_tour(
        body.title,
        body.iframe_url,
        description=body.description,
        slug=body.slug,
        thumbnail_url=body.thumbnail_url,
    )
    log_user_action(user.user_id, "tour_added", record_id=record["id"])
    return {"tour": record}


@router.get("/api/tours")
def list_tours(index_service: ContentIndexService = Depends(provide_index_service)):
    """Public tours listing; an unreadable index renders as no tours."""
    try:
        return index_service.read_document(ContentCategory.TOURS)
    except FolioError as e:
        logger.warning("tours_index_unavailable", error=str(e))
        return {"tours": []}


PROXY_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


@router.api_route("/api/proxy-360", methods=["GET", "HEAD"])
def proxy_360(
    url: str | None = None,
    object_store: ObjectStore = Depends(provide_object_store),
):
    """Serve a published asset from this origin so the 360° viewer can load it."""
    key = object_store.key_for_public_url(url)
    try:
        data = object_store.get_object(key)
    except StorageError as e:
        if e.code != "object_not_found":
            raise
        return JSONResponse(error_payload(e), status_code=status.HTTP_404_NOT_FOUND, headers=PROXY_CORS_HEADERS)

    return Response(
        content=data,
        media_type=IMAGE_CONTENT_TYPES.get(file_extension(key), WEBP_CONTENT_TYPE),
        headers={"Cache-Control": IMMUTABLE_CACHE_CONTROL, **PROXY_CORS_HEADERS},
    )


@router.options("/api/proxy-360")
def proxy_360_preflight():
    return Response(status_code=status.HTTP_200_OK, headers=PROXY_CORS_HEADERS)


def _require_image_upload(file: UploadFile) -> None:
    if not (file.content_type or "").startswith("image/"):
        raise ValidationError("File must be an image", code="not_an_image")


@router.post("/api/convert-webp")
def convert_webp(
    file: UploadFile = File(...),
    quality: int | None = Form(None),
    image_processor: ImageProcessor = Depends(provide_image_processor),
):
    """WebP preview of an image; quality overrides the configured main-image quality."""
    _require_image_upload(file)
    data = file.file.read()
    filename = file.filename or "image.jpg"
    processed = image_processor.process_image(data, filename)
    image, metadata = processed.image, processed.metadata
    if quality is not None:
        image, metadata = image_processor.convert_to_webp(data, quality, filename)
    return {
        "image": base64.b64encode(image).decode("ascii"),
        "thumbnail": base64.b64encode(processed.thumbnail).decode("ascii"),
        "metadata": metadata.to_dict(),
        "thumbnailMetadata": processed.thumbnail_metadata.to_dict(),
        "compressionRatio": compression_ratio(len(data), metadata.size),
    }


def png_download_name(filename: str) -> str:
    """Attachment name for a converted file: same stem, .png, no header-breaking characters."""
    stem = filename.replace("\\", "/").rsplit("/", 1)[-1].rsplit(".", 1)[0]
    stem = re.sub(r'["\r\n;]', "", stem).encode("ascii", "ignore").decode("ascii").strip()
    return f"{stem or 'image'}.png"


@router.post("/api/convert-heic")
def convert_heic(
    file: UploadFile = File(...),
    image_processor: ImageProcessor = Depends(provide_image_processor),
):
    filename = file.filename or ""
    png_data = image_processor.convert_heic_to_png(file.file.read(), filename)
    return Response(
        content=png_data,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{png_download_name(filename)}"'},
    )


@router.get("/health")
def health():
    health_data = perform_health_check()
    status_code = status.HTTP_200_OK if health_data["status"] == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(health_data, status_code=status_code)
