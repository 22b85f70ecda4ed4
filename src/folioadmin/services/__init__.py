"""
Services module for folioadmin.

This module contains all service classes that handle business logic:
- AdminAuthService: admin login and session validation
- ObjectStore / GCSObjectStore: object storage for uploads and derived assets
- ImageProcessor: WebP conversion and thumbnail generation
- ContentIndexService: JSON content index reads and appends
- UploadUrlIssuer / UploadProcessor: direct-to-storage upload flow
- ContentManager: video and tour records
"""

from .auth import AdminAuthService, AdminUser, get_auth_service
from .content_index import ContentIndexService, IndexStore, JsonFileIndexStore, get_content_index_service
from .content_manager import ContentManager
from .image_processor import ImageProcessor, ProcessedImage, compression_ratio, get_image_processor
from .storage import GCSObjectStore, ObjectStore, get_object_store
from .uploads import ProcessingResult, UploadProcessor, UploadTicket, UploadUrlIssuer

__all__ = [
    "AdminAuthService",
    "AdminUser",
    "get_auth_service",
    "ContentIndexService",
    "IndexStore",
    "JsonFileIndexStore",
    "get_content_index_service",
    "ContentManager",
    "ImageProcessor",
    "ProcessedImage",
    "compression_ratio",
    "get_image_processor",
    "GCSObjectStore",
    "ObjectStore",
    "get_object_store",
    "ProcessingResult",
    "UploadProcessor",
    "UploadTicket",
    "UploadUrlIssuer",
]
