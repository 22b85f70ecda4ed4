"""FastAPI application serving the admin JSON API."""

import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..error_handling import FolioError, error_payload, http_status_for
from ..logging_config import (
    bind_request_context,
    clear_request_context,
    configure_structured_logging,
    get_logger,
    log_error,
)
from .routes import router

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def _folio_error_handler(request: Request, exc: FolioError) -> JSONResponse:
    return JSONResponse(error_payload(exc), status_code=http_status_for(exc))


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_body_invalid", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse({"error": "Invalid request body", "code": "invalid_body"}, status_code=400)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log_error(exc, {"path": request.url.path, "method": request.method})
    return JSONResponse(error_payload(exc), status_code=500)


async def _request_context(request: Request, call_next):
    """Tag every log event of a request with its id, method and path."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    bind_request_context(request_id=request_id, method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def create_app(configure_logging: bool = True) -> FastAPI:
    """Build the API application."""
    if configure_logging:
        configure_structured_logging()

    app = FastAPI(title="folioadmin", version=__version__)
    app.add_exception_handler(FolioError, _folio_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)
    app.middleware("http")(_request_context)
    app.include_router(router)

    logger.info("api_application_created", version=__version__)
    return app
