import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.core.middleware import RequestIdMiddleware
from app.api.v1.router import v1_router

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please try again."


def _server_error(request: Request, exc: Exception) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    logger.exception("[error] %s %s request_id=%s: %s", request.method, request.url.path, rid, exc)
    return JSONResponse(status_code=500, content={"detail": GENERIC_ERROR, "request_id": rid})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    # Middleware: Request ID
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    # Storage and database failures surface as a generic message
    app.add_exception_handler(SQLAlchemyError, _server_error)
    app.add_exception_handler(OSError, _server_error)

    # API v1
    app.include_router(v1_router, prefix=settings.api_prefix)

    # Uploaded issue / resolution images
    media_root = settings.media_root
    media_root.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.blob_public_base_url,
        StaticFiles(directory=str(media_root), check_dir=False),
        name="media",
    )

    logger.info("[startup] %s env=%s", settings.app_name, settings.environment)
    return app


app = create_app()
