"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from webp_upload import __version__
from webp_upload.core.config import Settings, get_settings
from webp_upload.core.factories import UploadPipelineFactory
from webp_upload.core.logging_config import get_logger
from webp_upload.core.services import UploadPipeline

from .errors import register_exception_handlers
from .routes import health_router, router

ALLOWED_METHODS = ["POST", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-API-Key"]
CORS_MAX_AGE_SECONDS = 86400

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pipeline (and S3 client) per process, shared by every request.
    if app.state.pipeline is None:
        app.state.pipeline = UploadPipelineFactory.create_pipeline(settings=app.state.settings)
        logger.info("Upload pipeline initialised")

    settings: Settings = app.state.settings
    missing = settings.missing_storage_settings()
    if missing:
        logger.warning(f"Storage is not fully configured, uploads will fail: missing {', '.join(missing)}")
    if settings.auth_enabled and not settings.api_key:
        logger.warning("UPLOAD_AUTH_ENABLED is set but IMAGE_ROUTE_API_KEY is empty")
    yield


def create_app(
    settings: Optional[Settings] = None,
    pipeline: Optional[UploadPipeline] = None,
) -> FastAPI:
    """
    Build the upload API.

    Args:
        settings: Runtime settings (defaults to the environment)
        pipeline: Pre-built pipeline; created at startup when omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        max_age=CORS_MAX_AGE_SECONDS,
    )
    register_exception_handlers(app)

    app.include_router(router)
    app.include_router(health_router)
    return app
