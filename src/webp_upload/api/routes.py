"""Upload and health routes."""

import asyncio
import os
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from webp_upload.core.error_handling import status_code_for
from webp_upload.core.models import ConversionOptions, UploadRequest, UploadResult
from webp_upload.core.observability import LogContext, StructuredLogger, new_request_id
from webp_upload.core.services import UploadPipeline

from .security import require_api_key

router = APIRouter(prefix="/api", tags=["upload"])
health_router = APIRouter(tags=["health"])

logger = StructuredLogger("api.upload")


def to_upload_request(image: Optional[UploadFile]) -> Optional[UploadRequest]:
    """Wrap the multipart part without reading it; ``None`` when absent."""
    if image is None:
        return None

    size = image.size
    if size is None:
        image.file.seek(0, os.SEEK_END)
        size = image.file.tell()
        image.file.seek(0)

    # Browsers send an empty, nameless part when no file was chosen.
    if not image.filename and size == 0:
        return None

    return UploadRequest(
        filename=image.filename or "",
        content_type=image.content_type or "application/octet-stream",
        size=size,
        stream=image.file,
    )


def render_result(result: UploadResult, failure_status_code: int) -> JSONResponse:
    if result.success:
        return JSONResponse(content={"success": True, "imageUrl": result.url})
    return JSONResponse(
        status_code=status_code_for(result.error_kind, failure_status_code),
        content={"error": result.error},
    )


@router.options("/upload")
async def upload_preflight() -> dict:
    """Bare OPTIONS; CORS preflights are answered by the middleware."""
    return {}


@router.post("/upload", dependencies=[Depends(require_api_key)])
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(default=None),
    quality: Optional[int] = Form(default=None),
    width: Optional[int] = Form(default=None),
    height: Optional[int] = Form(default=None),
) -> JSONResponse:
    """
    Convert the ``image`` part to WebP, store it on S3 and return its URL.

    Optional ``quality``, ``width`` and ``height`` form fields tune the
    conversion; without them photos keep their dimensions and are encoded
    at the configured quality.
    """
    settings = request.app.state.settings
    pipeline: UploadPipeline = request.app.state.pipeline

    request_id = new_request_id()
    logger.debug(
        "Upload request started",
        LogContext(request_id=request_id, stage="http", component="api"),
        content_type=request.headers.get("content-type"),
        content_length=request.headers.get("content-length"),
        origin=request.headers.get("origin"),
        user_agent=request.headers.get("user-agent"),
    )

    options = ConversionOptions(
        quality=settings.default_quality if quality is None else quality,
        width=width,
        height=height,
    )
    # Transcoding is CPU-bound and the S3 write blocks; keep both off the loop.
    result = await asyncio.to_thread(
        pipeline.process, to_upload_request(image), options, request_id
    )
    return render_result(result, settings.failure_status_code)


@health_router.get("/health")
async def health() -> dict:
    return {"status": "ok"}
