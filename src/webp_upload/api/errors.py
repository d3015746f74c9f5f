"""Exception handlers.

Turn service exceptions raised outside the pipeline into ``{"error": ...}``
JSON responses.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from webp_upload.core.error_handling import error_kind_for, status_code_for
from webp_upload.core.exceptions import AuthenticationError, ConfigurationError
from webp_upload.core.logging_config import get_logger

logger = get_logger("api.errors")


def describe_validation_error(exc: RequestValidationError) -> str:
    """Render the first field error as a short sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = first.get("msg", "invalid value")
    return f"Invalid request: {field}: {message}" if field else f"Invalid request: {message}"


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers."""

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        client = request.client.host if request.client else "unknown"
        logger.info(f"Rejected unauthenticated upload from {client}")
        return JSONResponse(
            status_code=status_code_for(error_kind_for(exc)),
            content={"error": str(exc)},
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": describe_validation_error(exc)})
