"""Core utilities and shared components for the upload service."""

from .config import Settings, get_settings
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ErrorKind,
    ImageProcessingError,
    S3Error,
    UploadServiceError,
    UploadValidationError,
)
from .keys import KeyGenerator
from .logging_config import get_logger, setup_logger
from .models import ConversionOptions, StorageOptions, UploadRequest, UploadResult
from .services import S3StorageWriter, UploadPipeline, WebPTranscoderService

__all__ = [
    "Settings",
    "get_settings",
    "ErrorKind",
    "UploadServiceError",
    "UploadValidationError",
    "ImageProcessingError",
    "S3Error",
    "AuthenticationError",
    "ConfigurationError",
    "KeyGenerator",
    "get_logger",
    "setup_logger",
    "ConversionOptions",
    "StorageOptions",
    "UploadRequest",
    "UploadResult",
    "WebPTranscoderService",
    "S3StorageWriter",
    "UploadPipeline",
]
