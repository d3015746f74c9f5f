"""Custom exceptions and error kinds for the upload service."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Caller-visible failure categories."""

    VALIDATION = "validation"
    PROCESSING = "processing"
    STORAGE = "storage"
    AUTH = "auth"
    UNEXPECTED = "unexpected"


GENERIC_UPLOAD_ERROR_MESSAGE = "An error occurred while uploading the image."


class UploadServiceError(Exception):
    """Base exception for all upload service errors."""


# Validation


class UploadValidationError(UploadServiceError):
    """Error raised when the upload request itself is invalid."""


class MissingFileError(UploadValidationError):
    """No image part was sent."""

    def __init__(self) -> None:
        super().__init__("Image file is required.")


class FileTooLargeError(UploadValidationError):
    """Payload exceeds the configured ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"File size cannot exceed {limit // (1024 * 1024)}MB.")


class InvalidQualityError(UploadValidationError):
    """Quality is not an integer in [1, 100]."""

    def __init__(self, quality: object) -> None:
        self.quality = quality
        super().__init__(f"Quality must be an integer between 1 and 100, got {quality!r}.")


class InvalidDimensionsError(UploadValidationError):
    """Target width or height is not a positive integer."""


# Image processing


class ImageProcessingError(UploadServiceError):
    """Error raised when transcoding a single image fails."""


class UnsupportedFormatError(ImageProcessingError):
    """Input is not a raster format the codec can identify."""


class CorruptImageError(ImageProcessingError):
    """Input was identified but could not be decoded."""


class OutOfMemoryError(ImageProcessingError):
    """Decoding the input would exhaust memory."""


class CodecEngineError(ImageProcessingError):
    """Any other failure inside the codec engine."""


# Storage


class S3Error(UploadServiceError):
    """Error raised for S3 related failures."""


class MissingCredentialsError(S3Error):
    """Required storage coordinates are not configured."""


class AuthFailedError(S3Error):
    """S3 rejected the credentials."""


class PermissionDeniedError(S3Error):
    """Credentials are valid but not allowed to write."""


class NetworkError(S3Error):
    """S3 could not be reached or timed out."""


class BucketAccessError(S3Error):
    """The bucket does not exist or cannot be addressed."""


# Authentication and configuration


class AuthenticationError(UploadServiceError):
    """Caller did not present a valid API key."""


class ConfigurationError(UploadServiceError):
    """Error raised for invalid or missing server configuration."""
