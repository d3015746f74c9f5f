# src/webp_upload/core/error_handling.py

import functools
import logging
from typing import Callable, Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError as BotocoreClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)
from PIL import Image, UnidentifiedImageError as PILUnidentifiedImageError

from .exceptions import (
    AuthenticationError,
    AuthFailedError,
    BucketAccessError,
    CodecEngineError,
    CorruptImageError,
    ErrorKind,
    ImageProcessingError,
    MissingCredentialsError,
    NetworkError,
    OutOfMemoryError,
    PermissionDeniedError,
    S3Error,
    UnsupportedFormatError,
    UploadServiceError,
    UploadValidationError,
)

AUTH_FAILED_S3_ERROR_CODES = (
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
    "TokenRefreshRequired",
)
PERMISSION_DENIED_S3_ERROR_CODES = ("AccessDenied", "AllAccessDisabled", "AccountProblem", "403")
BUCKET_S3_ERROR_CODES = (
    "NoSuchBucket",
    "PermanentRedirect",
    "InvalidBucketName",
    "AuthorizationHeaderMalformed",
    "404",
)

Classifier = Callable[[Exception], Optional[UploadServiceError]]


def classify_codec_error(error: Exception) -> ImageProcessingError:
    """Map a Pillow failure onto the image processing taxonomy."""
    if isinstance(error, PILUnidentifiedImageError):
        return UnsupportedFormatError("Unsupported image format.")
    if isinstance(error, (Image.DecompressionBombError, MemoryError)):
        return OutOfMemoryError(f"Image is too large to decode: {error}")
    if isinstance(error, (OSError, SyntaxError, ValueError)):
        return CorruptImageError(f"Image data is corrupt or truncated: {error}")
    return CodecEngineError(str(error) or error.__class__.__name__)


def classify_storage_error(error: Exception) -> Optional[S3Error]:
    """Map a botocore failure onto the storage taxonomy.

    Returns None for errors that did not come from botocore so that they
    propagate unchanged.
    """
    if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
        return MissingCredentialsError(str(error))
    if isinstance(
        error,
        (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError, ConnectionClosedError),
    ):
        return NetworkError(str(error))
    if isinstance(error, BotocoreClientError):
        error_code = str(error.response.get("Error", {}).get("Code", ""))
        if error_code in AUTH_FAILED_S3_ERROR_CODES:
            return AuthFailedError(str(error))
        if error_code in PERMISSION_DENIED_S3_ERROR_CODES:
            return PermissionDeniedError(str(error))
        if error_code in BUCKET_S3_ERROR_CODES:
            return BucketAccessError(str(error))
        return S3Error(str(error))
    if isinstance(error, BotoCoreError):
        return S3Error(str(error))
    return None


def with_error_handling(classifier: Classifier):
    """
    A decorator that translates library errors raised by the wrapped call
    into the service taxonomy using ``classifier``.

    Service errors pass through untouched. Errors the classifier does not
    recognise are logged and re-raised as-is.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__ + '.' + func.__name__)
            try:
                return func(*args, **kwargs)
            except UploadServiceError:
                raise
            except Exception as e:
                logger.error(
                    f"Error in '{func.__name__}': {e}",
                    exc_info=True
                )
                translated = classifier(e)
                if translated is None:
                    raise
                raise translated from e
        return wrapper
    return decorator


def error_kind_for(error: BaseException) -> ErrorKind:
    """Return the caller-visible category of an exception."""
    if isinstance(error, UploadValidationError):
        return ErrorKind.VALIDATION
    if isinstance(error, ImageProcessingError):
        return ErrorKind.PROCESSING
    if isinstance(error, S3Error):
        return ErrorKind.STORAGE
    if isinstance(error, AuthenticationError):
        return ErrorKind.AUTH
    return ErrorKind.UNEXPECTED


def status_code_for(kind: ErrorKind, failure_status_code: int = 400) -> int:
    """
    Map an error kind to an HTTP status.

    Processing and storage failures share ``failure_status_code`` so the
    deployment picks one policy for both.
    """
    if kind is ErrorKind.VALIDATION:
        return 400
    if kind is ErrorKind.AUTH:
        return 401
    if kind in (ErrorKind.PROCESSING, ErrorKind.STORAGE):
        return failure_status_code
    return 500
