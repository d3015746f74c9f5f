# tests/core/test_error_handling.py

import pytest
from unittest import mock

from botocore.exceptions import (
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)
from PIL import Image, UnidentifiedImageError

from webp_upload.core.exceptions import (
    AuthenticationError,
    AuthFailedError,
    BucketAccessError,
    CodecEngineError,
    ConfigurationError,
    CorruptImageError,
    ErrorKind,
    FileTooLargeError,
    ImageProcessingError,
    MissingCredentialsError,
    MissingFileError,
    NetworkError,
    OutOfMemoryError,
    PermissionDeniedError,
    S3Error,
    UnsupportedFormatError,
    UploadServiceError,
)
from webp_upload.core.error_handling import (
    classify_codec_error,
    classify_storage_error,
    error_kind_for,
    status_code_for,
    with_error_handling,
)
from webp_upload.testing.fakes import make_client_error


# --- Tests for the exception hierarchy ---

def test_custom_exceptions_share_base():
    """All service errors derive from UploadServiceError."""
    for exc_type in (
        MissingFileError,
        ImageProcessingError,
        S3Error,
        AuthenticationError,
        ConfigurationError,
    ):
        assert issubclass(exc_type, UploadServiceError)

def test_processing_and_storage_families():
    """Concrete failures sit under their family."""
    for exc_type in (UnsupportedFormatError, CorruptImageError, OutOfMemoryError, CodecEngineError):
        assert issubclass(exc_type, ImageProcessingError)
    for exc_type in (
        MissingCredentialsError,
        AuthFailedError,
        PermissionDeniedError,
        NetworkError,
        BucketAccessError,
    ):
        assert issubclass(exc_type, S3Error)


# --- Tests for codec classification ---

@pytest.mark.parametrize(
    "error, expected",
    [
        (UnidentifiedImageError("cannot identify image file"), UnsupportedFormatError),
        (Image.DecompressionBombError("too many pixels"), OutOfMemoryError),
        (MemoryError(), OutOfMemoryError),
        (OSError("image file is truncated"), CorruptImageError),
        (SyntaxError("broken PNG file"), CorruptImageError),
        (ValueError("bad tile"), CorruptImageError),
        (RuntimeError("encoder failed"), CodecEngineError),
    ],
)
def test_classify_codec_error(error, expected):
    """Pillow failures map to exactly one processing error."""
    assert type(classify_codec_error(error)) is expected

def test_classify_codec_error_keeps_engine_message():
    """The engine's message is carried through."""
    translated = classify_codec_error(RuntimeError("libwebp refused"))
    assert "libwebp refused" in str(translated)


# --- Tests for storage classification ---

@pytest.mark.parametrize(
    "code, expected",
    [
        ("InvalidAccessKeyId", AuthFailedError),
        ("SignatureDoesNotMatch", AuthFailedError),
        ("ExpiredToken", AuthFailedError),
        ("AccessDenied", PermissionDeniedError),
        ("AllAccessDisabled", PermissionDeniedError),
        ("NoSuchBucket", BucketAccessError),
        ("PermanentRedirect", BucketAccessError),
        ("InternalError", S3Error),
    ],
)
def test_classify_storage_client_errors(code, expected):
    """S3 error codes map to storage failures."""
    translated = classify_storage_error(make_client_error(code, "simulated"))
    assert type(translated) is expected

def test_classify_storage_network_errors():
    """Connection problems are network errors."""
    assert isinstance(
        classify_storage_error(EndpointConnectionError(endpoint_url="https://s3.example")),
        NetworkError,
    )
    assert isinstance(
        classify_storage_error(ConnectTimeoutError(endpoint_url="https://s3.example")),
        NetworkError,
    )
    assert isinstance(
        classify_storage_error(ReadTimeoutError(endpoint_url="https://s3.example")),
        NetworkError,
    )

def test_classify_storage_missing_credentials():
    """botocore's credential lookup failure is a missing-credentials error."""
    assert isinstance(classify_storage_error(NoCredentialsError()), MissingCredentialsError)

def test_classify_storage_ignores_foreign_errors():
    """Non-botocore errors are left alone."""
    assert classify_storage_error(KeyError("Bucket")) is None


# --- Tests for the decorator ---

@pytest.fixture
def mock_logger():
    """Mock the logger the decorator looks up, without touching the global logging module."""
    with mock.patch('webp_upload.core.error_handling.logging') as mock_logging:
        mock_log_instance = mock.Mock()
        mock_logging.getLogger.return_value = mock_log_instance
        yield mock_log_instance

def test_with_error_handling_logs_error(mock_logger):
    """@with_error_handling logs the original error with a traceback."""
    @with_error_handling(classify_storage_error)
    def put():
        raise make_client_error("AccessDenied", "Access Denied")

    with pytest.raises(PermissionDeniedError):
        put()

    mock_logger.error.assert_called_once()
    args, kwargs = mock_logger.error.call_args
    assert kwargs.get('exc_info') is True

def test_with_error_handling_passes_success_through(mock_logger):
    """Return values are untouched and nothing is logged."""
    @with_error_handling(classify_codec_error)
    def ok():
        return b"webp"

    assert ok() == b"webp"
    mock_logger.error.assert_not_called()

def test_with_error_handling_preserves_metadata():
    """functools.wraps keeps the wrapped name."""
    @with_error_handling(classify_codec_error)
    def transcode_something():
        """Docstring."""

    assert transcode_something.__name__ == "transcode_something"
    assert transcode_something.__doc__ == "Docstring."


# --- Tests for kind and status mapping ---

@pytest.mark.parametrize(
    "error, kind",
    [
        (MissingFileError(), ErrorKind.VALIDATION),
        (FileTooLargeError(10, 5), ErrorKind.VALIDATION),
        (CorruptImageError("x"), ErrorKind.PROCESSING),
        (PermissionDeniedError("x"), ErrorKind.STORAGE),
        (AuthenticationError("x"), ErrorKind.AUTH),
        (ConfigurationError("x"), ErrorKind.UNEXPECTED),
        (RuntimeError("x"), ErrorKind.UNEXPECTED),
    ],
)
def test_error_kind_for(error, kind):
    assert error_kind_for(error) is kind

@pytest.mark.parametrize("failure_status", [400, 500])
def test_status_code_for(failure_status):
    """Processing and storage share one configurable status."""
    assert status_code_for(ErrorKind.VALIDATION, failure_status) == 400
    assert status_code_for(ErrorKind.AUTH, failure_status) == 401
    assert status_code_for(ErrorKind.PROCESSING, failure_status) == failure_status
    assert status_code_for(ErrorKind.STORAGE, failure_status) == failure_status
    assert status_code_for(ErrorKind.UNEXPECTED, failure_status) == 500
