"""Testing utilities and fakes for the upload service."""

from .fakes import (
    FakeLogger,
    FakeS3Client,
    FixedClock,
    RecordingTranscoder,
    S3Bucket,
    S3Object,
    create_test_image,
    create_test_settings,
    make_client_error,
    setup_test_s3_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeLogger",
    "FixedClock",
    "RecordingTranscoder",
    "S3Object",
    "S3Bucket",
    "create_test_image",
    "create_test_settings",
    "make_client_error",
    "setup_test_s3_environment",
]
