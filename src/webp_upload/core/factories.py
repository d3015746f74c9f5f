"""Factory classes for creating configured service instances."""

from typing import Any, Optional, TYPE_CHECKING

import boto3
from botocore.config import Config

from .config import Settings, get_settings
from .keys import KeyGenerator
from .models import StorageOptions
from .observability import StructuredLogger
from .protocols import LoggerProtocol, S3ClientProtocol
from .services import S3StorageWriter, UploadPipeline, WebPTranscoderService

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client
else:
    S3Client = Any


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str = "pipeline") -> LoggerProtocol:
        """Create a context-aware logger under the service namespace."""
        return StructuredLogger(name)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(settings: Settings, **kwargs: Any) -> S3Client:
        """
        Create the process-wide S3 client.

        boto3 clients are thread-safe, so one instance serves every request.
        Timeouts bound the single write attempt; botocore's own retries are
        disabled.
        """
        config = Config(
            signature_version="s3v4",
            connect_timeout=settings.s3_connect_timeout_seconds,
            read_timeout=settings.s3_read_timeout_seconds,
            retries={"total_max_attempts": 1, "mode": "standard"},
        )
        session = boto3.Session()
        return session.client(
            "s3",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
            config=config,
            **kwargs,
        )


class UploadPipelineFactory:
    """Factory for creating the complete upload pipeline."""

    @staticmethod
    def create_pipeline(
        settings: Optional[Settings] = None,
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> UploadPipeline:
        """Create a fully configured upload pipeline."""
        if settings is None:
            settings = get_settings()

        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client(settings)

        if logger is None:
            logger = LoggerFactory.create_logger()

        return UploadPipeline(
            transcoder=WebPTranscoderService(),
            key_generator=KeyGenerator(prefix=settings.key_prefix),
            storage_writer=S3StorageWriter(s3_client, settings),
            logger=logger,
            max_upload_bytes=settings.max_upload_bytes,
            storage_options=StorageOptions(prefix=settings.key_prefix),
        )
