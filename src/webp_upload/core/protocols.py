"""Protocol definitions for dependency injection and testability."""

from typing import Any, Dict, Optional, Protocol

from .models import ConversionOptions


class S3ClientProtocol(Protocol):
    """Protocol for the S3 client operations the service uses."""

    def put_object(
        self,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str,
        Metadata: Dict[str, str],
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class TranscoderProtocol(Protocol):
    """Protocol for image conversion."""

    def transcode(self, image_bytes: bytes, options: ConversionOptions) -> bytes:
        """Convert image bytes to the output format."""
        ...


class KeyGeneratorProtocol(Protocol):
    """Protocol for storage key generation."""

    def generate_key(self, prefix: Optional[str] = None) -> str:
        """Return a new unique key."""
        ...


class StorageWriterProtocol(Protocol):
    """Protocol for writing converted images to the object store."""

    def store(
        self, data: bytes, key: str, content_type: str, metadata: Dict[str, str]
    ) -> str:
        """Write data and return its public URL."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
