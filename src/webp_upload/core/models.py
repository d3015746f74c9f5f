"""Shared data models for the upload service."""

from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ErrorKind

WEBP_CONTENT_TYPE = "image/webp"


@dataclass(frozen=True)
class UploadRequest:
    """
    A single uploaded file as received from the HTTP layer.

    ``size`` is known up front so that oversized payloads can be rejected
    before ``stream`` is read.
    """

    filename: str
    content_type: str
    size: int
    stream: BinaryIO

    def read(self, limit: int = -1) -> bytes:
        """Read the payload into memory, at most ``limit`` bytes when given."""
        self.stream.seek(0)
        return self.stream.read(limit)


class ConversionOptions(BaseModel):
    """Parameters for a single WebP conversion."""

    model_config = ConfigDict(frozen=True)

    # Range is enforced by the transcoder so an invalid value surfaces as a
    # validation failure instead of a model error.
    quality: int = 80
    width: Optional[int] = None
    height: Optional[int] = None
    keep_metadata: bool = False


class StorageOptions(BaseModel):
    """Where and how a converted image is written."""

    model_config = ConfigDict(frozen=True)

    prefix: str = "images/"
    content_type: str = WEBP_CONTENT_TYPE
    metadata: Dict[str, str] = Field(default_factory=dict)


class UploadResult(BaseModel):
    """Outcome of one pass through the upload pipeline."""

    model_config = ConfigDict(frozen=True)

    success: bool = False
    url: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, url: str) -> "UploadResult":
        return cls(success=True, url=url)

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> "UploadResult":
        return cls(success=False, error_kind=kind, error=message)
