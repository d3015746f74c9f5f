"""
Runtime settings for the upload service.

Values come from the environment (or a local ``.env`` file). Each field's
``validation_alias`` is the variable it is read from.
"""

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3002",
    "https://vansdevblog.online",
]
# Status for processing and storage failures.
FAILURE_STATUS_CODES = (400, 500)


class Settings(BaseSettings):
    """Runtime configuration for the upload API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "WebP Upload API"

    aws_access_key_id: Optional[str] = Field(default=None, validation_alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(
        default=None, validation_alias="AWS_SECRET_ACCESS_KEY"
    )
    aws_region: Optional[str] = Field(
        default="ap-northeast-2",
        validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION"),
    )
    s3_bucket: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AWS_S3_BUCKET", "S3_BUCKET"),
    )
    public_base_url: Optional[str] = Field(default=None, validation_alias="S3_PUBLIC_BASE_URL")
    s3_connect_timeout_seconds: float = Field(
        default=3.0, gt=0, validation_alias="S3_CONNECT_TIMEOUT_SECONDS"
    )
    s3_read_timeout_seconds: float = Field(
        default=30.0, gt=0, validation_alias="S3_READ_TIMEOUT_SECONDS"
    )

    api_key: Optional[str] = Field(default=None, validation_alias="IMAGE_ROUTE_API_KEY")
    auth_enabled: bool = Field(default=False, validation_alias="UPLOAD_AUTH_ENABLED")
    allowed_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS),
        validation_alias="UPLOAD_ALLOWED_ORIGINS",
    )

    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024, gt=0, validation_alias="UPLOAD_MAX_BYTES"
    )
    default_quality: int = Field(default=85, ge=1, le=100, validation_alias="UPLOAD_QUALITY")
    key_prefix: str = Field(default="images/", validation_alias="UPLOAD_KEY_PREFIX")
    failure_status_code: int = Field(
        default=400, validation_alias="UPLOAD_FAILURE_STATUS_CODE"
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("failure_status_code")
    @classmethod
    def _check_failure_status(cls, value: int) -> int:
        if value not in FAILURE_STATUS_CODES:
            raise ValueError(f"must be one of {FAILURE_STATUS_CODES}")
        return value

    def missing_storage_settings(self) -> List[str]:
        """Names of the storage coordinates that are not configured."""
        required = {
            "AWS_ACCESS_KEY_ID": self.aws_access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.aws_secret_access_key,
            "AWS_REGION": self.aws_region,
            "AWS_S3_BUCKET": self.s3_bucket,
        }
        return [name for name, value in required.items() if not (value or "").strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
