"""Service implementations for the upload pipeline."""

from typing import Any, Dict, Optional
from urllib.parse import quote

from .config import Settings
from .error_handling import (
    classify_codec_error,
    classify_storage_error,
    with_error_handling,
)
from .exceptions import (
    GENERIC_UPLOAD_ERROR_MESSAGE,
    ErrorKind,
    FileTooLargeError,
    ImageProcessingError,
    MissingCredentialsError,
    MissingFileError,
    S3Error,
    UploadValidationError,
)
from .image_utils import (
    encode_webp,
    extract_exif_data,
    fit_inside,
    load_image,
    validate_dimension,
    validate_quality,
)
from .keys import strip_extension
from .models import ConversionOptions, StorageOptions, UploadRequest, UploadResult
from .observability import LogContext, MetricsCollector, new_request_id
from .protocols import (
    KeyGeneratorProtocol,
    LoggerProtocol,
    S3ClientProtocol,
    StorageWriterProtocol,
    TranscoderProtocol,
)

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
PROCESSING_ERROR_PREFIX = "image processing error"
STORAGE_ERROR_PREFIX = "storage error"


class WebPTranscoderService:
    """Pure image conversion service with no I/O dependencies."""

    @with_error_handling(classify_codec_error)
    def transcode(self, image_bytes: bytes, options: ConversionOptions) -> bytes:
        """
        Convert image bytes of any raster format Pillow reads to WebP.

        Quality and target dimensions are validated before the codec is
        touched. Dimensions pass through unless a bound is given, in which
        case the image is shrunk to fit inside it.
        """
        quality = validate_quality(options.quality)
        width = validate_dimension("width", options.width)
        height = validate_dimension("height", options.height)

        image = fit_inside(load_image(image_bytes), width, height)
        return encode_webp(image, quality, keep_metadata=options.keep_metadata)

    @with_error_handling(classify_codec_error)
    def inspect(self, image_bytes: bytes) -> Dict[str, Any]:
        """Extract dimensions, format and non-GPS EXIF tags from image bytes."""
        return extract_exif_data(load_image(image_bytes))


def build_public_url(
    bucket: str, region: str, key: str, public_base_url: Optional[str] = None
) -> str:
    """Return the URL an object resolves to once written."""
    if public_base_url:
        return f"{public_base_url.rstrip('/')}/{key}"
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"


def encode_metadata(metadata: Dict[str, str]) -> Dict[str, str]:
    """Percent-encode metadata values; S3 user metadata must be ASCII."""
    return {name: quote(str(value), safe="") for name, value in metadata.items()}


class S3StorageWriter:
    """Writes converted images to a single S3 bucket."""

    def __init__(self, s3_client: S3ClientProtocol, settings: Settings):
        self._s3_client = s3_client
        self._settings = settings

    @with_error_handling(classify_storage_error)
    def store(
        self, data: bytes, key: str, content_type: str, metadata: Dict[str, str]
    ) -> str:
        """Put ``data`` at ``key`` and return its public URL."""
        missing = self._settings.missing_storage_settings()
        if missing:
            raise MissingCredentialsError(
                f"Storage is not configured, missing: {', '.join(missing)}"
            )

        self._s3_client.put_object(
            Bucket=self._settings.s3_bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            Metadata=encode_metadata(metadata),
        )

        return build_public_url(
            self._settings.s3_bucket,
            self._settings.aws_region,
            key,
            self._settings.public_base_url,
        )


class UploadPipeline:
    """
    Validate → transcode → generate key → store → shape result.

    Each step consumes the previous one's output, so the first failure ends
    the request. Library errors arrive already classified by the transcoder
    and storage writer; this is the one place where they are tagged with a
    caller-visible kind and category prefix.
    """

    def __init__(
        self,
        transcoder: TranscoderProtocol,
        key_generator: KeyGeneratorProtocol,
        storage_writer: StorageWriterProtocol,
        logger: LoggerProtocol,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        storage_options: Optional[StorageOptions] = None,
    ):
        self._transcoder = transcoder
        self._key_generator = key_generator
        self._storage_writer = storage_writer
        self._logger = logger
        self._max_upload_bytes = max_upload_bytes
        self._storage_options = storage_options or StorageOptions()

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    def process(
        self,
        request: Optional[UploadRequest],
        options: Optional[ConversionOptions] = None,
        request_id: Optional[str] = None,
    ) -> UploadResult:
        """Run one upload and return its result. Never raises."""
        options = options or ConversionOptions()
        log_context = LogContext(
            request_id=request_id or new_request_id(),
            stage="upload",
            component="upload_pipeline",
        )
        metrics = MetricsCollector()

        try:
            url = self._run(request, options, log_context, metrics)
        except UploadValidationError as e:
            self._logger.warning(f"Upload rejected: {e}", log_context)
            return UploadResult.failed(ErrorKind.VALIDATION, str(e))
        except ImageProcessingError as e:
            self._logger.error(
                "Image conversion failed",
                log_context.bind(error_type=type(e).__name__, error=str(e)),
            )
            return UploadResult.failed(
                ErrorKind.PROCESSING, f"{PROCESSING_ERROR_PREFIX}: {e}"
            )
        except S3Error as e:
            self._logger.error(
                "Storage write failed",
                log_context.bind(error_type=type(e).__name__, error=str(e)),
            )
            return UploadResult.failed(ErrorKind.STORAGE, f"{STORAGE_ERROR_PREFIX}: {e}")
        except Exception:
            self._logger.error("Unexpected upload failure", log_context, exc_info=True)
            return UploadResult.failed(ErrorKind.UNEXPECTED, GENERIC_UPLOAD_ERROR_MESSAGE)

        summary = metrics.summary()
        self._logger.info(
            "Upload completed",
            log_context,
            url=url,
            duration_ms=summary["duration_ms"],
            stages=summary["stages_ms"],
        )
        return UploadResult.ok(url)

    def _run(
        self,
        request: Optional[UploadRequest],
        options: ConversionOptions,
        log_context: LogContext,
        metrics: MetricsCollector,
    ) -> str:
        if request is None:
            raise MissingFileError()

        request_context = log_context.bind(
            filename=request.filename,
            content_type=request.content_type,
            size=request.size,
        )
        self._logger.debug("Upload received", request_context)

        if request.size > self._max_upload_bytes:
            raise FileTooLargeError(request.size, self._max_upload_bytes)

        # The declared size comes from the client; never buffer past the limit.
        image_bytes = request.read(self._max_upload_bytes + 1)
        if len(image_bytes) > self._max_upload_bytes:
            raise FileTooLargeError(len(image_bytes), self._max_upload_bytes)

        self._logger.debug(
            "Converting to WebP",
            request_context.for_stage("transcode"),
            quality=options.quality,
        )
        with metrics.measure("transcode"):
            converted = self._transcoder.transcode(image_bytes, options)

        storage = self._storage_options.model_copy(
            update={
                "metadata": {
                    "originalName": strip_extension(request.filename),
                    "originalType": request.content_type,
                }
            }
        )
        key = self._key_generator.generate_key(storage.prefix)

        self._logger.debug(
            "Writing to storage",
            request_context.for_stage("store"),
            key=key,
            bytes=len(converted),
        )
        with metrics.measure("store"):
            return self._storage_writer.store(
                converted, key, storage.content_type, storage.metadata
            )
