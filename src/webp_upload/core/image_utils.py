"""Image processing utilities for WebP conversion."""

import io
from collections.abc import Iterable
from typing import Any, Dict, Optional, Union

from PIL import Image
from PIL.ExifTags import TAGS

from .exceptions import InvalidDimensionsError, InvalidQualityError

MIN_QUALITY = 1
MAX_QUALITY = 100
WEBP_FORMAT = "WEBP"


def validate_quality(quality: Any) -> int:
    """
    Check that quality is an integer within [1, 100].

    Raises:
        InvalidQualityError: Never clamps; out-of-range values are rejected.
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQualityError(quality)
    return quality


def validate_dimension(name: str, value: Any) -> Optional[int]:
    """Check an optional target dimension is a positive integer."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidDimensionsError(f"{name} must be a positive integer, got {value!r}.")
    return value


def load_image(image_bytes: bytes) -> "Image.Image":
    """Decode image bytes fully so that decoder errors surface here."""
    image = Image.open(io.BytesIO(image_bytes))
    image.load()
    return image


def fit_inside(
    img: "Image.Image", width: Optional[int] = None, height: Optional[int] = None
) -> "Image.Image":
    """
    Shrink an image to fit within a bounding box.

    Aspect ratio is preserved and the image is never enlarged. A missing
    bound leaves that axis unconstrained.

    Args:
        img: PIL Image to resize
        width: Maximum output width
        height: Maximum output height

    Returns:
        The resized image, or the original when no bound applies
    """
    if width is None and height is None:
        return img

    box = (width or img.width, height or img.height)
    if img.width <= box[0] and img.height <= box[1]:
        return img

    resized = img.copy()
    resized.thumbnail(box, Image.Resampling.LANCZOS)
    return resized


def has_transparency(img: "Image.Image") -> bool:
    """Whether the image carries an alpha channel or a transparent palette entry."""
    if img.mode in ("RGBA", "LA", "PA", "La", "RGBa"):
        return True
    return "transparency" in img.info


def prepare_for_webp(img: "Image.Image") -> "Image.Image":
    """Convert to a mode the WebP encoder accepts (RGB or RGBA)."""
    if img.mode in ("RGB", "RGBA"):
        return img
    if has_transparency(img):
        return img.convert("RGBA")
    return img.convert("RGB")


def encode_webp(img: "Image.Image", quality: int, keep_metadata: bool = False) -> bytes:
    """
    Encode an image as WebP.

    Args:
        img: PIL Image to encode (first frame only for animated input)
        quality: Encoder quality in [1, 100]
        keep_metadata: Carry EXIF and ICC profile into the output

    Returns:
        WebP bytes
    """
    save_kwargs: Dict[str, Any] = {"format": WEBP_FORMAT, "quality": quality, "method": 4}
    if keep_metadata:
        exif = img.info.get("exif")
        icc_profile = img.info.get("icc_profile")
        if exif:
            save_kwargs["exif"] = exif
        if icc_profile:
            save_kwargs["icc_profile"] = icc_profile

    output_stream = io.BytesIO()
    prepare_for_webp(img).save(output_stream, **save_kwargs)
    return output_stream.getvalue()


def extract_exif_data(img: "Image.Image") -> Dict[str, Any]:
    """
    Extract EXIF metadata from PIL Image, handling privacy concerns.

    Args:
        img: PIL Image to extract EXIF from

    Returns:
        Dictionary containing EXIF data and image info
    """
    exif_dict: Dict[str, Any] = {
        "width": img.width,
        "height": img.height,
        "format": img.format or "unknown",
        "mode": img.mode,
        "frames": getattr(img, "n_frames", 1),
    }

    for tag_id, value in img.getexif().items():
        tag = TAGS.get(tag_id, tag_id)

        # Skip GPS data for privacy
        if "gps" in str(tag).lower():
            continue

        processed_value: Union[str, int, float]
        if isinstance(value, bytes):
            try:
                processed_value = value.decode("utf-8")
            except UnicodeDecodeError:
                processed_value = value.hex()
        elif isinstance(value, (str, int, float)):
            processed_value = value
        elif isinstance(value, Iterable):
            processed_value = str(tuple(value))
        else:
            processed_value = str(value)

        exif_dict[str(tag)] = processed_value

    return exif_dict
