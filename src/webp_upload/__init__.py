"""WebP upload service: convert uploaded images to WebP and store them on S3."""

__version__ = "0.1.0"
