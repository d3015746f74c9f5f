"""Storage key generation."""

import re
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S%f"
SUFFIX_BYTES = 4  # 8 hex characters
EXTENSION_PATTERN = re.compile(r"\.[^/.]+\Z")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class KeyGenerator:
    """
    Builds object keys of the form ``<prefix><timestamp>_<suffix>.<ext>``.

    The timestamp is fixed-width UTC with microseconds. The random suffix,
    drawn from the OS CSPRNG, is what keeps keys generated within the same
    instant apart; no round trip to the store is made to check for clashes.
    User input never reaches the key.
    """

    def __init__(
        self,
        prefix: str = "images/",
        extension: str = "webp",
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._prefix = prefix
        self._extension = extension.lstrip(".")
        self._clock = clock

    @property
    def extension(self) -> str:
        return self._extension

    def generate_key(self, prefix: Optional[str] = None) -> str:
        """Return a new key under ``prefix`` (defaults to the configured one)."""
        timestamp = self._clock().strftime(TIMESTAMP_FORMAT)
        suffix = secrets.token_hex(SUFFIX_BYTES)
        key_prefix = self._prefix if prefix is None else prefix
        return f"{key_prefix}{timestamp}_{suffix}.{self._extension}"


def strip_extension(filename: str) -> str:
    """
    Remove the last extension of a filename, for the ``originalName`` hint.

    Only a non-empty run of characters after the final dot is removed, and
    never across a slash: ``photo.`` and ``dir.v2/readme`` are unchanged.
    """
    return EXTENSION_PATTERN.sub("", filename)
