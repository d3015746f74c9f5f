import logging
from unittest.mock import patch

import pytest
from PIL import UnidentifiedImageError

from webp_upload.core.error_handling import (
    classify_codec_error,
    classify_storage_error,
    with_error_handling,
)
from webp_upload.core.exceptions import (
    CodecEngineError,
    FileTooLargeError,
    InvalidQualityError,
    MissingFileError,
    UnsupportedFormatError,
)


@with_error_handling(classify_codec_error)
def _fail_func() -> None:
    raise UnidentifiedImageError("cannot identify image file")


@with_error_handling(classify_storage_error)
def _fail_with_bug() -> None:
    raise TypeError("not a storage error")


def test_with_error_handling_translates_library_error() -> None:
    with pytest.raises(UnsupportedFormatError):
        _fail_func()


def test_with_error_handling_reraises_unclassified_error() -> None:
    with pytest.raises(TypeError, match="not a storage error"):
        _fail_with_bug()


def test_with_error_handling_keeps_service_errors() -> None:
    @with_error_handling(classify_codec_error)
    def _reject() -> None:
        raise InvalidQualityError(0)

    with pytest.raises(InvalidQualityError):
        _reject()


def test_with_error_handling_logs_error() -> None:
    with patch("webp_upload.core.error_handling.logging") as mock_logging:
        with pytest.raises(UnsupportedFormatError):
            _fail_func()
    mock_logging.getLogger.assert_called_once_with(f"{__name__}._fail_func")
    mock_logging.getLogger.return_value.error.assert_called_once()


def test_with_error_handling_leaves_global_get_logger_alone() -> None:
    original = logging.getLogger
    with patch("webp_upload.core.error_handling.logging"):
        with pytest.raises(UnsupportedFormatError):
            _fail_func()
        assert logging.getLogger is original


def test_translated_error_keeps_cause() -> None:
    @with_error_handling(classify_codec_error)
    def _boom() -> None:
        raise RuntimeError("encoder exploded")

    with pytest.raises(CodecEngineError) as exc_info:
        _boom()
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert "encoder exploded" in str(exc_info.value)


def test_validation_messages() -> None:
    assert str(MissingFileError()) == "Image file is required."
    assert str(FileTooLargeError(6 * 1024 * 1024, 5 * 1024 * 1024)) == (
        "File size cannot exceed 5MB."
    )
    assert "150" in str(InvalidQualityError(150))
