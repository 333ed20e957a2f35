"""Utility modules for the sprite sheet analysis service."""

from gridslicer.utils.file_validation import (
    FORMAT_SUFFIXES,
    ValidationError,
    detect_image_format,
    validate_filename,
    validate_image,
)

__all__ = [
    "FORMAT_SUFFIXES",
    "ValidationError",
    "detect_image_format",
    "validate_filename",
    "validate_image",
]
