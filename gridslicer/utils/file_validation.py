"""
Upload checks for sprite sheets.

An upload is accepted only when its leading bytes carry a known raster
signature and Pillow can verify the whole file. The content type sent by
the client is never trusted.
"""

import logging
from pathlib import Path
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpeg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
    (b"BM", "bmp"),
)

# Stored upload extension per detected format
FORMAT_SUFFIXES = {
    "png": ".png",
    "jpeg": ".jpg",
    "gif": ".gif",
    "bmp": ".bmp",
    "webp": ".webp",
}

HEADER_SIZE = 32
MAX_FILENAME_LENGTH = 255


class ValidationError(Exception):
    """An upload was rejected."""


def detect_image_format(header: bytes) -> str | None:
    """
    Name the raster format a file header belongs to.

    WebP is a RIFF container, so the RIFF tag alone is not enough; the
    form type at offset 8 must read WEBP.
    """
    if header[:4] == b"RIFF":
        return "webp" if header[8:12] == b"WEBP" else None

    return next((name for magic, name in SIGNATURES if header.startswith(magic)), None)


def _size_of(file_obj: BinaryIO) -> int:
    file_obj.seek(0, 2)
    size = file_obj.tell()
    file_obj.seek(0)
    return size


def _decodes(file_obj: BinaryIO) -> bool:
    """Let Pillow walk the file; leaves the stream rewound."""
    try:
        with Image.open(file_obj) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.debug(f"Pillow rejected upload: {e}")
        return False
    finally:
        file_obj.seek(0)
    return True


def validate_image(file_obj: BinaryIO, max_size_mb: int = 50) -> str:
    """
    Check an uploaded sprite sheet before it is stored.

    Args:
        file_obj: Upload stream, rewound on return.
        max_size_mb: Size limit in MB.

    Returns:
        Detected format name, a key of FORMAT_SUFFIXES.

    Raises:
        ValidationError: Empty, oversized, unrecognized or undecodable file.
    """
    size = _size_of(file_obj)
    if not size:
        raise ValidationError("File is empty")

    limit = max_size_mb * 1024 * 1024
    if size > limit:
        raise ValidationError(f"File too large: {size / 1024 / 1024:.1f}MB (max {max_size_mb}MB)")

    image_format = detect_image_format(file_obj.read(HEADER_SIZE))
    file_obj.seek(0)
    if image_format is None:
        raise ValidationError("Unknown or unsupported file type")

    if not _decodes(file_obj):
        raise ValidationError("File is not a valid image")

    logger.debug(f"Accepted {image_format} upload of {size / 1024:.1f}KB")
    return image_format


def validate_filename(filename: str) -> str:
    """
    Reduce a client-supplied filename to a bare, safe name.

    Directory parts are dropped. Hidden names, names containing '..' and
    names longer than 255 characters are rejected.
    """
    name = Path(filename or "").name
    if not name:
        raise ValidationError("Filename cannot be empty")

    if name.startswith(".") or ".." in name:
        raise ValidationError(f"Invalid filename: {name}")

    if len(name) > MAX_FILENAME_LENGTH:
        raise ValidationError(f"Filename too long (max {MAX_FILENAME_LENGTH} characters)")

    return name
