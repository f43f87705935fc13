"""Base64 and MIME helpers for image payloads."""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING

from gemini_gen.core.exceptions import ImageDecodeError, InvalidPathError

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_MIME_TYPE = "image/jpeg"
DEFAULT_EXTENSION = ".png"

MIME_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
}

EXTENSIONS: dict[str, str] = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "image/heif": ".heif",
}


def get_mime_type(image_path: Path) -> str:
    """Get the MIME type for an image file from its extension.

    Args:
        image_path: Path to the image file.

    Returns:
        MIME type string; unknown extensions map to image/jpeg.
    """
    return MIME_TYPES.get(image_path.suffix.lower(), DEFAULT_MIME_TYPE)


def get_file_extension(mime_type: str) -> str:
    """Get file extension for a given MIME type.

    Args:
        mime_type: MIME type string (e.g., "image/png").

    Returns:
        File extension including the dot (e.g., ".png").
    """
    return EXTENSIONS.get(mime_type.lower(), DEFAULT_EXTENSION)


def encode_base64(data: bytes) -> str:
    """Encode raw bytes as standard base64 text."""
    return base64.standard_b64encode(data).decode("ascii")


def load_image_as_base64(image_path: Path) -> tuple[str, str]:
    """Load an image file and return base64 data and mime type.

    Args:
        image_path: Path to the image file.

    Returns:
        Tuple of (base64_encoded_data, mime_type).

    Raises:
        InvalidPathError: If the file cannot be read.
    """
    try:
        raw = image_path.read_bytes()
    except OSError as e:
        raise InvalidPathError(str(image_path), reason=e.strerror or str(e)) from e

    return encode_base64(raw), get_mime_type(image_path)


def decode_base64_image(base64_data: str) -> bytes:
    """Decode base64 image data to bytes.

    Embedded whitespace (line wrapping) is ignored; any other character
    outside the base64 alphabet is an error.

    Args:
        base64_data: Base64-encoded image data.

    Returns:
        Raw image bytes.

    Raises:
        ImageDecodeError: If the data is not valid base64.
    """
    compact = "".join(base64_data.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(details={"reason": str(e)}) from e
