"""
Image payloads for new tier list items.

Uploaded files and pasted clipboard data both end up as a data URI
plus a display name, which is what Workspace.create_item expects.
"""

from __future__ import annotations

import base64
import mimetypes
import time
from dataclasses import dataclass
from pathlib import Path

from tierengine.core.errors import ValidationError


PASTED_NAME_PREFIX = "Pasted_Image_"


@dataclass(frozen=True)
class ImagePayload:
    """Image content ready to become an item."""
    image_ref: str
    file_name: str


def is_image_type(mime_type: str | None) -> bool:
    return bool(mime_type) and mime_type.startswith("image/")


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode('ascii')
    return f"data:{mime_type};base64,{encoded}"


def load_image_file(path: str | Path) -> ImagePayload:
    """
    Read an image file from disk.

    Args:
        path: Image file path

    Returns:
        Payload with a data URI and the file's name

    Raises:
        ValidationError: If the file is not an image or cannot be read
    """
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if not is_image_type(mime_type):
        raise ValidationError(f"Not an image file: {path.name}")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise ValidationError(f"Cannot read image {path}: {e}") from e

    return ImagePayload(encode_data_uri(data, mime_type), path.name)


def pasted_image(data: bytes, mime_type: str, timestamp_ms: int | None = None) -> ImagePayload:
    """
    Build a payload for clipboard image data.

    Pasted images have no file name, so they are named after the paste
    time in milliseconds.
    """
    if not is_image_type(mime_type):
        raise ValidationError(f"Clipboard data is not an image: {mime_type}")
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return ImagePayload(encode_data_uri(data, mime_type), f"{PASTED_NAME_PREFIX}{timestamp_ms}")
