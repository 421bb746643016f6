"""
Resource loading.

Provides:
- Image files and clipboard data as item payloads
"""

from tierengine.resources.images import (
    ImagePayload,
    load_image_file,
    pasted_image,
    encode_data_uri,
)

__all__ = [
    "ImagePayload",
    "load_image_file",
    "pasted_image",
    "encode_data_uri",
]
