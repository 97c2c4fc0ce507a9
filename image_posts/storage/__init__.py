"""Storage module for post images."""

from .base import IMAGE_FIELD_NAME, ImageBackend, StoredImage
from .cloud import CloudinaryImageBackend
from .local import LocalImageBackend

__all__ = [
    "IMAGE_FIELD_NAME",
    "ImageBackend",
    "StoredImage",
    "LocalImageBackend",
    "CloudinaryImageBackend",
]
